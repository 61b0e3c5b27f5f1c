# session.py
"""
Quiz-taking state machine used by the terminal client.

A QuizSession is created when a quiz is loaded and thrown away on
navigation away; nothing about the quiz lives at module level.

    LOADING --load(quiz)--> IN_PROGRESS --next() on last--> COMPLETED
       |                         ^                              |
       +--load(None)--> UPLOAD_REQUIRED      +-----restart()----+
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import ValidationError as SchemaError

from quizgen.errors import ValidationError
from quizgen.schemas import QuestionOut
from quizgen.utils import percentage, score_message

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    LOADING = "loading"
    UPLOAD_REQUIRED = "upload_required"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class InvalidTransition(ValidationError):
    pass


@dataclass(frozen=True)
class RecordedAnswer:
    question_id: int
    selected_answer: int
    is_correct: bool


class QuizSession:
    def __init__(self):
        self.state = SessionState.LOADING
        self.title = ""
        self.questions: List[QuestionOut] = []
        self.current_index = 0
        self.answers: Dict[int, RecordedAnswer] = {}
        self.selected: Optional[int] = None
        self.show_feedback = False

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------
    def load(self, quiz: Optional[dict]) -> SessionState:
        """
        Accepts the `data` object of GET /quiz/{id} or POST /quiz/generate.
        Missing or empty quiz data sends the session to UPLOAD_REQUIRED.
        """
        self._require(SessionState.LOADING)
        questions = (quiz or {}).get("questions") or []
        if not questions:
            logger.info("No quiz data available; upload required")
            self.state = SessionState.UPLOAD_REQUIRED
            return self.state

        try:
            parsed = [QuestionOut.model_validate(q) for q in questions]
        except SchemaError as e:
            logger.warning("Malformed quiz data: %s", e)
            raise ValidationError("Quiz data is malformed") from e

        self.title = quiz.get("title") or ""
        self.questions = parsed
        self.state = SessionState.IN_PROGRESS
        return self.state

    # -------------------------------------------------------------------------
    # Answering
    # -------------------------------------------------------------------------
    @property
    def current_question(self) -> QuestionOut:
        self._require(SessionState.IN_PROGRESS)
        return self.questions[self.current_index]

    @property
    def current_answer(self) -> Optional[RecordedAnswer]:
        return self.answers.get(self.current_question.id)

    @property
    def is_first(self) -> bool:
        return self.current_index == 0

    @property
    def is_last(self) -> bool:
        return self.current_index == len(self.questions) - 1

    def select(self, option: int) -> None:
        question = self.current_question
        if not 0 <= option < len(question.options):
            raise ValidationError("Please select one of the listed options")
        self.selected = option

    def submit_answer(self) -> RecordedAnswer:
        question = self.current_question
        if self.selected is None:
            raise ValidationError("Please select an answer")

        answer = RecordedAnswer(
            question_id=question.id,
            selected_answer=self.selected,
            is_correct=self.selected == question.correct_answer,
        )
        self.answers[question.id] = answer
        self.show_feedback = True
        return answer

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------
    def next(self) -> SessionState:
        self._require(SessionState.IN_PROGRESS)
        if self.is_last:
            self.state = SessionState.COMPLETED
            return self.state

        self.current_index += 1
        self.selected = None
        self.show_feedback = False
        return self.state

    def previous(self) -> SessionState:
        self._require(SessionState.IN_PROGRESS)
        if self.is_first:
            return self.state

        self.current_index -= 1
        recorded = self.current_answer
        if recorded:
            self.selected = recorded.selected_answer
            self.show_feedback = True
        else:
            self.selected = None
            self.show_feedback = False
        return self.state

    def restart(self) -> SessionState:
        self._require(SessionState.COMPLETED, SessionState.IN_PROGRESS)
        self.current_index = 0
        self.answers = {}
        self.selected = None
        self.show_feedback = False
        self.state = SessionState.IN_PROGRESS
        return self.state

    # -------------------------------------------------------------------------
    # Score
    # -------------------------------------------------------------------------
    @property
    def is_completed(self) -> bool:
        return self.state == SessionState.COMPLETED

    @property
    def correct_count(self) -> int:
        return sum(1 for a in self.answers.values() if a.is_correct)

    @property
    def percentage(self) -> int:
        return percentage(self.correct_count, len(self.questions))

    @property
    def message(self) -> str:
        return score_message(self.percentage)

    def submission(self) -> List[dict]:
        """Recorded answers in question order, shaped for POST /quiz/{id}/submit."""
        return [
            {"questionId": a.question_id, "selectedAnswer": a.selected_answer}
            for _, a in sorted(self.answers.items())
        ]

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise InvalidTransition(f"Quiz is {self.state.value}; expected {allowed}")
