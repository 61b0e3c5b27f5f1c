# test_session.py
import pytest

from quizgen.errors import ValidationError
from quizgen.session import InvalidTransition, QuizSession, SessionState
from quizgen.utils import percentage

QUIZ = {
    "quizId": 7,
    "title": "Quiz from notes.pdf",
    "questions": [
        {
            "id": i,
            "question": f"Question {i}?",
            "options": ["A", "B", "C", "D"],
            "correctAnswer": i % 4,
            "explanation": f"Explanation {i}",
            "diveDeeper": f"Dive deeper {i}",
        }
        for i in range(1, 4)
    ],
}


@pytest.fixture
def session():
    s = QuizSession()
    s.load(QUIZ)
    return s


def answer(session, option):
    session.select(option)
    return session.submit_answer()


class TestLoading:
    def test_starts_loading(self):
        assert QuizSession().state == SessionState.LOADING

    def test_load_moves_to_in_progress(self, session):
        assert session.state == SessionState.IN_PROGRESS
        assert session.title == "Quiz from notes.pdf"
        assert session.current_index == 0
        assert session.answers == {}
        assert session.show_feedback is False

    @pytest.mark.parametrize("data", [None, {}, {"title": "x", "questions": []}])
    def test_missing_data_requires_upload(self, data):
        s = QuizSession()

        assert s.load(data) == SessionState.UPLOAD_REQUIRED
        with pytest.raises(InvalidTransition):
            s.next()

    def test_malformed_question_is_rejected(self):
        s = QuizSession()
        broken = {"title": "x", "questions": [{"id": 1, "question": "Q?"}]}

        with pytest.raises(ValidationError) as exc:
            s.load(broken)

        assert exc.value.message == "Quiz data is malformed"
        assert s.state == SessionState.LOADING
        assert s.questions == []

    def test_cannot_load_twice(self, session):
        with pytest.raises(InvalidTransition):
            session.load(QUIZ)


class TestAnswering:
    def test_submit_without_selection_is_rejected(self, session):
        with pytest.raises(ValidationError) as exc:
            session.submit_answer()

        assert exc.value.message == "Please select an answer"
        assert session.answers == {}
        assert session.show_feedback is False

    def test_select_out_of_range(self, session):
        with pytest.raises(ValidationError):
            session.select(4)
        assert session.selected is None

    def test_correct_and_incorrect(self, session):
        assert answer(session, 1).is_correct is True
        assert session.show_feedback is True
        session.next()
        assert answer(session, 0).is_correct is False

    def test_resubmitting_replaces_answer(self, session):
        answer(session, 0)
        answer(session, 1)

        assert len(session.answers) == 1
        assert session.answers[1].selected_answer == 1
        assert session.answers[1].is_correct is True


class TestNavigation:
    def test_next_clears_feedback_and_selection(self, session):
        answer(session, 1)

        session.next()

        assert session.current_index == 1
        assert session.selected is None
        assert session.show_feedback is False

    def test_next_on_last_completes(self, session):
        for _ in range(3):
            session.next()

        assert session.state == SessionState.COMPLETED
        assert session.is_completed
        with pytest.raises(InvalidTransition):
            session.next()

    def test_previous_restores_answer(self, session):
        answer(session, 3)
        feedback = session.current_answer
        session.next()

        session.previous()

        assert session.current_index == 0
        assert session.selected == 3
        assert session.show_feedback is True
        assert session.current_answer == feedback

    def test_previous_without_answer_clears(self, session):
        session.next()
        session.select(2)
        session.next()

        session.previous()

        assert session.current_index == 1
        assert session.selected is None
        assert session.show_feedback is False

    def test_previous_on_first_is_noop(self, session):
        session.select(2)

        session.previous()

        assert session.current_index == 0
        assert session.selected == 2


class TestScoreAndRestart:
    def _play(self, session, options):
        for option in options:
            answer(session, option)
            session.next()

    def test_score_on_completion(self, session):
        self._play(session, [1, 2, 0])  # correct, correct, wrong

        assert session.is_completed
        assert session.correct_count == 2
        assert session.percentage == 67
        assert session.message == "Not bad! Room for improvement."

    def test_unanswered_questions_count_as_wrong(self, session):
        answer(session, 1)
        session.next()
        session.next()
        session.next()

        assert session.percentage == 33

    def test_restart_resets(self, session):
        self._play(session, [1, 2, 3])

        session.restart()

        assert session.state == SessionState.IN_PROGRESS
        assert not session.is_completed
        assert session.current_index == 0
        assert session.answers == {}
        assert session.selected is None
        assert session.show_feedback is False
        assert len(session.questions) == 3

    def test_submission_matches_server_contract(self, session):
        session.next()
        answer(session, 2)
        session.previous()
        answer(session, 0)

        assert session.submission() == [
            {"questionId": 1, "selectedAnswer": 0},
            {"questionId": 2, "selectedAnswer": 2},
        ]

    def test_client_and_server_rounding_agree(self, session):
        self._play(session, [1, 0, 3])

        assert session.percentage == percentage(session.correct_count, 3) == 67
