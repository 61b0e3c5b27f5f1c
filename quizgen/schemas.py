# schemas.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel

DEFAULT_QUESTION_COUNT = 5
MAX_QUESTION_COUNT = 20


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------
class GenerateIn(CamelModel):
    upload_id: int
    question_count: int = Field(DEFAULT_QUESTION_COUNT, ge=1, le=MAX_QUESTION_COUNT)


class AnswerIn(CamelModel):
    question_id: StrictInt
    selected_answer: StrictInt


class SubmitIn(CamelModel):
    answers: List[AnswerIn]


# -----------------------------------------------------------------------------
# Gemini reply (validated before anything is stored)
# -----------------------------------------------------------------------------
class GeneratedQuestion(CamelModel):
    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=4, max_length=4)
    correct_answer: StrictInt = Field(ge=0, le=3)
    explanation: str
    dive_deeper: str


class GeneratedQuiz(CamelModel):
    questions: List[GeneratedQuestion] = Field(min_length=1)


# -----------------------------------------------------------------------------
# Responses
# -----------------------------------------------------------------------------
class QuestionOut(CamelModel):
    id: int  # 1-based display position, not the row id
    question: str
    options: List[str]
    correct_answer: int
    explanation: Optional[str] = None
    dive_deeper: Optional[str] = None


class UploadData(CamelModel):
    upload_id: int
    filename: str
    original_name: str
    extracted_text_length: int
    processing_status: str


class GeneratedQuizData(CamelModel):
    quiz_id: int
    title: str
    questions: List[QuestionOut]


class QuizData(GeneratedQuizData):
    source_document: str
    created_at: str


class AnswerResult(CamelModel):
    question_id: int
    correct: bool
    explanation: Optional[str] = None
    dive_deeper: Optional[str] = None
    user_answer: int
    correct_answer: int


class SubmissionData(CamelModel):
    score: int
    total_questions: int
    percentage: int
    results: List[AnswerResult]
    message: str


class HistoryRow(CamelModel):
    quiz_id: int
    title: str
    source_document: str
    total_questions: int
    created_at: str


class HistoryData(CamelModel):
    items: List[HistoryRow]


class AttemptRow(CamelModel):
    attempt_id: int
    score: int
    total_questions: int
    percentage: int
    created_at: str


class AttemptsData(CamelModel):
    items: List[AttemptRow]


class UploadOut(BaseModel):
    success: bool = True
    data: UploadData


class GeneratedQuizOut(BaseModel):
    success: bool = True
    data: GeneratedQuizData


class QuizOut(BaseModel):
    success: bool = True
    data: QuizData


class SubmissionOut(BaseModel):
    success: bool = True
    data: SubmissionData


class HistoryOut(BaseModel):
    success: bool = True
    data: HistoryData


class AttemptsOut(BaseModel):
    success: bool = True
    data: AttemptsData


class ErrorOut(BaseModel):
    success: bool = False
    error: str
