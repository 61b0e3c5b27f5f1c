# main.py
import os
import time
import logging

from dotenv import load_dotenv
from fastapi import FastAPI, APIRouter, Body, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError as SchemaError

from quizgen.db import init_db, get_session
from quizgen import models, schemas
from quizgen.errors import QuizGenError, ValidationError, NotFoundError
from quizgen.llm import generate_quiz_payload
from quizgen.pdf import extract_pdf_text
from quizgen.utils import percentage, score_message, question_views, isoformat

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

UPLOAD_DIR = os.getenv("UPLOAD_DIR", os.path.join(os.getcwd(), "uploads"))
MAX_UPLOAD_BYTES = 10 * 1024 * 1024
MIN_TEXT_CHARS = 100
PDF_MIME = "application/pdf"

# -----------------------------------------------------------------------------
# App & CORS
# -----------------------------------------------------------------------------
app = FastAPI(title="QuizGen: PDF to Quiz Generator")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten in prod
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create tables at startup
init_db()

router = APIRouter(prefix="/api")

# -----------------------------------------------------------------------------
# Error envelope
# -----------------------------------------------------------------------------
def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})

@app.exception_handler(QuizGenError)
def handle_quizgen_error(request: Request, exc: QuizGenError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return _error(exc.status_code, exc.message)

@app.exception_handler(RequestValidationError)
def handle_request_validation(request: Request, exc: RequestValidationError):
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
    return _error(400, "Invalid request")

@app.exception_handler(Exception)
def handle_unexpected(request: Request, exc: Exception):
    logger.exception("Unexpected error on %s %s", request.method, request.url.path)
    return _error(500, "Unexpected server error")

# -----------------------------------------------------------------------------
# Health
# -----------------------------------------------------------------------------
@router.get("/health")
def health():
    return {"status": "ok"}

# -----------------------------------------------------------------------------
# Upload PDF (validate + save + extract + store)
# -----------------------------------------------------------------------------
@router.post("/upload", response_model=schemas.UploadOut)
def upload_pdf(file: UploadFile = File(None)):
    if file is None:
        raise ValidationError("No file uploaded")
    if file.content_type != PDF_MIME:
        raise ValidationError("Only PDF files allowed")

    if file.size is not None and file.size > MAX_UPLOAD_BYTES:
        raise ValidationError("File too large (max 10MB)")
    data = file.file.read(MAX_UPLOAD_BYTES + 1)
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError("File too large (max 10MB)")

    # 1) Save raw bytes
    os.makedirs(UPLOAD_DIR, exist_ok=True)
    original_name = os.path.basename(file.filename or "upload.pdf")
    filename = f"{int(time.time() * 1000)}-{original_name}"
    filepath = os.path.join(UPLOAD_DIR, filename)
    with open(filepath, "wb") as out:
        out.write(data)

    # 2) Extract text; nothing is stored unless this passes
    text = extract_pdf_text(data).strip()
    if len(text) < MIN_TEXT_CHARS:
        logger.info("Rejected %s: only %d characters extracted", original_name, len(text))
        raise ValidationError(
            "Unable to extract sufficient text from PDF. Please ensure the PDF contains readable text."
        )

    # 3) Store
    with get_session() as db:
        row = models.Upload(
            filename=filename,
            original_name=original_name,
            file_size=len(data),
            mime_type=file.content_type,
            extracted_text=text,
            upload_path=filepath,
        )
        db.add(row)
        db.commit()
        db.refresh(row)
        logger.info("Stored upload %s (%d chars)", row.id, len(text))

        return {
            "data": {
                "upload_id": row.id,
                "filename": row.filename,
                "original_name": row.original_name,
                "extracted_text_length": len(row.extracted_text or ""),
                "processing_status": "completed",
            }
        }

# -----------------------------------------------------------------------------
# Generate quiz (Gemini + store + return)
# -----------------------------------------------------------------------------
@router.post("/quiz/generate", response_model=schemas.GeneratedQuizOut)
def generate_quiz(payload: schemas.GenerateIn):
    with get_session() as db:
        upload = db.get(models.Upload, payload.upload_id)
        if not upload or not upload.extracted_text:
            raise NotFoundError("Upload not found")

        generated = generate_quiz_payload(upload.extracted_text, payload.question_count)

        # Quiz and questions commit together or not at all
        quiz_row = models.Quiz(
            title=f"Quiz from {upload.original_name}",
            upload_id=upload.id,
            total_questions=len(generated.questions),
        )
        db.add(quiz_row)
        db.flush()

        for order, q in enumerate(generated.questions, start=1):
            db.add(models.Question(
                quiz_id=quiz_row.id,
                question_text=q.question,
                options=q.options,
                correct_answer=q.correct_answer,
                explanation=q.explanation,
                dive_deeper=q.dive_deeper,
                question_order=order,
            ))

        db.commit()
        db.refresh(quiz_row)
        logger.info("Created quiz %s with %d questions", quiz_row.id, quiz_row.total_questions)

        return {
            "data": {
                "quiz_id": quiz_row.id,
                "title": quiz_row.title,
                "questions": question_views(quiz_row.questions),
            }
        }

# -----------------------------------------------------------------------------
# History list
# -----------------------------------------------------------------------------
@router.get("/quizzes", response_model=schemas.HistoryOut)
def list_quizzes():
    with get_session() as db:
        rows = db.query(models.Quiz).order_by(models.Quiz.created_at.desc(), models.Quiz.id.desc()).all()
        return {
            "data": {
                "items": [
                    {
                        "quiz_id": r.id,
                        "title": r.title,
                        "source_document": r.upload.original_name,
                        "total_questions": r.total_questions,
                        "created_at": isoformat(r.created_at),
                    }
                    for r in rows
                ]
            }
        }

# -----------------------------------------------------------------------------
# Get quiz by id
# -----------------------------------------------------------------------------
@router.get("/quiz/{quiz_id}", response_model=schemas.QuizOut)
def get_quiz(quiz_id: int):
    with get_session() as db:
        r = db.get(models.Quiz, quiz_id)
        if not r:
            raise NotFoundError("Quiz not found")

        return {
            "data": {
                "quiz_id": r.id,
                "title": r.title,
                "questions": question_views(r.questions),
                "source_document": r.upload.original_name,
                "created_at": isoformat(r.created_at),
            }
        }

# -----------------------------------------------------------------------------
# Submit answers (score + store attempt)
# -----------------------------------------------------------------------------
@router.post("/quiz/{quiz_id}/submit", response_model=schemas.SubmissionOut)
def submit_quiz(quiz_id: int, payload: dict = Body(...)):
    try:
        submission = schemas.SubmitIn.model_validate(payload)
    except SchemaError:
        raise ValidationError("Invalid answers format")

    with get_session() as db:
        quiz = db.get(models.Quiz, quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")

        questions = quiz.questions
        # one verdict per question; a repeated questionId replaces the earlier one
        verdicts = {}
        results = []
        for answer in submission.answers:
            index = answer.question_id - 1
            if index < 0 or index >= len(questions):
                results.append({
                    "question_id": answer.question_id,
                    "correct": False,
                    "explanation": "Invalid question",
                    "dive_deeper": "",
                    "user_answer": answer.selected_answer,
                    "correct_answer": -1,
                })
                continue

            question = questions[index]
            correct = question.correct_answer == answer.selected_answer
            verdicts[answer.question_id] = correct
            results.append({
                "question_id": answer.question_id,
                "correct": correct,
                "explanation": question.explanation,
                "dive_deeper": question.dive_deeper,
                "user_answer": answer.selected_answer,
                "correct_answer": question.correct_answer,
            })

        score = sum(1 for correct in verdicts.values() if correct)
        db.add(models.QuizAttempt(
            quiz_id=quiz.id,
            answers=[a.model_dump(by_alias=True) for a in submission.answers],
            score=score,
        ))
        db.commit()

        total = len(questions)
        pct = percentage(score, total)
        logger.info("Quiz %s attempt scored %d/%d", quiz.id, score, total)
        return {
            "data": {
                "score": score,
                "total_questions": total,
                "percentage": pct,
                "results": results,
                "message": score_message(pct),
            }
        }

# -----------------------------------------------------------------------------
# Attempts for a quiz
# -----------------------------------------------------------------------------
@router.get("/quiz/{quiz_id}/attempts", response_model=schemas.AttemptsOut)
def list_attempts(quiz_id: int):
    with get_session() as db:
        quiz = db.get(models.Quiz, quiz_id)
        if not quiz:
            raise NotFoundError("Quiz not found")

        rows = (
            db.query(models.QuizAttempt)
            .filter(models.QuizAttempt.quiz_id == quiz.id)
            .order_by(models.QuizAttempt.created_at.desc(), models.QuizAttempt.id.desc())
            .all()
        )
        return {
            "data": {
                "items": [
                    {
                        "attempt_id": a.id,
                        "score": a.score,
                        "total_questions": quiz.total_questions,
                        "percentage": percentage(a.score, quiz.total_questions),
                        "created_at": isoformat(a.created_at),
                    }
                    for a in rows
                ]
            }
        }

app.include_router(router)
