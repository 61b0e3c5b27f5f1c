# llm.py  (google-generativeai directly, no wrapper)
import os
import re
import json
import logging

from dotenv import load_dotenv
import google.generativeai as genai
from pydantic import ValidationError as SchemaError

from quizgen.errors import ExternalServiceError
from quizgen.schemas import GeneratedQuiz, DEFAULT_QUESTION_COUNT

load_dotenv()

logger = logging.getLogger(__name__)

GEMINI_MODEL = (os.getenv("GEMINI_MODEL") or "gemini-2.5-flash").strip()

# Only the head of the document is sent; longer texts are not chunked.
MAX_PROMPT_CHARS = 4000

PROMPT_PATH = os.path.join(os.path.dirname(__file__), "prompts", "quiz_prompt.md")
with open(PROMPT_PATH, "r", encoding="utf-8") as f:
    PROMPT_MD = f.read()

FENCE_OPEN_RE = re.compile(r"^```(?:json)?\s*", re.I)
FENCE_CLOSE_RE = re.compile(r"\s*```$")


class LLMError(ExternalServiceError):
    pass


_configured = False

def _configure() -> None:
    global _configured
    if _configured:
        return
    api_key = os.getenv("GOOGLE_API_KEY", "").strip()
    if not api_key:
        raise RuntimeError("GOOGLE_API_KEY is missing in .env")
    genai.configure(api_key=api_key)
    _configured = True


def format_prompt(document_text: str, question_count: int = DEFAULT_QUESTION_COUNT) -> str:
    instructions = PROMPT_MD.replace("{question_count}", str(question_count))
    return f"""{instructions}

Document Content:
{document_text[:MAX_PROMPT_CHARS]}
"""


def strip_code_fences(text: str) -> str:
    # Gemini often wraps JSON in ``` or ```json blocks
    content = text.strip()
    if content.startswith("```"):
        content = FENCE_OPEN_RE.sub("", content, count=1)
        content = FENCE_CLOSE_RE.sub("", content, count=1)
    return content


def parse_quiz_reply(text: str) -> GeneratedQuiz:
    """
    Turns Gemini's free text into a validated GeneratedQuiz.
    Anything that isn't the exact shape we asked for raises LLMError;
    the raw text is logged, never returned.
    """
    content = strip_code_fences(text)
    try:
        raw = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error("Gemini returned non-JSON: %s\nRaw: %s", e, content[:2000])
        raise LLMError("Invalid AI response") from e

    try:
        return GeneratedQuiz.model_validate(raw)
    except SchemaError as e:
        logger.error("Gemini JSON failed validation: %s\nRaw: %s", e, content[:2000])
        raise LLMError("Invalid AI response") from e


def _complete(prompt_text: str) -> str:
    _configure()
    model = genai.GenerativeModel(GEMINI_MODEL)
    logger.info("Calling Gemini model %s (%d prompt chars)", GEMINI_MODEL, len(prompt_text))
    try:
        resp = model.generate_content(prompt_text)
        text = resp.text
    except Exception as e:
        logger.exception("Gemini request failed")
        raise LLMError("Quiz generation failed. Please try again.") from e
    if not text:
        raise LLMError("Quiz generation failed. Please try again.")
    return text


def generate_quiz_payload(document_text: str, question_count: int = DEFAULT_QUESTION_COUNT) -> GeneratedQuiz:
    """
    Builds the prompt, calls Gemini once and returns the validated reply,
    capped at `question_count` questions. Raises LLMError on failure.
    """
    reply = _complete(format_prompt(document_text, question_count))
    quiz = parse_quiz_reply(reply)
    if len(quiz.questions) > question_count:
        logger.info("Gemini returned %d questions, keeping %d", len(quiz.questions), question_count)
        quiz.questions = quiz.questions[:question_count]
    return quiz
