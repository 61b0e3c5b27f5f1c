# utils.py
import math

SCORE_MESSAGES = [
    (90, "Excellent! Outstanding performance!"),
    (80, "Great job! Well done!"),
    (70, "Good work! Keep it up!"),
    (60, "Not bad! Room for improvement."),
]
FALLBACK_MESSAGE = "Keep studying! You can do better!"


def percentage(score: int, total: int) -> int:
    """Round-half-up percentage, so 2/3 -> 67 and 1/3 -> 33."""
    if total <= 0:
        return 0
    return int(math.floor(score * 100 / total + 0.5))


def score_message(pct: int) -> str:
    for floor_pct, message in SCORE_MESSAGES:
        if pct >= floor_pct:
            return message
    return FALLBACK_MESSAGE


def question_views(questions) -> list:
    """Question rows (already ordered) -> API dicts with 1-based display ids."""
    return [
        {
            "id": index,
            "question": q.question_text,
            "options": q.options,
            "correct_answer": q.correct_answer,
            "explanation": q.explanation,
            "dive_deeper": q.dive_deeper,
        }
        for index, q in enumerate(questions, start=1)
    ]


def isoformat(value) -> str:
    return value.isoformat() if value else ""
