"""QuizGen: PDF-to-quiz service backed by Gemini."""

__version__ = "0.1.0"
