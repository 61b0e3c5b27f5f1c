# errors.py
class QuizGenError(Exception):
    """Base error; `status_code` is what the API answers with."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(QuizGenError):
    status_code = 400


class NotFoundError(QuizGenError):
    status_code = 404


class ExternalServiceError(QuizGenError):
    status_code = 500


class UnexpectedError(QuizGenError):
    status_code = 500
