# quiz_gateway/errors.py
from typing import Optional


class QuizGatewayError(Exception):
    """Base error. Rendered by the app as {"error": ..., "message": ...} with status_code."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error is not None:
            self.error = error


class InputValidationError(QuizGatewayError):
    """Missing file, blank topic, disallowed MIME type or oversize upload."""

    status_code = 400
    error = "Invalid request"


class ExtractionError(QuizGatewayError):
    """PDF text could not be extracted, or there is not enough of it."""

    status_code = 400
    error = "PDF content is too short or invalid"


class ModelUnavailableError(QuizGatewayError):
    """Transport, auth or quota failure talking to the generation API."""

    status_code = 500
    error = "Failed to generate quiz"


class MalformedReplyError(QuizGatewayError):
    """The model reply is not JSON or has no usable `questions` list."""

    status_code = 500
    error = "Model returned an invalid quiz"

    def __init__(self, message: str, raw_reply: str = ""):
        super().__init__(message)
        # kept for logs only
        self.raw_reply = raw_reply
