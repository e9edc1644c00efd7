"""
Error types surfaced by the Books API handlers.
"""


class BookAPIError(Exception):
    """Base error mapped to an HTTP status code at the API boundary."""

    status_code: int = 500
    default_message: str = "internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class PayloadValidationError(BookAPIError):
    """Missing required field or malformed request body."""

    status_code = 400
    default_message = "invalid JSON body"


class BookNotFoundError(BookAPIError):
    """No book is stored under the requested identifier."""

    status_code = 404
    default_message = "book not found"


class InternalServiceError(BookAPIError):
    """Unexpected failure; the detail is logged, never exposed."""

    status_code = 500
    default_message = "internal server error"
