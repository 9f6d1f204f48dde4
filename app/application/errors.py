"""
Application error kinds.

Each error knows the HTTP status and the short label it is reported with;
the API layer renders every AppError as ``{error, message, details?}``.
"""


class AppError(Exception):
    status_code = 500
    error = "Internal server error"
    default_message = "An error occurred while processing your request"

    def __init__(self, message: str | None = None, details: list[str] | None = None, error: str | None = None):
        self.message = message or self.default_message
        self.details = details
        if error is not None:
            self.error = error
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"error": self.error, "message": self.message}
        if self.details:
            body["details"] = list(self.details)
        return body


class ValidationError(AppError):
    """Malformed or out-of-range input; ``details`` lists every violation."""
    status_code = 400
    error = "Validation failed"
    default_message = "Please check your input and try again"


class NotFoundError(AppError):
    """Record absent or owned by someone else (deliberately indistinguishable)."""
    status_code = 404
    error = "Not found"
    default_message = "The requested resource does not exist or you do not have access to it"


class ConflictError(AppError):
    status_code = 400
    error = "Conflict"
    default_message = "Resource already exists"


class AuthError(AppError):
    status_code = 401
    error = "Access denied"
    default_message = "Authentication failed"


class InternalError(AppError):
    """Unexpected failure; the caller only ever sees the generic message."""
    status_code = 500


class DatabaseError(InternalError):
    error = "Database error"
