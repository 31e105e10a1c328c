"""Domain errors. Each maps to an HTTP status and a ``{error, message}`` JSON body."""


class AppError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def error(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error, "message": self.message}


class ValidationError(AppError):
    status_code = 400
    default_message = "Invalid request"


class Unauthenticated(AppError):
    status_code = 401
    default_message = "Access token required"


class InvalidOrExpiredToken(AppError):
    status_code = 403
    default_message = "Invalid or expired token"


class InvalidToken(InvalidOrExpiredToken):
    default_message = "Invalid authentication token"


class ExpiredToken(InvalidOrExpiredToken):
    default_message = "Your session has expired, please login again"


class InsufficientPermissions(AppError):
    status_code = 403
    default_message = "Insufficient permissions"


class NotFound(AppError):
    status_code = 404
    default_message = "The requested resource was not found"


class ConflictError(AppError):
    status_code = 409
    default_message = "A record with this information already exists"


class SignatureInvalid(AppError):
    status_code = 400
    default_message = "Webhook signature verification failed"


class UpstreamError(AppError):
    status_code = 500
    default_message = "Payment provider request failed"


class InternalError(AppError):
    status_code = 500
    default_message = "An unexpected error occurred. Please try again later."
