"""Application error taxonomy.

Services raise these instead of ``HTTPException`` so that business rules stay
independent of the web layer. Each class carries an ``ErrorCode`` tag and the
HTTP status the API answers with; ``main.create_app`` registers a single
handler that renders any ``AppError``.
"""

from enum import Enum


class ErrorCode(str, Enum):
    INVALID_ARGUMENT = "invalid_argument"
    UNAUTHORIZED = "unauthorized"
    INVALID_TOKEN = "invalid_token"
    EXPIRED_TOKEN = "expired_token"
    MALFORMED_TOKEN = "malformed_token"
    INVALID_CREDENTIALS = "invalid_credentials"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PERSISTENCE_ERROR = "persistence_error"
    INTERNAL_ERROR = "internal_error"


class AppError(Exception):
    """Base exception for all task manager errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgumentError(AppError):
    """Raised when a required field is missing or blank."""

    code = ErrorCode.INVALID_ARGUMENT
    status_code = 400


class UnauthorizedError(AppError):
    """Raised when the caller is unauthenticated or lacks the required role."""

    code = ErrorCode.UNAUTHORIZED
    status_code = 401

    def __init__(self, message: str = "You are not authorized to access this resource."):
        super().__init__(message)


class InvalidTokenError(UnauthorizedError):
    """Token signature or issuer does not verify."""

    code = ErrorCode.INVALID_TOKEN


class ExpiredTokenError(UnauthorizedError):
    """Token is past its expiry."""

    code = ErrorCode.EXPIRED_TOKEN


class MalformedTokenError(UnauthorizedError):
    """Token is not a structurally valid JWT or lacks required claims."""

    code = ErrorCode.MALFORMED_TOKEN


class InvalidCredentialsError(AppError):
    """Raised when a username/password pair does not verify."""

    code = ErrorCode.INVALID_CREDENTIALS
    status_code = 401


class NotFoundError(AppError):
    """Raised when a requested record does not exist."""

    code = ErrorCode.NOT_FOUND
    status_code = 404


class ConflictError(AppError):
    """Raised when a write would violate a uniqueness rule."""

    code = ErrorCode.CONFLICT
    status_code = 409


class PersistenceError(AppError):
    """Store-layer failure with database details withheld from the client."""

    code = ErrorCode.PERSISTENCE_ERROR
    status_code = 500

    def __init__(self, message: str = "Database error. See server log for details."):
        super().__init__(message)
