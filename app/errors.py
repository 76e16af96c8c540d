"""Error taxonomy. Each error maps to one HTTP status with a safe client-facing message."""
from fastapi import HTTPException


class AppError(HTTPException):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None, **extra):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)
        # Extra top-level fields for the JSON error body
        self.extra = extra


class ValidationError(AppError):
    """Missing or malformed input."""
    status_code = 400
    default_detail = "Invalid request"


class AuthError(AppError):
    """Bad credentials, bad token or inactive account."""
    status_code = 401
    default_detail = "Not authenticated"


class ForbiddenError(AppError):
    """Role or ownership mismatch."""
    status_code = 403
    default_detail = "Access denied"


class NotFoundError(AppError):
    status_code = 404
    default_detail = "Not found"


class ConflictError(AppError):
    status_code = 409
    default_detail = "Conflict"
