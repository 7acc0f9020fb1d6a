"""Domain error taxonomy.

Services raise these exceptions; the FastAPI application maps each one
to a JSON body of the form ``{"error": message}`` using the carried
``status_code``.
"""

from typing import Optional


class TyperankError(Exception):
    """Base class for errors that are reported to API callers."""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(TyperankError):
    """A required field is missing or malformed. Nothing was written."""
    status_code = 400


class AuthError(TyperankError):
    """Bad credentials, a missing token or a duplicate signup."""
    status_code = 401


class ForbiddenError(TyperankError):
    status_code = 403


class RateLimitError(TyperankError):
    """The caller exceeded the request budget for an endpoint."""
    status_code = 429

    def __init__(self, message: str, retry_after: int):
        super().__init__(message)
        self.retry_after = retry_after


class StoreError(TyperankError):
    status_code = 500
