"""Error taxonomy shared by the services and the HTTP layer."""
from typing import List, Optional


class SalonError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(SalonError):
    """Raised when required fields are missing or invalid."""
    status_code = 400
    code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        missing_fields: Optional[List[str]] = None
    ):
        super().__init__(message, detail)
        self.missing_fields = missing_fields


class AuthError(SalonError):
    """Raised for bad credentials or an invalid bearer token."""
    status_code = 401
    code = "AUTH_ERROR"


class ConflictError(SalonError):
    """Raised for a taken username or an overlapping booking."""
    status_code = 409
    code = "CONFLICT"


class StoreError(SalonError):
    """Raised when a query or the database connection fails."""
    status_code = 500
    code = "STORE_ERROR"
