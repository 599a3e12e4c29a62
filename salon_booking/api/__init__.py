"""API package initialization."""
from salon_booking.api.models import (
    AuthResponse, BookingRequest, BookingResponse, CredentialsRequest, ErrorResponse
)

__all__ = ["AuthResponse", "BookingRequest", "BookingResponse", "CredentialsRequest", "ErrorResponse"]
