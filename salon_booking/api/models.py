"""Pydantic models for API request/response validation.

Request fields are optional at the schema level so that missing values
reach the services and come back as 400 responses with the missing names.
"""
from datetime import date, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CredentialsRequest(BaseModel):
    """Request schema for /api/auth/register and /api/auth/login."""
    username: Optional[str] = Field(None, max_length=100, description="Account username")
    password: Optional[str] = Field(None, description="Plain-text password")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"username": "jane", "password": "s3cret-pass"}
        }
    )


class UserInfo(BaseModel):
    """Public identity of a user."""
    id: int
    username: str


class AuthResponse(BaseModel):
    """Response schema for register/login."""
    success: bool = True
    message: str
    token: str
    user: UserInfo


class ServiceResponse(BaseModel):
    """Service as listed by /api/services."""
    id: int
    name: str
    description: Optional[str] = None
    duration_minutes: Optional[int] = None
    price: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)


class StaffResponse(BaseModel):
    """Staff member as listed by /api/staff."""
    id: int
    name: str
    specialty: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AvailableSlotsResponse(BaseModel):
    """Response schema for /api/available-slots."""
    success: bool = True
    slots: List[time] = Field(default_factory=list, description="Free start times")


class BookingRequest(BaseModel):
    """Request schema for /api/bookings."""
    customer_id: Optional[int] = None
    service_id: Optional[int] = None
    staff_id: Optional[int] = None
    booking_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    notes: Optional[str] = Field(None, max_length=1000)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "customer_id": 1,
                "service_id": 2,
                "staff_id": 1,
                "booking_date": "2024-01-01",
                "start_time": "10:00",
                "end_time": "11:00",
                "notes": "First visit"
            }
        }
    )


class BookingInfo(BaseModel):
    """Stored booking."""
    id: int
    customer_id: int
    service_id: int
    staff_id: int
    booking_date: date
    start_time: time
    end_time: time
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    """Response schema for /api/bookings."""
    success: bool = True
    message: str
    booking: BookingInfo


class ErrorResponse(BaseModel):
    """Error response schema."""
    success: bool = False
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    code: Optional[str] = Field(None, description="Error code")
    missing_fields: Optional[List[str]] = Field(
        None,
        serialization_alias="missingFields",
        description="Required fields absent from the request"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": "Missing required fields",
                "code": "VALIDATION_ERROR",
                "missingFields": ["end_time"]
            }
        }
    )
