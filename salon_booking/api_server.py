"""FastAPI server for the salon booking backend.

Features:
- CORS middleware for the web front end
- Global exception handling (SalonError taxonomy -> JSON errors)
- Health check endpoint
- Structured logging with request IDs
- Store engine created at startup, sessions injected per request
"""
from contextlib import asynccontextmanager
from datetime import date
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salon_booking import __version__, auth, availability, bookings, catalog
from salon_booking.api.dependencies import get_current_user, get_db, get_settings
from salon_booking.api.models import (
    AuthResponse,
    AvailableSlotsResponse,
    BookingInfo,
    BookingRequest,
    BookingResponse,
    CredentialsRequest,
    ErrorResponse,
    ServiceResponse,
    StaffResponse,
)
from salon_booking.config import Settings
from salon_booking.config import get_settings as load_settings
from salon_booking.database import (
    check_connection,
    create_session_factory,
    create_store_engine,
    init_database,
)
from salon_booking.errors import SalonError
from salon_booking.logging_config import RequestIDMiddleware, get_logger, setup_structured_logging

logger = get_logger(__name__)


def _error_response(status_code: int, body: ErrorResponse, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    settings: Settings = app.state.settings

    logger.info("server_starting", port=settings.port)
    if settings.uses_default_secret:
        logger.warning("default_jwt_secret_in_use")

    engine = app.state.engine
    if engine is None:
        engine = create_store_engine(settings.database_url, pool_size=settings.db_pool_size)

    # Startup: a store outage is fatal
    try:
        check_connection(engine)
        init_database(engine)
        logger.info("database_connected")
    except SQLAlchemyError as e:
        logger.error("database_connection_failed", error=str(e))
        raise

    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)

    yield

    engine.dispose()
    logger.info("server_shutting_down")


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Runtime settings (defaults to the environment)
        engine: Pre-built store engine; created at startup when omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or load_settings()
    setup_structured_logging(settings.log_level)

    app = FastAPI(
        title="Salon Booking API",
        description="Authentication, catalog, availability and bookings for a salon",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = None

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(RequestIDMiddleware)

    _register_exception_handlers(app)
    _register_routes(app)
    return app


def _register_exception_handlers(app: FastAPI):

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies and query strings are client errors (400)."""
        logger.warning("request_validation_error", path=request.url.path, errors=str(exc.errors()))
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            ErrorResponse(
                error="Invalid request",
                detail=str(exc.errors()),
                code="VALIDATION_ERROR"
            )
        )

    @app.exception_handler(SalonError)
    async def salon_error_handler(request: Request, exc: SalonError):
        """Map the service error taxonomy onto status codes."""
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
        return _error_response(
            exc.status_code,
            ErrorResponse(
                error=exc.message,
                detail=exc.detail,
                code=exc.code,
                missing_fields=getattr(exc, "missing_fields", None)
            ),
            headers=headers
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch-all handler for unexpected exceptions."""
        logger.error("unexpected_error", path=request.url.path, error=str(exc), exc_info=True)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorResponse(
                error="Internal Server Error",
                detail="An unexpected error occurred. Please try again later.",
                code="INTERNAL_ERROR"
            )
        )


def _register_routes(app: FastAPI):

    @app.get("/health", tags=["Health"])
    async def health_check():
        """Health check endpoint for load balancers."""
        return {
            "status": "healthy",
            "service": "salon-booking-api",
            "version": __version__
        }

    @app.get("/", tags=["Root"])
    async def root():
        """Root endpoint with API info."""
        return {
            "message": "Salon Booking API",
            "docs": "/docs",
            "health": "/health"
        }

    @app.post(
        "/api/auth/register",
        tags=["Auth"],
        response_model=AuthResponse,
        status_code=status.HTTP_201_CREATED
    )
    def register(
        request: CredentialsRequest,
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings)
    ):
        """
        Create an account and return a signed token.

        Raises:
            400: Missing username/password
            409: Username already exists
        """
        result = auth.register(db, request.username, request.password, settings.jwt_secret)
        return AuthResponse(
            message="Registration successful",
            token=result["token"],
            user={"id": result["id"], "username": result["username"]}
        )

    @app.post("/api/auth/login", tags=["Auth"], response_model=AuthResponse)
    def login(
        request: CredentialsRequest,
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings)
    ):
        """
        Check credentials and return a fresh token.

        Raises:
            400: Missing username/password
            401: Invalid username or password
        """
        result = auth.login(db, request.username, request.password, settings.jwt_secret)
        return AuthResponse(
            message="Login successful",
            token=result["token"],
            user={"id": result["id"], "username": result["username"]}
        )

    @app.get("/api/services", tags=["Catalog"], response_model=List[ServiceResponse])
    def get_services(db: Session = Depends(get_db)):
        """List all services."""
        return catalog.list_services(db)

    @app.get("/api/staff", tags=["Catalog"], response_model=List[StaffResponse])
    def get_staff(db: Session = Depends(get_db)):
        """List all staff members."""
        return catalog.list_staff(db)

    @app.get("/api/available-slots", tags=["Availability"], response_model=AvailableSlotsResponse)
    def get_available_slots(
        staff_id: Optional[int] = Query(None, alias="staffId"),
        slot_date: Optional[date] = Query(None, alias="date"),
        db: Session = Depends(get_db)
    ):
        """Free slot times for a staff member on a date."""
        slots = availability.get_available_slots(db, staff_id, slot_date)
        return AvailableSlotsResponse(slots=slots)

    @app.post("/api/bookings", tags=["Bookings"], response_model=BookingResponse)
    def create_booking(
        request: BookingRequest,
        db: Session = Depends(get_db),
        current_user: Dict[str, Any] = Depends(get_current_user)
    ):
        """
        Create a booking if the staff member is free for the whole interval.

        Raises:
            400: Missing or invalid fields
            401: Missing or invalid bearer token
            409: Interval overlaps an existing booking
        """
        logger.info("booking_requested", user_id=current_user["id"], staff_id=request.staff_id)
        booking = bookings.create_booking(
            db,
            customer_id=request.customer_id,
            service_id=request.service_id,
            staff_id=request.staff_id,
            booking_date=request.booking_date,
            start_time=request.start_time,
            end_time=request.end_time,
            notes=request.notes
        )
        return BookingResponse(
            message="Booking created successfully",
            booking=BookingInfo.model_validate(booking)
        )


def main():
    """Run the API with uvicorn on the configured port."""
    settings = load_settings()
    uvicorn.run(
        "salon_booking.api_server:create_app",
        factory=True,
        host="0.0.0.0",
        port=settings.port
    )


if __name__ == "__main__":
    main()
