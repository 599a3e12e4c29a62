"""FastAPI dependency injection functions."""
from typing import Any, Dict, Iterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from salon_booking.auth import decode_access_token
from salon_booking.config import Settings
from salon_booking.errors import AuthError

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_db(request: Request) -> Iterator[Session]:
    """
    Store session for one request.

    The session factory is created at startup and kept on app.state;
    the session is closed (and any open transaction rolled back) afterwards.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    settings: Settings = Depends(get_settings)
) -> Dict[str, Any]:
    """
    FastAPI dependency for bearer token validation.

    Returns:
        {"id", "username"} claims of the caller

    Raises:
        AuthError: Missing or invalid token (401)
    """
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Missing bearer token")

    return decode_access_token(credentials.credentials, settings.jwt_secret)
