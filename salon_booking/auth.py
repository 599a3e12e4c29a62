"""User registration, login and bearer tokens."""
from datetime import datetime, timedelta, UTC
from typing import Any, Dict, Optional

import bcrypt
import jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salon_booking.api.database_models import User
from salon_booking.config import TOKEN_ALGORITHM, TOKEN_TTL_SECONDS
from salon_booking.database import store_errors
from salon_booking.errors import AuthError, ConflictError, ValidationError
from salon_booking.logging_config import get_logger

logger = get_logger(__name__)

# bcrypt ignores (or rejects) anything past 72 bytes
MAX_PASSWORD_BYTES = 72

INVALID_CREDENTIALS = "Invalid username or password"

# Checked when the username is unknown so both failures cost one bcrypt round
_DUMMY_HASH = bcrypt.hashpw(b"unknown-user", bcrypt.gensalt()).decode()


def hash_password(password: str) -> str:
    """Hash password using bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, password_hash: str) -> bool:
    """Verify password against hash; over-long passwords never match."""
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        return False
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def create_access_token(user_id: int, username: str, secret: str) -> str:
    """
    Sign a token carrying the user's identity.

    Claims: id, username, iat, exp (iat + 1 hour).
    """
    now = datetime.now(UTC)
    payload = {
        "id": user_id,
        "username": username,
        "iat": now,
        "exp": now + timedelta(seconds=TOKEN_TTL_SECONDS),
    }
    return jwt.encode(payload, secret, algorithm=TOKEN_ALGORITHM)


def decode_access_token(token: str, secret: str) -> Dict[str, Any]:
    """
    Verify a bearer token and return its identity claims.

    Args:
        token: Encoded JWT
        secret: Signing secret

    Returns:
        {"id": int, "username": str}

    Raises:
        AuthError: If the token is expired, tampered with or malformed
    """
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[TOKEN_ALGORITHM],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError as e:
        raise AuthError("Token expired") from e
    except jwt.InvalidTokenError as e:
        raise AuthError("Invalid token") from e

    if "id" not in claims or "username" not in claims:
        raise AuthError("Invalid token")

    return {"id": claims["id"], "username": claims["username"]}


def _require_credentials(username: Optional[str], password: Optional[str]):
    if not username or not password:
        raise ValidationError(
            "Username and password are required",
            missing_fields=[
                name for name, value in (("username", username), ("password", password))
                if not value
            ]
        )


def _auth_result(user: User, secret: str) -> Dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "token": create_access_token(user.id, user.username, secret),
    }


def register(db: Session, username: Optional[str], password: Optional[str], secret: str) -> Dict[str, Any]:
    """
    Create a user account and sign a token for it.

    Args:
        db: Store session
        username: Requested username (must be unused)
        password: Plain-text password, hashed before storage
        secret: Token signing secret

    Returns:
        {"id", "username", "token"}

    Raises:
        ValidationError: Missing fields or password over 72 bytes
        ConflictError: Username already taken
        StoreError: Database failure
    """
    _require_credentials(username, password)

    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    with store_errors("Registration failed"):
        existing = db.query(User).filter(User.username == username).first()
        if existing:
            db.rollback()
            logger.info("registration_conflict", username=username)
            raise ConflictError("Username already exists")

        user = User(username=username, password_hash=hash_password(password))
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration
            db.rollback()
            raise ConflictError("Username already exists") from e

    logger.info("user_registered", user_id=user.id, username=user.username)
    return _auth_result(user, secret)


def login(db: Session, username: Optional[str], password: Optional[str], secret: str) -> Dict[str, Any]:
    """
    Authenticate a user and sign a fresh token.

    Raises:
        ValidationError: Missing fields
        AuthError: Unknown username or wrong password
        StoreError: Database failure
    """
    _require_credentials(username, password)

    with store_errors("Login failed"):
        user = db.query(User).filter(User.username == username).first()

    password_matches = verify_password(password, user.password_hash if user else _DUMMY_HASH)
    if user is None or not password_matches:
        logger.warning("login_failed", username=username)
        raise AuthError(INVALID_CREDENTIALS)

    logger.info("user_logged_in", user_id=user.id)
    return _auth_result(user, secret)
