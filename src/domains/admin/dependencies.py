"""Admin session cookie handling."""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Annotated

import jwt
from fastapi import Cookie, Depends, HTTPException, status

from src.config.settings import settings

ADMIN_COOKIE_NAME = "admin-auth"
SESSION_ALGORITHM = "HS256"


def create_session_token(email: str, now: datetime | None = None) -> str:
    """Signed session token for ``email``, valid for ``ADMIN_SESSION_MAX_AGE`` seconds."""
    issued_at = now or datetime.now(timezone.utc)
    expires_at = issued_at + timedelta(seconds=settings.ADMIN_SESSION_MAX_AGE)

    payload = {
        "sub": email.lower(),
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.ADMIN_SESSION_SECRET, algorithm=SESSION_ALGORITHM)


def decode_session_token(token: str) -> dict:
    """Verify signature and expiry; raises ``jwt.InvalidTokenError`` subclasses."""
    return jwt.decode(
        token,
        settings.ADMIN_SESSION_SECRET,
        algorithms=[SESSION_ALGORITHM],
        options={"require": ["sub", "exp"]},
    )


def verify_credentials(email: str, password: str) -> bool:
    """Check login credentials; always False while no password is configured."""
    if not settings.ADMIN_PASSWORD:
        return False
    email_ok = secrets.compare_digest(email.strip().lower(), settings.ADMIN_EMAIL.lower())
    password_ok = secrets.compare_digest(password, settings.ADMIN_PASSWORD)
    return email_ok and password_ok


async def get_admin_session(
    admin_auth: Annotated[str | None, Cookie(alias=ADMIN_COOKIE_NAME)] = None,
) -> str:
    """Require a valid admin cookie; returns the admin email."""
    if not admin_auth:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    try:
        payload = decode_session_token(admin_auth)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )

    # Sessions end when the configured admin changes
    if payload["sub"] != settings.ADMIN_EMAIL.lower():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return settings.ADMIN_EMAIL


AdminSession = Annotated[str, Depends(get_admin_session)]
