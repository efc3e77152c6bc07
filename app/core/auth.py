"""Session resolution for authenticated endpoints.

The caller's identity comes from an opaque session token issued elsewhere in
the application. The token is read from ``Authorization: Bearer <token>`` or,
when that header is absent, from the session cookie. Sessions are looked up
in the ``sessions`` table; issuing and rotating them is not done here.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timezone
from typing import Annotated

from fastapi import Depends, Header, Request
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from app.core.config import settings
from app.core.errors import AuthenticationAppError
from app.db.session import get_db
from app.models import AuthSession, User

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "


def hash_token(token: str) -> str:
    """Short digest of a session token, safe to put in logs."""
    return hashlib.sha256(token.encode()).hexdigest()[:16]


def extract_session_token(authorization: str | None, cookie: str | None) -> str | None:
    """Pick the session token from the Authorization header or the cookie.

    Examples:
        >>> extract_session_token("Bearer abc", None)
        'abc'
        >>> extract_session_token(None, "xyz")
        'xyz'
        >>> extract_session_token("Basic Zm9v", None) is None
        True
    """
    if authorization:
        if authorization[: len(_BEARER_PREFIX)].lower() == _BEARER_PREFIX:
            token = authorization[len(_BEARER_PREFIX):].strip()
            return token or None
        return None

    if cookie and cookie.strip():
        return cookie.strip()
    return None


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they are stored as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_session(db: Session, token: str, *, now: datetime | None = None) -> User | None:
    """Return the user owning a live session, or None.

    Args:
        db: Database session.
        token: Opaque session token.
        now: Reference time (defaults to the current UTC time).
    """
    stmt = select(AuthSession).options(joinedload(AuthSession.user)).where(AuthSession.id == token)
    auth_session = db.scalar(stmt)
    if auth_session is None:
        return None

    current = now or datetime.now(timezone.utc)
    if _as_utc(auth_session.expires_at) <= current:
        logger.info(
            "auth.session_expired",
            extra={"token_hash": hash_token(token), "user_id": auth_session.user_id},
        )
        return None

    return auth_session.user


async def get_session_token(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    """FastAPI dependency returning the raw session token, if any."""
    return extract_session_token(authorization, request.cookies.get(settings.app.session_cookie_name))


def get_current_user(
    token: Annotated[str | None, Depends(get_session_token)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """FastAPI dependency for endpoints that require a logged-in user.

    Usage:
        @router.get("/protected")
        def protected(user: User = Depends(get_current_user)): ...

    Raises:
        AuthenticationAppError: 401 when no token is sent or it does not map
            to a live session.
    """
    if not token:
        logger.warning("auth.missing_session", extra={"session_present": False})
        raise AuthenticationAppError(code="unauthorized", message="Unauthorized")

    # Close the read transaction so services can open their own.
    with db.begin():
        user = resolve_session(db, token)
    if user is None:
        logger.warning(
            "auth.invalid_session",
            extra={"session_present": True, "token_hash": hash_token(token)},
        )
        raise AuthenticationAppError(code="unauthorized", message="Unauthorized")

    logger.debug("auth.success", extra={"user_id": user.id})
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
