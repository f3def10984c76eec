"""
Session-cookie authentication.

`get_current_user` is the gate for every task endpoint: it resolves the
session cookie through the configured `SessionStore` and raises
`AuthenticationRequiredError` (answered with a redirect to /login) when no
live session exists.
"""
from fastapi import Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.redis import get_redis_client
from db.session import get_async_session
from schemas.session_user import SessionUser
from services.session_store import (
    DatabaseSessionStore,
    RedisSessionStore,
    SessionStore,
    SessionStoreError,
)

LOGIN_PATH = "/login"


class AuthenticationRequiredError(Exception):
    """Raised when a request needs a session and has none (or an expired one)."""

    def __init__(self) -> None:
        super().__init__("Authentication required")


async def get_session_store(
    db: AsyncSession = Depends(get_async_session),
) -> SessionStore:
    """Session backend selected by `settings.session_backend`."""
    settings = get_settings()
    if settings.session_backend == "redis":
        redis_client = get_redis_client()
        if redis_client is None or not redis_client.is_connected:
            raise SessionStoreError("Redis session backend is not connected")
        return RedisSessionStore(redis_client, settings.session_max_age_seconds)
    return DatabaseSessionStore(db, settings.session_max_age_seconds)


def get_session_token(request: Request) -> str | None:
    """Session token from the request cookie, if any."""
    return request.cookies.get(get_settings().session_cookie_name) or None


async def get_current_user(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> SessionUser:
    """
    Resolve the request's session to an identity.

    Raises:
        AuthenticationRequiredError: If there is no cookie or it maps to no live session.
    """
    token = get_session_token(request)
    if token is None:
        raise AuthenticationRequiredError
    user = await store.get(token)
    if user is None:
        raise AuthenticationRequiredError
    request.state.user_id = user.id
    return user


def set_session_cookie(response: Response, token: str) -> None:
    """Attach the session cookie; its max-age matches the server-side lifetime."""
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_max_age_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    """Remove the session cookie from the client."""
    response.delete_cookie(key=get_settings().session_cookie_name, path="/")
