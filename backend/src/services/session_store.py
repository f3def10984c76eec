"""
Server-side session storage.

A session maps an opaque cookie token to a `SessionUser`. Only the token's
SHA-256 digest is persisted. Lifetime is fixed at creation: activity does not
extend it.
"""
import json
import logging
from dataclasses import asdict
from datetime import timedelta
from typing import Protocol

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.redis import RedisClient
from core.security import generate_session_token, hash_session_token
from models.base import utc_now
from models.session import UserSession
from schemas.session_user import SessionUser

logger = logging.getLogger(__name__)


class SessionStoreError(Exception):
    """Raised when a session cannot be persisted."""

    pass


class SessionStore(Protocol):
    """Operations every session backend provides."""

    async def create(self, user: SessionUser) -> str:
        """Persist a new session for `user` and return its token."""
        ...

    async def get(self, token: str) -> SessionUser | None:
        """Resolve a token to its identity; None if unknown or expired."""
        ...

    async def delete(self, token: str) -> None:
        """Destroy a session. Unknown tokens are ignored."""
        ...


class DatabaseSessionStore:
    """Sessions kept in the `sessions` table, sharing the request's transaction."""

    def __init__(self, db: AsyncSession, max_age_seconds: int) -> None:
        self._db = db
        self._max_age = timedelta(seconds=max_age_seconds)

    async def create(self, user: SessionUser) -> str:
        token = generate_session_token()
        self._db.add(
            UserSession(
                token_hash=hash_session_token(token),
                user_id=user.id,
                name=user.name,
                email=user.email,
                expires_at=utc_now() + self._max_age,
            ),
        )
        await self._db.flush()
        return token

    async def get(self, token: str) -> SessionUser | None:
        result = await self._db.execute(
            select(UserSession).where(
                UserSession.token_hash == hash_session_token(token),
                UserSession.expires_at > utc_now(),
            ),
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return SessionUser(id=row.user_id, name=row.name, email=row.email)

    async def delete(self, token: str) -> None:
        await self._db.execute(
            delete(UserSession).where(UserSession.token_hash == hash_session_token(token)),
        )


class RedisSessionStore:
    """Sessions kept in Redis as JSON under `session:<digest>`, expired by TTL."""

    KEY_PREFIX = "session:"

    def __init__(self, redis_client: RedisClient, max_age_seconds: int) -> None:
        self._redis = redis_client
        self._max_age_seconds = max_age_seconds

    def _key(self, token: str) -> str:
        return f"{self.KEY_PREFIX}{hash_session_token(token)}"

    async def create(self, user: SessionUser) -> str:
        token = generate_session_token()
        stored = await self._redis.setex(
            self._key(token), self._max_age_seconds, json.dumps(asdict(user)),
        )
        if not stored:
            raise SessionStoreError("Could not persist session to Redis")
        return token

    async def get(self, token: str) -> SessionUser | None:
        raw = await self._redis.get(self._key(token))
        if raw is None:
            return None
        try:
            return SessionUser(**json.loads(raw))
        except (TypeError, ValueError):
            logger.warning("session_payload_invalid")
            return None

    async def delete(self, token: str) -> None:
        await self._redis.delete(self._key(token))


async def purge_expired_sessions(db: AsyncSession) -> int:
    """Delete expired rows from the `sessions` table; returns how many went."""
    result = await db.execute(
        delete(UserSession)
        .where(UserSession.expires_at <= utc_now())
        .execution_options(synchronize_session=False),
    )
    return result.rowcount
