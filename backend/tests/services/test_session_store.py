"""Tests for the database and Redis session stores."""
import json
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.redis import RedisClient
from core.security import hash_session_token
from models.session import UserSession
from models.user import User
from schemas.session_user import SessionUser
from services.session_store import (
    DatabaseSessionStore,
    RedisSessionStore,
    SessionStoreError,
    purge_expired_sessions,
)

WEEK = 7 * 24 * 60 * 60


@pytest.fixture
async def session_user(db_session: AsyncSession) -> SessionUser:
    user = User(name="Alice", email="alice@example.com", password_hash="x")
    db_session.add(user)
    await db_session.flush()
    return SessionUser(id=user.id, name=user.name, email=user.email)


class TestDatabaseSessionStore:
    """Tests for sessions kept in the database."""

    async def test__create_then_get(
        self, db_session: AsyncSession, session_user: SessionUser,
    ) -> None:
        store = DatabaseSessionStore(db_session, WEEK)
        token = await store.create(session_user)

        assert await store.get(token) == session_user
        assert await store.get("unknown-token") is None

    async def test__token_stored_only_as_digest(
        self, db_session: AsyncSession, session_user: SessionUser,
    ) -> None:
        store = DatabaseSessionStore(db_session, WEEK)
        token = await store.create(session_user)

        stored = (await db_session.execute(select(UserSession.token_hash))).scalars().all()
        assert stored == [hash_session_token(token)]
        assert token not in stored

    async def test__expires_after_fixed_lifetime(
        self, db_session: AsyncSession, session_user: SessionUser,
    ) -> None:
        row_store = DatabaseSessionStore(db_session, WEEK)
        token = await row_store.create(session_user)
        row = await db_session.get(UserSession, hash_session_token(token))
        delta = row.expires_at - row.created_at
        assert abs(delta.total_seconds() - WEEK) < 5

        expired_store = DatabaseSessionStore(db_session, -1)
        expired = await expired_store.create(session_user)
        assert await expired_store.get(expired) is None

    async def test__delete(self, db_session: AsyncSession, session_user: SessionUser) -> None:
        store = DatabaseSessionStore(db_session, WEEK)
        token = await store.create(session_user)

        await store.delete(token)
        assert await store.get(token) is None
        await store.delete(token)

    async def test__purge_expired_sessions(
        self, db_session: AsyncSession, session_user: SessionUser,
    ) -> None:
        live = await DatabaseSessionStore(db_session, WEEK).create(session_user)
        await DatabaseSessionStore(db_session, -1).create(session_user)
        await DatabaseSessionStore(db_session, -1).create(session_user)

        assert await purge_expired_sessions(db_session) == 2
        remaining = (await db_session.execute(select(UserSession.token_hash))).scalars().all()
        assert remaining == [hash_session_token(live)]


class TestRedisSessionStore:
    """Tests for sessions kept in Redis, with the client mocked."""

    @pytest.fixture
    def redis_client(self) -> AsyncMock:
        client = AsyncMock(spec=RedisClient)
        client.setex.return_value = True
        client.get.return_value = None
        return client

    async def test__create_writes_json_with_ttl(self, redis_client: AsyncMock) -> None:
        store = RedisSessionStore(redis_client, WEEK)
        user = SessionUser(id=1, name="Alice", email="alice@example.com")

        token = await store.create(user)

        key, ttl, payload = redis_client.setex.await_args.args
        assert key == f"session:{hash_session_token(token)}"
        assert ttl == WEEK
        assert json.loads(payload) == {"id": 1, "name": "Alice", "email": "alice@example.com"}

    async def test__create_fails_when_redis_unavailable(self, redis_client: AsyncMock) -> None:
        redis_client.setex.return_value = False
        store = RedisSessionStore(redis_client, WEEK)

        with pytest.raises(SessionStoreError):
            await store.create(SessionUser(id=1, name="Alice", email="alice@example.com"))

    async def test__get_resolves_payload(self, redis_client: AsyncMock) -> None:
        redis_client.get.return_value = b'{"id": 7, "name": "Bob", "email": "bob@example.com"}'
        store = RedisSessionStore(redis_client, WEEK)

        assert await store.get("token") == SessionUser(id=7, name="Bob", email="bob@example.com")
        redis_client.get.assert_awaited_once_with(f"session:{hash_session_token('token')}")

    async def test__get_missing_or_corrupt(self, redis_client: AsyncMock) -> None:
        store = RedisSessionStore(redis_client, WEEK)
        assert await store.get("token") is None

        redis_client.get.return_value = b"not json"
        assert await store.get("token") is None

        redis_client.get.return_value = b'{"unexpected": true}'
        assert await store.get("token") is None

    async def test__delete(self, redis_client: AsyncMock) -> None:
        store = RedisSessionStore(redis_client, WEEK)
        await store.delete("token")
        redis_client.delete.assert_awaited_once_with(f"session:{hash_session_token('token')}")
