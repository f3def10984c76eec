"""Tests for registration and authentication."""
import asyncio
from pathlib import Path

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.security import verify_password
from models import Base, User
from schemas.user import UserRegister
from services.user_service import (
    EmailTakenError,
    InvalidCredentialsError,
    authenticate_user,
    register_user,
)


def registration(email: str = "alice@example.com", password: str = "s3cret") -> UserRegister:
    return UserRegister(name="Alice", email=email, password=password)


async def test__register_user__stores_normalized_email_and_hash(db_session: AsyncSession) -> None:
    user = await register_user(db_session, registration(email="  Alice@Example.COM "))

    assert user.id is not None
    assert user.email == "alice@example.com"
    assert user.password_hash != "s3cret"
    assert verify_password("s3cret", user.password_hash)


async def test__register_user__duplicate_is_case_insensitive(db_session: AsyncSession) -> None:
    await register_user(db_session, registration())
    await db_session.commit()

    with pytest.raises(EmailTakenError):
        await register_user(db_session, registration(email="ALICE@example.com"))

    count = await db_session.scalar(select(func.count()).select_from(User))
    assert count == 1


async def test__register_user__concurrent_same_email_only_one_wins(tmp_path: Path) -> None:
    """Two simultaneous registrations for one email: exactly one account results."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'race.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def attempt() -> bool:
        async with factory() as session:
            try:
                await register_user(session, registration(email="race@example.com"))
                await session.commit()
            except EmailTakenError:
                return False
            return True

    try:
        results = await asyncio.gather(attempt(), attempt())
        assert sorted(results) == [False, True]

        async with factory() as session:
            count = await session.scalar(select(func.count()).select_from(User))
        assert count == 1
    finally:
        await engine.dispose()


async def test__authenticate_user__success(db_session: AsyncSession) -> None:
    created = await register_user(db_session, registration())

    user = await authenticate_user(db_session, " ALICE@example.com", "s3cret")
    assert user.id == created.id


async def test__authenticate_user__failures_are_indistinguishable(db_session: AsyncSession) -> None:
    await register_user(db_session, registration())

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        await authenticate_user(db_session, "alice@example.com", "nope")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        await authenticate_user(db_session, "nobody@example.com", "s3cret")

    assert str(wrong_password.value) == str(unknown_email.value)
