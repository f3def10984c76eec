"""Service layer for account registration and credential checks."""
import logging
import secrets
from functools import lru_cache

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from core.config import get_settings
from core.security import hash_password, verify_password
from models.user import User
from schemas.user import UserRegister, normalize_email

logger = logging.getLogger(__name__)


class EmailTakenError(Exception):
    """Raised when registering an email that already has an account."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("Email already registered")


class InvalidCredentialsError(Exception):
    """Raised for an unknown email or a wrong password (deliberately indistinguishable)."""

    def __init__(self) -> None:
        super().__init__("Invalid email or password")


@lru_cache
def _dummy_hash(rounds: int) -> str:
    """Hash compared against when the email is unknown, so both paths cost one bcrypt check."""
    return hash_password(secrets.token_urlsafe(16), rounds)


async def register_user(db: AsyncSession, data: UserRegister) -> User:
    """
    Create an account.

    The email arrives already normalized by `UserRegister`. Uniqueness is left
    to the database constraint so two concurrent registrations cannot both win.

    Raises:
        EmailTakenError: If the normalized email already has an account.
    """
    password_hash = await run_in_threadpool(
        hash_password, data.password, get_settings().bcrypt_rounds,
    )
    user = User(name=data.name, email=data.email, password_hash=password_hash)
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        logger.info("registration_conflict")
        raise EmailTakenError(data.email) from e
    logger.info("user_registered", extra={"user_id": user.id})
    return user


async def authenticate_user(db: AsyncSession, email: str, password: str) -> User:
    """
    Return the user for a matching email/password pair.

    Raises:
        InvalidCredentialsError: If the email is unknown or the password is wrong.
    """
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    user = result.scalar_one_or_none()

    stored_hash = user.password_hash if user else _dummy_hash(get_settings().bcrypt_rounds)
    password_ok = await run_in_threadpool(verify_password, password, stored_hash)
    if user is None or not password_ok:
        logger.info("login_failed")
        raise InvalidCredentialsError
    logger.info("login_succeeded", extra={"user_id": user.id})
    return user
