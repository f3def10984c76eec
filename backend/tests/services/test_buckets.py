"""Tests for bucket resolution and listing."""
import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from models.task import Task
from models.user import User
from services.buckets import (
    DEFAULT_BUCKETS,
    get_buckets,
    merge_buckets,
    parse_bucket_filter,
    resolve_bucket,
)


@pytest.mark.parametrize(
    ("custom", "selected", "expected"),
    [
        ("Travel", "Work", "Travel"),
        ("  Travel  ", None, "Travel"),
        ("", "Work", "Work"),
        ("   ", " Work ", "Work"),
        (None, None, "Life"),
        ("", "", "Life"),
    ],
)
def test__resolve_bucket__precedence(
    custom: str | None,
    selected: str | None,
    expected: str,
) -> None:
    """Custom beats selected beats the default."""
    assert resolve_bucket(custom, selected) == expected


def test__resolve_bucket__explicit_default() -> None:
    assert resolve_bucket(None, "", default="Work") == "Work"


def test__merge_buckets__defaults_first_without_duplicates() -> None:
    assert merge_buckets(["Daily", "Errands", "Travel"]) == [
        "Life", "Work", "Daily", "Errands", "Travel",
    ]
    assert merge_buckets([]) == list(DEFAULT_BUCKETS)


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, None), ("", None), ("  ", None), ("All", None), (" Work ", "Work")],
)
def test__parse_bucket_filter(value: str | None, expected: str | None) -> None:
    assert parse_bucket_filter(value) == expected


async def test__get_buckets__only_own_buckets(db_session: AsyncSession) -> None:
    """Each user sees the defaults plus their own custom buckets."""
    alice = User(name="Alice", email="alice@example.com", password_hash="x")
    bob = User(name="Bob", email="bob@example.com", password_hash="x")
    db_session.add_all([alice, bob])
    await db_session.flush()

    db_session.add_all([
        Task(user_id=alice.id, title="a", bucket="Travel"),
        Task(user_id=alice.id, title="b", bucket="Errands"),
        Task(user_id=alice.id, title="c", bucket="Work"),
        Task(user_id=bob.id, title="d", bucket="Secret"),
    ])
    await db_session.flush()

    assert await get_buckets(db_session, alice.id) == [
        "Life", "Work", "Daily", "Errands", "Travel",
    ]
    assert await get_buckets(db_session, bob.id) == ["Life", "Work", "Daily", "Secret"]
