"""Bucket labels: the fixed defaults plus whatever a user has typed in."""
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.task import Task

DEFAULT_BUCKETS: tuple[str, ...] = ("Life", "Work", "Daily")
DEFAULT_BUCKET = DEFAULT_BUCKETS[0]

# Listing filter value meaning "no bucket filter"
ALL_BUCKETS = "All"


def resolve_bucket(
    custom: str | None,
    selected: str | None,
    default: str = DEFAULT_BUCKET,
) -> str:
    """
    Pick the bucket for a submitted task.

    Precedence: a non-blank custom bucket, then a non-blank selected bucket,
    then `default`. Values are trimmed.
    """
    for candidate in (custom, selected):
        if candidate and candidate.strip():
            return candidate.strip()
    return default


def merge_buckets(stored: Iterable[str]) -> list[str]:
    """Defaults first, then stored buckets not already listed, without duplicates."""
    return list(dict.fromkeys([*DEFAULT_BUCKETS, *stored]))


def parse_bucket_filter(value: str | None) -> str | None:
    """Listing filter from a query parameter; blank or 'All' means no filter."""
    if value is None or not value.strip() or value.strip() == ALL_BUCKETS:
        return None
    return value.strip()


async def get_buckets(db: AsyncSession, user_id: int) -> list[str]:
    """Buckets offered to a user: the defaults plus the user's own (A to Z)."""
    result = await db.execute(
        select(Task.bucket)
        .where(Task.user_id == user_id)
        .distinct()
        .order_by(Task.bucket),
    )
    return merge_buckets(result.scalars().all())
