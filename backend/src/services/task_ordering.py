"""
Display ordering for task lists.

Every sort mode puts unfinished tasks before finished ones, then applies the
mode's own keys. Orderings are built from successive stable sorts, so tasks
whose keys are all equal keep the order they were passed in (storage order).
"""
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from enum import Enum

from models.task import Priority, Task


class SortKey(str, Enum):
    """Sort modes offered by the task list. Unrecognized input maps to DATE."""

    DATE = "date"
    NAME = "name"
    PRIORITY = "priority"
    TAG = "tag"

    @classmethod
    def parse(cls, value: "str | SortKey | None") -> "SortKey":
        """Case-insensitive lookup; blank or unknown values fall back to DATE."""
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.DATE


PRIORITY_RANK: dict[Priority, int] = {
    Priority.HIGH: 0,
    Priority.MID: 1,
    Priority.LOW: 2,
}

# Placeholder so undated tasks share a comparable key; never compared against real dates
_NO_DATE = datetime.min.replace(tzinfo=UTC)


def _newest_first(tasks: list[Task]) -> None:
    tasks.sort(key=lambda t: t.created_at, reverse=True)


def _by_date(tasks: list[Task]) -> None:
    _newest_first(tasks)
    tasks.sort(key=lambda t: (t.due_at is None, t.due_at or _NO_DATE))


def _by_name(tasks: list[Task]) -> None:
    tasks.sort(key=lambda t: t.title.lower())


def _by_priority(tasks: list[Task]) -> None:
    _newest_first(tasks)
    tasks.sort(key=lambda t: PRIORITY_RANK[Priority.parse(t.priority)])


def _by_tag(tasks: list[Task]) -> None:
    tasks.sort(key=lambda t: (t.tag is None, t.tag or ""))


_SORTERS: dict[SortKey, Callable[[list[Task]], None]] = {
    SortKey.DATE: _by_date,
    SortKey.NAME: _by_name,
    SortKey.PRIORITY: _by_priority,
    SortKey.TAG: _by_tag,
}


def order_tasks(tasks: Iterable[Task], sort: SortKey = SortKey.DATE) -> list[Task]:
    """
    Return tasks in display order for the given sort mode.

    - date: dated before undated, earliest due first, then newest created first.
    - name: case-insensitive title, A to Z.
    - priority: High, Mid, Low, then newest created first.
    - tag: tagged before untagged, tag A to Z.

    Done tasks always come after every unfinished task.
    """
    ordered = list(tasks)
    _SORTERS[SortKey.parse(sort)](ordered)
    # Final pass is the primary key; stability preserves the secondary ordering
    ordered.sort(key=lambda t: t.is_done)
    return ordered
