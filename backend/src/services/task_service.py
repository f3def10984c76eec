"""
Service layer for task CRUD.

Every function takes the acting user's id and filters on it together with the
task id. A task that belongs to someone else is reported exactly like a task
that does not exist.
"""
import logging

from sqlalchemy import ColumnElement, delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from models.base import utc_now
from models.task import Task
from schemas.task import TaskCreate, TaskUpdate
from services.buckets import resolve_bucket
from services.task_ordering import SortKey, order_tasks

logger = logging.getLogger(__name__)


class TaskNotFoundError(Exception):
    """Raised when no task with this id is owned by the acting user."""

    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


def _owned_by(user_id: int, task_id: int) -> tuple[ColumnElement[bool], ...]:
    return (Task.id == task_id, Task.user_id == user_id)


async def create_task(db: AsyncSession, user_id: int, data: TaskCreate) -> Task:
    """Create a task for `user_id`. The bucket follows `resolve_bucket` precedence."""
    task = Task(
        user_id=user_id,
        title=data.title,
        description=data.description,
        bucket=resolve_bucket(data.bucket_custom, data.bucket),
        due_at=data.due_at,
        priority=data.priority,
        tag=data.tag,
        reminder_enabled=data.reminder_enabled,
        is_done=False,
    )
    db.add(task)
    await db.flush()
    logger.info("task_created", extra={"user_id": user_id, "task_id": task.id})
    return task


async def get_task(db: AsyncSession, user_id: int, task_id: int) -> Task | None:
    """Get one task if (and only if) `user_id` owns it."""
    result = await db.execute(select(Task).where(*_owned_by(user_id, task_id)))
    return result.scalar_one_or_none()


async def list_tasks(
    db: AsyncSession,
    user_id: int,
    bucket: str | None = None,
    sort: SortKey = SortKey.DATE,
) -> list[Task]:
    """
    List a user's tasks in display order.

    Args:
        db: Database session.
        user_id: Owner whose tasks are listed.
        bucket: Restrict to one bucket; None lists every bucket.
        sort: Ordering mode (see `order_tasks`).

    Returns:
        Tasks ordered by `order_tasks`; ties keep storage (id) order.
    """
    query = select(Task).where(Task.user_id == user_id)
    if bucket is not None:
        query = query.where(Task.bucket == bucket)
    result = await db.execute(query.order_by(Task.id))
    return order_tasks(result.scalars().all(), sort)


async def update_task(
    db: AsyncSession,
    user_id: int,
    task_id: int,
    data: TaskUpdate,
) -> Task:
    """
    Replace every editable field of a task.

    Last write wins; there is no version check.

    Raises:
        TaskNotFoundError: If the task does not exist or is not owned by `user_id`.
    """
    task = await get_task(db, user_id, task_id)
    if task is None:
        raise TaskNotFoundError(task_id)

    task.title = data.title
    task.description = data.description
    task.bucket = resolve_bucket(data.bucket_custom, data.bucket)
    task.due_at = data.due_at
    task.priority = data.priority
    task.tag = data.tag
    task.reminder_enabled = data.reminder_enabled
    task.is_done = data.is_done
    task.updated_at = utc_now()
    await db.flush()
    logger.info("task_updated", extra={"user_id": user_id, "task_id": task_id})
    return task


async def set_task_done(
    db: AsyncSession,
    user_id: int,
    task_id: int,
    is_done: bool,
) -> None:
    """
    Set only the done flag (and updated_at) in a single UPDATE.

    Safe to retry: applying the same desired state twice has the same result.

    Raises:
        TaskNotFoundError: If no row matched id and owner.
    """
    result = await db.execute(
        update(Task)
        .where(*_owned_by(user_id, task_id))
        .values(is_done=is_done, updated_at=utc_now()),
    )
    if result.rowcount == 0:
        raise TaskNotFoundError(task_id)
    logger.info(
        "task_toggled",
        extra={"user_id": user_id, "task_id": task_id, "is_done": is_done},
    )


async def delete_task(db: AsyncSession, user_id: int, task_id: int) -> None:
    """
    Hard-delete a task.

    Raises:
        TaskNotFoundError: If no row matched id and owner.
    """
    result = await db.execute(delete(Task).where(*_owned_by(user_id, task_id)))
    if result.rowcount == 0:
        raise TaskNotFoundError(task_id)
    logger.info("task_deleted", extra={"user_id": user_id, "task_id": task_id})
