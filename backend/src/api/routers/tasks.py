"""Task list and task CRUD endpoints. All of them require a session."""
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_current_user
from schemas.session_user import SessionUser
from schemas.task import (
    TaskCreate,
    TaskListResponse,
    TaskResponse,
    TaskToggle,
    TaskUpdate,
    ToggleResponse,
)
from services import task_service
from services.buckets import ALL_BUCKETS, get_buckets, parse_bucket_filter
from services.task_ordering import SortKey

router = APIRouter(tags=["tasks"])


def _redirect_to_list(bucket: str | None = None) -> RedirectResponse:
    url = f"/?{urlencode({'bucket': bucket})}" if bucket else "/"
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")


@router.get("/", response_model=TaskListResponse)
async def list_tasks(
    bucket: str | None = Query(default=None, description="Bucket filter; 'All' or blank for every bucket"),
    sort: str | None = Query(default=None, description="date (default), name, priority or tag"),
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> TaskListResponse:
    """
    List the current user's tasks in display order.

    Unfinished tasks come first under every sort. Unknown sort values fall back
    to `date`.
    """
    bucket_filter = parse_bucket_filter(bucket)
    sort_key = SortKey.parse(sort)
    tasks = await task_service.list_tasks(db, current_user.id, bucket_filter, sort_key)
    return TaskListResponse(
        items=[TaskResponse.model_validate(t) for t in tasks],
        buckets=await get_buckets(db, current_user.id),
        active_bucket=bucket_filter or ALL_BUCKETS,
        active_sort=sort_key,
        user=current_user,
    )


@router.get("/tasks/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> TaskResponse:
    """Get a single task by ID."""
    task = await task_service.get_task(db, current_user.id, task_id)
    if task is None:
        raise _not_found()
    return TaskResponse.model_validate(task)


@router.post("/tasks", status_code=status.HTTP_303_SEE_OTHER)
async def create_task(
    data: TaskCreate,
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> RedirectResponse:
    """Create a task, then redirect to the list filtered to its bucket."""
    task = await task_service.create_task(db, current_user.id, data)
    return _redirect_to_list(task.bucket)


@router.post("/tasks/{task_id}", status_code=status.HTTP_303_SEE_OTHER)
async def update_task(
    task_id: int,
    data: TaskUpdate,
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> RedirectResponse:
    """Replace a task's fields, then redirect to the list filtered to its bucket."""
    try:
        task = await task_service.update_task(db, current_user.id, task_id, data)
    except task_service.TaskNotFoundError:
        raise _not_found() from None
    return _redirect_to_list(task.bucket)


@router.post("/tasks/{task_id}/toggle", response_model=ToggleResponse)
async def toggle_task(
    task_id: int,
    data: TaskToggle,
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> ToggleResponse | JSONResponse:
    """Set the done flag without resubmitting the task. Answers `{"ok": bool}`."""
    try:
        await task_service.set_task_done(db, current_user.id, task_id, data.is_done)
    except task_service.TaskNotFoundError:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=ToggleResponse(ok=False).model_dump(),
        )
    return ToggleResponse(ok=True)


@router.delete("/tasks/{task_id}", status_code=status.HTTP_303_SEE_OTHER)
async def delete_task(
    task_id: int,
    current_user: SessionUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> RedirectResponse:
    """Delete a task, then redirect to the list."""
    try:
        await task_service.delete_task(db, current_user.id, task_id)
    except task_service.TaskNotFoundError:
        raise _not_found() from None
    return _redirect_to_list()
