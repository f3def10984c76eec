"""Pydantic schemas for task endpoints."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.task import Priority
from schemas.session_user import SessionUser
from services.task_ordering import SortKey


def blank_to_none(value: str | None) -> str | None:
    """Collapse empty or whitespace-only form values to None; trim the rest."""
    if value is None:
        return None
    value = value.strip()
    return value or None


class TaskFields(BaseModel):
    """Fields shared by create and full update."""

    title: str = Field(max_length=255)
    description: str | None = None
    # A non-blank bucket_custom wins over bucket; both blank means the default bucket
    bucket: str | None = Field(default=None, max_length=100)
    bucket_custom: str | None = Field(default=None, max_length=100)
    due_at: datetime | None = None
    priority: Priority = Priority.MID
    tag: str | None = Field(default=None, max_length=100)
    reminder_enabled: bool = False

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        """Title is required and stored trimmed."""
        title = v.strip()
        if not title:
            raise ValueError("Title is required.")
        return title

    @field_validator("description", "bucket", "bucket_custom", "tag", mode="before")
    @classmethod
    def normalize_optional_text(cls, v: object) -> object:
        """Treat blank optional text as absent."""
        return blank_to_none(v) if isinstance(v, str) else v

    @field_validator("due_at", mode="before")
    @classmethod
    def empty_due_at(cls, v: object) -> object:
        """An empty date input means no due date."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def parse_priority(cls, v: str | Priority | None) -> Priority:
        """Map free-text priority onto the closed set (unknown -> Mid)."""
        return Priority.parse(v)


class TaskCreate(TaskFields):
    """Schema for creating a task."""

    pass


class TaskUpdate(TaskFields):
    """Schema for a full replace of a task's editable fields."""

    is_done: bool = False


class TaskToggle(BaseModel):
    """Schema for flipping only the done flag (accepts true/false or 1/0)."""

    is_done: bool


class TaskResponse(BaseModel):
    """Schema for a single task as shown to its owner."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    bucket: str
    due_at: datetime | None
    priority: Priority
    tag: str | None
    reminder_enabled: bool
    is_done: bool
    created_at: datetime
    updated_at: datetime


class TaskListResponse(BaseModel):
    """Everything the task list view needs, with tasks already in display order."""

    items: list[TaskResponse]
    buckets: list[str]
    active_bucket: str  # "All" when no bucket filter is applied
    active_sort: SortKey
    user: SessionUser


class ToggleResponse(BaseModel):
    """Acknowledgement for the done toggle."""

    ok: bool
