"""Task model - a single to-do item owned by exactly one user."""
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Index, String, Text, false
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from models.base import Base, TimestampMixin, UTCDateTime

if TYPE_CHECKING:
    from models.user import User


class Priority(str, Enum):
    """Task priority. Unrecognized input maps to MID."""

    HIGH = "High"
    MID = "Mid"
    LOW = "Low"

    @classmethod
    def parse(cls, value: "str | Priority | None") -> "Priority":
        """Case-insensitive lookup by value; blank or unknown values fall back to MID."""
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower()
        for member in cls:
            if member.value.lower() == normalized:
                return member
        return cls.MID


class Task(Base, TimestampMixin):
    """Task model. Every query against this table must filter on user_id."""

    __tablename__ = "tasks"
    __table_args__ = (
        # Primary listing query: WHERE user_id = ? [AND bucket = ?]
        Index("ix_tasks_user_id_bucket", "user_id", "bucket"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"))
    title: Mapped[str] = mapped_column(String(255))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    bucket: Mapped[str] = mapped_column(String(100), default="Life", server_default="Life")
    due_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)
    priority: Mapped[Priority] = mapped_column(
        SAEnum(
            Priority,
            native_enum=False,
            length=10,
            values_callable=lambda enum: [member.value for member in enum],
        ),
        default=Priority.MID,
        server_default=Priority.MID.value,
    )
    tag: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # Stored for the UI only; no reminders are ever sent
    reminder_enabled: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(),
    )
    is_done: Mapped[bool] = mapped_column(Boolean, default=False, server_default=false())

    user: Mapped["User"] = relationship(back_populates="tasks")
