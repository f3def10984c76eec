"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UTCDateTime, utc_now
from models.session import UserSession
from models.task import Priority, Task
from models.user import User

__all__ = [
    "Base",
    "Priority",
    "Task",
    "TimestampMixin",
    "UTCDateTime",
    "User",
    "UserSession",
    "utc_now",
]
