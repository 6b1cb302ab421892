"""Data models for sincewhen."""

from sincewhen.models.user import User
from sincewhen.models.timer import Timer, Group

__all__ = [
    "User",
    "Timer",
    "Group",
]
