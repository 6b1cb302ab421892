"""Timer and group data models for sincewhen."""

from typing import List
from pydantic import BaseModel, Field

from sincewhen.errors import ValidationError
from sincewhen.models.constants import DEFAULT_FORMAT, MAX_TITLE_LENGTH


class Timer(BaseModel):
    """A named timer measuring time since its last reset."""

    id: int = Field(..., description="Internal timer identifier")
    epoch: int = Field(..., description="Unix seconds of the last reset")
    title: str = Field(..., description="Timer title")
    slug: str = Field(..., description="Public identifier for viewing the timer")
    secret: str = Field(..., description="Private capability token allowing a reset")
    user_id: int = Field(..., description="User ID who owns this timer")
    format: int = Field(DEFAULT_FORMAT, description="Index into the format registry")
    created_at: int = Field(..., description="Unix seconds of creation")


class Group(BaseModel):
    """A user-owned, ordered collection of timers."""

    id: int = Field(..., description="Internal group identifier")
    title: str = Field(..., description="Group title")
    slug: str = Field(..., description="Public identifier for viewing the group")
    user_id: int = Field(..., description="User ID who owns this group")
    created_at: int = Field(..., description="Unix seconds of creation")
    timers: List[Timer] = Field(default_factory=list, description="Member timers in membership order")


def clean_title(title: str) -> str:
    """Strip a timer or group title and check it is usable.

    Raises:
        ValidationError: if the title is empty or too long
    """
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title must not be empty")
    title = title.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
    return title
