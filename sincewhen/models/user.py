"""User data model for sincewhen."""

from pydantic import BaseModel, Field


class User(BaseModel):
    """User model for sincewhen."""

    id: int = Field(..., description="Internal user identifier")
    email: str = Field(..., description="User email address (unique, case-sensitive)")
    slug: str = Field(..., description="Public identifier listing all of the user's timers")
