"""SQLAlchemy database models for sincewhen."""

import time
from sqlalchemy import Column, String, Integer, JSON, ForeignKey

from sincewhen.database.database import Base
from sincewhen.models.constants import DEFAULT_FORMAT


def unix_now() -> int:
    """Current time in whole Unix seconds."""
    return int(time.time())


class SettingDB(Base):
    """Key/value settings (holds the schema version marker)."""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(JSON, nullable=True)


class SlugDB(Base):
    """Registry of every slug ever issued, across users, timers and groups.

    The unique constraint on `slug` is what makes allocation race-free.
    """

    __tablename__ = "slugs"

    slug = Column(String, primary_key=True)


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String, nullable=False, unique=True, index=True)
    slug = Column(String, nullable=False, index=True)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from sincewhen.models.user import User
        return User(id=self.id, email=self.email, slug=self.slug)


class TimerDB(Base):
    """Database model for Timer."""

    __tablename__ = "timers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    epoch = Column(Integer, nullable=False, default=unix_now)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, index=True)
    secret = Column(String, nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    format = Column(Integer, nullable=False, default=DEFAULT_FORMAT)
    created_at = Column(Integer, nullable=False, default=unix_now)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from sincewhen.models.timer import Timer
        return Timer(
            id=self.id,
            epoch=self.epoch,
            title=self.title,
            slug=self.slug,
            secret=self.secret,
            user_id=self.user_id,
            format=self.format,
            created_at=self.created_at,
        )


class GroupDB(Base):
    """Database model for Group."""

    __tablename__ = "groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    slug = Column(String, nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(Integer, nullable=False, default=unix_now)

    def to_pydantic(self, timers=None):
        """Convert database model to Pydantic model (members supplied by the caller)."""
        from sincewhen.models.timer import Group
        return Group(
            id=self.id,
            title=self.title,
            slug=self.slug,
            user_id=self.user_id,
            created_at=self.created_at,
            timers=list(timers or []),
        )


class TimerGroupDB(Base):
    """Membership of a timer in a group.

    `user_id` records who made the link; it is not a foreign key.
    """

    __tablename__ = "timer_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    group_id = Column(Integer, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False, index=True)
    timer_id = Column(Integer, ForeignKey("timers.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False)
    created_at = Column(Integer, nullable=False, default=unix_now)
