"""Repository for Timer database operations."""

import logging
import secrets
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sincewhen.database.models import TimerDB, GroupDB, TimerGroupDB, UserDB, unix_now
from sincewhen.database.slugs import SlugAllocator
from sincewhen.engine.formatters import is_valid_format
from sincewhen.errors import SincewhenError, StorageError, ValidationError
from sincewhen.models.constants import DEFAULT_FORMAT
from sincewhen.models.timer import Timer, clean_title

logger = logging.getLogger(__name__)


def generate_secret() -> str:
    """Generate a reset capability token, independent of the timer's slug."""
    return secrets.token_urlsafe(32)


class TimerRepository:
    """Repository for Timer database operations.

    Mutations carry the owner (or the secret) in the same WHERE clause as the
    slug, so a caller without rights affects zero rows and gets False back.
    """

    def __init__(self, db: Session):
        self.db = db

    def _all(self, query) -> List[Timer]:
        try:
            return [timer_db.to_pydantic() for timer_db in query.all()]
        except SQLAlchemyError as e:
            raise StorageError("Failed to read timers") from e

    def create(self, user_id: int, title: str) -> str:
        """Create a timer starting now; returns its slug."""
        title = clean_title(title)
        try:
            slug = SlugAllocator(self.db).allocate()
            now = unix_now()
            timer_db = TimerDB(
                epoch=now,
                title=title,
                slug=slug,
                secret=generate_secret(),
                user_id=user_id,
                format=DEFAULT_FORMAT,
                created_at=now,
            )
            self.db.add(timer_db)
            self.db.commit()
            logger.debug(f"Created timer {slug} for user {user_id}: {title[:50]}")
            return slug
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create timer for user {user_id}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to create timer for user {user_id}") from e
        except SincewhenError:
            self.db.rollback()
            raise

    def get_by_slug(self, slug: str) -> Optional[Timer]:
        """Get a single timer by its own slug."""
        timers = self._all(self.db.query(TimerDB).filter(TimerDB.slug == slug))
        return timers[0] if timers else None

    def get_for_user(self, user_id: int) -> List[Timer]:
        """Get all timers owned by a user, oldest first."""
        return self._all(
            self.db.query(TimerDB)
            .filter(TimerDB.user_id == user_id)
            .order_by(TimerDB.created_at, TimerDB.id)
        )

    def get_by_any_slug(self, slug: str) -> List[Timer]:
        """Resolve a slug that may name a group, a timer or a user.

        Branches are tried in that order and concatenated. Slugs are unique
        across all three kinds, so at most one branch contributes rows:
        - group: its member timers in membership order
        - timer: that timer
        - user: every timer the user owns, oldest first
        """
        in_group = (
            self.db.query(TimerDB)
            .join(TimerGroupDB, TimerGroupDB.timer_id == TimerDB.id)
            .join(GroupDB, GroupDB.id == TimerGroupDB.group_id)
            .filter(GroupDB.slug == slug)
            .order_by(TimerGroupDB.created_at, TimerGroupDB.id)
        )
        single = self.db.query(TimerDB).filter(TimerDB.slug == slug)
        owned = (
            self.db.query(TimerDB)
            .join(UserDB, UserDB.id == TimerDB.user_id)
            .filter(UserDB.slug == slug)
            .order_by(TimerDB.created_at, TimerDB.id)
        )
        return self._all(in_group) + self._all(single) + self._all(owned)

    def _update(self, description: str, criteria: list, values: dict) -> bool:
        try:
            affected = (
                self.db.query(TimerDB)
                .filter(*criteria)
                .update(values, synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to {description}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to {description}") from e
        logger.debug(f"{description}: {affected} rows")
        return affected > 0

    def reset(self, slug: str, secret: str) -> bool:
        """Move a timer's epoch to now if `secret` matches; no login required."""
        return self._update(
            f"reset timer {slug}",
            [TimerDB.slug == slug, TimerDB.secret == secret],
            {TimerDB.epoch: unix_now()},
        )

    def set_format(self, user_id: int, slug: str, format_index: int) -> bool:
        """Change the display format of a timer owned by `user_id`.

        Raises:
            ValidationError: if `format_index` is not a registered format
        """
        if not is_valid_format(format_index):
            raise ValidationError(f"Unknown format {format_index!r}")
        return self._update(
            f"set format of timer {slug}",
            [TimerDB.slug == slug, TimerDB.user_id == user_id],
            {TimerDB.format: format_index},
        )

    def delete(self, user_id: int, slug: str) -> bool:
        """Delete a timer owned by `user_id`; memberships cascade."""
        try:
            affected = (
                self.db.query(TimerDB)
                .filter(TimerDB.slug == slug, TimerDB.user_id == user_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete timer {slug}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to delete timer {slug}") from e
        logger.debug(f"Deleted {affected} timer rows for slug {slug}")
        return affected > 0
