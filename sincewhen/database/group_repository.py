"""Repository for Group and membership database operations."""

import logging
from typing import Dict, List, Optional
from sqlalchemy import insert, literal, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sincewhen.database.models import GroupDB, TimerDB, TimerGroupDB, unix_now
from sincewhen.database.slugs import SlugAllocator
from sincewhen.errors import SincewhenError, StorageError
from sincewhen.models.timer import Group, clean_title

logger = logging.getLogger(__name__)


class GroupRepository:
    """Repository for Group database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, user_id: int, title: str) -> str:
        """Create an empty group; returns its slug."""
        title = clean_title(title)
        try:
            slug = SlugAllocator(self.db).allocate()
            group_db = GroupDB(title=title, slug=slug, user_id=user_id, created_at=unix_now())
            self.db.add(group_db)
            self.db.commit()
            logger.debug(f"Created group {slug} for user {user_id}: {title[:50]}")
            return slug
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create group for user {user_id}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to create group for user {user_id}") from e
        except SincewhenError:
            self.db.rollback()
            raise

    def get_by_slug(self, slug: str) -> Optional[Group]:
        """Get a group by slug, without its member timers."""
        try:
            group_db = self.db.query(GroupDB).filter(GroupDB.slug == slug).first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read group {slug}") from e
        return group_db.to_pydantic() if group_db else None

    def get_for_user(self, user_id: int) -> List[Group]:
        """Get a user's groups, oldest first, each with its timers in membership order.

        Groups without members are included with an empty timer list.
        """
        try:
            rows = (
                self.db.query(GroupDB, TimerDB)
                .outerjoin(TimerGroupDB, TimerGroupDB.group_id == GroupDB.id)
                .outerjoin(TimerDB, TimerDB.id == TimerGroupDB.timer_id)
                .filter(GroupDB.user_id == user_id)
                .order_by(GroupDB.created_at, GroupDB.id, TimerGroupDB.created_at, TimerGroupDB.id)
                .all()
            )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read groups for user {user_id}") from e

        groups: Dict[int, GroupDB] = {}
        members: Dict[int, list] = {}
        for group_db, timer_db in rows:
            if group_db.id not in groups:
                groups[group_db.id] = group_db
                members[group_db.id] = []
            if timer_db is not None:
                members[group_db.id].append(timer_db.to_pydantic())
        return [group_db.to_pydantic(members[group_id]) for group_id, group_db in groups.items()]

    def delete(self, user_id: int, slug: str) -> bool:
        """Delete a group owned by `user_id`; memberships cascade, timers stay."""
        try:
            affected = (
                self.db.query(GroupDB)
                .filter(GroupDB.slug == slug, GroupDB.user_id == user_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete group {slug}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to delete group {slug}") from e
        logger.debug(f"Deleted {affected} group rows for slug {slug}")
        return affected > 0

    def add_timer(self, user_id: int, group_id: int, timer_id: int) -> bool:
        """Add a timer to a group owned by `user_id`.

        Issued as a single INSERT ... SELECT that yields no row when the group
        is not the user's, the timer does not exist or the timer is already a
        member.
        """
        already_member = (
            select(TimerGroupDB.id)
            .where(TimerGroupDB.group_id == group_id, TimerGroupDB.timer_id == timer_id)
            .correlate(None)
            .exists()
        )
        source = (
            select(GroupDB.id, TimerDB.id, literal(user_id), literal(unix_now()))
            .select_from(GroupDB)
            .join(TimerDB, TimerDB.id == timer_id)
            .where(GroupDB.id == group_id, GroupDB.user_id == user_id, ~already_member)
        )
        stmt = insert(TimerGroupDB.__table__).from_select(
            ["group_id", "timer_id", "user_id", "created_at"], source
        )
        try:
            added = self.db.execute(stmt).rowcount
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to add timer {timer_id} to group {group_id}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to add timer {timer_id} to group {group_id}") from e
        logger.debug(f"Added {added} memberships of timer {timer_id} in group {group_id}")
        return added > 0

    def remove_timer(self, user_id: int, group_id: int, timer_id: int) -> bool:
        """Remove a timer from a group; only the user who linked it can."""
        try:
            affected = (
                self.db.query(TimerGroupDB)
                .filter(
                    TimerGroupDB.user_id == user_id,
                    TimerGroupDB.group_id == group_id,
                    TimerGroupDB.timer_id == timer_id,
                )
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to remove timer {timer_id} from group {group_id}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to remove timer {timer_id} from group {group_id}") from e
        logger.debug(f"Removed {affected} memberships of timer {timer_id} in group {group_id}")
        return affected > 0
