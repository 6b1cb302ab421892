"""Repository for User database operations."""

import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sincewhen.database.database import dialect_insert
from sincewhen.database.models import UserDB
from sincewhen.database.slugs import SlugAllocator
from sincewhen.errors import SincewhenError, StorageError
from sincewhen.models.user import User

logger = logging.getLogger(__name__)


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _first(self, *criteria) -> Optional[User]:
        try:
            user_db = self.db.query(UserDB).filter(*criteria).first()
        except SQLAlchemyError as e:
            raise StorageError("Failed to read user") from e
        return user_db.to_pydantic() if user_db else None

    def get(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        return self._first(UserDB.id == user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return self._first(UserDB.email == email)

    def get_by_slug(self, slug: str) -> Optional[User]:
        """Get user by public slug."""
        return self._first(UserDB.slug == slug)

    def get_or_create(self, email: str) -> User:
        """Return the user for `email`, creating it on first sight.

        Concurrent first logins for one email race on the unique email
        constraint; the loser's insert is ignored and both read the winner's row.
        """
        existing = self.get_by_email(email)
        if existing:
            return existing

        try:
            slug = SlugAllocator(self.db).allocate()
            stmt = (
                dialect_insert(self.db, UserDB.__table__)
                .values(email=email, slug=slug)
                .on_conflict_do_nothing(index_elements=["email"])
            )
            inserted = self.db.execute(stmt).rowcount == 1
            if inserted:
                self.db.commit()
            else:
                # Lost the race for this email; release the unused slug
                self.db.rollback()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create user {email}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to create user {email}") from e
        except SincewhenError:
            self.db.rollback()
            raise

        if inserted:
            logger.debug(f"Created user {email} with slug {slug}")

        user = self.get_by_email(email)
        if user is None:
            raise StorageError(f"User {email} missing after insert")
        return user

    def delete(self, user_id: int) -> bool:
        """Delete a user; the database cascades to their timers, groups and memberships."""
        try:
            affected = (
                self.db.query(UserDB)
                .filter(UserDB.id == user_id)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete user {user_id}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to delete user {user_id}") from e
        logger.debug(f"Deleted {affected} user rows for id {user_id}")
        return affected > 0
