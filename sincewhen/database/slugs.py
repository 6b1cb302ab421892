"""Slug allocation for sincewhen.

Slugs are short random public identifiers shared by users, timers and groups.
They come from a single registry table so one slug resolves to at most one
entity of any kind.
"""

import logging
import secrets
from typing import Callable, Sequence
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sincewhen.database.database import dialect_insert
from sincewhen.database.models import SlugDB
from sincewhen.errors import ExhaustionError, StorageError
from sincewhen.models.constants import (
    SLUG_ALPHABET,
    SLUG_MIN_LENGTH,
    SLUG_MAX_LENGTH,
    SLUG_LENGTH_STEP,
    SLUG_ATTEMPTS_PER_LENGTH,
)

logger = logging.getLogger(__name__)


def slug_lengths() -> range:
    """Lengths tried, shortest first."""
    return range(SLUG_MIN_LENGTH, SLUG_MAX_LENGTH, SLUG_LENGTH_STEP)


def random_slug(length: int, choice: Callable[[Sequence[str]], str] = secrets.choice) -> str:
    """Draw `length` characters uniformly (with replacement) from the slug alphabet."""
    return "".join(choice(SLUG_ALPHABET) for _ in range(length))


class SlugAllocator:
    """Allocates globally unique slugs inside the caller's transaction.

    The slug row is flushed immediately but committed by the caller, together
    with the row that uses it.
    """

    def __init__(self, db: Session, choice: Callable[[Sequence[str]], str] = secrets.choice):
        self.db = db
        self.choice = choice

    def _claim(self, slug: str) -> bool:
        """Insert `slug` unless already registered; True when this call inserted it."""
        stmt = dialect_insert(self.db, SlugDB.__table__).values(slug=slug).on_conflict_do_nothing()
        result = self.db.execute(stmt)
        return result.rowcount == 1

    def allocate(self) -> str:
        """Claim and return a fresh slug.

        Raises:
            ExhaustionError: every length tier ran out of attempts
            StorageError: the registry insert failed
        """
        for length in slug_lengths():
            for _ in range(SLUG_ATTEMPTS_PER_LENGTH):
                slug = random_slug(length, self.choice)
                try:
                    claimed = self._claim(slug)
                except SQLAlchemyError as e:
                    logger.error(f"Failed to register slug: {type(e).__name__}: {str(e)}")
                    raise StorageError("Failed to register slug") from e
                if claimed:
                    return slug
            logger.warning(f"No free slug of length {length}, trying longer slugs")
        raise ExhaustionError("Slug space exhausted")
