"""Repository for key/value settings."""

import logging
from typing import Any, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sincewhen.database.database import dialect_insert
from sincewhen.database.models import SettingDB
from sincewhen.errors import StorageError
from sincewhen.models.constants import SCHEMA_VERSION_KEY, SCHEMA_VERSION

logger = logging.getLogger(__name__)


class SettingsRepository:
    """Repository for Settings database operations."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, key: str) -> Optional[Any]:
        """Get a setting value, or None if the key is unset."""
        try:
            setting_db = self.db.query(SettingDB).filter(SettingDB.key == key).first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read setting {key}") from e
        return setting_db.value if setting_db else None

    def set(self, key: str, value: Any) -> None:
        """Insert or overwrite a setting."""
        stmt = dialect_insert(self.db, SettingDB.__table__).values(key=key, value=value)
        stmt = stmt.on_conflict_do_update(index_elements=["key"], set_={"value": stmt.excluded["value"]})
        try:
            self.db.execute(stmt)
            self.db.commit()
            logger.debug(f"Set setting {key}")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to set setting {key}: {type(e).__name__}: {str(e)}")
            raise StorageError(f"Failed to set setting {key}") from e

    def ensure_defaults(self) -> None:
        """Insert the schema version marker unless one is already stored."""
        stmt = (
            dialect_insert(self.db, SettingDB.__table__)
            .values(key=SCHEMA_VERSION_KEY, value=SCHEMA_VERSION)
            .on_conflict_do_nothing()
        )
        try:
            self.db.execute(stmt)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to initialize settings: {type(e).__name__}: {str(e)}")
            raise StorageError("Failed to initialize settings") from e
