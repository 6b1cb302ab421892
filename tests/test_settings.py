"""Tests for settings storage and schema initialization."""

from sqlalchemy import inspect

from sincewhen.database.database import init_db
from sincewhen.database.settings_repository import SettingsRepository
from sincewhen.models.constants import SCHEMA_VERSION, SCHEMA_VERSION_KEY


def test_init_creates_tables(test_engine):
    tables = set(inspect(test_engine).get_table_names())
    assert {"settings", "slugs", "users", "timers", "groups", "timer_groups"} <= tables


def test_version_marker_initialized(settings_repository):
    assert settings_repository.get(SCHEMA_VERSION_KEY) == SCHEMA_VERSION


def test_set_and_get(settings_repository):
    settings_repository.set("other", 0)
    assert settings_repository.get("other") == 0

    settings_repository.set("other", "text")
    assert settings_repository.get("other") == "text"


def test_missing_setting(settings_repository):
    assert settings_repository.get("missing") is None


def test_init_does_not_overwrite_version(test_engine, db_session, settings_repository):
    settings_repository.set(SCHEMA_VERSION_KEY, SCHEMA_VERSION + 1)

    init_db(bind=test_engine)

    assert SettingsRepository(db_session).get(SCHEMA_VERSION_KEY) == SCHEMA_VERSION + 1
