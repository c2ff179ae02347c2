import os
from pathlib import Path

import pytest

from flood_alert.adapters.dev_email import DevEmailAdapter
from flood_alert.adapters.sqlite.migrator import SQLiteMigrator
from flood_alert.adapters.sqlite_db import SQLiteSubscriberRepo, SQLiteTideRepo
from flood_alert.core.config import AlertConfig

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TEST_SECRET = "test-unsubscribe-secret"


@pytest.fixture
def db_path(tmp_path) -> str:
    """Migrated SQLite database in a temp dir."""
    path = os.path.join(tmp_path, "flood_alert.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def subscriber_repo(db_path) -> SQLiteSubscriberRepo:
    return SQLiteSubscriberRepo(db_path)


@pytest.fixture
def tide_repo(db_path) -> SQLiteTideRepo:
    return SQLiteTideRepo(db_path)


@pytest.fixture
def email_sender() -> DevEmailAdapter:
    return DevEmailAdapter()


@pytest.fixture
def alert_config() -> AlertConfig:
    return AlertConfig(unsubscribe_secret=TEST_SECRET, base_url="http://testserver")


@pytest.fixture
def rules_path() -> Path:
    return PROJECT_ROOT / "rules.yaml"
