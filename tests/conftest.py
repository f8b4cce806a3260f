"""Pytest fixtures for the task API."""

import os


os.environ["OTEL_ENABLED"] = "false"

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import StaticPool

from task_api.config import Settings
from task_api.main import create_app
from task_api.store import TaskStore


# SQLite equivalent of sql/schema.sql
SQLITE_SCHEMA = (
    """
    CREATE TABLE tasks (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        task TEXT NOT NULL,
        completed BOOLEAN NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
        updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
    )
    """,
    """
    CREATE TRIGGER tasks_set_updated_at AFTER UPDATE OF completed ON tasks
    FOR EACH ROW
    BEGIN
        UPDATE tasks SET updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now') WHERE id = NEW.id;
    END
    """,
)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    with engine.begin() as conn:
        for statement in SQLITE_SCHEMA:
            conn.exec_driver_sql(statement)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine) -> TaskStore:
    return TaskStore(engine)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def client(settings: Settings, store: TaskStore) -> TestClient:
    return TestClient(create_app(settings=settings, store=store))


@pytest.fixture
def failing_store() -> MagicMock:
    """A store whose every operation fails the way a dropped connection does."""
    store = MagicMock(spec=TaskStore)
    error = OperationalError("SELECT 1", {}, Exception("server has gone away"))
    store.create.side_effect = error
    store.list_all.side_effect = error
    store.set_completed.side_effect = error
    store.delete.side_effect = error
    return store


@pytest.fixture
def failing_client(settings: Settings, failing_store: MagicMock) -> TestClient:
    return TestClient(create_app(settings=settings, store=failing_store))
