"""Tests for engine construction."""

from task_api.config import Settings
from task_api.database import create_db_engine


def test_engine_uses_pool_settings():
    settings = Settings(
        _env_file=None,
        database_url=None,
        db_hostname="db",
        db_pool_size=7,
        db_max_overflow=3,
    )

    engine = create_db_engine(settings)
    try:
        assert engine.url.drivername == "postgresql+psycopg"
        assert engine.url.host == "db"
        assert engine.pool.size() == 7
        assert engine.pool._max_overflow == 3
        assert engine.pool._pre_ping is True
    finally:
        engine.dispose()
