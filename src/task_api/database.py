"""Database engine setup using SQLAlchemy 2.0."""

from sqlalchemy import Engine, create_engine

from task_api.config import Settings


def create_db_engine(settings: Settings) -> Engine:
    """Create the pooled engine shared by every request.

    Nothing connects here; the pool opens connections lazily on first use.
    """
    return create_engine(
        settings.sqlalchemy_url,
        pool_pre_ping=True,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=settings.db_pool_timeout,
        pool_recycle=settings.db_pool_recycle,
    )
