"""
Database engine configuration with dual database support.
Supports SQLite (default) and PostgreSQL (optional override).
"""
import logging

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from reconcile.core.config import settings
from reconcile.core.logging_config import LogCategory, _sanitize_data

logger = logging.getLogger(LogCategory.DB.value)

# Get effective database URL and type
database_url = settings.effective_database_url
database_type = settings.database_type

safe_database_url = _sanitize_data(database_url)


def build_engine(url: str, db_type: str):
    """Create an engine tuned for the configured backend."""
    if db_type == "sqlite":
        parsed = make_url(url)
        is_sqlite_memory = parsed.database in (None, "", ":memory:")

        engine_kwargs = {
            "echo": False,
            "connect_args": {"check_same_thread": False},
        }
        if is_sqlite_memory:
            engine_kwargs["poolclass"] = StaticPool

        sqlite_engine = create_engine(url, **engine_kwargs)

        @event.listens_for(sqlite_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            """Enforce foreign keys so teardown order is checked like on PostgreSQL."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            if not is_sqlite_memory:
                cursor.execute("PRAGMA journal_mode=WAL")  # Readers do not block the live app
            cursor.execute("PRAGMA temp_store=MEMORY")
            cursor.close()

        logger.info(f"Configured SQLite engine ({'in-memory' if is_sqlite_memory else 'file-based'})")
        return sqlite_engine

    if db_type in {"postgres", "postgresql"}:
        logger.info("Configured PostgreSQL engine with connection pooling")
        return create_engine(
            url,
            echo=False,
            pool_pre_ping=True,
            pool_size=5,
            max_overflow=5,
            pool_recycle=3600,
        )

    logger.warning(
        f"Using unsupported database type '{db_type}'. "
        "Install the appropriate DB driver for production use."
    )
    return create_engine(url, echo=False, pool_pre_ping=True)


logger.info(f"Using {database_type} database: {safe_database_url}")
engine = build_engine(database_url, database_type)
