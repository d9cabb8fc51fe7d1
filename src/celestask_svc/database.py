"""Core database connection and session management using SQLAlchemy.

This module provides database connectivity for both PostgreSQL and SQLite,
with connection pooling, SQLite foreign-key enforcement and savepoint-safe
transaction handling, and proper session management.
"""

import logging
import os
from typing import Generator, Tuple

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Import config to ensure dotenv is loaded
from . import config
from .models import Base

logger = logging.getLogger(__name__)

# Module-level engine and session factory - initialized lazily
ENGINE: Engine | None = None
SESSION_FACTORY: sessionmaker | None = None


def get_db_url() -> str:
    """Get database URL from environment variables.

    Returns:
        Database URL string. Defaults to SQLite in-memory if DATABASE_URL is not set.
    """
    return os.getenv("DATABASE_URL", "sqlite:///:memory:")


def _configure_sqlite_engine(engine: Engine) -> None:
    """Enable foreign keys and let SQLAlchemy own transaction boundaries.

    pysqlite opens transactions lazily on its own, which breaks SAVEPOINT
    handling. Driver-level autocommit plus an explicit BEGIN fixes that so
    ``Session.begin_nested()`` can isolate single rows during an import.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_engine_and_session_factory(db_url: str | None = None) -> Tuple[Engine, sessionmaker]:
    """Create SQLAlchemy engine and session factory.

    Args:
        db_url: Database URL. If None, uses get_db_url().

    Returns:
        Tuple of (engine, sessionmaker)

    Raises:
        Exception: If engine creation fails.
    """
    if db_url is None:
        db_url = get_db_url()

    try:
        if db_url.startswith("postgresql"):
            # PostgreSQL configuration with connection pooling
            engine = create_engine(
                db_url,
                pool_size=10,
                max_overflow=20,
                pool_timeout=30,
                pool_pre_ping=True
            )
        else:
            # SQLite configuration
            connect_args = {"check_same_thread": False}
            if db_url == "sqlite:///:memory:":
                # Use StaticPool for in-memory SQLite to maintain single connection
                engine = create_engine(
                    db_url,
                    connect_args=connect_args,
                    poolclass=StaticPool
                )
            else:
                engine = create_engine(db_url, connect_args=connect_args)
            _configure_sqlite_engine(engine)

        SessionLocal = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False
        )

        return engine, SessionLocal

    except Exception as e:
        logger.error(f"Failed to create database engine: {e}", exc_info=True)
        raise


def _ensure_initialized() -> None:
    """Ensure the module-level ENGINE and SESSION_FACTORY are initialized.

    This function is called lazily to initialize database connections
    using the current environment configuration.
    """
    global ENGINE, SESSION_FACTORY

    if SESSION_FACTORY is None:
        ENGINE, SESSION_FACTORY = create_engine_and_session_factory()


def _reset_db_state() -> None:
    """Reset the module-level database state.

    Disposes the current engine and resets ENGINE and SESSION_FACTORY to
    None, forcing re-initialization on the next database access. Primarily
    used for testing.
    """
    global ENGINE, SESSION_FACTORY

    if ENGINE is not None:
        try:
            ENGINE.dispose()
        except Exception as e:
            logger.error(f"Error disposing database engine: {e}", exc_info=True)

    ENGINE = None
    SESSION_FACTORY = None


def get_engine() -> Engine:
    """Return the module-level engine, initializing it on first use."""
    _ensure_initialized()
    return ENGINE


def init_db(engine: Engine | None = None) -> None:
    """Create every table declared on the ORM metadata if missing.

    Args:
        engine: Engine to create tables on. Defaults to the module engine.
    """
    target = engine if engine is not None else get_engine()
    Base.metadata.create_all(bind=target)
    logger.info(f"Database schema ensured for {len(Base.metadata.tables)} tables")


def get_db() -> Generator[Session, None, None]:
    """Get database session generator.

    Yields:
        SQLAlchemy Session instance.

    Ensures proper cleanup of the session even if errors occur.
    """
    _ensure_initialized()

    db = SESSION_FACTORY()
    try:
        yield db
    except Exception as e:
        logger.error(f"Database session error: {e}", exc_info=True)
        raise
    finally:
        db.close()


def check_db_connection() -> bool:
    """Check database connectivity.

    Returns:
        True if connection successful, False otherwise.
    """
    db_gen = None
    try:
        db_gen = get_db()
        db = next(db_gen)
        db.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection check failed: {e}", exc_info=True)
        return False
    finally:
        if db_gen is not None:
            db_gen.close()
