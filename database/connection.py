"""
Database connection management for the KenyonCore job tracker.
Handles SQLAlchemy engine creation, session management, and connection verification.
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

# SQLAlchemy Base for model declarations
Base = declarative_base()

# Engine and SessionLocal are bound by init_engine() from the app factory
engine = None
SessionLocal = None


def _enable_sqlite_foreign_keys(dbapi_conn, _):
    """SQLite ignores FKs by default, turn them on so cascades apply."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def init_engine(database_url, **engine_options):
    """
    Create the SQLAlchemy engine and session factory for the given URL.

    Calling it again replaces the previous engine, which is how the test
    suite swaps in a fresh in-memory database.
    """
    global engine, SessionLocal

    if not database_url:
        raise RuntimeError(
            "DATABASE_URL not configured. "
            "Please set the DATABASE_URL environment variable."
        )

    if engine is not None:
        engine.dispose()

    if database_url.startswith('sqlite'):
        engine = create_engine(
            database_url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
        )
        event.listen(engine, 'connect', _enable_sqlite_foreign_keys)
    else:
        options = {'pool_size': 5, 'max_overflow': 10}
        options.update(engine_options)
        engine = create_engine(database_url, **options)

    SessionLocal = sessionmaker(autocommit=False, autoflush=False,
                                expire_on_commit=False, bind=engine)
    logger.info(f"Database engine created for {engine.url.get_backend_name()}")
    return engine


def get_engine():
    """Get the configured SQLAlchemy engine."""
    if engine is None:
        raise RuntimeError("Database engine is not initialised; call init_engine() first")
    return engine


def get_session_factory():
    """Get the configured session factory."""
    if SessionLocal is None:
        raise RuntimeError("Database engine is not initialised; call init_engine() first")
    return SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for getting a database session.

    Commits on success, rolls back on any exception and re-raises it.

    Example:
        with get_db_session() as db:
            jobs = db.query(Job).all()
    """
    session_factory = get_session_factory()
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def check_db_connection():
    """
    Verify that the database connection is working.
    Returns True if connection is successful, raises exception otherwise.
    """
    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()
        logger.info("Database connection verified successfully")
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        raise RuntimeError(f"Cannot connect to database: {e}")


def init_db():
    """
    Create all tables.
    Production schemas are managed by Alembic; this covers dev and tests.
    """
    # Import models to ensure they're registered with Base
    from database import models  # noqa: F401

    Base.metadata.create_all(bind=get_engine())
    logger.info("Database tables created/verified")


def drop_db():
    """Drop all tables (tests only)."""
    from database import models  # noqa: F401

    Base.metadata.drop_all(bind=get_engine())
