"""
Database Configuration Module

This module sets up SQLAlchemy 2.0 for the Library API.

Session Management Pattern
==========================
We use the "session per request" pattern:
1. Request arrives → create a new session
2. Use session for all database operations in that request
3. Commit on success, rollback on failure
4. Close session when request ends

This is implemented using FastAPI's dependency injection (get_db).

PostgreSQL (psycopg2) is the production target. SQLite URLs are accepted
for local runs and the test suite; they get a single shared connection
instead of a sized pool.
"""

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from library_api.config import Settings, get_settings

settings = get_settings()

# Largest id an INTEGER primary key can hold on every supported backend
MAX_ROW_ID = 2**31 - 1


# =============================================================================
# Database Engine
# =============================================================================
def build_engine(config: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for the configured database URL.

    Key parameters:
    - pool_size / max_overflow: connection pool sizing (server databases)
    - pool_pre_ping: test connection health before using
    - echo: log all SQL statements in debug mode
    """
    if config.is_sqlite:
        return create_engine(
            config.database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=config.debug,
        )

    return create_engine(
        config.database_url,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_pre_ping=True,
        echo=config.debug,
    )


engine = build_engine(settings)


# =============================================================================
# Session Factory
# =============================================================================
# - autocommit=False: We control when to commit
# - autoflush=False: Don't auto-flush before queries (more predictable)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)


# =============================================================================
# Base Model Class
# =============================================================================
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models.

    Alembic uses Base.metadata to discover the tables for migrations.
    """
    pass


# =============================================================================
# Dependency Injection
# =============================================================================
def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency for FastAPI.

    Creates a new session, yields it to the route handler, and closes it
    when the request ends (even if an exception occurs).

    Usage in Routes:
        @router.get("/books")
        def list_books(db: DbSession):
            ...

    Yields:
        SQLAlchemy Session instance
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =============================================================================
# Utility Functions
# =============================================================================
def create_tables() -> None:
    """
    Create all database tables.

    WARNING: In production, use Alembic migrations instead!
    """
    # Models must be imported so their tables are registered on Base.metadata
    import library_api.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
