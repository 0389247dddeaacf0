"""
Database configuration and connection management.

This module provides:
- SQLAlchemy engine and session management
- Connection pooling with sane defaults (StaticPool for in-memory SQLite)
- Test database support
- Table definitions for users, packages and bills
"""
from typing import Optional
from contextlib import contextmanager
from sqlalchemy import create_engine, event, MetaData, Table, Column, String, DateTime, JSON, Text, Numeric, Index
from sqlalchemy.engine import make_url
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.orm import sessionmaker
from sqlalchemy.sql import func
import logging
import os

from backend.core.config import settings


# SQLAlchemy metadata for table definitions
metadata = MetaData()

# Connection pooling configuration
POOL_SIZE = 10
MAX_OVERFLOW = 20
POOL_TIMEOUT = 30
POOL_RECYCLE = 3600  # Recycle connections after 1 hour

# Global engine and session factory
_engine = None
_SessionLocal = None

logger = logging.getLogger("salonpro")


def get_database_url() -> Optional[str]:
    """
    Get the database URL from settings or environment.

    For testing, use TEST_DATABASE_URL if available.
    """
    test_url = os.getenv("TEST_DATABASE_URL")
    if test_url:
        return test_url

    return os.getenv("DATABASE_URL") or settings.DATABASE_URL


def is_memory_sqlite(url: str) -> bool:
    """True for sqlite:// and :memory: URLs, which live inside a single connection."""
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return False
    return not parsed.database or parsed.database == ":memory:" or parsed.query.get("mode") == "memory"


def _begin_immediate_on_sqlite(engine) -> None:
    """
    Make every sqlite transaction take the write lock up front.

    pysqlite only opens a transaction before DML, so a rank SELECT and the
    following UPDATE/DELETE would otherwise not be isolated from other connections.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def init_engine(database_url: Optional[str] = None):
    """
    Initialize the SQLAlchemy engine.

    Args:
        database_url: Optional override for DATABASE_URL
    """
    global _engine, _SessionLocal

    url = database_url or get_database_url()

    if not url:
        raise ValueError(
            "DATABASE_URL is not configured. "
            "Set DATABASE_URL in environment or .env file."
        )

    if is_memory_sqlite(url):
        # Single shared connection so the in-memory database survives across sessions
        _engine = create_engine(
            url,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    elif url.startswith("sqlite"):
        # File database: default pool, one connection (and transaction) per session
        _engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            echo=False,
        )
        _begin_immediate_on_sqlite(_engine)
    else:
        _engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=POOL_SIZE,
            max_overflow=MAX_OVERFLOW,
            pool_timeout=POOL_TIMEOUT,
            pool_recycle=POOL_RECYCLE,
            pool_pre_ping=True,
            echo=False,  # Set to True for SQL query logging
        )

    _SessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=_engine
    )

    return _engine


def dispose_engine() -> None:
    """Dispose the engine and forget it (tests switch URLs between cases)."""
    global _engine, _SessionLocal
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _SessionLocal = None


def get_engine():
    """Get the current SQLAlchemy engine."""
    global _engine
    if _engine is None:
        init_engine()
    return _engine


def get_session_factory():
    """Get the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        init_engine()
    return _SessionLocal


@contextmanager
def get_db_session():
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            session.execute(...)
    """
    SessionLocal = get_session_factory()
    session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def create_all_tables():
    """
    Create all tables defined in metadata.

    This is idempotent - tables that already exist will not be recreated.
    """
    engine = get_engine()
    metadata.create_all(bind=engine)


def drop_all_tables():
    """
    Drop all tables defined in metadata.

    WARNING: This is destructive! Only use in tests or development.
    """
    engine = get_engine()
    metadata.drop_all(bind=engine)


def check_connection() -> bool:
    """
    Check if database connection is available.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        engine = get_engine()
        with engine.connect() as conn:
            conn.exec_driver_sql("SELECT 1")
        return True
    except Exception as e:
        logger.warning(f"Database connection check failed: {e}")
        return False


# Salon owners (one row per account)
users = Table(
    'app_users',
    metadata,
    Column('user_id', String(64), primary_key=True),
    Column('email', String(320), nullable=False, unique=True),
    Column('name', Text, nullable=True),
    Column('password_hash', String(128), nullable=False),
    Column('created_at', DateTime(timezone=True), server_default=func.now(), nullable=False),
    Index('idx_users_created_at', 'created_at'),
)

# Service packages offered by a salon
packages = Table(
    'packages',
    metadata,
    Column('id', String(64), primary_key=True),
    Column('user_id', String(64), nullable=False, index=True),
    Column('name', Text, nullable=False),
    Column('type', String(20), nullable=False),  # 'Basic' | 'Premium'
    Column('price', Numeric(12, 2), nullable=False),
    Column('description', Text, nullable=False, server_default=''),
    Column('created_at', DateTime(timezone=True), nullable=False),
    Column('updated_at', DateTime(timezone=True), nullable=False),
    # Composite index for list pattern: (user_id, created_at)
    Index('idx_packages_user_created', 'user_id', 'created_at'),
)

# Bills: line items are kept as a JSON document of package snapshots
bills = Table(
    'bills',
    metadata,
    Column('id', String(64), primary_key=True),
    Column('user_id', String(64), nullable=False, index=True),
    Column('items', JSON, nullable=False),
    Column('total_amount', Numeric(12, 2), nullable=False),
    Column('created_at', DateTime(timezone=True), nullable=False),
    Column('updated_at', DateTime(timezone=True), nullable=False),
    # Composite index for window and recency queries: (user_id, created_at, id)
    Index('idx_bills_user_created_id', 'user_id', 'created_at', 'id'),
)
