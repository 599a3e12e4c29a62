"""Database engine and session setup.

Production Pattern:
- One SQLAlchemy engine per process, created at startup and injected
- QueuePool bounded at pool_size connections, no overflow
- Automatic table creation via init_database()
- SQLite runs every transaction as BEGIN IMMEDIATE so the booking
  check-and-insert is serialized there as well
"""
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from salon_booking.api.database_models import Base
from salon_booking.errors import StoreError
from salon_booking.logging_config import get_logger

logger = get_logger(__name__)


def create_store_engine(database_url: str, pool_size: int = 10) -> Engine:
    """
    Create the SQLAlchemy engine for the booking store.

    Pool configuration (server databases):
    - pool_size: Maximum connections kept open
    - max_overflow=0: Never exceed pool_size; callers queue for a connection
    - pool_pre_ping: Drop dead connections before use

    Args:
        database_url: SQLAlchemy connection string
        pool_size: Connection pool size

    Returns:
        Engine instance (connections are opened lazily)
    """
    url = make_url(database_url)

    if url.get_backend_name() != "sqlite":
        return create_engine(
            url,
            pool_size=pool_size,
            max_overflow=0,
            pool_pre_ping=True,
            pool_timeout=30,
        )

    if url.database in (None, "", ":memory:"):
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

    _use_immediate_transactions(engine)
    return engine


def _use_immediate_transactions(engine: Engine):
    """Take the SQLite write lock when a transaction begins, not at first write."""

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to the engine; objects stay readable after commit."""
    return sessionmaker(bind=engine, expire_on_commit=False)


def init_database(engine: Engine):
    """
    Create all tables.

    Safe to call multiple times (idempotent).
    """
    Base.metadata.create_all(engine)


def check_connection(engine: Engine):
    """
    Open one connection and run a trivial query.

    Raises:
        SQLAlchemyError: If the database is unreachable
    """
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


@contextmanager
def store_errors(message: str):
    """
    Translate SQLAlchemy failures into StoreError.

    Usage:
        with store_errors("Failed to fetch services"):
            rows = db.execute(...)
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("store_error", error=str(e), message=message)
        raise StoreError(message, detail=e.__class__.__name__) from e
