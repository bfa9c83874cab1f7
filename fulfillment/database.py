"""
Database engine, session factory and transaction helpers
"""
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from fulfillment.config import settings

# Base class for declarative models
Base = declarative_base()


def create_db_engine(database_url: str = None, echo: bool = None, lock_timeout_ms: int = None) -> Engine:
    """
    Create the SQLAlchemy engine

    SQLite has no row-level locks, so every SQLite transaction is opened with
    BEGIN IMMEDIATE: writers serialize on the database lock and a second
    reader-then-writer can never act on a stale balance.
    """
    database_url = database_url or settings.DATABASE_URL
    echo = settings.DB_ECHO if echo is None else echo
    lock_timeout_ms = settings.LOCK_TIMEOUT_MS if lock_timeout_ms is None else lock_timeout_ms

    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={
            "check_same_thread": False,
            "timeout": max(lock_timeout_ms, 1) / 1000.0,
        },
    )

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        # Let SQLAlchemy emit BEGIN itself
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = create_db_engine()

# Create a configured "Session" class
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(bind: Engine = None) -> None:
    """Create tables defined by the models if they don't exist"""
    # Register every model on Base.metadata
    import fulfillment.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db() -> Iterator[Session]:
    """Dependency to get a DB session for a request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        # Rolls back anything left open, releasing row locks
        db.close()


@contextmanager
def atomic(db: Session) -> Iterator[Session]:
    """
    Run a block as one transaction: commit on success, roll back on any error

    Row locks taken inside the block are released on either exit path.
    """
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def apply_lock_timeout(db: Session, lock_timeout_ms: int = None) -> None:
    """Bound how long the current transaction waits for a row lock (PostgreSQL only)"""
    lock_timeout_ms = settings.LOCK_TIMEOUT_MS if lock_timeout_ms is None else lock_timeout_ms
    if db.get_bind().dialect.name == "postgresql" and lock_timeout_ms > 0:
        db.execute(text(f"SET LOCAL lock_timeout = '{int(lock_timeout_ms)}ms'"))
