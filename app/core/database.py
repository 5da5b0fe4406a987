"""Database engine, session management and store-failure translation."""

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, settings
from app.core.errors import StoreUnavailable

logger = logging.getLogger(__name__)


def build_engine(config: Settings) -> Engine:
    """Create the engine with every store call bounded by STORE_TIMEOUT_SEC."""
    url = config.DATABASE_URL
    timeout = config.STORE_TIMEOUT_SEC
    if url.startswith("sqlite"):
        kwargs: dict[str, Any] = {
            "connect_args": {"check_same_thread": False, "timeout": timeout},
        }
        if ":memory:" in url or url.rstrip("/") in ("sqlite:", "sqlite+pysqlite:"):
            # One shared connection, otherwise each checkout sees an empty database.
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=config.DEBUG, **kwargs)
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_timeout=timeout,
        echo=config.DEBUG,
        connect_args={
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        },
    )


engine = build_engine(settings)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def check_db_connected(db: Session) -> bool:
    """Run a trivial query to verify the database is reachable."""
    try:
        db.execute(text("SELECT 1"))
        return True
    except Exception:
        return False


@contextmanager
def store_call(db: Session, operation: str) -> Iterator[None]:
    """
    Translate transient store failures (timeouts, lost connections) into StoreUnavailable.

    Rolls the session back so the caller can safely retry the whole operation.
    Integrity and programming errors are not transient and propagate unchanged.
    """
    try:
        yield
    except (OperationalError, PoolTimeoutError) as e:
        db.rollback()
        logger.warning(
            "Store unavailable",
            extra={"operation": operation, "error_type": type(e).__name__},
        )
        raise StoreUnavailable() from e
    except DBAPIError as e:
        if not e.connection_invalidated:
            raise
        db.rollback()
        logger.warning(
            "Store connection lost",
            extra={"operation": operation, "error_type": type(e).__name__},
        )
        raise StoreUnavailable() from e
