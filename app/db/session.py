"""Database engine, session factory and the request-scoped session dependency."""

import logging
import time
from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from app.core.config import settings

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict[str, Any]:
    options: dict[str, Any] = {"future": True, "pool_pre_ping": True}
    if make_url(database_url).get_backend_name() == "sqlite":
        # Request handlers run in a thread pool.
        options["connect_args"] = {"check_same_thread": False}
    return options


engine = create_engine(settings.database_url, **_engine_options(settings.database_url))
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
    future=True,
)


def get_db() -> Generator[Session, None, None]:
    """Yield one session per request; it is the repository every service receives."""

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def verify_connection(max_attempts: int = 20, delay_seconds: float = 1.0) -> None:
    """Block until ``SELECT 1`` succeeds, retrying with linear backoff.

    Raises the last database error once ``max_attempts`` is exhausted.
    """

    last_exc: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        try:
            with engine.connect() as connection:
                connection.execute(text("SELECT 1"))
        except SQLAlchemyError as exc:
            last_exc = exc
            logger.warning(
                "Database not reachable (attempt %d/%d): %s",
                attempt,
                max_attempts,
                type(exc).__name__,
            )
            time.sleep(delay_seconds * attempt)
            continue

        if attempt > 1:
            logger.info("Database reachable after %d attempt(s)", attempt)
        return

    logger.error("Giving up on the database after %d attempts", max_attempts, exc_info=last_exc)
    raise last_exc if last_exc else RuntimeError("Database connection verification failed")


__all__ = ["engine", "SessionLocal", "get_db", "verify_connection"]
