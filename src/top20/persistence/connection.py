"""Engine construction and startup wait for the submissions database."""

from __future__ import annotations

import logging
import time
from typing import Callable

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from top20.config import Settings

from .store import SubmissionStore


logger = logging.getLogger("uvicorn.error")

INITIAL_BACKOFF = 1.0
MAX_BACKOFF = 10.0
CONNECT_TIMEOUT = 5


class DatabaseUnavailableError(RuntimeError):
    """The database never answered the liveness probe before the deadline."""


def build_engine(settings: Settings) -> Engine:
    if settings.is_sqlite:
        connect_args = {"check_same_thread": False}
    else:
        connect_args = {"connect_timeout": CONNECT_TIMEOUT}
    return create_engine(
        settings.database_url,
        pool_pre_ping=True,
        connect_args=connect_args,
    )


def _probe(engine: Engine) -> None:
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def wait_for_database(
    engine: Engine,
    timeout: float = 60.0,
    *,
    initial_backoff: float = INITIAL_BACKOFF,
    max_backoff: float = MAX_BACKOFF,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Block until ``SELECT 1`` succeeds or ``timeout`` seconds have passed.

    The delay between probes starts at ``initial_backoff`` and doubles after each
    failure, capped at ``max_backoff``. The final wait is cut short at the
    deadline, after which ``DatabaseUnavailableError`` carries the last error.
    """
    deadline = clock() + timeout
    backoff = initial_backoff
    while True:
        try:
            _probe(engine)
            return
        except SQLAlchemyError as exc:
            last_error = exc

        remaining = deadline - clock()
        if remaining <= 0 or backoff >= remaining:
            sleep(max(remaining, 0.0))
            raise DatabaseUnavailableError(f"timeout waiting for database: {last_error}") from last_error

        sleep(backoff)
        logger.info("Waiting for database (retrying in %.0fs)...", backoff)
        backoff = min(backoff * 2, max_backoff)


def connect(settings: Settings) -> SubmissionStore:
    """Open the pooled engine, wait for the database and ensure the schema."""
    engine = build_engine(settings)
    try:
        wait_for_database(engine, timeout=settings.db_wait_timeout)
        logger.info("Database connected successfully")
        store = SubmissionStore(engine)
        store.ensure_schema()
    except Exception:
        engine.dispose()
        raise
    logger.info("Submissions table ready")
    return store
