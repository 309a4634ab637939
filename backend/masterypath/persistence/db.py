"""SQLite connection + schema initialisation."""
from __future__ import annotations
import functools
import os
import sqlite3
import time
from typing import Callable, Optional, TypeVar

from masterypath.core.config import (
    DATABASE_PATH,
    MIGRATIONS_DIR,
    SQLITE_BUSY_TIMEOUT_SECONDS,
    STORE_RETRY_ATTEMPTS,
    STORE_RETRY_BACKOFF_SECONDS,
)
from masterypath.core.logging_config import get_logger
from masterypath.domain.common.errors import StoreUnavailable

logger = get_logger(__name__)

T = TypeVar("T")

_TRANSIENT_MESSAGES = ("database is locked", "database table is locked", "database is busy")


def get_connection(db_path: Optional[str] = None) -> sqlite3.Connection:
    # isolation_level=None: transactions are opened explicitly with BEGIN IMMEDIATE
    conn = sqlite3.connect(
        db_path or DATABASE_PATH,
        timeout=SQLITE_BUSY_TIMEOUT_SECONDS,
        check_same_thread=False,
        isolation_level=None,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    return conn


def init_db(db_path: Optional[str] = None) -> None:
    """Run all migration SQL files against the database."""
    path = db_path or DATABASE_PATH
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    for name in sorted(os.listdir(MIGRATIONS_DIR)):
        if not name.endswith(".sql"):
            continue
        with open(os.path.join(MIGRATIONS_DIR, name), "r", encoding="utf-8") as f:
            sql = f.read()
        conn = get_connection(path)
        try:
            conn.executescript(sql)
        finally:
            conn.close()
    logger.info("Database initialised", extra={"db_path": path})


def is_transient(exc: sqlite3.OperationalError) -> bool:
    message = str(exc).lower()
    return any(m in message for m in _TRANSIENT_MESSAGES)


def with_store_retry(fn: Callable[..., T]) -> Callable[..., T]:
    """
    Retry a store operation on transient SQLite lock errors with exponential
    backoff, then raise StoreUnavailable. Other errors propagate unchanged.
    """

    @functools.wraps(fn)
    def wrapper(*args, **kwargs) -> T:
        delay = STORE_RETRY_BACKOFF_SECONDS
        for attempt in range(1, STORE_RETRY_ATTEMPTS + 1):
            try:
                return fn(*args, **kwargs)
            except sqlite3.OperationalError as exc:
                if not is_transient(exc):
                    raise
                if attempt == STORE_RETRY_ATTEMPTS:
                    raise StoreUnavailable(f"{fn.__qualname__} failed after {attempt} attempts: {exc}") from exc
                logger.warning(
                    "Transient store failure, retrying",
                    extra={"operation": fn.__qualname__, "attempt": attempt, "error": str(exc)},
                )
                time.sleep(delay)
                delay *= 2
        raise StoreUnavailable(f"{fn.__qualname__} was not attempted")

    return wrapper
