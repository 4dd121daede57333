"""SQLite storage — latest state per container plus an append-only history.

Every write goes through a small, fixed-size connection pool. A record's
latest-row upsert and its history append share one connection and one
transaction, so either both land or neither does.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.pool import QueuePool

from container_health.health.models import HealthRecord

logger = logging.getLogger(__name__)

SCHEMA = """
    CREATE TABLE IF NOT EXISTS containers (
        id           TEXT NOT NULL DEFAULT '',
        name         TEXT NOT NULL UNIQUE,
        state        TEXT NOT NULL,
        status       TEXT NOT NULL,
        last_updated REAL NOT NULL
    );

    CREATE TABLE IF NOT EXISTS container_history (
        id             TEXT NOT NULL DEFAULT '',
        name           TEXT NOT NULL,
        status         TEXT NOT NULL,
        cpu_percent    REAL NOT NULL,
        memory_percent REAL NOT NULL,
        restart_count  INTEGER NOT NULL,
        uptime         TEXT NOT NULL,
        timestamp      REAL NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_history_name
        ON container_history (name, timestamp DESC);
"""


class StoreUnavailable(Exception):
    """Raised when the SQLite store can't be opened or written."""


class ConnectionPool:
    """Bounded pool of SQLite connections shared across a run."""

    def __init__(self, db_path: Path, size: int = 2, timeout: float = 5.0) -> None:
        self._db_path = db_path
        self._pool = QueuePool(self._open, pool_size=size, max_overflow=0, timeout=timeout)

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Check out a connection, returning it to the pool afterwards."""
        try:
            pooled = self._pool.connect()
        except PoolTimeoutError as e:
            raise StoreUnavailable("No database connection available") from e
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Cannot open {self._db_path}: {e}") from e
        try:
            yield pooled.dbapi_connection
        finally:
            pooled.close()

    def close(self) -> None:
        self._pool.dispose()


class HealthStore:
    """SQLite-backed latest-state table + history log."""

    def __init__(self, db_path: Path | str, pool_size: int = 2, pool_timeout: float = 5.0) -> None:
        self._db_path = Path(db_path)
        try:
            self._db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"Cannot create {self._db_path.parent}: {e}") from e
        self._pool = ConnectionPool(self._db_path, size=pool_size, timeout=pool_timeout)
        try:
            self._init_db()
        except StoreUnavailable:
            self._pool.close()
            raise

    def __enter__(self) -> HealthStore:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """One pooled connection, committed on success, rolled back on error."""
        with self._pool.connection() as conn:
            try:
                with conn:
                    yield conn
            except sqlite3.Error as e:
                raise StoreUnavailable(f"Database write failed: {e}") from e

    def _init_db(self) -> None:
        with self._pool.connection() as conn:
            try:
                conn.executescript(SCHEMA)
                conn.commit()
            except sqlite3.Error as e:
                raise StoreUnavailable(f"Cannot initialise {self._db_path}: {e}") from e

    # ── Writes ────────────────────────────────────────────────────────────

    def write(self, record: HealthRecord) -> None:
        """Upsert the latest row and append history in a single transaction."""
        with self._transaction() as conn:
            _upsert_latest(conn, record)
            _append_history(conn, record)
        logger.debug("Stored %s (%s)", record.name, record.status.value)

    def upsert_latest(self, record: HealthRecord) -> None:
        """Replace the latest row for ``record.name`` (last write wins)."""
        with self._transaction() as conn:
            _upsert_latest(conn, record)

    def append_history(self, record: HealthRecord) -> None:
        """Insert an immutable history row."""
        with self._transaction() as conn:
            _append_history(conn, record)

    def wipe(self) -> int:
        """Delete every latest and history row; returns rows removed."""
        with self._transaction() as conn:
            removed = conn.execute("DELETE FROM containers").rowcount
            removed += conn.execute("DELETE FROM container_history").rowcount
        logger.info("Wiped %d rows from %s", removed, self._db_path)
        return removed

    def close(self) -> None:
        self._pool.close()


def _upsert_latest(conn: sqlite3.Connection, record: HealthRecord) -> None:
    conn.execute(
        "INSERT OR REPLACE INTO containers (id, name, state, status, last_updated) "
        "VALUES (?, ?, ?, ?, ?)",
        (record.id, record.name, record.state.value, record.status.value, record.last_updated),
    )


def _append_history(conn: sqlite3.Connection, record: HealthRecord) -> None:
    conn.execute(
        "INSERT INTO container_history "
        "(id, name, status, cpu_percent, memory_percent, restart_count, uptime, timestamp) "
        "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
        (
            record.id, record.name, record.status.value, record.cpu_percent,
            record.memory_percent, record.restart_count, record.uptime, record.last_updated,
        ),
    )
