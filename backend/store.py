"""BoroughWatch Backend: SQLite store for borough totals & the month catalog

Synchronous; callers run these methods in a worker thread. Each call opens its
own connection so the store is safe to use from several threads at once.
"""

import time
import sqlite3
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Optional

from errors import StoreUnavailable

logger = logging.getLogger("boroughwatch.store")

_SCHEMA = """
    CREATE TABLE IF NOT EXISTS crime_totals (
        borough      TEXT NOT NULL,
        category     TEXT NOT NULL,
        crime_month  TEXT NOT NULL,
        total_crimes INTEGER NOT NULL CHECK (total_crimes >= 0),
        fetched_at   TEXT NOT NULL,
        PRIMARY KEY (borough, category, crime_month)
    );

    CREATE TABLE IF NOT EXISTS crime_months (
        crime_month  TEXT PRIMARY KEY,
        fetched_at   TEXT NOT NULL
    );
"""


@dataclass(frozen=True)
class StoredAggregate:
    borough: str
    category: str
    month: str
    total_crimes: int
    fetched_at: float  # epoch seconds


def _to_iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def _from_iso(value: str) -> float:
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.timestamp()


class CrimeStore:
    def __init__(self, db_path, clock: Callable[[], float] = time.time):
        self.db_path = str(db_path)
        self._clock = clock

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path, timeout=10)

    def init_schema(self):
        try:
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            conn = self._connect()
            try:
                conn.execute("PRAGMA journal_mode=WAL")
                conn.executescript(_SCHEMA)
            finally:
                conn.close()
        except (sqlite3.Error, OSError) as e:
            raise StoreUnavailable(f"Cannot initialise store at {self.db_path}: {e}") from e

    # ── Borough totals ──

    def get_aggregate(self, borough: str, category: str, month: Optional[str] = None) -> Optional[StoredAggregate]:
        """Row for an explicit month, or the most recent month when month is None."""
        sql = """
            SELECT borough, category, crime_month, total_crimes, fetched_at
            FROM crime_totals
            WHERE borough = ? AND category = ?
        """
        params: list = [borough, category]
        if month:
            sql += " AND crime_month = ?"
            params.append(month)
        sql += " ORDER BY crime_month DESC LIMIT 1"

        try:
            conn = self._connect()
            try:
                row = conn.execute(sql, params).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Reading crime totals failed: {e}") from e

        if row is None:
            return None
        return StoredAggregate(
            borough=row[0], category=row[1], month=row[2],
            total_crimes=int(row[3]), fetched_at=_from_iso(row[4]),
        )

    def save_aggregate(self, borough: str, category: str, month: str, total_crimes: int,
                       fetched_at: Optional[float] = None):
        fetched = _to_iso(self._clock() if fetched_at is None else fetched_at)
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute("""
                        INSERT INTO crime_totals (borough, category, crime_month, total_crimes, fetched_at)
                        VALUES (?, ?, ?, ?, ?)
                        ON CONFLICT (borough, category, crime_month) DO UPDATE SET
                            total_crimes = excluded.total_crimes,
                            fetched_at = excluded.fetched_at
                    """, (borough, category, month, int(total_crimes), fetched))
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Writing crime totals failed: {e}") from e

    # ── Month catalog ──

    def get_months(self) -> tuple[list[str], Optional[float]]:
        """(months most recent first, fetch timestamp) - ([], None) when empty."""
        try:
            conn = self._connect()
            try:
                rows = conn.execute(
                    "SELECT crime_month, fetched_at FROM crime_months ORDER BY crime_month DESC"
                ).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Reading crime months failed: {e}") from e

        if not rows:
            return [], None
        return [r[0] for r in rows], _from_iso(rows[0][1])

    def replace_months(self, months: list[str], fetched_at: Optional[float] = None):
        """Delete the catalog and reinsert it in one transaction."""
        fetched = _to_iso(self._clock() if fetched_at is None else fetched_at)
        try:
            conn = self._connect()
            try:
                with conn:
                    conn.execute("DELETE FROM crime_months")
                    conn.executemany(
                        "INSERT OR REPLACE INTO crime_months (crime_month, fetched_at) VALUES (?, ?)",
                        [(m, fetched) for m in months if m],
                    )
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise StoreUnavailable(f"Replacing crime months failed: {e}") from e


def open_store(db_path, clock: Callable[[], float] = time.time) -> Optional[CrimeStore]:
    """CrimeStore for db_path, or None when unconfigured or unusable."""
    if not db_path:
        logger.info("CRIME_DB_PATH not set; running with memory cache + upstream only")
        return None
    store = CrimeStore(db_path, clock=clock)
    try:
        store.init_schema()
    except StoreUnavailable as e:
        logger.warning(f"{e}; continuing without persistent store")
        return None
    logger.info(f"Crime store ready at {db_path}")
    return store
