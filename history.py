"""SQLite-backed estimate history with a size cap."""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List

from config import HISTORY_DB_PATH
from models import EstimateMode, EstimateResult

logger = logging.getLogger(__name__)


class SqliteHistoryStore:
    def __init__(self, db_path: Path | str = HISTORY_DB_PATH, max_size: int = 10) -> None:
        if str(db_path) != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.db_path = db_path
        self.max_size = max_size
        self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._setup()

    @property
    def max_size(self) -> int:
        return self._max_size

    @max_size.setter
    def max_size(self, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ValueError(f"max_size must be a positive int, got {value!r}")
        self._max_size = value

    def _setup(self) -> None:
        with self._lock, self._conn:
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS estimate_history (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    timestamp TEXT NOT NULL,
                    text TEXT NOT NULL,
                    mode TEXT NOT NULL,
                    intensity REAL NOT NULL,
                    duration_s REAL NOT NULL
                )
                """
            )
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_estimate_history_ts ON estimate_history(timestamp)"
            )

    def append(self, result: EstimateResult) -> None:
        with self._lock, self._conn:
            self._conn.execute(
                """
                INSERT INTO estimate_history(id, timestamp, text, mode, intensity, duration_s)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    result.id,
                    result.timestamp.astimezone(timezone.utc).isoformat(timespec="microseconds"),
                    result.text,
                    result.mode.value,
                    result.intensity,
                    result.duration_s,
                ),
            )
            cur = self._conn.execute(
                """
                DELETE FROM estimate_history WHERE seq NOT IN (
                    SELECT seq FROM estimate_history ORDER BY timestamp DESC, seq DESC LIMIT ?
                )
                """,
                (self._max_size,),
            )
            if cur.rowcount > 0:
                logger.debug("pruned %d old estimates", cur.rowcount)

    def query(self, limit: int = 10) -> List[EstimateResult]:
        if limit <= 0:
            return []
        with self._lock:
            cur = self._conn.execute(
                """
                SELECT id, timestamp, text, mode, intensity, duration_s FROM estimate_history
                ORDER BY timestamp DESC, seq DESC LIMIT ?
                """,
                (limit,),
            )
            rows = cur.fetchall()
        return [
            EstimateResult(
                id=row["id"],
                timestamp=datetime.fromisoformat(row["timestamp"]),
                text=row["text"],
                mode=EstimateMode(row["mode"]),
                intensity=row["intensity"],
                duration_s=row["duration_s"],
            )
            for row in rows
        ]

    def clear(self) -> None:
        with self._lock, self._conn:
            self._conn.execute("DELETE FROM estimate_history")

    def count(self) -> int:
        with self._lock:
            cur = self._conn.execute("SELECT COUNT(*) AS c FROM estimate_history")
            row = cur.fetchone()
        return row["c"] or 0

    def close(self) -> None:
        with self._lock:
            self._conn.close()
