"""
Persistent first-seen timestamps for inactive configuration paths.

Backed by a single-table SQLite file. Keys are the raw identifier bytes
(``<host>:<path>``), values are 8-byte big-endian Unix timestamps. Every
write and delete is committed on its own, so a run that aborts half way keeps
whatever single-entry updates it had already applied.
"""
from __future__ import annotations

import logging
import sqlite3
import struct
import time
from enum import Enum
from typing import Callable, Dict, Optional

from .config import CACHE_PATH, STALE_AFTER_SECONDS
from .errors import CacheError

log = logging.getLogger(__name__)

_TIMESTAMP = struct.Struct(">Q")


class Classification(str, Enum):
    NEW = "new"
    FRESH = "fresh"
    STALE = "stale"
    REMOVED = "removed"
    OBSERVED = "observed"


def classify_age(age_seconds: float) -> Classification:
    """Stale strictly after the threshold; exactly 30 days is still fresh."""
    if age_seconds > STALE_AFTER_SECONDS:
        return Classification.STALE
    return Classification.FRESH


def encode_timestamp(ts: int) -> bytes:
    return _TIMESTAMP.pack(ts)


def decode_timestamp(raw: bytes) -> int:
    return _TIMESTAMP.unpack(raw)[0]


class StalenessCache:
    """
    Maps path identifiers to the time they were first seen.

    Use as context manager to ensure the store is closed exactly once.
    """

    def __init__(self, path: str = CACHE_PATH, clock: Callable[[], float] = time.time):
        self.path = path
        self.clock = clock
        self._conn: Optional[sqlite3.Connection] = None

    def open(self) -> None:
        if self._conn is not None:
            return
        try:
            conn = sqlite3.connect(self.path)
        except sqlite3.Error as e:
            raise CacheError(f"cannot open cache {self.path}: {e}") from e
        try:
            conn.execute(
                "CREATE TABLE IF NOT EXISTS inactive ("
                " path BLOB PRIMARY KEY,"
                " first_seen BLOB NOT NULL)"
            )
            conn.commit()
        except sqlite3.Error as e:
            conn.close()
            raise CacheError(f"cannot open cache {self.path}: {e}") from e
        self._conn = conn
        log.debug("Opened cache %s", self.path)

    def close(self) -> None:
        if self._conn is not None:
            try:
                self._conn.close()
                log.debug("Closed cache %s", self.path)
            finally:
                self._conn = None

    def __enter__(self) -> "StalenessCache":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            raise CacheError("cache is not open")
        return self._conn

    def load_all(self) -> Dict[str, int]:
        """Full scan: identifier -> first-seen Unix timestamp."""
        try:
            rows = self.conn.execute("SELECT path, first_seen FROM inactive").fetchall()
            return {bytes(k).decode("utf-8"): decode_timestamp(bytes(v)) for k, v in rows}
        except (sqlite3.Error, struct.error, UnicodeDecodeError) as e:
            raise CacheError(f"cannot read cache {self.path}: {e}") from e

    def record_seen(self, identifier: str) -> int:
        """Store the current time as the first sighting of *identifier*."""
        now = int(self.clock())
        try:
            with self.conn:
                self.conn.execute(
                    "INSERT OR REPLACE INTO inactive (path, first_seen) VALUES (?, ?)",
                    (identifier.encode("utf-8"), encode_timestamp(now)),
                )
        except sqlite3.Error as e:
            raise CacheError(f"cannot record {identifier}: {e}") from e
        return now

    def remove(self, identifier: str) -> None:
        try:
            with self.conn:
                self.conn.execute("DELETE FROM inactive WHERE path = ?", (identifier.encode("utf-8"),))
        except sqlite3.Error as e:
            raise CacheError(f"cannot remove {identifier}: {e}") from e
