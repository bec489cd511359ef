"""
Durable like store (SQL-only)
=============================

- One row per (did, rkey) that matched a trigger post.
- WAL + pragmatic PRAGMAs; schema.sql applied on open (idempotent).
- Blocking sqlite calls run in a worker thread under a shared asyncio lock.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar
import asyncio
import logging
import pathlib
import sqlite3
import time

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreClosedError(RuntimeError):
    """Raised when a closed :class:`LikeStore` is used."""


@dataclass(frozen=True)
class LikeRecord:
    did: str
    rkey: str
    trigger_uri: str
    created_at: int


def connect(path: str) -> sqlite3.Connection:
    # Autocommit; writes use explicit `with conn:` blocks.
    conn = sqlite3.connect(
        path,
        isolation_level=None,
        check_same_thread=False,
    )

    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA temp_store=MEMORY;")
    conn.execute("PRAGMA busy_timeout=3000;")    # 3s

    conn.row_factory = sqlite3.Row
    return conn


def migrate(conn: sqlite3.Connection) -> None:
    """Execute schema.sql. Every statement uses IF NOT EXISTS."""
    schema_file = pathlib.Path(__file__).with_name("schema.sql")
    sql = schema_file.read_text(encoding="utf-8")
    with conn:
        conn.executescript(sql)


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class LikeStore:
    """Async facade over the ``likes`` table."""

    def __init__(self, path: str, lock: asyncio.Lock | None = None):
        if path != ":memory:":
            pathlib.Path(path).parent.mkdir(parents=True, exist_ok=True)
        self.path = path
        self.conn: sqlite3.Connection | None = connect(path)
        migrate(self.conn)
        self._lock = lock or asyncio.Lock()
        self._last_ts = 0

    @property
    def closed(self) -> bool:
        return self.conn is None

    def _require_conn(self) -> sqlite3.Connection:
        if self.conn is None:
            raise StoreClosedError(f"Like store {self.path} is closed")
        return self.conn

    async def _run(self, fn: Callable[[sqlite3.Connection], T]) -> T:
        conn = self._require_conn()
        async with self._lock:
            return await asyncio.to_thread(fn, conn)

    def _next_created_at(self) -> int:
        # Non-decreasing within this process even if the wall clock steps back.
        self._last_ts = max(self._last_ts, _now_ms())
        return self._last_ts

    async def add_like(self, did: str, rkey: str, trigger_uri: str) -> bool:
        """
        Record a trigger-matching like. Re-adding an existing (did, rkey) is a
        no-op; returns True only when a new row was written.
        """
        sql = "INSERT OR IGNORE INTO likes(did, rkey, trigger_uri, created_at) VALUES(?, ?, ?, ?)"
        created_at = self._next_created_at()

        def _write(conn: sqlite3.Connection) -> bool:
            with conn:
                cur = conn.execute(sql, (did, rkey, trigger_uri, created_at))
            return cur.rowcount > 0

        return await self._run(_write)

    async def remove_like(self, did: str, rkey: str) -> None:
        sql = "DELETE FROM likes WHERE did=? AND rkey=?"

        def _write(conn: sqlite3.Connection) -> None:
            with conn:
                conn.execute(sql, (did, rkey))

        await self._run(_write)

    async def get_trigger_uri(self, did: str, rkey: str) -> Optional[str]:
        sql = "SELECT trigger_uri FROM likes WHERE did=? AND rkey=?"

        def _query(conn: sqlite3.Connection) -> Optional[str]:
            row = conn.execute(sql, (did, rkey)).fetchone()
            return row["trigger_uri"] if row else None

        return await self._run(_query)

    async def get_all_likes(self) -> list[LikeRecord]:
        sql = "SELECT did, rkey, trigger_uri, created_at FROM likes"

        def _query(conn: sqlite3.Connection) -> list[LikeRecord]:
            return [
                LikeRecord(
                    did=str(r["did"]),
                    rkey=str(r["rkey"]),
                    trigger_uri=str(r["trigger_uri"]),
                    created_at=int(r["created_at"]),
                )
                for r in conn.execute(sql).fetchall()
            ]

        return await self._run(_query)

    async def count(self) -> int:
        def _query(conn: sqlite3.Connection) -> int:
            return int(conn.execute("SELECT COUNT(*) FROM likes").fetchone()[0])

        return await self._run(_query)

    async def close(self) -> None:
        """
        Checkpoint the WAL and close the connection. Repeat calls are no-ops;
        every other method raises :class:`StoreClosedError` afterwards.
        """
        if self.conn is None:
            return

        conn = self.conn
        self.conn = None

        def _close() -> None:
            try:
                conn.execute("PRAGMA wal_checkpoint(TRUNCATE);")
            finally:
                conn.close()

        async with self._lock:
            await asyncio.to_thread(_close)
        logger.info("Closed like store %s", self.path)


__all__ = ["LikeStore", "LikeRecord", "StoreClosedError", "connect", "migrate"]
