"""SQLite implementation of the CursorStore protocol."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from wax_trigger.models.records import Cursor

SCHEMA = """
-- One cursor per trigger registration
CREATE TABLE IF NOT EXISTS cursors (
    scope TEXT PRIMARY KEY,
    last_timestamp TEXT NOT NULL,
    last_block_num INTEGER,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_ts(value: str) -> datetime:
    ts = datetime.fromisoformat(value)
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class SQLiteCursorStore:
    """SQLite-backed cursor store, keyed by trigger scope."""

    def __init__(self, db_path: str, scope: str = "default") -> None:
        self._db_path = db_path
        self._scope = scope
        self._db: aiosqlite.Connection | None = None

    @property
    def scope(self) -> str:
        return self._scope

    async def initialize(self) -> None:
        if self._db is not None:
            return
        if self._db_path != ":memory:":
            Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path)
        self._db.row_factory = aiosqlite.Row
        await self._db.executescript(SCHEMA)
        await self._db.commit()

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    # ── Cursor ─────────────────────────────────────────────

    async def load(self) -> Cursor | None:
        async with self.db.execute(
            "SELECT last_timestamp, last_block_num FROM cursors WHERE scope=?",
            (self._scope,),
        ) as cur:
            row = await cur.fetchone()
        if row is None:
            return None
        return Cursor(
            last_timestamp=_parse_ts(row["last_timestamp"]),
            last_block_num=row["last_block_num"],
        )

    async def save(self, cursor: Cursor) -> None:
        await self.db.execute(
            "INSERT INTO cursors (scope, last_timestamp, last_block_num, updated_at)"
            " VALUES (?, ?, ?, ?)"
            " ON CONFLICT(scope) DO UPDATE SET"
            " last_timestamp=excluded.last_timestamp,"
            " last_block_num=excluded.last_block_num,"
            " updated_at=excluded.updated_at",
            (
                self._scope,
                cursor.last_timestamp.isoformat(),
                cursor.last_block_num,
                _now(),
            ),
        )
        await self.db.commit()

    async def clear(self) -> None:
        await self.db.execute("DELETE FROM cursors WHERE scope=?", (self._scope,))
        await self.db.commit()

    # ── Inspection ─────────────────────────────────────────

    async def list_scopes(self) -> list[tuple[str, Cursor, str]]:
        """All saved cursors as (scope, cursor, updated_at)."""
        async with self.db.execute(
            "SELECT * FROM cursors ORDER BY scope"
        ) as cur:
            rows = await cur.fetchall()
        return [
            (
                row["scope"],
                Cursor(
                    last_timestamp=_parse_ts(row["last_timestamp"]),
                    last_block_num=row["last_block_num"],
                ),
                row["updated_at"],
            )
            for row in rows
        ]
