"""In-memory CursorStore, for tests and one-shot runs."""

from __future__ import annotations

from dataclasses import replace

from wax_trigger.models.records import Cursor


class MemoryCursorStore:
    """Holds the cursor in process memory. Lost on restart."""

    def __init__(self, cursor: Cursor | None = None) -> None:
        self._cursor = cursor
        self.saves = 0

    async def load(self) -> Cursor | None:
        return replace(self._cursor) if self._cursor else None

    async def save(self, cursor: Cursor) -> None:
        self._cursor = replace(cursor)
        self.saves += 1

    async def clear(self) -> None:
        self._cursor = None
