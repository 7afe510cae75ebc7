"""CursorStore protocol - persists the trigger's resumption marker."""

from __future__ import annotations

from typing import Protocol

from wax_trigger.models.records import Cursor


class CursorStore(Protocol):
    """Scoped key-value record holding one trigger's cursor.

    Single writer: only the PollScheduler that owns the scope saves to it.
    """

    async def load(self) -> Cursor | None:
        """Return the saved cursor, or None on first use."""
        ...

    async def save(self, cursor: Cursor) -> None:
        ...

    async def clear(self) -> None:
        """Forget the saved cursor so the next tick starts fresh."""
        ...
