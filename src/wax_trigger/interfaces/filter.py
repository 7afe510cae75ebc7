"""ResultFilter protocol - post-query predicates the history API cannot express."""

from __future__ import annotations

from typing import Any, Protocol


class ResultFilter(Protocol):
    """Drops raw actions that fail a local predicate. Never raises on shape."""

    def accepts(self, action: dict[str, Any]) -> bool:
        ...

    def apply(self, actions: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Keep accepted actions, preserving order."""
        ...
