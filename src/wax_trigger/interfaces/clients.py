"""Protocols for the two upstream services a tick may call."""

from __future__ import annotations

from typing import Any, Protocol

from wax_trigger.models.query import HistoryQuery
from wax_trigger.wax.chain import ChainInfo


class HistoryClient(Protocol):
    """Time-ranged, filtered action history (Hyperion get_actions)."""

    async def get_actions(self, query: HistoryQuery) -> list[dict[str, Any]]:
        """Return raw actions, ascending by time. Raises UpstreamQueryFailure."""
        ...


class ChainInfoClient(Protocol):
    """Chain head / irreversible block info (/v1/chain/get_info)."""

    async def get_info(self) -> ChainInfo:
        """Raises UpstreamQueryFailure."""
        ...
