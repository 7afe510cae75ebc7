"""Hyperion history client - time-ranged, filtered action queries."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from wax_trigger.errors import UpstreamQueryFailure
from wax_trigger.models.query import HistoryQuery

log = logging.getLogger(__name__)

GET_ACTIONS = "/v2/history/get_actions"
HEALTH = "/v2/health"


class HyperionClient:
    """Async client for a Hyperion history API node.

    Filters are passed straight through as query parameters, so
    comma-joined action names (``act.name=transfer,logtransfer``) match
    any of the listed names.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self._base_url}{endpoint}"
        try:
            resp = await self._client.get(url, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            body = exc.response.text[:200]
            raise UpstreamQueryFailure(
                "hyperion", f"HTTP {exc.response.status_code} - {body}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamQueryFailure("hyperion", str(exc) or type(exc).__name__) from exc
        except ValueError as exc:
            raise UpstreamQueryFailure("hyperion", f"invalid JSON: {exc}") from exc

    async def get_actions(self, query: HistoryQuery) -> list[dict[str, Any]]:
        """Fetch actions for one window. Order is whatever the query sorts by."""
        start = time.monotonic()
        data = await self._get(GET_ACTIONS, query.to_params())
        if not isinstance(data, dict):
            raise UpstreamQueryFailure("hyperion", "get_actions response is not an object")

        actions = data.get("actions") or []
        if not isinstance(actions, list):
            raise UpstreamQueryFailure("hyperion", "get_actions 'actions' is not a list")

        duration = int((time.monotonic() - start) * 1000)
        log.debug(
            "get_actions %s returned %d actions in %dms",
            query.extra_filters, len(actions), duration,
        )
        return [a for a in actions if isinstance(a, dict)]

    async def health(self) -> dict[str, Any]:
        """Return the node's /v2/health report."""
        data = await self._get(HEALTH)
        return data if isinstance(data, dict) else {}
