"""Chain API client - reads head and irreversible block info."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from wax_trigger.errors import UpstreamQueryFailure
from wax_trigger.models.query import BlockSource

log = logging.getLogger(__name__)

GET_INFO = "/v1/chain/get_info"


@dataclass
class ChainInfo:
    """Subset of /v1/chain/get_info the trigger uses."""

    head_block_num: int
    head_block_id: str | None
    head_block_time: str | None
    head_block_producer: str | None
    last_irreversible_block_num: int
    last_irreversible_block_id: str | None
    chain_id: str | None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> ChainInfo:
        return cls(
            head_block_num=int(data["head_block_num"]),
            head_block_id=data.get("head_block_id"),
            head_block_time=data.get("head_block_time"),
            head_block_producer=data.get("head_block_producer"),
            last_irreversible_block_num=int(data["last_irreversible_block_num"]),
            last_irreversible_block_id=data.get("last_irreversible_block_id"),
            chain_id=data.get("chain_id"),
        )

    def block_num(self, source: BlockSource) -> int:
        if source is BlockSource.HEAD:
            return self.head_block_num
        return self.last_irreversible_block_num

    def block_id(self, source: BlockSource) -> str | None:
        if source is BlockSource.HEAD:
            return self.head_block_id
        return self.last_irreversible_block_id


class ChainApiClient:
    """Async client for an EOSIO chain API node."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_info(self) -> ChainInfo:
        url = f"{self._base_url}{GET_INFO}"
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            info = ChainInfo.from_json(resp.json())
        except httpx.HTTPStatusError as exc:
            raise UpstreamQueryFailure(
                "chain_api", f"HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamQueryFailure("chain_api", str(exc) or type(exc).__name__) from exc
        except (ValueError, KeyError, TypeError) as exc:
            raise UpstreamQueryFailure("chain_api", f"bad get_info response: {exc}") from exc

        log.debug(
            "Chain head %d, irreversible %d",
            info.head_block_num, info.last_irreversible_block_num,
        )
        return info
