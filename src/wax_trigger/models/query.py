"""Event definitions, user filter parameters and per-tick query models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class EventCategory(str, Enum):
    """Event families a trigger can watch."""

    ACCOUNT = "account"
    NFT = "nft"
    MARKET = "market"
    COLLECTION = "collection"
    STAKING = "staking"
    GAME = "game"
    PACK_BLEND = "packBlend"
    BLOCK = "block"


class BlockSource(str, Enum):
    """Which block number of the chain info a block event follows."""

    HEAD = "head"
    IRREVERSIBLE = "irreversible"


@dataclass(frozen=True)
class RoleBinding:
    """Binds a user parameter onto a history query field.

    ``field`` is the query key the value lands on (``data.to``,
    ``data.new_asset_owner``, bare ``account``, ...).
    """

    param: str
    field: str
    required: bool = True


@dataclass(frozen=True)
class EventDefinition:
    """Static description of one (category, event) pair."""

    category: EventCategory
    event_key: str
    contract_accounts: frozenset[str] = frozenset()
    action_names: frozenset[str] = frozenset()  # OR semantics
    role_bindings: Mapping[str, RoleBinding] = field(
        default_factory=lambda: MappingProxyType({})
    )
    optional_filters: Mapping[str, str] = field(  # param -> query field
        default_factory=lambda: MappingProxyType({})
    )
    block_source: BlockSource | None = None
    description: str = ""

    @property
    def is_block_event(self) -> bool:
        return self.block_source is not None

    @property
    def params(self) -> tuple[str, ...]:
        """Names of every FilterParams field this event reads."""
        names = [b.param for b in self.role_bindings.values()]
        names.extend(self.optional_filters)
        return tuple(dict.fromkeys(names))


@dataclass(frozen=True)
class FilterParams:
    """User-supplied trigger parameters, snapshotted once per tick."""

    account_name: str = ""
    collection_name: str = ""
    token_contract: str = "eosio.token"
    token_symbol: str = "WAX"
    game_contract: str = ""
    staking_contract: str = ""
    action_contract: str = ""
    action_name: str = ""
    min_amount: float = 0

    def get(self, name: str) -> str:
        value = getattr(self, name)
        return "" if value is None else str(value).strip()


def format_timestamp(ts: datetime) -> str:
    """Render a datetime the way the history service expects (UTC, ms, Z)."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


@dataclass
class HistoryQuery:
    """A concrete get_actions query for one time window."""

    after: datetime
    before: datetime
    limit: int = 100
    sort: str = "asc"
    extra_filters: dict[str, str] = field(default_factory=dict)

    def to_params(self) -> dict[str, str | int]:
        params: dict[str, str | int] = {
            "after": format_timestamp(self.after),
            "before": format_timestamp(self.before),
            "limit": self.limit,
            "sort": self.sort,
        }
        params.update(self.extra_filters)
        return params


@dataclass(frozen=True)
class BlockInfoRequest:
    """Chain-info lookup issued instead of a history query for block events."""

    source: BlockSource
