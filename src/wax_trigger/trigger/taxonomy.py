"""Event taxonomy - (category, event) -> contracts, actions and role bindings.

Adding an event is a table change. Action names that were renamed by a
contract upgrade are listed together (``transfer`` / ``logtransfer``) and
matched with OR semantics.
"""

from __future__ import annotations

from types import MappingProxyType

from wax_trigger.errors import UnknownEvent
from wax_trigger.models.query import (
    BlockSource,
    EventCategory,
    EventDefinition,
    RoleBinding,
)

ACCOUNT = "account_name"

# Role bindings shared by many events
_TO = {"recipient": RoleBinding(ACCOUNT, "data.to")}
_FROM = {"sender": RoleBinding(ACCOUNT, "data.from")}
_ACTOR = {"actor": RoleBinding(ACCOUNT, "account")}

_COLLECTION = {"collection_name": "data.collection_name"}


def _define(
    category: EventCategory,
    event_key: str,
    contracts: tuple[str, ...] = (),
    actions: tuple[str, ...] = (),
    roles: dict[str, RoleBinding] | None = None,
    optional: dict[str, str] | None = None,
    block_source: BlockSource | None = None,
    description: str = "",
) -> EventDefinition:
    return EventDefinition(
        category=category,
        event_key=event_key,
        contract_accounts=frozenset(contracts),
        action_names=frozenset(actions),
        role_bindings=MappingProxyType(dict(roles or {})),
        optional_filters=MappingProxyType(dict(optional or {})),
        block_source=block_source,
        description=description,
    )


_A = EventCategory.ACCOUNT
_N = EventCategory.NFT
_M = EventCategory.MARKET
_C = EventCategory.COLLECTION
_S = EventCategory.STAKING
_G = EventCategory.GAME
_P = EventCategory.PACK_BLEND
_B = EventCategory.BLOCK

_DEFINITIONS = [
    # ── Account ────────────────────────────────────────────
    _define(_A, "waxpReceived", ("eosio.token",), ("transfer",), _TO,
            description="WAXP received"),
    _define(_A, "waxpSent", ("eosio.token",), ("transfer",), _FROM,
            description="WAXP sent"),
    _define(_A, "tokenReceived", ("eosio.token",), ("transfer",), _TO,
            {"token_contract": "act.account"}, description="Token received"),
    _define(_A, "tokenSent", ("eosio.token",), ("transfer",), _FROM,
            {"token_contract": "act.account"}, description="Token sent"),
    _define(_A, "resourceChanged", (),
            ("delegatebw", "undelegatebw", "buyrambytes", "buyram", "sellram"),
            _ACTOR, description="CPU/NET/RAM changed"),

    # ── NFT ────────────────────────────────────────────────
    _define(_N, "assetReceived", ("atomicassets",), ("transfer", "logtransfer"), _TO,
            description="Asset received"),
    _define(_N, "assetSent", ("atomicassets",), ("transfer", "logtransfer"), _FROM,
            description="Asset sent"),
    _define(_N, "assetBurned", ("atomicassets",), ("burnasset", "logburnasset"),
            {"owner": RoleBinding(ACCOUNT, "data.asset_owner")},
            description="Asset burned"),
    _define(_N, "assetBacked", ("atomicassets",), ("logbackasset",),
            description="Asset backed with tokens"),
    _define(_N, "assetMinted", ("atomicassets",), ("logmint",),
            {"owner": RoleBinding(ACCOUNT, "data.new_asset_owner")},
            description="Asset minted to account"),

    # ── Market ─────────────────────────────────────────────
    _define(_M, "saleCreated", ("atomicmarket",), ("lognewsale",),
            optional=_COLLECTION, description="Sale created"),
    _define(_M, "saleCancelled", ("atomicmarket",), ("logcancelsale",),
            optional=_COLLECTION, description="Sale cancelled"),
    _define(_M, "saleCompleted", ("atomicmarket",), ("purchasesale", "logpurchsale"),
            optional=_COLLECTION, description="Sale completed"),
    _define(_M, "auctionCreated", ("atomicmarket",), ("lognewauct",),
            optional=_COLLECTION, description="Auction created"),
    _define(_M, "auctionBid", ("atomicmarket",), ("auctionbid", "logauctbid"),
            optional=_COLLECTION, description="Auction bid"),
    _define(_M, "auctionEnded", ("atomicmarket",), ("auctclaimbuy", "auctclaimsel"),
            optional=_COLLECTION, description="Auction ended"),
    _define(_M, "buyofferReceived", ("atomicmarket",), ("lognewbuyo",),
            optional=_COLLECTION, description="Buyoffer received"),
    _define(_M, "buyofferAccepted", ("atomicmarket",), ("acceptbuyo",),
            optional=_COLLECTION, description="Buyoffer accepted"),

    # ── Collection ─────────────────────────────────────────
    _define(_C, "collectionAssetMinted", ("atomicassets",), ("logmint",),
            optional=_COLLECTION, description="Asset minted in collection"),
    _define(_C, "templateCreated", ("atomicassets",), ("createtempl", "lognewtempl"),
            optional=_COLLECTION, description="Template created"),
    _define(_C, "schemaCreated", ("atomicassets",), ("createschema",),
            optional=_COLLECTION, description="Schema created"),
    _define(_C, "schemaExtended", ("atomicassets",), ("extendschema",),
            optional=_COLLECTION, description="Schema extended"),
    _define(_C, "collectionUpdated", ("atomicassets",),
            ("setcoldata", "addcolauth", "remcolauth"),
            optional=_COLLECTION, description="Collection updated"),

    # ── Staking ────────────────────────────────────────────
    _define(_S, "nftStaked", (), ("stake", "logstake"), _ACTOR,
            {"staking_contract": "act.account"}, description="NFT staked"),
    _define(_S, "nftUnstaked", (), ("unstake", "logunstake"), _ACTOR,
            {"staking_contract": "act.account"}, description="NFT unstaked"),
    _define(_S, "rewardsAvailable", (), ("logreward", "claimreward"),
            {"owner": RoleBinding(ACCOUNT, "data.owner")},
            {"staking_contract": "act.account"}, description="Staking rewards"),
    _define(_S, "poolUpdated", (), ("setpool", "updatepool"),
            optional={"staking_contract": "act.account"}, description="Pool updated"),

    # ── Game ───────────────────────────────────────────────
    _define(_G, "gameAction", (), (), _ACTOR,
            {"game_contract": "act.account"}, description="Any game action"),
    _define(_G, "rewardEarned", (), ("claim", "reward", "claimreward"), _ACTOR,
            {"game_contract": "act.account"}, description="Game reward earned"),
    _define(_G, "achievementUnlocked", (), ("achievement", "unlock"), _ACTOR,
            {"game_contract": "act.account"}, description="Achievement unlocked"),
    _define(_G, "leaderboardChanged", (), (), _ACTOR,
            {"game_contract": "act.account"}, description="Leaderboard changed"),

    # ── Pack / blend ───────────────────────────────────────
    _define(_P, "packOpened", ("atomicpacksx",), ("unboxassets", "lognewunbox"), _ACTOR,
            description="Pack opened"),
    _define(_P, "dropClaimed", ("atomicdropsx",), ("claimdrop", "logclaim"), _ACTOR,
            description="Drop claimed"),
    _define(_P, "blendCompleted", ("blenderizerx",), ("logblend",), _ACTOR,
            description="Blend completed"),

    # ── Block ──────────────────────────────────────────────
    _define(_B, "newBlock", block_source=BlockSource.HEAD,
            description="New head block"),
    _define(_B, "irreversibleBlock", block_source=BlockSource.IRREVERSIBLE,
            description="New irreversible block"),
    _define(_B, "actionExecuted",
            roles={"contract": RoleBinding("action_contract", "act.account")},
            optional={"action_name": "act.name"},
            description="Specific contract action executed"),
]

TAXONOMY: MappingProxyType[tuple[EventCategory, str], EventDefinition] = MappingProxyType(
    {(d.category, d.event_key): d for d in _DEFINITIONS}
)


def get_definition(category: str | EventCategory, event: str) -> EventDefinition:
    """Look up an event definition. Raises UnknownEvent if absent."""
    try:
        cat = EventCategory(category)
    except ValueError:
        raise UnknownEvent(str(category), event) from None
    definition = TAXONOMY.get((cat, event))
    if definition is None:
        raise UnknownEvent(cat.value, event)
    return definition


def list_events(category: str | EventCategory | None = None) -> list[EventDefinition]:
    """All definitions, optionally restricted to one category, in table order."""
    if category is None:
        return list(TAXONOMY.values())
    cat = EventCategory(category)
    return [d for d in TAXONOMY.values() if d.category is cat]

