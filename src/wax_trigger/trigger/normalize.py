"""Event normalizer and output emitter.

Projection is total: any dict (or junk) becomes an event, with missing
fields set to None.
"""

from __future__ import annotations

from typing import Any, Sequence

from wax_trigger.models.events import (
    ActionPayload,
    BlockEvent,
    NormalizedEvent,
    TriggerEvent,
)
from wax_trigger.models.query import BlockSource, EventDefinition
from wax_trigger.wax.chain import ChainInfo

# Hyperion v2 indexes the time as "@timestamp"; older nodes use "timestamp"
_TIMESTAMP_FIELDS = ("@timestamp", "timestamp")


def _field(raw: Any, key: str) -> Any:
    return raw.get(key) if isinstance(raw, dict) else None


def normalize_action(raw: Any, event: str, category: str) -> NormalizedEvent:
    act = _field(raw, "act")
    timestamp = None
    for key in _TIMESTAMP_FIELDS:
        timestamp = _field(raw, key)
        if timestamp:
            break

    return NormalizedEvent(
        event=event,
        event_category=category,
        timestamp=timestamp or None,
        block_num=_field(raw, "block_num"),
        trx_id=_field(raw, "trx_id"),
        action=ActionPayload(
            account=_field(act, "account"),
            name=_field(act, "name"),
            data=_field(act, "data"),
            authorization=_field(act, "authorization"),
        ),
        receiver=_field(raw, "receiver"),
        producer=_field(raw, "producer"),
        global_sequence=_field(raw, "global_sequence"),
    )


def normalize_actions(
    actions: Sequence[Any], event: str, category: str
) -> list[NormalizedEvent]:
    """One event per raw action, same order."""
    return [normalize_action(a, event, category) for a in actions]


def normalize_block(info: ChainInfo, definition: EventDefinition) -> BlockEvent:
    source = definition.block_source or BlockSource.HEAD
    return BlockEvent(
        event=definition.event_key,
        event_category=definition.category.value,
        block_num=info.block_num(source),
        block_id=info.block_id(source),
        block_time=info.head_block_time,
        producer=info.head_block_producer,
        chain_id=info.chain_id,
    )


def emit(events: Sequence[TriggerEvent]) -> list[TriggerEvent] | None:
    """None when nothing happened, otherwise the events in order."""
    if not events:
        return None
    return list(events)
