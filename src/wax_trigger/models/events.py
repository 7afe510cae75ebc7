"""Trigger output models produced by the event normalizer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union


@dataclass(frozen=True)
class ActionPayload:
    """The ``act`` section of a history action."""

    account: str | None = None
    name: str | None = None
    data: Any = None
    authorization: Any = None


@dataclass(frozen=True)
class NormalizedEvent:
    """One matching history action, projected into the output contract.

    Consumers that need exactly-once handling should dedupe on
    ``(trx_id, global_sequence)``.
    """

    event: str
    event_category: str
    timestamp: str | None
    block_num: int | None
    trx_id: str | None
    action: ActionPayload = field(default_factory=ActionPayload)
    receiver: str | None = None
    producer: str | None = None
    global_sequence: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "eventCategory": self.event_category,
            "timestamp": self.timestamp,
            "blockNum": self.block_num,
            "trxId": self.trx_id,
            "action": {
                "account": self.action.account,
                "name": self.action.name,
                "data": self.action.data,
                "authorization": self.action.authorization,
            },
            "receiver": self.receiver,
            "producer": self.producer,
            "globalSequence": self.global_sequence,
        }


@dataclass(frozen=True)
class BlockEvent:
    """A new head or irreversible block seen on the chain-info service."""

    event: str
    event_category: str
    block_num: int
    block_id: str | None
    block_time: str | None
    producer: str | None
    chain_id: str | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.event,
            "eventCategory": self.event_category,
            "blockNum": self.block_num,
            "blockId": self.block_id,
            "blockTime": self.block_time,
            "producer": self.producer,
            "chainId": self.chain_id,
        }


TriggerEvent = Union[NormalizedEvent, BlockEvent]
