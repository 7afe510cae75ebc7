"""Data models for the wax_trigger engine."""

from wax_trigger.models.events import (
    ActionPayload,
    BlockEvent,
    NormalizedEvent,
    TriggerEvent,
)
from wax_trigger.models.query import (
    BlockInfoRequest,
    BlockSource,
    EventCategory,
    EventDefinition,
    FilterParams,
    HistoryQuery,
    RoleBinding,
    format_timestamp,
)
from wax_trigger.models.records import Cursor, PollStats
from wax_trigger.models.config import DaemonConfig, TriggerSettings

__all__ = [
    "ActionPayload", "BlockEvent", "NormalizedEvent", "TriggerEvent",
    "BlockInfoRequest", "BlockSource", "EventCategory", "EventDefinition",
    "FilterParams", "HistoryQuery", "RoleBinding", "format_timestamp",
    "Cursor", "PollStats",
    "DaemonConfig", "TriggerSettings",
]
