"""Event-polling engine: taxonomy, query building, normalization, scheduling."""

from wax_trigger.trigger.poller import PollScheduler, TickState
from wax_trigger.trigger.taxonomy import TAXONOMY, get_definition, list_events

__all__ = ["PollScheduler", "TickState", "TAXONOMY", "get_definition", "list_events"]
