"""Error types raised by the trigger engine.

Only ``UnknownEvent`` is meant to reach the host, and only at setup time.
Everything else is absorbed inside ``PollScheduler.poll()`` and shows up
in ``PollStats.last_error``.
"""

from __future__ import annotations


class TriggerError(Exception):
    """Base class for wax_trigger errors."""


class UnknownEvent(TriggerError):
    """The (category, event) pair is not in the taxonomy."""

    def __init__(self, category: str, event: str) -> None:
        self.category = category
        self.event = event
        super().__init__(f"unknown event {category!r}/{event!r}")


class MissingRequiredParameter(TriggerError):
    """A role-bound parameter required by the event definition is empty."""

    def __init__(self, param: str, event: str) -> None:
        self.param = param
        self.event = event
        super().__init__(f"event {event!r} requires parameter {param!r}")


class UpstreamQueryFailure(TriggerError):
    """Network, HTTP or decode error from the history or chain-info service."""

    def __init__(self, service: str, detail: str) -> None:
        self.service = service
        self.detail = detail
        super().__init__(f"{service}: {detail}")


class MalformedActionPayload(TriggerError):
    """A raw action does not have the expected shape.

    The normalizer and result filter treat missing fields as ``None``.
    ``PollScheduler`` records this when processing fetched actions still
    fails, and the tick yields no events.
    """
