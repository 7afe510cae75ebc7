"""Persisted cursor and per-trigger bookkeeping records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Cursor:
    """Resumption marker for one trigger registration.

    ``last_timestamp`` never moves backwards.
    """

    last_timestamp: datetime
    last_block_num: int | None = None


@dataclass
class PollStats:
    """Counters kept by the scheduler across ticks."""

    ticks: int = 0
    events_emitted: int = 0
    failures: int = 0
    skipped: int = 0
    last_error: str | None = None
