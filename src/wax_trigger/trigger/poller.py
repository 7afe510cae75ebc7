"""Poll scheduler - one tick of the trigger, from cursor read to cursor write."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable

from wax_trigger.errors import (
    MalformedActionPayload,
    MissingRequiredParameter,
    UpstreamQueryFailure,
)
from wax_trigger.interfaces.clients import ChainInfoClient, HistoryClient
from wax_trigger.interfaces.filter import ResultFilter
from wax_trigger.interfaces.store import CursorStore
from wax_trigger.models.config import TriggerSettings
from wax_trigger.models.events import TriggerEvent
from wax_trigger.models.query import EventDefinition, FilterParams
from wax_trigger.models.records import Cursor, PollStats
from wax_trigger.policy.filter import AmountFilter
from wax_trigger.trigger.filters import DEFAULT_LIMIT, build_query, build_request
from wax_trigger.trigger.normalize import emit, normalize_actions, normalize_block
from wax_trigger.trigger.taxonomy import get_definition

log = logging.getLogger(__name__)

# How far back the very first tick looks
FIRST_RUN_LOOKBACK = timedelta(seconds=60)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TickState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    BLOCK_CHECK = "block_check"
    ACTION_QUERY = "action_query"
    EMITTING = "emitting"


class PollScheduler:
    """Turns the stateless history API into a resumable event stream.

    Each ``poll()`` call is one tick:
    1. Load the cursor (first run: now - 60s)
    2. Block events: compare the chain's block number with the cursor
       Other events: query action history for [cursor, now]
    3. Drop actions failing the amount filter, normalize the rest
    4. Save the cursor with ``last_timestamp = now``, even if the query failed
    5. Return None if nothing matched, else the events in upstream order

    Upstream failures are logged and count as an empty tick. Ticks must not
    overlap; the scheduler is the only writer of its cursor.
    """

    def __init__(
        self,
        definition: EventDefinition,
        params: FilterParams,
        store: CursorStore,
        history: HistoryClient,
        chain: ChainInfoClient,
        limit: int = DEFAULT_LIMIT,
        advance_on_failure: bool = True,
        result_filter: ResultFilter | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._definition = definition
        self._params = params
        self._store = store
        self._history = history
        self._chain = chain
        self._limit = limit
        self._advance_on_failure = advance_on_failure
        self._filter = result_filter or AmountFilter(params.min_amount, params.token_symbol)
        self._clock = clock
        self._state = TickState.IDLE
        self._stats = PollStats()

        for binding in definition.role_bindings.values():
            if binding.required and not params.get(binding.param):
                log.warning(
                    "%s needs %s; ticks will be skipped until it is set",
                    definition.event_key, binding.param,
                )

    @classmethod
    def from_settings(
        cls,
        settings: TriggerSettings,
        store: CursorStore,
        history: HistoryClient,
        chain: ChainInfoClient,
        limit: int = DEFAULT_LIMIT,
        clock: Callable[[], datetime] = _utcnow,
    ) -> PollScheduler:
        """Build a scheduler from config. Raises UnknownEvent for a bad pair."""
        definition = get_definition(settings.category, settings.event)
        return cls(
            definition,
            settings.to_filter_params(),
            store,
            history,
            chain,
            limit=limit,
            advance_on_failure=settings.advance_on_failure,
            clock=clock,
        )

    @property
    def definition(self) -> EventDefinition:
        return self._definition

    @property
    def state(self) -> TickState:
        return self._state

    @property
    def stats(self) -> PollStats:
        return self._stats

    async def poll(self) -> list[TriggerEvent] | None:
        """Run one tick. Returns None when there are no new events."""
        if self._state is not TickState.IDLE:
            raise RuntimeError("poll() called while a tick is in progress")

        self._state = TickState.POLLING
        try:
            return await self._tick()
        finally:
            self._state = TickState.IDLE

    async def _tick(self) -> list[TriggerEvent] | None:
        self._stats.ticks += 1
        now = self._clock()

        cursor = await self._store.load()
        if cursor is None:
            cursor = Cursor(last_timestamp=now - FIRST_RUN_LOOKBACK)
            log.info(
                "No cursor for %s, starting from %s",
                self._definition.event_key, cursor.last_timestamp.isoformat(),
            )

        window_start = cursor.last_timestamp
        window_end = max(now, window_start)

        if self._definition.is_block_event:
            self._state = TickState.BLOCK_CHECK
            events, ok = await self._check_block(cursor)
        else:
            self._state = TickState.ACTION_QUERY
            events, ok = await self._query_actions(window_start, window_end)

        self._state = TickState.EMITTING
        if ok or self._advance_on_failure:
            cursor.last_timestamp = window_end
        await self._store.save(cursor)

        if events:
            self._stats.events_emitted += len(events)
            log.info(
                "%s: %d new events (cursor: %s)",
                self._definition.event_key, len(events),
                cursor.last_timestamp.isoformat(),
            )
        return emit(events)

    async def _check_block(self, cursor: Cursor) -> tuple[list[TriggerEvent], bool]:
        request = build_request(self._definition)
        try:
            info = await self._chain.get_info()
        except Exception as exc:
            self._record_failure(exc)
            return [], False

        block_num = info.block_num(request.source)
        last_block = cursor.last_block_num
        if last_block is None:
            last_block = block_num - 1

        if block_num <= last_block:
            log.debug("No new %s block (still %d)", request.source.value, block_num)
            return [], True

        cursor.last_block_num = block_num
        return [normalize_block(info, self._definition)], True

    async def _query_actions(
        self, after: datetime, before: datetime
    ) -> tuple[list[TriggerEvent], bool]:
        try:
            query = build_query(
                self._definition, self._params, after, before, limit=self._limit,
            )
        except MissingRequiredParameter as exc:
            self._stats.skipped += 1
            log.warning("Skipping tick: %s", exc)
            return [], True

        try:
            actions = await self._history.get_actions(query)
        except Exception as exc:
            self._record_failure(exc)
            return [], False

        if len(actions) >= self._limit:
            log.warning(
                "%s: window returned %d actions (limit %d), later actions in it are dropped",
                self._definition.event_key, len(actions), self._limit,
            )

        try:
            kept = self._filter.apply(actions)
            events = normalize_actions(
                kept, self._definition.event_key, self._definition.category.value,
            )
        except Exception as exc:
            log.debug("Result processing failed", exc_info=True)
            self._record_failure(MalformedActionPayload(str(exc)))
            return [], True
        return list(events), True

    def _record_failure(self, exc: Exception) -> None:
        self._stats.failures += 1
        self._stats.last_error = str(exc)
        if isinstance(exc, (UpstreamQueryFailure, MalformedActionPayload)):
            log.error("%s poll failed: %s", self._definition.event_key, exc)
        else:
            log.error(
                "%s poll failed: %s", self._definition.event_key, exc, exc_info=True,
            )
