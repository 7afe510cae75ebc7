"""PollScheduler tick behavior: cursor handling, branching, failures."""

from __future__ import annotations

from datetime import timedelta

import pytest

from wax_trigger.errors import UnknownEvent, UpstreamQueryFailure
from wax_trigger.models.config import TriggerSettings
from wax_trigger.models.events import BlockEvent, NormalizedEvent
from wax_trigger.models.records import Cursor
from wax_trigger.trigger.poller import FIRST_RUN_LOOKBACK, PollScheduler, TickState

from tests.factories import make_action, make_transfer
from tests.mocks import T0


# ── Asset received scenario ───────────────────────────────────────


async def test_asset_received_scenario(make_scheduler, store, mock_history, clock):
    """Two transfers to alice → two events, ascending, cursor = tick's now."""
    await store.save(Cursor(last_timestamp=T0))
    clock.now = T0 + timedelta(seconds=30)
    mock_history.enqueue(
        make_action(T0 + timedelta(seconds=1), data={"from": "bob", "to": "alice"},
                    trx_id="tx1", global_sequence=1),
        make_action(T0 + timedelta(seconds=2), data={"from": "carol", "to": "alice"},
                    trx_id="tx2", global_sequence=2),
    )

    scheduler = make_scheduler("nft", "assetReceived", account_name="alice")
    events = await scheduler.poll()

    assert events is not None
    assert len(events) == 2
    assert all(isinstance(e, NormalizedEvent) for e in events)
    assert [e.event for e in events] == ["assetReceived", "assetReceived"]
    assert {e.event_category for e in events} == {"nft"}
    assert [e.trx_id for e in events] == ["tx1", "tx2"]
    assert events[0].timestamp < events[1].timestamp

    query = mock_history.queries[0]
    assert query.after == T0
    assert query.before == clock.now
    assert query.extra_filters["act.account"] == "atomicassets"
    assert query.extra_filters["act.name"] == "logtransfer,transfer"
    assert query.extra_filters["data.to"] == "alice"

    cursor = await store.load()
    assert cursor.last_timestamp == T0 + timedelta(seconds=30)


async def test_first_run_looks_back_sixty_seconds(make_scheduler, store, mock_history, clock):
    scheduler = make_scheduler("nft", "assetReceived", account_name="alice")
    assert await scheduler.poll() is None

    assert mock_history.queries[0].after == clock.now - FIRST_RUN_LOOKBACK
    assert (await store.load()).last_timestamp == clock.now


# ── Cursor monotonicity ───────────────────────────────────────────


async def test_cursor_never_moves_backwards(make_scheduler, store, mock_history, clock):
    """Success, failure and a clock that jumps backwards all keep the cursor monotonic."""
    scheduler = make_scheduler("account", "waxpReceived", account_name="alice")
    seen = []

    await scheduler.poll()
    seen.append((await store.load()).last_timestamp)

    clock.advance(10)
    mock_history.fail_next()
    await scheduler.poll()
    seen.append((await store.load()).last_timestamp)

    clock.advance(-300)
    await scheduler.poll()
    seen.append((await store.load()).last_timestamp)

    clock.advance(600)
    mock_history.enqueue(make_transfer(clock.now))
    await scheduler.poll()
    seen.append((await store.load()).last_timestamp)

    assert seen == sorted(seen)


async def test_empty_windows_return_none(make_scheduler, mock_history, clock):
    scheduler = make_scheduler("nft", "assetSent", account_name="alice")

    assert await scheduler.poll() is None
    clock.advance(5)
    assert await scheduler.poll() is None
    assert len(mock_history.queries) == 2
    assert mock_history.queries[1].after == mock_history.queries[0].before


# ── Failure handling ──────────────────────────────────────────────


async def test_upstream_failure_is_absorbed(make_scheduler, store, mock_history, clock):
    await store.save(Cursor(last_timestamp=T0 - timedelta(seconds=30)))
    mock_history.fail_next()

    scheduler = make_scheduler("nft", "assetReceived", account_name="alice")
    assert await scheduler.poll() is None

    assert (await store.load()).last_timestamp == clock.now
    assert scheduler.stats.failures == 1
    assert "HTTP 503" in scheduler.stats.last_error
    assert scheduler.state is TickState.IDLE


async def test_unexpected_client_error_is_absorbed(make_scheduler, mock_history):
    mock_history.fail_next(RuntimeError("connection reset"))

    scheduler = make_scheduler("nft", "assetReceived", account_name="alice")
    assert await scheduler.poll() is None
    assert scheduler.stats.failures == 1


async def test_failed_window_retried_when_not_advancing(make_scheduler, store, mock_history, clock):
    start = T0 - timedelta(seconds=30)
    await store.save(Cursor(last_timestamp=start))
    mock_history.fail_next()

    scheduler = make_scheduler(
        "nft", "assetReceived", account_name="alice", advance_on_failure=False,
    )
    assert await scheduler.poll() is None
    assert (await store.load()).last_timestamp == start

    clock.advance(10)
    mock_history.enqueue(make_action(T0 + timedelta(seconds=1)))
    events = await scheduler.poll()
    assert len(events) == 1
    assert mock_history.queries[1].after == start
    assert (await store.load()).last_timestamp == clock.now


async def test_missing_account_skips_tick(make_scheduler, store, mock_history, clock):
    """No account configured → no unscoped query, zero events, cursor advances."""
    scheduler = make_scheduler("nft", "assetReceived", account_name="")

    assert await scheduler.poll() is None
    assert mock_history.queries == []
    assert scheduler.stats.skipped == 1
    assert scheduler.stats.failures == 0
    assert (await store.load()).last_timestamp == clock.now


# ── Amount filter in the pipeline ─────────────────────────────────


async def test_min_amount_filters_results(make_scheduler, mock_history, clock):
    mock_history.enqueue(
        make_transfer(T0, "3.00000000 WAX", trx_id="small"),
        make_transfer(T0, "10.00000000 WAX", trx_id="big"),
        make_transfer(T0, None, trx_id="noqty"),
    )
    scheduler = make_scheduler(
        "account", "waxpReceived", account_name="alice", min_amount=5, token_symbol="WAX",
    )
    events = await scheduler.poll()
    assert [e.trx_id for e in events] == ["big", "noqty"]



async def test_non_mapping_action_does_not_break_tick(make_scheduler, store, mock_history, clock):
    mock_history.enqueue(None, make_transfer(T0, "10.0 WAX", trx_id="big"))
    scheduler = make_scheduler(
        "account", "waxpReceived", account_name="alice", min_amount=5, token_symbol="WAX",
    )

    events = await scheduler.poll()
    assert [e.trx_id for e in events] == [None, "big"]
    assert (await store.load()).last_timestamp == clock.now
    assert scheduler.stats.failures == 0


class _ExplodingFilter:
    def accepts(self, action):
        raise KeyError("quantity")

    def apply(self, actions):
        return [a for a in actions if self.accepts(a)]


async def test_result_processing_error_is_absorbed(make_scheduler, store, mock_history, clock):
    start = T0 - timedelta(seconds=30)
    await store.save(Cursor(last_timestamp=start))
    mock_history.enqueue(make_transfer(T0, "10.0 WAX"))
    scheduler = make_scheduler(
        "account", "waxpReceived", account_name="alice",
        advance_on_failure=False, result_filter=_ExplodingFilter(),
    )

    assert await scheduler.poll() is None
    assert scheduler.stats.failures == 1
    assert "quantity" in scheduler.stats.last_error
    assert scheduler.state is TickState.IDLE
    assert (await store.load()).last_timestamp == clock.now

async def test_limit_is_sent_with_query(make_scheduler, mock_history):
    scheduler = make_scheduler("market", "saleCompleted", limit=25)
    await scheduler.poll()
    assert mock_history.queries[0].limit == 25
    assert mock_history.queries[0].sort == "asc"


# ── Block events ──────────────────────────────────────────────────


async def test_new_block_dedupe(make_scheduler, store, mock_chain, mock_history):
    mock_chain.set_blocks(100)
    scheduler = make_scheduler("block", "newBlock")

    events = await scheduler.poll()
    assert len(events) == 1
    block = events[0]
    assert isinstance(block, BlockEvent)
    assert block.block_num == 100
    assert block.block_id == mock_chain.info.head_block_id
    assert block.chain_id == mock_chain.info.chain_id
    assert (await store.load()).last_block_num == 100

    assert await scheduler.poll() is None
    assert (await store.load()).last_block_num == 100
    assert mock_history.queries == []


async def test_irreversible_block_tracks_lib(make_scheduler, store, mock_chain, clock):
    await store.save(Cursor(last_timestamp=T0, last_block_num=80))
    mock_chain.set_blocks(120, 85)
    scheduler = make_scheduler("block", "irreversibleBlock")

    events = await scheduler.poll()
    assert events[0].block_num == 85
    assert events[0].block_id == mock_chain.info.last_irreversible_block_id
    cursor = await store.load()
    assert cursor.last_block_num == 85
    assert cursor.last_timestamp == clock.now


async def test_block_failure_keeps_block_cursor(make_scheduler, store, mock_chain, clock):
    await store.save(Cursor(last_timestamp=T0 - timedelta(seconds=5), last_block_num=50))
    mock_chain.error = UpstreamQueryFailure("chain_api", "HTTP 502")
    scheduler = make_scheduler("block", "newBlock")

    assert await scheduler.poll() is None
    cursor = await store.load()
    assert cursor.last_block_num == 50
    assert cursor.last_timestamp == clock.now
    assert scheduler.stats.failures == 1


async def test_action_executed_uses_history(make_scheduler, mock_history, mock_chain):
    scheduler = make_scheduler(
        "block", "actionExecuted", action_contract="farmersworld", action_name="",
    )
    await scheduler.poll()

    assert mock_chain.calls == 0
    filters = mock_history.queries[0].extra_filters
    assert filters == {"act.account": "farmersworld"}


# ── Setup and re-entrancy ─────────────────────────────────────────


def test_from_settings_rejects_unknown_event(store, mock_history, mock_chain):
    settings = TriggerSettings(category="nft", event="assetTeleported")
    with pytest.raises(UnknownEvent):
        PollScheduler.from_settings(settings, store, mock_history, mock_chain)


async def test_from_settings_builds_working_scheduler(store, mock_history, mock_chain, clock):
    settings = TriggerSettings(
        category="market", event="saleCreated", collection_name="alien.worlds",
    )
    scheduler = PollScheduler.from_settings(
        settings, store, mock_history, mock_chain, limit=50, clock=clock,
    )
    await scheduler.poll()
    assert mock_history.queries[0].extra_filters["data.collection_name"] == "alien.worlds"
    assert mock_history.queries[0].limit == 50


async def test_overlapping_poll_is_rejected(make_scheduler, mock_history):
    scheduler = make_scheduler("nft", "assetReceived", account_name="alice")
    inner: list[Exception] = []

    async def _reenter(query):
        mock_history.queries.append(query)
        try:
            await scheduler.poll()
        except RuntimeError as exc:
            inner.append(exc)
        return []

    mock_history.get_actions = _reenter
    assert await scheduler.poll() is None
    assert len(inner) == 1
    assert scheduler.state is TickState.IDLE
