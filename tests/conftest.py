"""Shared fixtures for wax_trigger tests."""

from __future__ import annotations

import pytest

from wax_trigger.models.config import DaemonConfig, TriggerSettings
from wax_trigger.models.query import FilterParams
from wax_trigger.storage.memory import MemoryCursorStore
from wax_trigger.storage.sqlite import SQLiteCursorStore
from wax_trigger.trigger.poller import PollScheduler
from wax_trigger.trigger.taxonomy import get_definition

from tests.mocks import FakeClock, MockChainClient, MockHistoryClient


def make_test_config(**overrides) -> DaemonConfig:
    """Build a DaemonConfig suitable for testing."""
    trigger = overrides.pop("trigger", None) or TriggerSettings(
        category="nft", event="assetReceived", account_name="alice",
    )
    defaults = dict(
        name="test",
        poll_interval=0,
        network="testnet",
        request_timeout=1.0,
        limit=100,
        db_path=":memory:",
        trigger=trigger,
    )
    defaults.update(overrides)
    return DaemonConfig(**defaults)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    """Empty in-memory cursor store."""
    return MemoryCursorStore()


@pytest.fixture
async def sqlite_store():
    """Initialized in-memory SQLiteCursorStore."""
    s = SQLiteCursorStore(":memory:", scope="test")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def mock_history():
    return MockHistoryClient()


@pytest.fixture
def mock_chain():
    return MockChainClient()


@pytest.fixture
def make_scheduler(store, mock_history, mock_chain, clock):
    """Factory for a PollScheduler wired to the mocks."""

    def _make(category: str, event: str, **params) -> PollScheduler:
        advance_on_failure = params.pop("advance_on_failure", True)
        limit = params.pop("limit", 100)
        result_filter = params.pop("result_filter", None)
        return PollScheduler(
            get_definition(category, event),
            FilterParams(**params),
            store,
            mock_history,
            mock_chain,
            limit=limit,
            advance_on_failure=advance_on_failure,
            result_filter=result_filter,
            clock=clock,
        )

    return _make
