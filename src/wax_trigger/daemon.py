"""Main daemon loop - the timer that drives one tick at a time."""

from __future__ import annotations

import asyncio
import json
import logging
import signal
import sys
from typing import Callable, Sequence

from wax_trigger.interfaces.clients import ChainInfoClient, HistoryClient
from wax_trigger.interfaces.store import CursorStore
from wax_trigger.models.config import DaemonConfig
from wax_trigger.models.events import TriggerEvent
from wax_trigger.storage.sqlite import SQLiteCursorStore
from wax_trigger.trigger.poller import PollScheduler
from wax_trigger.trigger.taxonomy import get_definition
from wax_trigger.wax.chain import ChainApiClient
from wax_trigger.wax.hyperion import HyperionClient
from wax_trigger.wax.networks import get_network

log = logging.getLogger(__name__)

EventSink = Callable[[Sequence[TriggerEvent]], None]


def json_lines_sink(events: Sequence[TriggerEvent]) -> None:
    """Write each event as one JSON line on stdout."""
    for event in events:
        sys.stdout.write(json.dumps(event.to_dict(), default=str) + "\n")
    sys.stdout.flush()


class TriggerDaemon:
    """Runs the poll scheduler on a fixed interval.

    Ticks never overlap: the next one starts ``poll_interval`` seconds
    after the previous one finished.
    """

    def __init__(
        self,
        cfg: DaemonConfig,
        store: CursorStore | None = None,
        history: HistoryClient | None = None,
        chain: ChainInfoClient | None = None,
        sink: EventSink = json_lines_sink,
    ) -> None:
        self._cfg = cfg
        self._running = False
        self._sink = sink
        self.network = get_network(cfg.network, cfg.chain_api, cfg.hyperion, cfg.chain_id)
        # Raises UnknownEvent before any client is opened
        get_definition(cfg.trigger.category, cfg.trigger.event)

        self.store = store or SQLiteCursorStore(cfg.db_path, cfg.name)
        self.history = history or HyperionClient(self.network.hyperion, cfg.request_timeout)
        self.chain = chain or ChainApiClient(self.network.chain_api, cfg.request_timeout)

        self.scheduler = PollScheduler.from_settings(
            cfg.trigger, self.store, self.history, self.chain, limit=cfg.limit,
        )

    @property
    def running(self) -> bool:
        return self._running

    async def open(self) -> None:
        if isinstance(self.store, SQLiteCursorStore):
            await self.store.initialize()

    async def close(self) -> None:
        for component in (self.history, self.chain, self.store):
            closer = getattr(component, "close", None)
            if closer is not None:
                await closer()

    async def tick(self) -> list[TriggerEvent] | None:
        """Run one tick and hand any events to the sink."""
        events = await self.scheduler.poll()
        if events:
            self._sink(events)
        return events

    async def start(self) -> None:
        """Initialize components and run the main loop."""
        definition = self.scheduler.definition
        log.info("Starting wax_trigger daemon")
        log.info("  Trigger:  %s (%s/%s)", self._cfg.name,
                 definition.category.value, definition.event_key)
        log.info("  Network:  %s", self.network.name)
        log.info("  Hyperion: %s", self.network.hyperion)
        log.info("  Chain:    %s", self.network.chain_api)
        log.info("  Interval: %ds", self._cfg.poll_interval)

        await self.open()
        self._running = True
        try:
            await self._main_loop()
        finally:
            await self.close()
            log.info("Daemon shut down cleanly")

    async def stop(self) -> None:
        """Signal the daemon to stop after the current tick."""
        log.info("Stop requested")
        self._running = False

    async def _main_loop(self) -> None:
        while self._running:
            try:
                await self.tick()
            except asyncio.CancelledError:
                log.info("Main loop cancelled")
                break
            except Exception as exc:
                # Upstream errors are absorbed by the scheduler; this is the store
                log.error("Main loop error: %s", exc, exc_info=True)

            if not self._running:
                break
            try:
                await asyncio.sleep(self._cfg.poll_interval)
            except asyncio.CancelledError:
                break


async def run_once(cfg: DaemonConfig, sink: EventSink = json_lines_sink) -> list[TriggerEvent] | None:
    """Open, run a single tick, close."""
    daemon = TriggerDaemon(cfg, sink=sink)
    await daemon.open()
    try:
        return await daemon.tick()
    finally:
        await daemon.close()


async def run_daemon(cfg: DaemonConfig) -> None:
    """Entry point for running the daemon."""
    daemon = TriggerDaemon(cfg)

    loop = asyncio.get_running_loop()

    def _signal_handler():
        asyncio.ensure_future(daemon.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _signal_handler)
        except NotImplementedError:
            # Windows doesn't support add_signal_handler
            pass

    await daemon.start()
