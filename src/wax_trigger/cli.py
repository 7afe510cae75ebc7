"""CLI entry point for the wax_trigger daemon."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from wax_trigger.config import load_config
from wax_trigger.daemon import run_daemon, run_once
from wax_trigger.errors import TriggerError, UnknownEvent
from wax_trigger.models.query import EventCategory
from wax_trigger.storage.sqlite import SQLiteCursorStore
from wax_trigger.trigger.taxonomy import get_definition, list_events
from wax_trigger.wax.chain import ChainApiClient
from wax_trigger.wax.networks import get_network


def _require_event(cfg):
    """Exit with error if the configured category/event is not known."""
    try:
        return get_definition(cfg.trigger.category, cfg.trigger.event)
    except UnknownEvent as exc:
        click.echo(f"Error: {exc}", err=True)
        click.echo("Run 'wax-trigger events' to list supported events.", err=True)
        sys.exit(1)


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """wax_trigger - poll WAX action history and emit matching events."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


# ── Daemon ─────────────────────────────────────────────


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Start polling on the configured interval."""
    cfg = load_config(ctx.obj["config_path"])
    definition = _require_event(cfg)

    click.echo(
        f"Starting wax_trigger ({definition.category.value}/{definition.event_key})",
        err=True,
    )
    asyncio.run(run_daemon(cfg))


@cli.command()
@click.pass_context
def poll(ctx: click.Context) -> None:
    """Run a single tick and print new events as JSON lines."""
    cfg = load_config(ctx.obj["config_path"])
    _require_event(cfg)

    def _echo(events):
        for event in events:
            click.echo(json.dumps(event.to_dict(), default=str))

    events = asyncio.run(run_once(cfg, sink=_echo))
    if not events:
        click.echo("No new events", err=True)


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show resolved trigger configuration."""
    cfg = load_config(ctx.obj["config_path"])
    net = get_network(cfg.network, cfg.chain_api, cfg.hyperion, cfg.chain_id)
    t = cfg.trigger
    click.echo(f"Trigger:    {cfg.name}")
    click.echo(f"Event:      {t.category}/{t.event}")
    click.echo(f"Network:    {net.name}")
    click.echo(f"Chain API:  {net.chain_api}")
    click.echo(f"Hyperion:   {net.hyperion}")
    click.echo(f"Chain ID:   {net.chain_id}")
    click.echo(f"Interval:   {cfg.poll_interval}s")
    click.echo(f"Account:    {t.account_name or '(not set)'}")
    click.echo(f"Collection: {t.collection_name or '(not set)'}")
    if t.min_amount:
        click.echo(f"Min amount: {t.min_amount} {t.token_symbol}")
    click.echo(f"DB path:    {cfg.db_path}")


@cli.command()
@click.option(
    "--category",
    type=click.Choice([c.value for c in EventCategory]),
    default=None,
    help="Only list one category",
)
def events(category: str | None) -> None:
    """List supported (category, event) pairs."""
    for d in list_events(category):
        params = ", ".join(d.params) or "-"
        click.echo(f"{d.category.value:<11} {d.event_key:<22} {d.description}  [{params}]")


@cli.command("chain-info")
@click.pass_context
def chain_info(ctx: click.Context) -> None:
    """Query the chain API once and show head/irreversible blocks."""
    cfg = load_config(ctx.obj["config_path"])
    net = get_network(cfg.network, cfg.chain_api, cfg.hyperion, cfg.chain_id)

    async def _info():
        client = ChainApiClient(net.chain_api, cfg.request_timeout)
        try:
            return await client.get_info()
        finally:
            await client.close()

    try:
        info = asyncio.run(_info())
    except TriggerError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Chain ID:     {info.chain_id}")
    click.echo(f"Head block:   {info.head_block_num} ({info.head_block_time})")
    click.echo(f"Producer:     {info.head_block_producer}")
    click.echo(f"Irreversible: {info.last_irreversible_block_num}")
    if net.chain_id and info.chain_id and info.chain_id != net.chain_id:
        click.echo(f"Warning: expected chain ID {net.chain_id}", err=True)


# ── Cursor ─────────────────────────────────────────────


@cli.group()
def cursor() -> None:
    """Inspect or reset persisted cursors."""


@cursor.command("show")
@click.pass_context
def cursor_show(ctx: click.Context) -> None:
    """Show every saved cursor."""
    cfg = load_config(ctx.obj["config_path"])

    async def _show():
        store = SQLiteCursorStore(cfg.db_path, cfg.name)
        await store.initialize()
        try:
            return await store.list_scopes()
        finally:
            await store.close()

    rows = asyncio.run(_show())
    if not rows:
        click.echo("No cursors saved")
        return
    for scope, c, updated_at in rows:
        block = c.last_block_num if c.last_block_num is not None else "-"
        click.echo(f"{scope:<20} {c.last_timestamp.isoformat()}  block={block}  updated={updated_at}")


@cursor.command("reset")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def cursor_reset(ctx: click.Context, yes: bool) -> None:
    """Delete this trigger's cursor; the next tick starts from now - 60s."""
    cfg = load_config(ctx.obj["config_path"])
    if not yes:
        click.confirm(f"Reset cursor for '{cfg.name}'?", abort=True)

    async def _reset():
        store = SQLiteCursorStore(cfg.db_path, cfg.name)
        await store.initialize()
        try:
            await store.clear()
        finally:
            await store.close()

    asyncio.run(_reset())
    click.echo(f"Cursor for '{cfg.name}' cleared")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
