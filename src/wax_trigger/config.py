"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from wax_trigger.models.config import DaemonConfig, TriggerSettings

_TRIGGER_STR_FIELDS = (
    "category",
    "event",
    "account_name",
    "collection_name",
    "token_contract",
    "token_symbol",
    "game_contract",
    "staking_contract",
    "action_contract",
    "action_name",
)


def _bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "WAX_TRIGGER_",
) -> DaemonConfig:
    """Load trigger configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (WAX_TRIGGER_ACCOUNT, etc.)
        2. TOML config file
        3. Defaults from DaemonConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = DaemonConfig()

    # ── Daemon section ─────────────────────────────────────
    daemon = raw.get("daemon", {})
    if v := daemon.get("name"):
        cfg.name = str(v)
    if v := daemon.get("poll_interval"):
        cfg.poll_interval = int(v)
    if v := daemon.get("log_level"):
        cfg.log_level = str(v)

    # ── Network section ────────────────────────────────────
    network = raw.get("network", {})
    if v := network.get("network"):
        cfg.network = str(v)
    if v := network.get("chain_api"):
        cfg.chain_api = str(v)
    if v := network.get("hyperion"):
        cfg.hyperion = str(v)
    if v := network.get("chain_id"):
        cfg.chain_id = str(v)
    if v := network.get("request_timeout"):
        cfg.request_timeout = float(v)
    if v := network.get("limit"):
        cfg.limit = int(v)

    # ── Trigger section ────────────────────────────────────
    trigger = raw.get("trigger", {})
    settings = TriggerSettings()
    for name in _TRIGGER_STR_FIELDS:
        if name in trigger and trigger[name] is not None:
            setattr(settings, name, str(trigger[name]))
    if "min_amount" in trigger:
        settings.min_amount = float(trigger["min_amount"] or 0)
    if "advance_on_failure" in trigger:
        settings.advance_on_failure = _bool(trigger["advance_on_failure"])
    cfg.trigger = settings

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        cfg.db_path = str(v)

    # ── Environment variable overrides (highest priority) ──
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = net
    if url := os.environ.get(f"{env_prefix}CHAIN_API"):
        cfg.chain_api = url
    if url := os.environ.get(f"{env_prefix}HYPERION"):
        cfg.hyperion = url
    if cat := os.environ.get(f"{env_prefix}CATEGORY"):
        cfg.trigger.category = cat
    if event := os.environ.get(f"{env_prefix}EVENT"):
        cfg.trigger.event = event
    if account := os.environ.get(f"{env_prefix}ACCOUNT"):
        cfg.trigger.account_name = account
    if db := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg
