"""Configuration models for the trigger daemon."""

from __future__ import annotations

from dataclasses import dataclass, field

from wax_trigger.models.query import FilterParams


@dataclass
class TriggerSettings:
    """What the trigger watches and how results are filtered."""

    category: str = "account"
    event: str = "waxpReceived"
    account_name: str = ""
    collection_name: str = ""
    token_contract: str = "eosio.token"
    token_symbol: str = "WAX"
    game_contract: str = ""
    staking_contract: str = ""
    action_contract: str = ""
    action_name: str = ""
    min_amount: float = 0
    advance_on_failure: bool = True  # move the cursor past a failed window

    def to_filter_params(self) -> FilterParams:
        return FilterParams(
            account_name=self.account_name,
            collection_name=self.collection_name,
            token_contract=self.token_contract,
            token_symbol=self.token_symbol,
            game_contract=self.game_contract,
            staking_contract=self.staking_contract,
            action_contract=self.action_contract,
            action_name=self.action_name,
            min_amount=self.min_amount,
        )


@dataclass
class DaemonConfig:
    """Complete daemon configuration."""

    # Daemon
    name: str = "default"  # cursor scope
    poll_interval: int = 60  # seconds
    log_level: str = "info"

    # Network
    network: str = "mainnet"
    chain_api: str = ""  # empty = network default
    hyperion: str = ""
    chain_id: str = ""
    request_timeout: float = 10.0  # seconds
    limit: int = 100  # max actions per tick

    # Storage
    db_path: str = "~/.wax_trigger/state.db"

    # Trigger
    trigger: TriggerSettings = field(default_factory=TriggerSettings)
