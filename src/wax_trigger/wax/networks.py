"""WAX network endpoints and chain IDs."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class NetworkConfig:
    name: str
    chain_id: str
    chain_api: str
    hyperion: str


NETWORKS = {
    "mainnet": NetworkConfig(
        name="WAX Mainnet",
        chain_id="1064487b3cd1a897ce03ae5b6a865651747e2e152090f99c1d19d44e01aea5a4",
        chain_api="https://wax.greymass.com",
        hyperion="https://wax.eosusa.io",
    ),
    "testnet": NetworkConfig(
        name="WAX Testnet",
        chain_id="f16b1833c747c43682f4386fca9cbb327929334a762755ebec17f6f23c9b8a12",
        chain_api="https://testnet.waxsweden.org",
        hyperion="https://testnet.wax.pink.gg",
    ),
}

# Alternates for operators whose default endpoint is down
MAINNET_HYPERION = [
    "https://wax.eosusa.io",
    "https://api.waxsweden.org",
    "https://wax.cryptolions.io",
    "https://wax.eosphere.io",
]

TESTNET_HYPERION = [
    "https://testnet.wax.pink.gg",
    "https://testnet.waxsweden.org",
]


def get_network(
    network: str,
    chain_api: str = "",
    hyperion: str = "",
    chain_id: str = "",
) -> NetworkConfig:
    """Resolve a network name, applying any explicit endpoint overrides.

    ``custom`` (or any unknown name) starts from mainnet defaults.
    """
    base = NETWORKS.get(network, NETWORKS["mainnet"])
    if network not in NETWORKS:
        base = replace(base, name="Custom Network")
    return replace(
        base,
        chain_api=chain_api or base.chain_api,
        hyperion=hyperion or base.hyperion,
        chain_id=chain_id or base.chain_id,
    )
