"""WAX chain and history API integration."""

from wax_trigger.wax.chain import ChainApiClient, ChainInfo
from wax_trigger.wax.hyperion import HyperionClient
from wax_trigger.wax.networks import NETWORKS, NetworkConfig, get_network

__all__ = [
    "ChainApiClient", "ChainInfo",
    "HyperionClient",
    "NETWORKS", "NetworkConfig", "get_network",
]
