"""
Network configuration for Project deployments.

Reads config/networks.json and connects web3 to the selected network.
"""

import json
import os
from pathlib import Path

from dotenv import load_dotenv
from web3 import Web3

load_dotenv()

CONFIG_PATH = Path(__file__).parent.parent / "config" / "networks.json"

DEFAULT_NETWORK = "core_testnet2"


def load_networks(config_path: Path = CONFIG_PATH) -> dict:
    """Load all network entries"""
    with open(config_path) as f:
        return json.load(f)["networks"]


def load_network_config(network: str, config_path: Path = CONFIG_PATH) -> dict:
    """Load the configuration for a single network."""
    networks = load_networks(config_path)
    if network not in networks:
        raise ValueError(f"Unknown network: {network}. Available: {', '.join(networks.keys())}")
    return networks[network]


def get_rpc_url(net_config: dict) -> str:
    """RPC endpoint for a network, honouring its environment override"""
    override_env = net_config.get("rpc_url_env")
    if override_env and os.getenv(override_env):
        return os.getenv(override_env)
    return net_config["rpc_url"]


def get_explorer_url(net_config: dict, address: str):
    """Explorer page for an address, or None when the network has no explorer"""
    explorer = net_config.get("explorer")
    if not explorer:
        return None
    return f"{explorer.rstrip('/')}/address/{address}"


def connect(network: str) -> Web3:
    """Connect to a configured network."""
    net_config = load_network_config(network)
    rpc_url = get_rpc_url(net_config)

    w3 = Web3(Web3.HTTPProvider(rpc_url))
    if not w3.is_connected():
        raise ConnectionError(f"Cannot connect to {net_config['name']} at {rpc_url}")

    return w3
