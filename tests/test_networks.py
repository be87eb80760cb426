"""
Tests for network configuration loading
"""

import pytest

from core_escrow_deploy.networks import (
    connect,
    get_explorer_url,
    get_rpc_url,
    load_network_config,
    load_networks,
)


@pytest.mark.unit
class TestNetworkConfig:
    def test_core_testnet2(self):
        config = load_network_config("core_testnet2")
        assert config["chain_id"] == 1114
        assert config["is_testnet"] is True
        assert config["explorer"] == "https://scan.test2.btcs.network"

    def test_all_networks_have_required_fields(self):
        for name, config in load_networks().items():
            for field in ("name", "rpc_url", "chain_id", "native_currency"):
                assert field in config, f"{name} missing {field}"

    def test_unknown_network_lists_available(self):
        with pytest.raises(ValueError, match="core_testnet2"):
            load_network_config("ropsten")

    def test_rpc_url_default(self):
        assert get_rpc_url(load_network_config("core_testnet2")) == "https://rpc.test2.btcs.network"

    def test_rpc_url_env_override(self, monkeypatch):
        monkeypatch.setenv("CORE_TESTNET2_RPC_URL", "https://rpc.example.org")
        assert get_rpc_url(load_network_config("core_testnet2")) == "https://rpc.example.org"

    def test_explorer_url(self):
        config = load_network_config("core_testnet2")
        assert get_explorer_url(config, "0xabc") == "https://scan.test2.btcs.network/address/0xabc"

    def test_no_explorer(self):
        assert get_explorer_url(load_network_config("local"), "0xabc") is None

    def test_unreachable_node_raises(self, monkeypatch):
        monkeypatch.setenv("CORE_TESTNET2_RPC_URL", "http://127.0.0.1:1")
        with pytest.raises(ConnectionError):
            connect("core_testnet2")
