"""
Unit Tests for network configuration loading
"""

import json

import pytest
from web3 import Web3

from provision.config import load_network_config
from utils.exceptions import ConfigurationError


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "network_config.json"
    path.write_text(json.dumps({
        "testnet": {
            "chain_id": 5,
            "rpc_url_env": "TEST_RPC_URL",
            "batch_exchange": "0xc576ea7bd102f7e476368a5e98fa455d1ea34de2",
            "multi_send": "0x8D29bE29923b68abfDD21e541b9374737B49cdAD",
            "safe_master_copy": "0x34CfAC646f301356fAa8B21e94227e3583Fe3F5F",
            "fleet_factory": None,
            "safe_service_url": "https://safe-transaction.test/",
            "safe_interface_url": "https://safe.test/{safe}"
        }
    }))
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ('FLEET_FACTORY_ADDRESS', 'BATCH_EXCHANGE_ADDRESS', 'SAFE_SERVICE_URL', 'TEST_RPC_URL'):
        monkeypatch.delenv(name, raising=False)


class TestLoadNetworkConfig:
    """Test config file and environment merging"""

    def test_loads_network(self, config_file, monkeypatch):
        monkeypatch.setenv('TEST_RPC_URL', 'http://node:8545')

        config = load_network_config('testnet', config_file)

        assert config['network'] == 'testnet'
        assert config['chain_id'] == 5
        assert config['batch_exchange'] == Web3.to_checksum_address('0xc576ea7bd102f7e476368a5e98fa455d1ea34de2')
        assert config['safe_service_url'] == 'https://safe-transaction.test'
        assert config['rpc_url'] == 'http://node:8545'
        assert config['fleet_factory'] is None

    def test_env_overrides(self, config_file, monkeypatch):
        monkeypatch.setenv('FLEET_FACTORY_ADDRESS', '0x' + 'ab' * 20)

        config = load_network_config('testnet', config_file)

        assert config['fleet_factory'] == Web3.to_checksum_address('0x' + 'ab' * 20)

    def test_unknown_network(self, config_file):
        with pytest.raises(ConfigurationError):
            load_network_config('moon', config_file)

    def test_invalid_address(self, config_file, monkeypatch):
        monkeypatch.setenv('FLEET_FACTORY_ADDRESS', '0x1234')

        with pytest.raises(ConfigurationError):
            load_network_config('testnet', config_file)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_network_config('testnet', tmp_path / "missing.json")

    def test_shipped_config(self):
        config = load_network_config('mainnet')

        assert config['batch_exchange'] == Web3.to_checksum_address('0x6f400810b62df8e13fded51be75ff5393eaa841f')
        assert config['multi_send'] == Web3.to_checksum_address('0x8d29be29923b68abfdd21e541b9374737b49cdad')
        assert config['fleet_factory'] is None
