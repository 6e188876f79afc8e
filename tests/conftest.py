"""
Shared fixtures
"""

import pytest
from web3 import Web3

MASTER = '0x1111111111111111111111111111111111111111'
BRACKET_A = '0x2222222222222222222222222222222222222222'
BRACKET_B = '0x3333333333333333333333333333333333333333'
EXCHANGE = Web3.to_checksum_address('0x6f400810b62df8e13fded51be75ff5393eaa841f')
MULTI_SEND = Web3.to_checksum_address('0x8d29be29923b68abfdd21e541b9374737b49cdad')
WETH = '0x4444444444444444444444444444444444444444'
USDC = '0x5555555555555555555555555555555555555555'

# Well known throwaway key, never holds funds
TEST_PRIVATE_KEY = '0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318'


@pytest.fixture
def network_config():
    """Test network configuration"""
    return {
        'network': 'mainnet',
        'chain_id': 1,
        'batch_exchange': EXCHANGE,
        'multi_send': MULTI_SEND,
        'safe_master_copy': Web3.to_checksum_address('0x34cfac646f301356faa8b21e94227e3583fe3f5f'),
        'fleet_factory': None,
        'safe_service_url': 'https://safe-transaction.test',
        'safe_interface_url': 'https://safe.test/{safe}',
        'rpc_url': 'http://127.0.0.1:8545'
    }


@pytest.fixture
def base_token():
    """WETH-like base token"""
    return {'id': 1, 'address': WETH, 'symbol': 'WETH', 'decimals': 18}


@pytest.fixture
def quote_token():
    """USDC-like quote token with 6 decimals"""
    return {'id': 7, 'address': USDC, 'symbol': 'USDC', 'decimals': 6}
