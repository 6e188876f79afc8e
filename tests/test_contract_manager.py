"""
Unit Tests for contract reads
"""

import pytest
from unittest.mock import Mock
from web3 import Web3

from blockchain.contract_manager import ZERO_ADDRESS, ContractManager
from utils.exceptions import ConfigurationError, SubmissionError, ValidationError

from conftest import BRACKET_A, BRACKET_B, EXCHANGE, MASTER, WETH

FLEET_FACTORY = '0x6666666666666666666666666666666666666666'
PROPOSER = '0x7777777777777777777777777777777777777777'
DEPLOY_TX_HASH = b'\xab' * 32


@pytest.fixture
def contract():
    """Single mock contract returned for every address"""
    return Mock()


@pytest.fixture
def w3(contract):
    """Mock Web3 instance"""
    mock = Mock(spec=Web3)
    mock.eth = Mock()
    mock.eth.contract.return_value = contract
    return mock


@pytest.fixture
def manager(w3, network_config):
    return ContractManager(w3, network_config)


class TestTokenInfo:
    """Test token lookups through the exchange"""

    @pytest.mark.asyncio
    async def test_fetch_token_info(self, manager, contract):
        contract.functions.tokenIdToAddressMap.return_value.call.return_value = WETH
        contract.functions.decimals.return_value.call.return_value = 18
        contract.functions.symbol.return_value.call.return_value = 'WETH'

        tokens = await manager.fetch_token_info([1])

        assert tokens[1]['address'] == WETH
        assert tokens[1]['decimals'] == 18
        assert tokens[1]['symbol'] == 'WETH'
        assert tokens[1]['id'] == 1

    @pytest.mark.asyncio
    async def test_symbol_falls_back_to_address(self, manager, contract):
        contract.functions.tokenIdToAddressMap.return_value.call.return_value = WETH
        contract.functions.decimals.return_value.call.return_value = 18
        contract.functions.symbol.return_value.call.side_effect = OverflowError("bytes32 symbol")

        tokens = await manager.fetch_token_info([1])

        assert tokens[1]['symbol'] == WETH

    @pytest.mark.asyncio
    async def test_unregistered_token(self, manager, contract):
        contract.functions.tokenIdToAddressMap.return_value.call.return_value = ZERO_ADDRESS

        with pytest.raises(ValidationError):
            await manager.fetch_token_info([99])


class TestSafeChecks:
    """Test bracket ownership and order checks"""

    @pytest.mark.asyncio
    async def test_sole_owner(self, manager, contract):
        contract.functions.getOwners.return_value.call.return_value = [MASTER]

        assert await manager.is_only_safe_owner(MASTER, BRACKET_A)

    @pytest.mark.asyncio
    async def test_additional_owner(self, manager, contract):
        contract.functions.getOwners.return_value.call.return_value = [MASTER, BRACKET_A]

        assert not await manager.is_only_safe_owner(MASTER, BRACKET_A)

    @pytest.mark.asyncio
    async def test_existing_orders(self, manager, contract):
        contract.functions.getEncodedUserOrders.return_value.call.return_value = b'\x00' * 112

        assert await manager.has_existing_orders(BRACKET_A)

    @pytest.mark.asyncio
    async def test_no_orders(self, manager, contract):
        contract.functions.getEncodedUserOrders.return_value.call.return_value = b''

        assert not await manager.has_existing_orders(BRACKET_A)

    @pytest.mark.asyncio
    async def test_balance_check(self, manager, contract):
        contract.functions.balanceOf.return_value.call.return_value = 100
        token = {'instance': contract, 'symbol': 'WETH'}

        assert await manager.check_sufficiency_of_balance(token, MASTER, 100)
        assert not await manager.check_sufficiency_of_balance(token, MASTER, 101)


class TestDeployment:
    """Test fleet deployment preconditions"""

    @pytest.mark.asyncio
    async def test_requires_fleet_factory(self, manager):
        with pytest.raises(ConfigurationError):
            await manager.deploy_fleet_of_safes(MASTER, 2, Mock())


@pytest.fixture
def deployer(w3, contract, network_config):
    """Contract manager with a fleet factory and a successful deployment"""
    network_config['fleet_factory'] = FLEET_FACTORY

    contract.functions.deployFleet.return_value.build_transaction.return_value = {'data': '0xdeploy'}
    contract.events.FleetDeployed.return_value.process_receipt.return_value = [
        {'args': {'fleet': [BRACKET_A, BRACKET_B]}}
    ]
    w3.eth.get_transaction_count.return_value = 9
    w3.eth.send_raw_transaction.return_value = DEPLOY_TX_HASH
    w3.eth.wait_for_transaction_receipt.return_value = {'status': 1}

    return ContractManager(w3, network_config)


@pytest.fixture
def wallet():
    """Mock proposer wallet"""
    mock = Mock()
    mock.address = PROPOSER
    mock.sign_transaction.return_value = Mock(raw_transaction=b'signed')
    return mock


class TestFleetDeployment:
    """Test deploying brackets through the fleet factory"""

    @pytest.mark.asyncio
    async def test_deploys_and_returns_fleet(self, deployer, w3, contract, wallet, network_config):
        fleet = await deployer.deploy_fleet_of_safes(MASTER, 2, wallet)

        assert fleet == [BRACKET_A, BRACKET_B]
        contract.functions.deployFleet.assert_called_once_with(MASTER, 2, network_config['safe_master_copy'])
        contract.functions.deployFleet.return_value.build_transaction.assert_called_once_with({
            'from': PROPOSER,
            'nonce': 9,
            'chainId': 1
        })
        wallet.sign_transaction.assert_called_once_with({'data': '0xdeploy'})
        w3.eth.send_raw_transaction.assert_called_once_with(b'signed')
        w3.eth.wait_for_transaction_receipt.assert_called_once_with(DEPLOY_TX_HASH, timeout=300)

    @pytest.mark.asyncio
    async def test_reverted_deployment(self, deployer, w3, contract, wallet):
        w3.eth.wait_for_transaction_receipt.return_value = {'status': 0}

        with pytest.raises(SubmissionError, match="reverted"):
            await deployer.deploy_fleet_of_safes(MASTER, 2, wallet)

        contract.events.FleetDeployed.return_value.process_receipt.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_deployment_event(self, deployer, contract, wallet):
        contract.events.FleetDeployed.return_value.process_receipt.return_value = []

        with pytest.raises(SubmissionError, match="FleetDeployed"):
            await deployer.deploy_fleet_of_safes(MASTER, 2, wallet)


class TestSafeReads:
    """Test Safe nonce and transaction hash reads"""

    def test_transaction_hash_arguments(self, manager, contract):
        contract.functions.getTransactionHash.return_value.call.return_value = b'\x01' * 32
        transaction = {'to': EXCHANGE, 'value': 5, 'data': b'\xaa', 'operation': 1}

        safe_tx_hash = manager.get_safe_transaction_hash(MASTER, transaction, 7)

        assert safe_tx_hash == b'\x01' * 32
        contract.functions.getTransactionHash.assert_called_once_with(
            EXCHANGE, 5, b'\xaa', 1, 0, 0, 0, ZERO_ADDRESS, ZERO_ADDRESS, 7
        )

    def test_safe_nonce(self, manager, contract):
        contract.functions.nonce.return_value.call.return_value = 12

        assert manager.get_safe_nonce(MASTER) == 12
