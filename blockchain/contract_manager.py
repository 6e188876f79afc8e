"""
Contract Manager
Handles all reads from and deployments of the provisioning contracts
"""

import asyncio
from typing import Dict, List
from web3 import Web3
from loguru import logger

from utils.exceptions import ConfigurationError, SubmissionError, ValidationError
from .abis import BATCH_EXCHANGE_ABI, ERC20_ABI, FLEET_FACTORY_ABI, GNOSIS_SAFE_ABI

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


class ContractManager:
    """
    Manages contract instances for the master Safe, the brackets,
    the BatchExchange and the traded tokens
    """

    def __init__(self, w3: Web3, network_config: Dict):
        """
        Initialize Contract Manager

        Args:
            w3: Web3 instance
            network_config: Network configuration from config/network_config.json
        """
        self.w3 = w3
        self.network_config = network_config

        self.exchange = self.w3.eth.contract(
            address=network_config['batch_exchange'],
            abi=BATCH_EXCHANGE_ABI
        )

        logger.info(f"Contract Manager initialized (BatchExchange at {self.exchange.address})")

    def safe(self, address: str):
        """Gnosis Safe instance at address"""
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=GNOSIS_SAFE_ABI)

    def token(self, address: str):
        """ERC20 instance at address"""
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=ERC20_ABI)

    async def fetch_token_info(self, token_ids: List[int]) -> Dict[int, Dict]:
        """
        Fetch address, symbol and decimals of exchange listed tokens

        Args:
            token_ids: BatchExchange token ids

        Returns:
            Mapping token id -> token info dict
        """
        infos = await asyncio.gather(*(self._fetch_single_token_info(token_id) for token_id in token_ids))
        return dict(zip(token_ids, infos))

    async def _fetch_single_token_info(self, token_id: int) -> Dict:
        address = self.exchange.functions.tokenIdToAddressMap(token_id).call()

        if int(address, 16) == 0:
            raise ValidationError(f"No token registered on the exchange with id {token_id}")

        token = self.token(address)

        try:
            decimals = token.functions.decimals().call()
        except Exception as e:
            raise ValidationError(f"Token {address} (id {token_id}) does not expose decimals: {e}") from e

        try:
            symbol = token.functions.symbol().call()
        except Exception as e:
            # Some tokens return bytes32 symbols or none at all
            logger.warning(f"Could not read symbol of {address}: {e}")
            symbol = address

        logger.debug(f"Token {token_id}: {symbol} at {address} with {decimals} decimals")

        return {
            'id': token_id,
            'address': Web3.to_checksum_address(address),
            'symbol': symbol,
            'decimals': decimals,
            'instance': token
        }

    async def check_sufficiency_of_balance(self, token_info: Dict, owner: str, amount: int) -> bool:
        """
        Check that owner holds at least amount of the token

        Args:
            token_info: Token info dict from fetch_token_info
            owner: Holder address
            amount: Required amount in token units

        Returns:
            True if the balance covers the amount
        """
        balance = token_info['instance'].functions.balanceOf(Web3.to_checksum_address(owner)).call()

        if balance < amount:
            logger.warning(
                f"{owner} holds {balance} units of {token_info['symbol']}, {amount} required"
            )
            return False

        return True

    async def is_only_safe_owner(self, master_address: str, bracket_address: str) -> bool:
        """Check that the bracket Safe has the master Safe as its only owner"""
        owners = self.safe(bracket_address).functions.getOwners().call()
        return [owner.lower() for owner in owners] == [master_address.lower()]

    async def has_existing_orders(self, bracket_address: str) -> bool:
        """Check whether the bracket already has orders on the exchange"""
        encoded_orders = self.exchange.functions.getEncodedUserOrders(
            Web3.to_checksum_address(bracket_address)
        ).call()
        return len(encoded_orders) > 0

    def get_current_batch_id(self) -> int:
        """Current BatchExchange batch (auction) id"""
        return self.exchange.functions.getCurrentBatchId().call()

    def get_safe_nonce(self, safe_address: str) -> int:
        """Next nonce of the Safe"""
        return self.safe(safe_address).functions.nonce().call()

    def get_safe_transaction_hash(self, safe_address: str, transaction: Dict, nonce: int) -> bytes:
        """
        Hash the Safe signs for a transaction

        Args:
            safe_address: Safe executing the transaction
            transaction: Safe transaction dict (to, value, data, operation)
            nonce: Safe nonce

        Returns:
            32 byte transaction hash
        """
        return self.safe(safe_address).functions.getTransactionHash(
            Web3.to_checksum_address(transaction['to']),
            transaction['value'],
            transaction['data'],
            transaction['operation'],
            0,
            0,
            0,
            ZERO_ADDRESS,
            ZERO_ADDRESS,
            nonce
        ).call()

    async def deploy_fleet_of_safes(self, master_address: str, fleet_size: int, wallet_manager) -> List[str]:
        """
        Deploy fleet_size Safes owned solely by the master Safe

        Args:
            master_address: Owner of every new Safe
            fleet_size: Number of Safes to deploy
            wallet_manager: Wallet paying for the deployment

        Returns:
            Addresses of the deployed Safes
        """
        factory_address = self.network_config.get('fleet_factory')
        if not factory_address:
            raise ConfigurationError(
                "No FleetFactory address configured (set FLEET_FACTORY_ADDRESS)"
            )

        fleet_factory = self.w3.eth.contract(address=factory_address, abi=FLEET_FACTORY_ABI)

        tx = fleet_factory.functions.deployFleet(
            Web3.to_checksum_address(master_address),
            fleet_size,
            self.network_config['safe_master_copy']
        ).build_transaction({
            'from': wallet_manager.address,
            'nonce': self.w3.eth.get_transaction_count(wallet_manager.address),
            'chainId': self.network_config['chain_id']
        })

        signed_tx = wallet_manager.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)

        logger.info(f"Fleet deployment sent: {tx_hash.hex()}")

        receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=300)

        if receipt['status'] != 1:
            logger.error(f"Fleet deployment reverted: {tx_hash.hex()}")
            raise SubmissionError(f"Fleet deployment transaction {tx_hash.hex()} reverted")

        events = fleet_factory.events.FleetDeployed().process_receipt(receipt)
        if not events:
            raise SubmissionError(f"No FleetDeployed event in transaction {tx_hash.hex()}")

        fleet = [Web3.to_checksum_address(address) for address in events[0]['args']['fleet']]

        logger.success(f"Deployed {len(fleet)} brackets owned by {master_address}")
        return fleet
