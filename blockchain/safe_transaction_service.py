"""
Safe Transaction Service Client
Proposes master Safe transactions for co-signing and verifies earlier proposals
"""

import asyncio
from typing import Dict, Optional
import aiohttp
from web3 import Web3
from loguru import logger

from utils.exceptions import SubmissionError
from .contract_manager import ZERO_ADDRESS


class SafeTransactionService:
    """
    Thin client for the Gnosis Safe transaction service API
    """

    def __init__(self, contract_manager, network_config: Dict, wallet_manager=None, timeout: float = 30):
        """
        Initialize the service client

        Args:
            contract_manager: ContractManager computing Safe transaction hashes
            network_config: Network configuration (safe_service_url, safe_interface_url)
            wallet_manager: Proposer wallet, only required when proposing
            timeout: HTTP timeout in seconds
        """
        self.contract_manager = contract_manager
        self.base_url = network_config['safe_service_url']
        self.interface_url = network_config.get('safe_interface_url')
        self.wallet_manager = wallet_manager
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def sign_and_send(self, safe_address: str, transaction: Dict, nonce: int, verify: bool = False) -> str:
        """
        Propose a transaction to the master Safe, or verify an earlier proposal

        Args:
            safe_address: Master Safe
            transaction: Safe transaction dict (to, value, data, operation)
            nonce: Safe nonce of the transaction
            verify: Only check that the transaction was proposed as built

        Returns:
            Safe transaction hash (hex)
        """
        safe_address = Web3.to_checksum_address(safe_address)
        safe_tx_hash = Web3.to_hex(
            self.contract_manager.get_safe_transaction_hash(safe_address, transaction, nonce)
        )

        logger.info(f"Safe transaction hash for nonce {nonce}: {safe_tx_hash}")

        if verify:
            await self.verify_transaction(safe_tx_hash, transaction, nonce)
        else:
            await self.propose_transaction(safe_address, safe_tx_hash, transaction, nonce)

        if self.interface_url:
            logger.info(f"Transaction awaiting execution in the interface {self.interface_url.format(safe=safe_address)}")

        return safe_tx_hash

    def _payload(self, safe_tx_hash: str, transaction: Dict, nonce: int) -> Dict:
        signature = self.wallet_manager.sign_safe_transaction_hash(Web3.to_bytes(hexstr=safe_tx_hash))

        return {
            'to': Web3.to_checksum_address(transaction['to']),
            'value': str(transaction['value']),
            'data': Web3.to_hex(transaction['data']),
            'operation': transaction['operation'],
            'safeTxGas': '0',
            'baseGas': '0',
            'gasPrice': '0',
            'gasToken': ZERO_ADDRESS,
            'refundReceiver': ZERO_ADDRESS,
            'nonce': nonce,
            'contractTransactionHash': safe_tx_hash,
            'sender': self.wallet_manager.address,
            'signature': Web3.to_hex(signature),
            'origin': 'bracket-liquidity-provision'
        }

    async def propose_transaction(self, safe_address: str, safe_tx_hash: str, transaction: Dict, nonce: int):
        """POST the signed transaction to the service"""
        if self.wallet_manager is None:
            raise SubmissionError("A proposer wallet is required to propose transactions")

        url = f"{self.base_url}/api/v1/safes/{safe_address}/multisig-transactions/"
        payload = self._payload(safe_tx_hash, transaction, nonce)

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(url, json=payload, timeout=self.timeout) as response:
                    if response.status not in (200, 201):
                        body = await response.text()
                        logger.error(f"Safe service rejected proposal ({response.status}): {body}")
                        raise SubmissionError(
                            f"Proposal of nonce {nonce} rejected with status {response.status}: {body}"
                        )

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error proposing transaction: {e}")
            raise SubmissionError(f"Could not reach the Safe transaction service: {e}") from e

        logger.success(f"Proposed transaction with nonce {nonce}")

    async def fetch_transaction(self, safe_tx_hash: str) -> Optional[Dict]:
        """
        Fetch a proposed transaction by its Safe transaction hash

        Returns:
            Transaction as returned by the service or None if unknown
        """
        url = f"{self.base_url}/api/v1/multisig-transactions/{safe_tx_hash}/"

        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(url, timeout=self.timeout) as response:
                    if response.status == 404:
                        return None
                    if response.status != 200:
                        body = await response.text()
                        raise SubmissionError(
                            f"Safe service returned status {response.status} for {safe_tx_hash}: {body}"
                        )
                    return await response.json()

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error fetching transaction {safe_tx_hash}: {e}")
            raise SubmissionError(f"Could not reach the Safe transaction service: {e}") from e

    async def verify_transaction(self, safe_tx_hash: str, transaction: Dict, nonce: int):
        """Raise if the proposal with this hash is missing or differs from transaction"""
        proposed = await self.fetch_transaction(safe_tx_hash)

        if proposed is None:
            raise SubmissionError(f"No proposed transaction with hash {safe_tx_hash} (nonce {nonce})")

        mismatches = []
        if (proposed.get('to') or '').lower() != transaction['to'].lower():
            mismatches.append('to')
        if (proposed.get('data') or '0x').lower() != Web3.to_hex(transaction['data']).lower():
            mismatches.append('data')
        if int(proposed.get('operation', -1)) != transaction['operation']:
            mismatches.append('operation')
        if int(proposed.get('nonce', -1)) != nonce:
            mismatches.append('nonce')

        if mismatches:
            raise SubmissionError(
                f"Proposed transaction {safe_tx_hash} differs in: {', '.join(mismatches)}"
            )

        logger.success(f"Verified proposed transaction with nonce {nonce}")
