"""
Nonce Manager
Hands out sequential Safe nonces for transactions that must execute in order
"""

import asyncio
from typing import Optional
from web3 import Web3
from loguru import logger


class SafeNonceManager:
    """
    Allocates consecutive nonces of a Safe

    The first nonce is either given explicitly (e.g. to re-verify earlier
    proposals) or read from the Safe contract.
    """

    def __init__(self, contract_manager, safe_address: str, start_nonce: Optional[int] = None):
        """
        Initialize Nonce Manager

        Args:
            contract_manager: ContractManager used to read the Safe nonce
            safe_address: Safe whose transactions are sequenced
            start_nonce: Explicit first nonce (None = next on-chain nonce)
        """
        self.contract_manager = contract_manager
        self.safe_address = Web3.to_checksum_address(safe_address)
        self.current_nonce = start_nonce
        self.lock = asyncio.Lock()

    def _sync_nonce(self):
        """Sync nonce with the Safe contract"""
        self.current_nonce = self.contract_manager.get_safe_nonce(self.safe_address)
        logger.debug(f"Safe nonce synced: {self.current_nonce}")

    async def get_nonce(self) -> int:
        """
        Get next nonce

        Returns:
            Nonce to use for the next proposal
        """
        async with self.lock:
            if self.current_nonce is None:
                self._sync_nonce()

            nonce = self.current_nonce
            self.current_nonce += 1

            logger.debug(f"Allocated nonce: {nonce}")
            return nonce
