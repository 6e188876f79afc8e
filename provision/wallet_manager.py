"""
Wallet Manager
Holds the proposer key: an owner of the master Safe that signs proposals
and pays for bracket deployment
"""

import os
from typing import Dict, Optional
from eth_account import Account
from loguru import logger
from dotenv import load_dotenv

from utils.exceptions import ConfigurationError

load_dotenv()


class WalletManager:
    """
    Signs raw transactions and Safe transaction hashes with the proposer key
    """

    def __init__(self, private_key: Optional[str] = None):
        """
        Initialize wallet manager

        Args:
            private_key: Proposer key, defaults to PROPOSER_PRIVATE_KEY from .env
        """
        private_key = private_key or os.getenv('PROPOSER_PRIVATE_KEY')

        if not private_key:
            raise ConfigurationError("PROPOSER_PRIVATE_KEY must be set in .env")

        try:
            self.account = Account.from_key(private_key)
        except ValueError as e:
            raise ConfigurationError(f"Invalid PROPOSER_PRIVATE_KEY: {e}") from e

        self.address = self.account.address

        logger.info(f"Proposer wallet: {self.address}")

    def sign_transaction(self, transaction: Dict):
        """
        Sign a transaction

        Args:
            transaction: Transaction dict

        Returns:
            Signed transaction
        """
        try:
            return self.account.sign_transaction(transaction)
        except Exception as e:
            logger.error(f"Error signing transaction: {e}")
            raise

    def sign_safe_transaction_hash(self, safe_tx_hash: bytes) -> bytes:
        """
        Sign a Safe transaction hash

        Returns:
            65 byte signature r || s || v as the Safe expects for an EOA owner
        """
        signed = self.account.unsafe_sign_hash(safe_tx_hash)
        return bytes(signed.signature)
