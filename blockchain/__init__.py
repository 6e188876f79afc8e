"""
Blockchain Interaction Package
Handles contract reads, Safe transaction building, nonce sequencing and proposal submission
"""

from .contract_manager import ContractManager
from .transaction_builder import TransactionBuilder
from .nonce_manager import SafeNonceManager
from .safe_transaction_service import SafeTransactionService

__all__ = ['ContractManager', 'TransactionBuilder', 'SafeNonceManager', 'SafeTransactionService']
