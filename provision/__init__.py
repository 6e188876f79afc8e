"""
Provisioning Package
Command line, configuration, proposer wallet and the provisioning run
"""

from .liquidity_provision import LiquidityProvision
from .wallet_manager import WalletManager

__all__ = ['LiquidityProvision', 'WalletManager']
