"""
Utilities Package
Unit conversion, bracket math, price checks and operator prompts
"""

from .exceptions import (
    ProvisionError,
    ConfigurationError,
    ValidationError,
    SafetyCheckError,
    SubmissionError
)
from .printing_tools import to_erc20_units, from_erc20_units
from .bracket_math import bracket_limits, unlimited_order_amounts, split_deposits
from .price_utils import is_price_reasonable, are_bounds_reasonable
from .user_interface import proceed_anyways

__all__ = [
    'ProvisionError',
    'ConfigurationError',
    'ValidationError',
    'SafetyCheckError',
    'SubmissionError',
    'to_erc20_units',
    'from_erc20_units',
    'bracket_limits',
    'unlimited_order_amounts',
    'split_deposits',
    'is_price_reasonable',
    'are_bounds_reasonable',
    'proceed_anyways'
]
