"""
Token Unit Conversion
Converts between human readable token amounts and ERC20 base units
"""

from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

# Enough digits for any uint256 amount
_PRECISION = 100


def to_erc20_units(amount: Union[str, int, Decimal], decimals: int) -> int:
    """
    Convert a human readable amount into integer token units

    Args:
        amount: Amount as decimal string (e.g. "1.5")
        decimals: Token decimals

    Returns:
        Amount in token base units

    Raises:
        ValueError: If the amount is malformed, negative or more precise
            than the token supports
    """
    if decimals < 0:
        raise ValueError(f"Invalid number of decimals: {decimals}")

    with localcontext() as ctx:
        ctx.prec = _PRECISION

        try:
            value = Decimal(str(amount).strip())
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {amount!r}")

        if not value.is_finite():
            raise ValueError(f"Invalid amount: {amount!r}")
        if value < 0:
            raise ValueError(f"Amount must not be negative: {amount}")

        units = value.scaleb(decimals)
        if units != units.to_integral_value():
            raise ValueError(f"Amount {amount} has more than {decimals} decimals")

        return int(units)


def from_erc20_units(units: int, decimals: int) -> str:
    """Format integer token units as a plain decimal string"""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        text = format(Decimal(int(units)).scaleb(-decimals), 'f')

    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text or '0'
