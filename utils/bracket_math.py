"""
Bracket Math
Price limits of a bracket fleet and order amounts for never-ending limit orders
"""

from decimal import Decimal
from fractions import Fraction
from typing import List, Tuple

# BatchExchange stores order amounts as uint128
MAX_UINT128 = 2**128 - 1


def bracket_limits(lowest_limit: float, highest_limit: float, fleet_size: int) -> List[Tuple[float, float]]:
    """
    Split [lowest_limit, highest_limit] into geometrically spaced brackets

    Args:
        lowest_limit: Buy price of the lowest bracket
        highest_limit: Sell price of the highest bracket
        fleet_size: Number of brackets

    Returns:
        List of (lower_limit, upper_limit) per bracket, ordered by price
    """
    if fleet_size <= 0:
        raise ValueError("Fleet size must be positive")
    if not 0 < lowest_limit < highest_limit:
        raise ValueError(
            f"Limits must satisfy 0 < lowest ({lowest_limit}) < highest ({highest_limit})"
        )

    step = (highest_limit / lowest_limit) ** (1 / fleet_size)

    limits = []
    for index in range(fleet_size):
        lower = lowest_limit * step ** index
        upper = lower * step
        limits.append((lower, upper))

    return limits


def _to_fraction(value) -> Fraction:
    if isinstance(value, Fraction):
        return value
    # Go through the shortest repr so 0.1 stays 1/10
    return Fraction(Decimal(str(value)))


def unlimited_order_amounts(price, sell_token_decimals: int, buy_token_decimals: int) -> Tuple[int, int]:
    """
    Order amounts that keep an order open for as long as possible

    The larger side is set to MAX_UINT128 and the other one follows
    from the limit price.

    Args:
        price: Limit price in buy token per sell token (human units)
        sell_token_decimals: Decimals of the sold token
        buy_token_decimals: Decimals of the bought token

    Returns:
        (sell_amount, buy_amount) in token base units
    """
    price = _to_fraction(price)
    if price <= 0:
        raise ValueError(f"Price must be positive: {price}")

    unit_price = price * Fraction(10) ** (buy_token_decimals - sell_token_decimals)

    sell_amount = MAX_UINT128
    buy_amount = int(sell_amount * unit_price)

    if buy_amount > MAX_UINT128:
        buy_amount = MAX_UINT128
        sell_amount = int(buy_amount / unit_price)

    return sell_amount, buy_amount


def split_deposits(limits: List[Tuple[float, float]], current_price: float) -> Tuple[List[int], List[int]]:
    """
    Decide which brackets are funded with which token

    Brackets whose lower limit is below the current price start out
    holding quote token (they buy base first), all others hold base token.

    Returns:
        (quote_bracket_indices, base_bracket_indices)
    """
    quote_brackets = []
    base_brackets = []

    for index, (lower, _upper) in enumerate(limits):
        if lower < current_price:
            quote_brackets.append(index)
        else:
            base_brackets.append(index)

    return quote_brackets, base_brackets
