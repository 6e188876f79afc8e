"""
Price Sanity Checks
Compares the operator's price against a public price API and checks bracket bounds
"""

import os
import asyncio
from typing import Dict, Optional
import aiohttp
from loguru import logger

DEFAULT_PRICE_API_URL = "https://api-v2.dex.ag/price?from={base}&to={quote}&fromAmount=1&dex=ag"

# Bounds further away than this factor from the current price are suspicious
MAX_BOUND_FACTOR = 1.5


async def fetch_market_price(
    base_symbol: str,
    quote_symbol: str,
    api_url: Optional[str] = None,
    timeout: float = 10
) -> Optional[float]:
    """
    Fetch the price of one base token in quote token

    Args:
        base_symbol: Base token symbol (e.g. WETH)
        quote_symbol: Quote token symbol (e.g. DAI)
        api_url: URL template with {base} and {quote} placeholders
        timeout: Request timeout in seconds

    Returns:
        Price or None if the API did not answer with one
    """
    template = api_url or os.getenv('PRICE_API_URL') or DEFAULT_PRICE_API_URL
    url = template.format(base=base_symbol, quote=quote_symbol)

    try:
        async with aiohttp.ClientSession() as session:
            async with session.get(url, timeout=aiohttp.ClientTimeout(total=timeout)) as response:
                if response.status != 200:
                    logger.warning(f"Price API returned status {response.status}")
                    return None

                data = await response.json(content_type=None)
                price = data.get('price') if isinstance(data, dict) else None

                if price is None:
                    logger.warning(f"Price API response has no price: {data}")
                    return None

                return float(price)

    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
        logger.warning(f"Error fetching price for {base_symbol}/{quote_symbol}: {e}")
        return None


async def is_price_reasonable(
    base_token: Dict,
    quote_token: Dict,
    price: float,
    accepted_deviation_pct: float = 2,
    api_url: Optional[str] = None
) -> bool:
    """
    Check the operator supplied price against the market

    Args:
        base_token: Token info dict with 'symbol'
        quote_token: Token info dict with 'symbol'
        price: Price in quote per base
        accepted_deviation_pct: Maximum relative deviation in percent

    Returns:
        True if the market price is known and close enough
    """
    market_price = await fetch_market_price(base_token['symbol'], quote_token['symbol'], api_url)

    if market_price is None or market_price <= 0:
        logger.warning("Could not perform price check against the price API")
        return False

    deviation = abs(market_price - price) / market_price
    if deviation >= accepted_deviation_pct / 100:
        logger.warning(
            f"Price {price} deviates {deviation * 100:.2f}% from the market price "
            f"{market_price} of {base_token['symbol']} in {quote_token['symbol']}"
        )
        return False

    return True


def are_bounds_reasonable(current_price: float, lowest_limit: float, highest_limit: float) -> bool:
    """
    Check that the bracket bounds enclose the current price and are not too wide

    Returns:
        True if both conditions hold
    """
    encloses_price = lowest_limit < current_price < highest_limit
    if not encloses_price:
        logger.warning(
            f"Bounds [{lowest_limit}, {highest_limit}] do not enclose the current price {current_price}"
        )

    close_to_price = (
        current_price / MAX_BOUND_FACTOR < lowest_limit
        and highest_limit < current_price * MAX_BOUND_FACTOR
    )
    if not close_to_price:
        logger.warning(
            f"Bounds [{lowest_limit}, {highest_limit}] are further than a factor "
            f"{MAX_BOUND_FACTOR} away from the current price {current_price}"
        )

    return encloses_price and close_to_price
