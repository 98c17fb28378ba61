"""Gas price lookup for stader-deployments library."""

import logging
import re
from typing import Dict

import requests

logger = logging.getLogger(__name__)

_GAS_PRICE = re.compile(r"^\s*([0-9]*\.?[0-9]+)\s*([a-zA-Z][a-zA-Z0-9/]*)\s*$")


def parse_gas_prices(text: str) -> Dict[str, str]:
    """
    Parse a coin list such as "0.15uusd,0.01133uluna".

    Args:
        text: Comma separated amount+denom pairs

    Returns:
        Dictionary mapping denom -> amount string

    Raises:
        ValueError: If an entry is not an amount followed by a denom
    """
    prices: Dict[str, str] = {}
    for entry in text.split(","):
        if not entry.strip():
            continue
        match = _GAS_PRICE.match(entry)
        if match is None:
            raise ValueError(f"Invalid gas price entry: {entry!r}")
        amount, denom = match.groups()
        prices[denom] = amount
    return prices


def fetch_gas_prices(fcd_url: str) -> Dict[str, str]:
    """
    Fetch current gas prices from a Terra FCD endpoint.

    Args:
        fcd_url: Base URL of the FCD service, e.g. "https://bombay-fcd.terra.dev"

    Returns:
        Dictionary mapping denom -> price string

    Raises:
        ValueError: If the response is not a denom -> price mapping
        RuntimeError: If the request fails
    """
    url = f"{fcd_url.rstrip('/')}/v1/txs/gas_prices"
    try:
        response = requests.get(url, timeout=30)

        if response.status_code != 200:
            raise RuntimeError(f"Gas price request failed with status {response.status_code}")

        prices = response.json()

    except requests.RequestException as e:
        raise RuntimeError(f"Network error during gas price lookup: {e}") from e

    if not isinstance(prices, dict) or not prices:
        raise ValueError(f"Unexpected gas price response: {prices!r}")

    logger.debug("Fetched gas prices for %d denom(s) from %s", len(prices), url)
    return {denom: str(price) for denom, price in prices.items()}
