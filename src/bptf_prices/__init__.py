"""
bptf-prices — client for the backpack.tf economy Web API.

Usage:
    from bptf_prices import EconomyClient

    client = EconomyClient(api_key="...")
    currencies = client.get_currencies(raw=2).result()
"""

from bptf_prices.config import ClientConfig
from bptf_prices.client import EconomyClient
from bptf_prices.errors import EconomyError, InvalidParameter, UpstreamError

__all__ = [
    "EconomyClient",
    "ClientConfig",
    "EconomyError",
    "InvalidParameter",
    "UpstreamError",
]
