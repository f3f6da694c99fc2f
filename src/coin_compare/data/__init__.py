"""Market data module."""

from .connector import DataConnector, CoinGeckoConnector, ProviderError

__all__ = [
    "DataConnector",
    "CoinGeckoConnector",
    "ProviderError",
]
