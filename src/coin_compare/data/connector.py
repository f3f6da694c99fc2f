"""Market data provider interface and implementations."""

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Any
import logging

import aiohttp
import numpy as np
import pandas as pd

from ..core.models import SearchCandidate

logger = logging.getLogger(__name__)


class ProviderError(Exception):
    """Raised when the data provider returns an unusable response."""
    pass


class DataConnector(ABC):
    """Abstract base class for search and price history providers."""

    @abstractmethod
    async def search(self, query: str) -> List[SearchCandidate]:
        """Search assets by name. Results keep the provider's ordering."""
        pass

    @abstractmethod
    async def get_price_range(
        self,
        asset_id: str,
        from_ts: int,
        to_ts: int,
        vs_currency: str = "usd"
    ) -> pd.DataFrame:
        """Get price history between two epoch-second bounds.

        Returns a frame indexed by UTC timestamp with a single ``price``
        column, ordered by time.
        """
        pass

    @abstractmethod
    async def close(self):
        """Close connection."""
        pass


def parse_search_results(data: Any) -> List[SearchCandidate]:
    """Convert a provider search payload into candidates."""
    if not isinstance(data, dict) or not isinstance(data.get('coins'), list):
        raise ProviderError("Search response has no 'coins' list")

    candidates = []
    for coin in data['coins']:
        try:
            candidates.append(SearchCandidate(
                id=coin['id'],
                name=coin['name'],
                symbol=coin.get('symbol') or '',
                thumb=coin.get('thumb') or '',
                market_cap_rank=coin.get('market_cap_rank'),
            ))
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderError(f"Malformed search entry: {e}") from e
    return candidates


def parse_price_range(data: Any) -> pd.DataFrame:
    """Convert a provider market-chart payload into a price frame."""
    if not isinstance(data, dict) or not isinstance(data.get('prices'), list):
        raise ProviderError("Price response has no 'prices' list")

    try:
        df = pd.DataFrame(data['prices'], columns=['timestamp', 'price'], dtype=float)
    except (ValueError, TypeError) as e:
        raise ProviderError(f"Malformed price entries: {e}") from e

    if df.empty:
        df.index = pd.DatetimeIndex([], tz='UTC', name='timestamp')
        return df[['price']]

    if df.isnull().any().any() or np.isinf(df.values).any():
        raise ProviderError("Price data contains NaN or inf values")

    df['timestamp'] = pd.to_datetime(df['timestamp'], unit='ms', utc=True)
    df.set_index('timestamp', inplace=True)
    df.sort_index(inplace=True)
    return df


class CoinGeckoConnector(DataConnector):
    """CoinGecko public API connector."""

    DEFAULT_BASE_URL = "https://api.coingecko.com/api/v3"

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """Initialize CoinGecko connector."""
        self.config = config or {}
        self.base_url = (self.config.get('base_url') or self.DEFAULT_BASE_URL).rstrip('/')
        self.api_key = self.config.get('api_key') or ''
        self.timeout = self.config.get('timeout', 15)
        self._session: Optional[aiohttp.ClientSession] = None
        logger.info(f"Initialized CoinGecko connector ({self.base_url})")

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            headers = {"Accept": "application/json"}
            if self.api_key:
                headers["x-cg-demo-api-key"] = self.api_key
            self._session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
        return self._session

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        session = await self._get_session()
        async with session.get(f"{self.base_url}{path}", params=params) as response:
            if response.status != 200:
                error_text = await response.text()
                raise ProviderError(f"Provider error {response.status}: {error_text[:200]}")
            try:
                return await response.json()
            except (aiohttp.ContentTypeError, ValueError) as e:
                raise ProviderError(f"Invalid JSON from provider: {e}") from e

    async def search(self, query: str) -> List[SearchCandidate]:
        """Search coins by name or symbol."""
        try:
            data = await self._get_json("/search", {"query": query})
            candidates = parse_search_results(data)
            logger.debug(f"Search '{query}' returned {len(candidates)} coins")
            return candidates
        except Exception as e:
            logger.error(f"Error searching for '{query}': {e}")
            raise

    async def get_price_range(
        self,
        asset_id: str,
        from_ts: int,
        to_ts: int,
        vs_currency: str = "usd"
    ) -> pd.DataFrame:
        """Get price history for a coin."""
        try:
            data = await self._get_json(
                f"/coins/{asset_id}/market_chart/range",
                {"vs_currency": vs_currency, "from": from_ts, "to": to_ts},
            )
            df = parse_price_range(data)
            logger.debug(f"Retrieved {len(df)} price points for {asset_id}")
            return df
        except Exception as e:
            logger.error(f"Error fetching price range for {asset_id}: {e}")
            raise

    async def close(self):
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.info("Closed CoinGecko session")
