"""Paired price history retrieval."""

import asyncio
import logging
import time
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd

from ..core.models import PriceComparison, PricePoint, PriceSeries, Selection
from ..data.connector import DataConnector

logger = logging.getLogger(__name__)

GENERIC_FETCH_ERROR = "Failed to fetch cryptocurrency data. Please try again later."

SECONDS_PER_DAY = 24 * 60 * 60


class PriceFetchError(Exception):
    """Raised when a comparison fetch cycle fails.

    The message is always the generic user-facing text; the underlying
    cause is chained for diagnostics.
    """

    def __init__(self, message: str = GENERIC_FETCH_ERROR):
        super().__init__(message)


class PriceComparisonFetcher:
    """Fetches the trailing price window for two assets at once.

    Both requests are dispatched concurrently and joined; the cycle
    succeeds only if both succeed. Labels are taken from the first
    series. Series with differing timestamps are accepted unchanged and
    reported in the log.
    """

    def __init__(
        self,
        connector: DataConnector,
        config: Optional[Dict] = None,
        clock: Callable[[], float] = time.time,
    ):
        defaults = self._default_config()
        if config:
            defaults.update(config)
        self.config = defaults
        self.connector = connector
        self._clock = clock
        logger.info(f"Price comparison fetcher initialized (window={self.config['window_days']}d)")

    @staticmethod
    def _default_config() -> Dict:
        return {
            "window_days": 30,
            "request_timeout": 15.0,
            "vs_currency": "usd",
            "label_format": "%m/%d/%Y",
        }

    def compute_window(self) -> Tuple[int, int]:
        """Return (from, to) epoch seconds ending now."""
        now = int(self._clock())
        return now - self.config["window_days"] * SECONDS_PER_DAY, now

    async def fetch(self, selection_a: Selection, selection_b: Selection) -> PriceComparison:
        """Fetch both series for the pair. Raises PriceFetchError."""
        from_ts, to_ts = self.compute_window()
        logger.info(f"Fetching {selection_a.id} vs {selection_b.id} ({from_ts}..{to_ts})")

        results = await asyncio.gather(
            self._fetch_prices(selection_a, from_ts, to_ts),
            self._fetch_prices(selection_b, from_ts, to_ts),
            return_exceptions=True,
        )

        failures = [
            (selection, result)
            for selection, result in zip((selection_a, selection_b), results)
            if isinstance(result, BaseException)
        ]
        for selection, error in failures:
            logger.error(f"Price request for {selection.id} failed: {error!r}")
        if failures:
            raise PriceFetchError() from failures[0][1]

        try:
            coin1 = self._to_series(selection_a, results[0])
            coin2 = self._to_series(selection_b, results[1])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Could not parse price data: {e}")
            raise PriceFetchError() from e

        self._check_alignment(coin1, coin2)

        return PriceComparison(
            selection_a=selection_a,
            selection_b=selection_b,
            coin1=coin1,
            coin2=coin2,
            labels=tuple(self.build_labels(coin1)),
        )

    def build_labels(self, series: PriceSeries) -> List[str]:
        """Human-readable date labels for each point of *series*."""
        fmt = self.config["label_format"]
        return [ts.strftime(fmt) for ts in series.timestamps]

    async def _fetch_prices(self, selection: Selection, from_ts: int, to_ts: int) -> pd.DataFrame:
        return await asyncio.wait_for(
            self.connector.get_price_range(
                selection.id, from_ts, to_ts, self.config["vs_currency"]
            ),
            timeout=self.config["request_timeout"],
        )

    @staticmethod
    def _to_series(selection: Selection, df: pd.DataFrame) -> PriceSeries:
        points = tuple(
            PricePoint(timestamp=pd.Timestamp(ts).to_pydatetime(), price=float(price))
            for ts, price in df['price'].items()
        )
        return PriceSeries(
            slot=selection.slot,
            asset_id=selection.id,
            name=selection.name,
            points=points,
        )

    @staticmethod
    def _check_alignment(coin1: PriceSeries, coin2: PriceSeries) -> None:
        if len(coin1.points) != len(coin2.points):
            logger.warning(
                f"Series length mismatch: {coin1.asset_id}={len(coin1.points)}, "
                f"{coin2.asset_id}={len(coin2.points)}; labels follow {coin1.asset_id}"
            )
        elif coin1.timestamps != coin2.timestamps:
            logger.warning(
                f"Series timestamps differ for {coin1.asset_id} and {coin2.asset_id}; "
                f"labels follow {coin1.asset_id}"
            )
