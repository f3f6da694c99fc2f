"""Unit tests for the paired price fetcher."""

import asyncio

import pytest

from coin_compare.comparison.fetcher import (
    GENERIC_FETCH_ERROR, PriceComparisonFetcher, PriceFetchError
)
from coin_compare.core.enums import Slot
from coin_compare.core.models import Selection
from coin_compare.data.connector import ProviderError

from conftest import make_price_frame, settle

NOW = 1_700_000_000


@pytest.fixture
def fetcher(connector):
    return PriceComparisonFetcher(connector, clock=lambda: NOW)


@pytest.fixture
def pair():
    return (
        Selection(slot=Slot.A, id="bitcoin", name="Bitcoin"),
        Selection(slot=Slot.B, id="ethereum", name="Ethereum"),
    )


class TestWindow:
    """Tests for the trailing window."""

    def test_thirty_day_window(self, fetcher):
        assert fetcher.compute_window() == (NOW - 30 * 24 * 3600, NOW)

    def test_configurable_window(self, connector):
        fetcher = PriceComparisonFetcher(connector, {"window_days": 7}, clock=lambda: NOW)
        assert fetcher.compute_window() == (NOW - 7 * 24 * 3600, NOW)

    @pytest.mark.asyncio
    async def test_window_fixed_at_start(self, connector, pair):
        """Both requests use the window computed once when the cycle starts."""
        ticks = iter([NOW, NOW + 500, NOW + 1000])
        fetcher = PriceComparisonFetcher(connector, clock=lambda: next(ticks))

        await fetcher.fetch(*pair)

        windows = {(call[1], call[2]) for call in connector.price_calls}
        assert windows == {(NOW - 30 * 24 * 3600, NOW)}


class TestFetch:
    """Tests for PriceComparisonFetcher.fetch."""

    @pytest.mark.asyncio
    async def test_success(self, fetcher, connector, pair):
        connector.price_frames["bitcoin"] = make_price_frame(30, base=40000.0)
        connector.price_frames["ethereum"] = make_price_frame(30, base=2000.0)

        comparison = await fetcher.fetch(*pair)

        assert comparison.selection_a is pair[0]
        assert comparison.selection_b is pair[1]
        assert comparison.coin1.slot is Slot.A
        assert comparison.coin1.name == "Bitcoin"
        assert comparison.coin1.prices[0] == 40000.0
        assert comparison.coin2.prices[-1] == 2029.0
        assert len(comparison.labels) == 30
        assert [call[3] for call in connector.price_calls] == ["usd", "usd"]

    @pytest.mark.asyncio
    async def test_requests_dispatched_concurrently(self, fetcher, connector, pair):
        """The second request starts while the first is still pending."""
        gate_a = connector.gate("bitcoin")
        gate_b = connector.gate("ethereum")

        task = asyncio.create_task(fetcher.fetch(*pair))
        await settle()

        assert [call[0] for call in connector.price_calls] == ["bitcoin", "ethereum"]
        assert connector.active_price_requests == 2

        gate_b.set()
        await settle()
        assert not task.done()

        gate_a.set()
        comparison = await task
        assert connector.max_active_price_requests == 2
        assert comparison.coin2.asset_id == "ethereum"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing", ["bitcoin", "ethereum"])
    async def test_either_failure_fails_cycle(self, fetcher, connector, pair, failing):
        connector.price_errors[failing] = ProviderError("Provider error 429")

        with pytest.raises(PriceFetchError) as exc_info:
            await fetcher.fetch(*pair)

        assert str(exc_info.value) == GENERIC_FETCH_ERROR
        assert isinstance(exc_info.value.__cause__, ProviderError)
        assert len(connector.price_calls) == 2

    @pytest.mark.asyncio
    async def test_both_fail_single_error(self, fetcher, connector, pair):
        connector.price_errors["bitcoin"] = ProviderError("down")
        connector.price_errors["ethereum"] = ConnectionError("reset")

        with pytest.raises(PriceFetchError, match="Failed to fetch cryptocurrency data"):
            await fetcher.fetch(*pair)

    @pytest.mark.asyncio
    async def test_timeout_fails_cycle(self, connector, pair):
        fetcher = PriceComparisonFetcher(connector, {"request_timeout": 0.02}, clock=lambda: NOW)
        connector.gate("ethereum")

        with pytest.raises(PriceFetchError):
            await fetcher.fetch(*pair)

    @pytest.mark.asyncio
    async def test_unparseable_frame_fails_cycle(self, fetcher, connector, pair):
        connector.price_frames["ethereum"] = make_price_frame().rename(columns={"price": "close"})

        with pytest.raises(PriceFetchError):
            await fetcher.fetch(*pair)

    @pytest.mark.asyncio
    async def test_non_frame_payload_fails_cycle(self, fetcher, connector, pair):
        connector.price_frames["ethereum"] = {"price": [2.0, 3.0]}

        with pytest.raises(PriceFetchError) as exc_info:
            await fetcher.fetch(*pair)

        assert str(exc_info.value) == GENERIC_FETCH_ERROR
        assert isinstance(exc_info.value.__cause__, AttributeError)


class TestLabels:
    """Tests for timeline labels."""

    @pytest.mark.asyncio
    async def test_labels_follow_first_series(self, fetcher, connector, pair):
        connector.price_frames["bitcoin"] = make_price_frame(3)
        connector.price_frames["ethereum"] = make_price_frame(5)

        comparison = await fetcher.fetch(*pair)

        assert len(comparison.labels) == 3
        assert len(comparison.coin2.points) == 5

    @pytest.mark.asyncio
    async def test_misaligned_series_logged(self, fetcher, connector, pair, caplog):
        connector.price_frames["bitcoin"] = make_price_frame(3)
        connector.price_frames["ethereum"] = make_price_frame(4)

        await fetcher.fetch(*pair)

        assert "length mismatch" in caplog.text

    @pytest.mark.asyncio
    async def test_label_format(self, fetcher, connector, pair):
        # 2023-11-14 22:13:20 UTC
        connector.price_frames["bitcoin"] = make_price_frame(2, start_ms=1_700_000_000_000)
        connector.price_frames["ethereum"] = make_price_frame(2, start_ms=1_700_000_000_000)

        comparison = await fetcher.fetch(*pair)

        assert comparison.labels == ("11/14/2023", "11/15/2023")

    def test_empty_series_has_no_labels(self, fetcher):
        series = PriceComparisonFetcher._to_series(
            Selection(slot=Slot.A, id="x", name="X"), make_price_frame(0)
        )
        assert fetcher.build_labels(series) == []
