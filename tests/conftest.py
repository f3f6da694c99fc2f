"""Pytest configuration and fixtures."""

import asyncio
from typing import Dict, List, Optional

import pytest

from coin_compare.core.models import SearchCandidate
from coin_compare.data.connector import DataConnector, parse_price_range

DAY_MS = 24 * 60 * 60 * 1000
START_MS = 1_697_000_000_000


def make_candidates(count: int, prefix: str = "coin") -> List[SearchCandidate]:
    """Create *count* candidates in provider order."""
    return [
        SearchCandidate(
            id=f"{prefix}-{i}",
            name=f"{prefix.title()} {i}",
            symbol=f"{prefix[:3]}{i}",
            thumb=f"https://img.example/{prefix}-{i}.png",
            market_cap_rank=i + 1,
        )
        for i in range(count)
    ]


def make_price_frame(count: int = 30, base: float = 100.0, start_ms: int = START_MS, step_ms: int = DAY_MS):
    """Create a price frame the way the provider parser builds it."""
    prices = [[start_ms + i * step_ms, base + i] for i in range(count)]
    return parse_price_range({"prices": prices})


class MockDataConnector(DataConnector):
    """In-memory provider with per-asset gates for ordering tests."""

    def __init__(self):
        self.search_results: Dict[str, List[SearchCandidate]] = {}
        self.search_error: Optional[Exception] = None
        self.search_calls: List[str] = []
        self.price_frames = {}
        self.price_errors: Dict[str, Exception] = {}
        self.price_calls: List[tuple] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.active_price_requests = 0
        self.max_active_price_requests = 0
        self.closed = False

    def gate(self, asset_id: str) -> asyncio.Event:
        """Block price requests for *asset_id* until the event is set."""
        event = asyncio.Event()
        self.gates[asset_id] = event
        return event

    async def search(self, query):
        self.search_calls.append(query)
        if self.search_error is not None:
            raise self.search_error
        return list(self.search_results.get(query, []))

    async def get_price_range(self, asset_id, from_ts, to_ts, vs_currency="usd"):
        self.price_calls.append((asset_id, from_ts, to_ts, vs_currency))
        self.active_price_requests += 1
        self.max_active_price_requests = max(
            self.max_active_price_requests, self.active_price_requests
        )
        try:
            gate = self.gates.get(asset_id)
            if gate is not None:
                await gate.wait()
            if asset_id in self.price_errors:
                raise self.price_errors[asset_id]
            frame = self.price_frames.get(asset_id)
            return frame if frame is not None else make_price_frame()
        finally:
            self.active_price_requests -= 1

    async def close(self):
        self.closed = True


async def settle(rounds: int = 20):
    """Let pending callbacks and tasks run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def connector():
    return MockDataConnector()


@pytest.fixture
def bitcoin():
    return SearchCandidate(id="bitcoin", name="Bitcoin", symbol="btc", thumb="btc.png", market_cap_rank=1)


@pytest.fixture
def ethereum():
    return SearchCandidate(id="ethereum", name="Ethereum", symbol="eth", thumb="eth.png", market_cap_rank=2)


@pytest.fixture
def solana():
    return SearchCandidate(id="solana", name="Solana", symbol="sol", thumb="sol.png", market_cap_rank=5)
