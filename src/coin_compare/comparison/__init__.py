"""Paired price fetching and fetch coordination."""

from .fetcher import PriceComparisonFetcher, PriceFetchError, GENERIC_FETCH_ERROR
from .coordinator import ComparisonCoordinator, InvalidTransition

__all__ = [
    "PriceComparisonFetcher",
    "PriceFetchError",
    "GENERIC_FETCH_ERROR",
    "ComparisonCoordinator",
    "InvalidTransition",
]
