"""
Cryptocurrency Price Comparison

Debounced asset search for two comparison slots, paired 30-day price
history retrieval with staleness protection, and a pure dual-axis chart
projection recomputed on every relevant state change.
"""

__version__ = "0.1.0"

from .core.models import (
    SearchCandidate, Selection, PriceSeries, PriceComparison,
    DisplayAttributes, ChartProjection,
)
from .core.enums import Slot, ViewStatus
from .main import ComparisonApp

__all__ = [
    "SearchCandidate",
    "Selection",
    "PriceSeries",
    "PriceComparison",
    "DisplayAttributes",
    "ChartProjection",
    "Slot",
    "ViewStatus",
    "ComparisonApp",
]
