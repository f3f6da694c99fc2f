"""Core module for the comparison system."""

from .models import (
    SearchCandidate, Selection, PricePoint, PriceSeries, PriceComparison,
    DisplayAttributes, SlotState, ComparisonState,
    ChartDataset, AxisSpec, ChartProjection, DEFAULT_COLORS,
)
from .enums import Slot, ViewStatus, AxisPosition
from .store import StateStore
from .debounce import Debouncer

__all__ = [
    "SearchCandidate",
    "Selection",
    "PricePoint",
    "PriceSeries",
    "PriceComparison",
    "DisplayAttributes",
    "SlotState",
    "ComparisonState",
    "ChartDataset",
    "AxisSpec",
    "ChartProjection",
    "DEFAULT_COLORS",
    "Slot",
    "ViewStatus",
    "AxisPosition",
    "StateStore",
    "Debouncer",
]
