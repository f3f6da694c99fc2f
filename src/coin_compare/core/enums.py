"""Core enumerations for the comparison system."""

from enum import Enum


class Slot(str, Enum):
    """Comparison slots."""
    A = "A"
    B = "B"


class ViewStatus(str, Enum):
    """Observable comparison states."""
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


class AxisPosition(str, Enum):
    """Y-axis placement."""
    LEFT = "left"
    RIGHT = "right"
