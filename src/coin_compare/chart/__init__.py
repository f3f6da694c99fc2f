"""Chart render structure."""

from .projection import build_chart_projection, with_opacity
from .display import DisplayController

__all__ = ["build_chart_projection", "with_opacity", "DisplayController"]
