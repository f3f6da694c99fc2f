"""Render structure derivation for the dual-axis comparison chart."""

import re
from typing import Optional, Sequence

from ..core.enums import AxisPosition, Slot
from ..core.models import (
    AxisSpec, ChartDataset, ChartProjection, DisplayAttributes, PriceSeries
)

LEFT_AXIS_ID = "y"
RIGHT_AXIS_ID = "y1"
FILL_OPACITY = 0.5
EMPTY_TITLE = "Select two cryptocurrencies to compare"

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{3,4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")
_FUNC_RE = re.compile(
    r"^(rgb|hsl)a?\(\s*([^,]+),\s*([^,]+),\s*([^,)]+)(?:,\s*[^)]+)?\)$", re.IGNORECASE
)


def with_opacity(color: str, alpha: float = FILL_OPACITY) -> str:
    """Return *color* at *alpha* opacity.

    Hex colors get an alpha byte (``#36a2eb`` -> ``#36a2eb80``, short
    forms are expanded first), ``rgb()``/``rgba()`` become ``rgba()`` and
    ``hsl()``/``hsla()`` become ``hsla()``. Any other format raises
    ValueError.
    """
    color = color.strip()
    match = _HEX_RE.match(color)
    if match:
        digits = match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits)
        return f"#{digits[:6]}{round(alpha * 255):02x}"

    match = _FUNC_RE.match(color)
    if match:
        func = match.group(1).lower()
        x, y, z = (part.strip() for part in match.groups()[1:])
        return f"{func}a({x}, {y}, {z}, {alpha:g})"

    raise ValueError(f"Unsupported color format: {color!r}")


def is_supported_color(color: str) -> bool:
    """True if with_opacity can derive a fill color from *color*."""
    try:
        with_opacity(color)
    except ValueError:
        return False
    return True


def _dataset(series: PriceSeries, color: str, axis_id: str, currency: str) -> ChartDataset:
    return ChartDataset(
        slot=series.slot,
        label=f"{series.name} ({currency})",
        data=tuple(series.prices),
        border_color=color,
        background_color=with_opacity(color),
        y_axis_id=axis_id,
    )


def build_chart_projection(
    coin1: Optional[PriceSeries],
    coin2: Optional[PriceSeries],
    display: DisplayAttributes,
    labels: Sequence[str] = (),
    currency: str = "USD",
    window_days: int = 30,
) -> ChartProjection:
    """Derive the chart render structure.

    Slot A's series is bound to the left axis and slot B's to the right
    axis, whose gridlines are not drawn on the chart area. Absent series
    are left out of the datasets and their axis title is blank.
    """
    datasets = []
    if coin1 is not None:
        datasets.append(_dataset(coin1, display.color_for(Slot.A), LEFT_AXIS_ID, currency))
    if coin2 is not None:
        datasets.append(_dataset(coin2, display.color_for(Slot.B), RIGHT_AXIS_ID, currency))

    axes = (
        AxisSpec(
            id=LEFT_AXIS_ID,
            position=AxisPosition.LEFT,
            title=f"{coin1.name} Price ({currency})" if coin1 is not None else "",
        ),
        AxisSpec(
            id=RIGHT_AXIS_ID,
            position=AxisPosition.RIGHT,
            title=f"{coin2.name} Price ({currency})" if coin2 is not None else "",
            draw_on_chart_area=False,
        ),
    )

    if coin1 is not None and coin2 is not None:
        title = f"{coin1.name} vs {coin2.name} Price Comparison ({window_days} Days)"
    else:
        title = EMPTY_TITLE

    return ChartProjection(
        title=title,
        labels=tuple(labels) if datasets else (),
        datasets=tuple(datasets),
        axes=axes,
    )
