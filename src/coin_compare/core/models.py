"""Core data models for the comparison system."""

from datetime import datetime
from typing import Optional, List, Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import Slot, ViewStatus, AxisPosition


DEFAULT_COLORS = {
    Slot.A: "#36a2eb",
    Slot.B: "#ff6384",
}


class SearchCandidate(BaseModel):
    """A single search result as returned by the provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Provider asset ID")
    name: str = Field(description="Display name")
    symbol: str = Field(default="", description="Ticker symbol")
    thumb: str = Field(default="", description="Icon URL")
    market_cap_rank: Optional[int] = Field(default=None, description="Provider rank")


class Selection(BaseModel):
    """Asset chosen for a slot.

    Each pick creates a new instance; staleness checks compare instances by
    identity, so re-picking the same asset still starts a new cycle.
    """

    model_config = ConfigDict(frozen=True)

    slot: Slot = Field(description="Owning slot")
    id: str = Field(description="Provider asset ID")
    name: str = Field(description="Display name")
    thumb: str = Field(default="", description="Icon URL")

    @classmethod
    def from_candidate(cls, slot: Slot, candidate: SearchCandidate) -> "Selection":
        return cls(slot=slot, id=candidate.id, name=candidate.name, thumb=candidate.thumb)


class PricePoint(BaseModel):
    """One (timestamp, price) observation."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    price: float


class PriceSeries(BaseModel):
    """Price history for one slot's asset."""

    model_config = ConfigDict(frozen=True)

    slot: Slot = Field(description="Owning slot")
    asset_id: str = Field(description="Provider asset ID")
    name: str = Field(description="Display name")
    points: Tuple[PricePoint, ...] = Field(default=(), description="Ordered observations")

    @property
    def prices(self) -> List[float]:
        return [p.price for p in self.points]

    @property
    def timestamps(self) -> List[datetime]:
        return [p.timestamp for p in self.points]


class PriceComparison(BaseModel):
    """Paired result of one successful fetch cycle."""

    model_config = ConfigDict(frozen=True)

    selection_a: Selection
    selection_b: Selection
    coin1: PriceSeries
    coin2: PriceSeries
    labels: Tuple[str, ...] = Field(default=(), description="Shared date labels")

    def matches(self, selection_a: Optional[Selection], selection_b: Optional[Selection]) -> bool:
        """Check the comparison was produced for exactly this pair."""
        return self.selection_a is selection_a and self.selection_b is selection_b


class DisplayAttributes(BaseModel):
    """Per-slot display colors."""

    model_config = ConfigDict(frozen=True)

    colors: Dict[Slot, str] = Field(default_factory=lambda: dict(DEFAULT_COLORS))

    @field_validator('colors')
    @classmethod
    def validate_colors(cls, v):
        for slot in Slot:
            if not v.get(slot):
                raise ValueError(f"Missing color for slot {slot.value}")
        return v

    def color_for(self, slot: Slot) -> str:
        return self.colors[slot]

    def with_color(self, slot: Slot, color: str) -> "DisplayAttributes":
        return DisplayAttributes(colors={**self.colors, slot: color})


class SlotState(BaseModel):
    """Search and selection state of one slot."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(default="", description="Current input text")
    candidates: Tuple[SearchCandidate, ...] = Field(default=(), description="Visible suggestions")
    selection: Optional[Selection] = Field(default=None, description="Chosen asset")


class ComparisonState(BaseModel):
    """Whole application state held by the store. Replaced, never mutated."""

    model_config = ConfigDict(frozen=True)

    slots: Dict[Slot, SlotState] = Field(
        default_factory=lambda: {slot: SlotState() for slot in Slot}
    )
    comparison: Optional[PriceComparison] = Field(default=None, description="Committed price pair")
    status: ViewStatus = Field(default=ViewStatus.IDLE, description="Fetch status")
    error: Optional[str] = Field(default=None, description="User-facing error message")
    display: DisplayAttributes = Field(default_factory=DisplayAttributes)

    def slot(self, slot: Slot) -> SlotState:
        return self.slots[slot]

    @property
    def selection_a(self) -> Optional[Selection]:
        return self.slots[Slot.A].selection

    @property
    def selection_b(self) -> Optional[Selection]:
        return self.slots[Slot.B].selection


class ChartDataset(BaseModel):
    """One line series in the render structure."""

    model_config = ConfigDict(frozen=True)

    slot: Slot
    label: str
    data: Tuple[float, ...]
    border_color: str
    background_color: str
    y_axis_id: str


class AxisSpec(BaseModel):
    """Y-axis description."""

    model_config = ConfigDict(frozen=True)

    id: str
    position: AxisPosition
    title: str = ""
    draw_on_chart_area: bool = True


class ChartProjection(BaseModel):
    """Render-ready chart description."""

    model_config = ConfigDict(frozen=True)

    title: str
    labels: Tuple[str, ...] = ()
    datasets: Tuple[ChartDataset, ...] = ()
    axes: Tuple[AxisSpec, ...] = ()

    def axis(self, axis_id: str) -> Optional[AxisSpec]:
        for axis in self.axes:
            if axis.id == axis_id:
                return axis
        return None
