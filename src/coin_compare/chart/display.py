"""Debounced per-slot color changes."""

import logging
from typing import Dict, Optional

from ..core.debounce import Debouncer
from ..core.enums import Slot
from ..core.models import DEFAULT_COLORS, DisplayAttributes
from ..core.store import StateStore
from .projection import is_supported_color

logger = logging.getLogger(__name__)


class DisplayController:
    """Applies color picks to DisplayAttributes after a short quiet period.

    Colors live outside the fetch path: they never touch selections or
    price series and survive every fetch cycle.
    """

    def __init__(self, store: StateStore, config: Optional[Dict] = None):
        defaults = self._default_config()
        if config:
            defaults.update(config)
        self.config = defaults
        self.store = store
        delay = self.config["color_debounce_seconds"]
        self._debouncers = {slot: Debouncer(f"color-{slot.value}", delay) for slot in Slot}

    @staticmethod
    def _default_config() -> Dict:
        return {
            "color_debounce_seconds": 0.1,
            "colors": dict(DEFAULT_COLORS),
        }

    def default_display(self) -> DisplayAttributes:
        colors = {Slot(slot): color for slot, color in self.config["colors"].items()}
        return DisplayAttributes(colors={**DEFAULT_COLORS, **colors})

    def on_color_changed(self, slot: Slot, color: str) -> None:
        """Schedule *color* for *slot*, replacing any pending change."""
        if not isinstance(color, str) or not is_supported_color(color):
            raise ValueError(f"Invalid color for slot {slot.value}: {color!r}")
        self._debouncers[slot].schedule(self._commit, slot, color.strip())

    def reset_colors(self) -> None:
        """Drop pending changes and restore the configured defaults."""
        for debouncer in self._debouncers.values():
            debouncer.cancel()
        self.store.update(display=self.default_display())
        logger.info("Display colors reset")

    def _commit(self, slot: Slot, color: str) -> None:
        display = self.store.state.display.with_color(slot, color)
        self.store.update(display=display)
        logger.debug(f"Slot {slot.value} color set to {color}")

    async def close(self) -> None:
        for debouncer in self._debouncers.values():
            await debouncer.close()
