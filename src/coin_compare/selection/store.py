"""Per-slot asset selection."""

import logging
from typing import Optional, Tuple

from ..core.enums import Slot
from ..core.models import SearchCandidate, Selection
from ..core.store import StateStore

logger = logging.getLogger(__name__)


class SelectionStore:
    """Holds the chosen asset for each slot.

    Writes go through the shared StateStore, so any component subscribed
    to it (the comparison coordinator in particular) reacts to every
    selection transition.
    """

    def __init__(self, store: StateStore):
        """Initialize selection store."""
        self.store = store

    def get(self, slot: Slot) -> Optional[Selection]:
        return self.store.state.slot(slot).selection

    def pair(self) -> Tuple[Optional[Selection], Optional[Selection]]:
        """Current (A, B) selections."""
        state = self.store.state
        return state.selection_a, state.selection_b

    def both_selected(self) -> bool:
        a, b = self.pair()
        return a is not None and b is not None

    def set_selection(
        self, slot: Slot, candidate: Optional[SearchCandidate]
    ) -> Optional[Selection]:
        """Set or clear the selection for *slot*."""
        if candidate is None and self.get(slot) is None:
            return None

        selection = Selection.from_candidate(slot, candidate) if candidate is not None else None
        self.store.update_slot(slot, selection=selection)

        if selection is None:
            logger.info(f"Slot {slot.value} cleared")
        else:
            logger.info(f"Slot {slot.value} selected {selection.id}")
        return selection

    def clear(self, slot: Slot) -> None:
        self.set_selection(slot, None)
