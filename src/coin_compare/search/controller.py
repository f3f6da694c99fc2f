"""Debounced asset search for a single comparison slot."""

import asyncio
import logging
from typing import Dict, Optional

from ..core.debounce import Debouncer
from ..core.enums import Slot
from ..core.models import SearchCandidate
from ..core.store import StateStore
from ..data.connector import DataConnector
from ..selection.store import SelectionStore

logger = logging.getLogger(__name__)


class SearchController:
    """
    Turns raw input text into rate-limited provider queries and keeps the
    slot's candidate list current.

    Queries fire on the trailing edge of a quiet period. Search failures
    are non-fatal: they are logged and the previous candidates stay
    visible. A response is only applied if no newer query (or a clear)
    happened for this slot since it was issued.
    """

    def __init__(
        self,
        slot: Slot,
        connector: DataConnector,
        store: StateStore,
        selection_store: SelectionStore,
        config: Optional[Dict] = None,
    ):
        defaults = self._default_config()
        if config:
            defaults.update(config)
        self.config = defaults
        self.slot = slot
        self.connector = connector
        self.store = store
        self.selection_store = selection_store
        self._debouncer = Debouncer(f"search-{slot.value}", self.config["debounce_seconds"])
        self._generation = 0
        logger.info(f"Search controller initialized for slot {slot.value}")

    @staticmethod
    def _default_config() -> Dict:
        return {
            "debounce_seconds": 0.3,
            "min_query_length": 2,
            "max_results": 5,
            "timeout": 10.0,
        }

    @property
    def query_pending(self) -> bool:
        return self._debouncer.pending

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def on_input(self, text: str) -> None:
        """Handle a keystroke-level change of the slot's input text."""
        self._generation += 1
        if len(text) < self.config["min_query_length"]:
            self._debouncer.cancel()
            self.store.update_slot(self.slot, query=text, candidates=())
            return

        self.store.update_slot(self.slot, query=text)
        self._debouncer.schedule(self._run_query, text, self._generation)

    def pick(self, candidate: SearchCandidate) -> None:
        """Commit *candidate* as the slot's selection."""
        self._generation += 1
        self._debouncer.cancel()
        self.store.update_slot(self.slot, query="", candidates=())
        self.selection_store.set_selection(self.slot, candidate)

    async def drain(self) -> None:
        """Wait for in-flight queries to settle."""
        await self._debouncer.drain()

    async def close(self) -> None:
        await self._debouncer.close()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _run_query(self, text: str, generation: int) -> None:
        logger.debug(f"Slot {self.slot.value}: searching '{text}'")
        try:
            results = await asyncio.wait_for(
                self.connector.search(text), timeout=self.config["timeout"]
            )
        except Exception as e:
            logger.warning(f"Slot {self.slot.value}: search for '{text}' failed: {e!r}")
            return

        if generation != self._generation:
            logger.debug(f"Slot {self.slot.value}: dropping superseded results for '{text}'")
            return

        candidates = tuple(results[: self.config["max_results"]])
        self.store.update_slot(self.slot, candidates=candidates)
        logger.debug(f"Slot {self.slot.value}: {len(candidates)} candidates for '{text}'")
