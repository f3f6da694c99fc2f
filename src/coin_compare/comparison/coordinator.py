"""Fetch coordination and comparison status."""

import asyncio
import logging
from typing import Dict, FrozenSet, Set

from ..core.enums import ViewStatus
from ..core.models import ComparisonState, Selection
from ..core.store import StateStore
from .fetcher import PriceComparisonFetcher, PriceFetchError

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: Dict[ViewStatus, FrozenSet[ViewStatus]] = {
    ViewStatus.IDLE: frozenset({ViewStatus.IDLE, ViewStatus.LOADING}),
    ViewStatus.LOADING: frozenset({
        ViewStatus.IDLE, ViewStatus.LOADING, ViewStatus.READY, ViewStatus.ERROR,
    }),
    ViewStatus.READY: frozenset({ViewStatus.IDLE, ViewStatus.LOADING}),
    ViewStatus.ERROR: frozenset({ViewStatus.IDLE, ViewStatus.LOADING}),
}


class InvalidTransition(RuntimeError):
    """Raised on a status change outside ALLOWED_TRANSITIONS."""
    pass


class ComparisonCoordinator:
    """Starts fetch cycles on selection changes and owns the view status.

    Every selection transition clears the committed comparison and error.
    When both slots are filled a new cycle starts. A finished cycle is
    committed only if both selections it was started for are still the
    current ones (by identity); otherwise its result is dropped.
    """

    def __init__(self, store: StateStore, fetcher: PriceComparisonFetcher):
        """Initialize coordinator."""
        self.store = store
        self.fetcher = fetcher
        self._tasks: Set[asyncio.Task] = set()
        self._cycles_started = 0
        self._unsubscribe = store.subscribe(self._on_state_change)
        logger.info("Comparison coordinator initialized")

    @property
    def status(self) -> ViewStatus:
        return self.store.state.status

    @property
    def busy(self) -> bool:
        return self.store.state.status is ViewStatus.LOADING

    @property
    def cycles_started(self) -> int:
        return self._cycles_started

    @property
    def in_flight(self) -> int:
        return len(self._tasks)

    # ------------------------------------------------------------------
    # State reactions
    # ------------------------------------------------------------------

    def _on_state_change(self, old: ComparisonState, new: ComparisonState) -> None:
        if old.selection_a is new.selection_a and old.selection_b is new.selection_b:
            return

        a, b = new.selection_a, new.selection_b
        if a is not None and b is not None:
            self._start_cycle(a, b)
        else:
            self._transition(ViewStatus.IDLE, comparison=None, error=None)

    def _start_cycle(self, selection_a: Selection, selection_b: Selection) -> None:
        self._cycles_started += 1
        self._transition(ViewStatus.LOADING, comparison=None, error=None)
        task = asyncio.create_task(self._run_cycle(selection_a, selection_b))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_cycle(self, selection_a: Selection, selection_b: Selection) -> None:
        try:
            try:
                comparison = await self.fetcher.fetch(selection_a, selection_b)
            except PriceFetchError as e:
                if not self._is_current(selection_a, selection_b):
                    logger.debug(f"Discarding failed stale cycle {selection_a.id}/{selection_b.id}")
                    return
                self._transition(ViewStatus.ERROR, comparison=None, error=str(e))
                return

            if not self._is_current(selection_a, selection_b):
                logger.debug(f"Discarding stale result {selection_a.id}/{selection_b.id}")
                return

            self._transition(ViewStatus.READY, comparison=comparison, error=None)
            logger.info(f"Comparison ready: {selection_a.id} vs {selection_b.id}")
        finally:
            if self._is_current(selection_a, selection_b) and self.busy:
                # cycle ended without committing (cancelled)
                self._transition(ViewStatus.IDLE, comparison=None, error=None)

    def _is_current(self, selection_a: Selection, selection_b: Selection) -> bool:
        state = self.store.state
        return state.selection_a is selection_a and state.selection_b is selection_b

    def _transition(self, status: ViewStatus, **changes) -> None:
        current = self.store.state.status
        if status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidTransition(f"{current.value} -> {status.value}")
        if current is not status:
            logger.debug(f"Status {current.value} -> {status.value}")
        self.store.update(status=status, **changes)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait until no fetch cycle is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Stop reacting to changes and cancel in-flight cycles."""
        self._unsubscribe()
        for task in list(self._tasks):
            task.cancel()
        await self.wait_idle()
