"""Reactive state store shared by all comparison components."""

from collections import deque
from typing import Callable, Deque, List, Optional, Tuple
import logging

from .enums import Slot
from .models import ComparisonState

logger = logging.getLogger(__name__)

Listener = Callable[[ComparisonState, ComparisonState], None]


class StateStore:
    """Holds the current ComparisonState and notifies listeners on change.

    Updates replace the whole state value. Notifications are queued and
    dispatched in FIFO order, so a listener that updates the store from
    inside its callback never sees a nested dispatch; every listener
    receives every (old, new) transition in the order it happened.
    """

    def __init__(self, initial: Optional[ComparisonState] = None):
        """Initialize state store."""
        self._state = initial or ComparisonState()
        self._listeners: List[Listener] = []
        self._pending: Deque[Tuple[ComparisonState, ComparisonState]] = deque()
        self._dispatching = False
        logger.debug("State store initialized")

    @property
    def state(self) -> ComparisonState:
        """Current state snapshot."""
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def update(self, **changes) -> ComparisonState:
        """Replace the state with a copy carrying *changes*."""
        old = self._state
        new = old.model_copy(update=changes)
        self._state = new
        self._pending.append((old, new))
        self._dispatch()
        return new

    def update_slot(self, slot: Slot, **changes) -> ComparisonState:
        """Replace one slot's state, leaving the other slot untouched."""
        slots = dict(self._state.slots)
        slots[slot] = slots[slot].model_copy(update=changes)
        return self.update(slots=slots)

    def _dispatch(self) -> None:
        if self._dispatching:
            return
        self._dispatching = True
        try:
            while self._pending:
                old, new = self._pending.popleft()
                for listener in list(self._listeners):
                    listener(old, new)
        finally:
            self._dispatching = False
            # A listener that raised leaves later transitions undelivered
            self._pending.clear()
