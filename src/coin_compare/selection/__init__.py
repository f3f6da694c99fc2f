"""Slot selection state."""

from .store import SelectionStore

__all__ = ["SelectionStore"]
