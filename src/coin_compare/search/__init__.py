"""Debounced asset search."""

from .controller import SearchController

__all__ = ["SearchController"]
