"""Comparison application facade."""

import logging
import os
import sys
from typing import Callable, Dict, List, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

from .chart.display import DisplayController
from .chart.projection import build_chart_projection
from .comparison.coordinator import ComparisonCoordinator
from .comparison.fetcher import PriceComparisonFetcher
from .core.enums import Slot, ViewStatus
from .core.models import (
    ChartProjection, ComparisonState, SearchCandidate, Selection, DEFAULT_COLORS
)
from .core.store import StateStore
from .data.connector import CoinGeckoConnector, DataConnector
from .search.controller import SearchController
from .selection.store import SelectionStore

logger = logging.getLogger(__name__)

ProjectionListener = Callable[[ChartProjection], None]


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


class ComparisonApp:
    """Wires search, selection, fetching and chart projection together.

    The ``on_*`` methods are the inbound UI events; they return nothing and
    drive state transitions. The current render structure is available as
    ``projection`` and pushed to ``subscribe``-d callbacks whenever it
    changes.
    """

    def __init__(self, config: Optional[Dict] = None, connector: Optional[DataConnector] = None):
        """Initialize comparison app."""
        defaults = self._default_config()
        if config:
            for key, val in config.items():
                if isinstance(val, dict) and key in defaults and isinstance(defaults[key], dict):
                    defaults[key].update(val)
                else:
                    defaults[key] = val
        self.config = defaults

        self.connector = connector or CoinGeckoConnector(self.config['provider'])
        self.store = StateStore()
        self.selection_store = SelectionStore(self.store)
        self.search_controllers = {
            slot: SearchController(
                slot, self.connector, self.store, self.selection_store, self.config['search']
            )
            for slot in Slot
        }
        comparison_config = dict(self.config['comparison'])
        comparison_config.setdefault('vs_currency', self.config['provider']['vs_currency'])
        self.fetcher = PriceComparisonFetcher(self.connector, comparison_config)
        self.coordinator = ComparisonCoordinator(self.store, self.fetcher)
        self.display_controller = DisplayController(self.store, self.config['chart'])
        self.store.update(display=self.display_controller.default_display())

        self._projection_listeners: List[ProjectionListener] = []
        self._projection = self._build_projection(self.store.state)
        self.store.subscribe(self._on_state_change)

        logger.info("Comparison app initialized")

    def _default_config(self) -> Dict:
        """Default configuration."""
        return {
            'provider': {
                'base_url': os.getenv('COINGECKO_BASE_URL') or CoinGeckoConnector.DEFAULT_BASE_URL,
                'api_key': os.getenv('COINGECKO_API_KEY'),
                'timeout': 15,
                'vs_currency': 'usd',
            },
            'search': {
                'debounce_seconds': 0.3,
                'min_query_length': 2,
                'max_results': 5,
                'timeout': 10.0,
            },
            'comparison': {
                'window_days': 30,
                'request_timeout': 15.0,
                'label_format': '%m/%d/%Y',
            },
            'chart': {
                'color_debounce_seconds': 0.1,
                'colors': dict(DEFAULT_COLORS),
            },
        }

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def on_slot_text_changed(self, slot: Slot, text: str) -> None:
        self.search_controllers[slot].on_input(text)

    def on_candidate_picked(self, slot: Slot, candidate: SearchCandidate) -> None:
        self.search_controllers[slot].pick(candidate)

    def on_selection_cleared(self, slot: Slot) -> None:
        self.selection_store.clear(slot)

    def on_color_changed(self, slot: Slot, color: str) -> None:
        self.display_controller.on_color_changed(slot, color)

    def reset_colors(self) -> None:
        self.display_controller.reset_colors()

    # ------------------------------------------------------------------
    # Outbound state
    # ------------------------------------------------------------------

    @property
    def state(self) -> ComparisonState:
        return self.store.state

    @property
    def projection(self) -> ChartProjection:
        return self._projection

    @property
    def status(self) -> ViewStatus:
        return self.store.state.status

    @property
    def error(self) -> Optional[str]:
        return self.store.state.error

    def candidates(self, slot: Slot) -> Tuple[SearchCandidate, ...]:
        return self.store.state.slot(slot).candidates

    def query(self, slot: Slot) -> str:
        return self.store.state.slot(slot).query

    def selection(self, slot: Slot) -> Optional[Selection]:
        return self.store.state.slot(slot).selection

    def subscribe(self, listener: ProjectionListener) -> Callable[[], None]:
        """Register a callback receiving each new projection."""
        self._projection_listeners.append(listener)

        def unsubscribe():
            if listener in self._projection_listeners:
                self._projection_listeners.remove(listener)

        return unsubscribe

    def get_status(self) -> Dict:
        """Get app status."""
        state = self.store.state
        return {
            'status': state.status.value,
            'error': state.error,
            'selection_a': state.selection_a.id if state.selection_a else None,
            'selection_b': state.selection_b.id if state.selection_b else None,
            'datasets': len(self._projection.datasets),
            'cycles_started': self.coordinator.cycles_started,
            'in_flight': self.coordinator.in_flight,
        }

    # ------------------------------------------------------------------
    # Projection
    # ------------------------------------------------------------------

    def _build_projection(self, state: ComparisonState) -> ChartProjection:
        comparison = state.comparison
        if comparison is not None and not comparison.matches(state.selection_a, state.selection_b):
            comparison = None
        return build_chart_projection(
            comparison.coin1 if comparison else None,
            comparison.coin2 if comparison else None,
            state.display,
            comparison.labels if comparison else (),
            currency=self.config['provider']['vs_currency'].upper(),
            window_days=self.config['comparison']['window_days'],
        )

    def _on_state_change(self, old: ComparisonState, new: ComparisonState) -> None:
        if (
            old.comparison is new.comparison
            and old.display is new.display
            and old.selection_a is new.selection_a
            and old.selection_b is new.selection_b
        ):
            return

        projection = self._build_projection(new)
        if projection == self._projection:
            return
        self._projection = projection
        for listener in list(self._projection_listeners):
            listener(projection)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def wait_idle(self) -> None:
        """Wait for in-flight searches and fetch cycles."""
        for controller in self.search_controllers.values():
            await controller.drain()
        await self.coordinator.wait_idle()

    async def close(self) -> None:
        """Stop timers, cancel in-flight work and close the provider."""
        for controller in self.search_controllers.values():
            await controller.close()
        await self.display_controller.close()
        await self.coordinator.close()
        await self.connector.close()
        logger.info("Comparison app closed")


def _config_from_env() -> Dict:
    """Build config overrides from environment variables."""
    config: Dict = {}

    debounce = os.getenv('SEARCH_DEBOUNCE_SECONDS', '').strip()
    max_results = os.getenv('SEARCH_MAX_RESULTS', '').strip()
    if debounce or max_results:
        config['search'] = {}
        if debounce:
            config['search']['debounce_seconds'] = float(debounce)
        if max_results:
            config['search']['max_results'] = int(max_results)

    window_days = os.getenv('COMPARISON_WINDOW_DAYS', '').strip()
    request_timeout = os.getenv('COMPARISON_REQUEST_TIMEOUT', '').strip()
    if window_days or request_timeout:
        config['comparison'] = {}
        if window_days:
            config['comparison']['window_days'] = int(window_days)
        if request_timeout:
            config['comparison']['request_timeout'] = float(request_timeout)

    vs_currency = os.getenv('COMPARISON_VS_CURRENCY', '').strip().lower()
    if vs_currency:
        config['provider'] = {'vs_currency': vs_currency}

    return config


def create_app(connector: Optional[DataConnector] = None) -> ComparisonApp:
    """Create an app configured from the environment."""
    configure_logging(os.getenv('LOG_LEVEL', 'INFO'))
    config = _config_from_env()
    return ComparisonApp(config if config else None, connector=connector)
