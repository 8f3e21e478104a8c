# ngo_supply/api/services/route_service.py
"""Route calculation: fetch alternatives, rank them, put them on the map."""

import itertools
import logging
import threading
import time
from typing import Callable, List, Optional

from ngo_supply.api.config import get_map_config, get_tariff_config
from ngo_supply.api.directions import fetch_directions
from ngo_supply.api.models import Route, RouteCalculationResult
from ngo_supply.api.services.route_metrics import routes_from_directions
from ngo_supply.api.services.route_ranking import pick_default
from ngo_supply.api.services.route_selection import RouteSelectionStateMachine

logger = logging.getLogger(__name__)


class RouteCalculationService:
    """Computes candidate routes and applies only the latest calculation.

    Every calculation takes a sequence number; a response whose number is
    no longer the latest issued is dropped instead of overwriting the map.
    """

    def __init__(self, fetch: Callable = fetch_directions, tariff_per_km: Optional[float] = None):
        self._fetch = fetch
        self.tariff_per_km = (
            get_tariff_config()["rate_per_km"] if tariff_per_km is None else tariff_per_km
        )
        self._sequence = itertools.count(1)
        self._latest = 0
        self._lock = threading.Lock()

    def next_sequence(self) -> int:
        with self._lock:
            self._latest = next(self._sequence)
            return self._latest

    def is_current(self, sequence: int) -> bool:
        with self._lock:
            return sequence == self._latest

    def calculate(self, start: str, end: str) -> List[Route]:
        """Fetch and measure every alternative route between two addresses.

        Raises:
            ValidationError: start or end is blank
            UpstreamProviderError: the directions provider failed
            InvalidLegData: a provider leg lacks distance or duration
        """
        directions = self._fetch(start, end)
        return routes_from_directions(directions, self.tariff_per_km)

    def calculate_and_display(self, start: str, end: str,
                              machine: RouteSelectionStateMachine,
                              ready_timeout: Optional[float] = None) -> Optional[RouteCalculationResult]:
        """Calculate routes and show them, highlighting the shortest.

        Returns None when a newer calculation started while this one was in
        flight, or when the map never became ready.
        """
        sequence = self.next_sequence()
        started = time.time()
        routes = self.calculate(start, end)

        if not self.is_current(sequence):
            logger.info(f"Dropping stale route calculation #{sequence}")
            return None

        default_index = pick_default(routes)

        if ready_timeout is None:
            ready_timeout = get_map_config()["ready_timeout"]
        if not machine.map.wait_until_ready(ready_timeout):
            logger.warning(
                f"Map not ready after {ready_timeout:.1f}s; calculation #{sequence} not displayed"
            )
            return None

        with machine.lock:
            # A newer calculation may have started while waiting for the map.
            if not self.is_current(sequence):
                logger.info(f"Dropping stale route calculation #{sequence}")
                return None
            machine.load(routes)
            machine.highlight(default_index)

        duration = time.time() - started
        logger.info(
            f"Route calculation #{sequence}: {len(routes)} route(s), "
            f"default {default_index}, {duration:.2f}s"
        )
        return RouteCalculationResult(sequence=sequence, routes=routes, default_index=default_index)


__all__ = ["RouteCalculationService"]
