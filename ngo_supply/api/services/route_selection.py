# ngo_supply/api/services/route_selection.py
"""Interactive route selection on the request dialog's map.

The state machine owns the candidate routes of one dialog, the sticky
"shortest" route, the highlighted route and every overlay it has drawn.
All of its observable effects go through the injected MapProvider.
"""

import logging
import threading
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ngo_supply.api.config import get_map_config
from ngo_supply.api.errors import IndexOutOfRange, MalformedPolyline
from ngo_supply.api.models import Coordinate, Route
from ngo_supply.api.polyline import decode
from ngo_supply.api.services.map_service import MapProvider
from ngo_supply.api.services.route_ranking import pick_default

logger = logging.getLogger(__name__)

PRIMARY_COLOR = "#4285F4"
SECONDARY_COLOR = "#34A853"
PRIMARY_HIGHLIGHT_COLOR = "#1565C0"
SECONDARY_HIGHLIGHT_COLOR = "#2E7D32"

START_MARKER_STYLE = {
    "radius": 8,
    "fillColor": "#34A853",
    "color": "#fff",
    "weight": 2,
    "opacity": 1,
    "fillOpacity": 1,
}
END_MARKER_STYLE = dict(START_MARKER_STYLE, fillColor="#EA4335")


class SelectionState(str, Enum):
    EMPTY = "empty"
    DISPLAYED = "displayed"


def load_style(is_primary: bool) -> Dict[str, Any]:
    """Style of a route right after a route set is drawn."""
    return {
        "color": PRIMARY_COLOR if is_primary else SECONDARY_COLOR,
        "weight": 6 if is_primary else 4,
        "opacity": 0.8,
    }


def highlight_style(is_primary: bool, is_selected: bool) -> Dict[str, Any]:
    """Style of a route once one of the set is highlighted."""
    if is_selected:
        return {
            "color": PRIMARY_HIGHLIGHT_COLOR if is_primary else SECONDARY_HIGHLIGHT_COLOR,
            "weight": 8,
            "opacity": 1.0,
        }
    return {
        "color": PRIMARY_COLOR if is_primary else SECONDARY_COLOR,
        "weight": 4,
        "opacity": 0.5,
    }


class RouteSelectionStateMachine:
    """Keeps the map, the route list and the chosen route consistent.

    States are EMPTY (nothing loaded) and DISPLAYED (routes drawn, one
    highlighted). ``load`` and ``highlight`` are no-ops returning False while
    the map provider is not ready.
    """

    def __init__(self, map_provider: MapProvider, padding: Optional[int] = None):
        self.map = map_provider
        self.padding = get_map_config()["fit_padding"] if padding is None else padding

        self.lock = threading.RLock()
        self._routes: List[Route] = []
        self._points: List[List[Coordinate]] = []
        self._primary_index: Optional[int] = None
        self._selected_index: Optional[int] = None
        self._overlays: List[str] = []
        self._markers: List[str] = []

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    @property
    def state(self) -> SelectionState:
        return SelectionState.DISPLAYED if self._routes else SelectionState.EMPTY

    @property
    def routes(self) -> Tuple[Route, ...]:
        return tuple(self._routes)

    @property
    def primary_index(self) -> Optional[int]:
        """Index of the shortest route; unaffected by highlighting."""
        return self._primary_index

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected_index

    @property
    def selected_route(self) -> Optional[Route]:
        with self.lock:
            if self._selected_index is None:
                return None
            return self._routes[self._selected_index]

    def is_valid_index(self, index) -> bool:
        return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < len(self._routes)

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #
    def load(self, routes: Sequence[Route]) -> bool:
        """Replace the route set and draw every route.

        The shortest route becomes both the primary route and the selection.

        Raises:
            EmptyRouteSet: ``routes`` is empty
        """
        routes = list(routes)
        primary = pick_default(routes)

        with self.lock:
            if not self._map_ready("load"):
                return False

            self._remove_all()
            self.map.invalidate_size()

            self._routes = routes
            self._points = [self._decode(idx, route) for idx, route in enumerate(routes)]
            self._primary_index = primary
            self._selected_index = primary

            drawn = 0
            for idx, points in enumerate(self._points):
                if not points:
                    continue
                self._draw_route(idx, points, load_style(idx == primary))
                drawn += 1

            # Alternatives share their endpoints, so any decodable route will do.
            endpoints = next((points for points in self._points if points), [])
            self._draw_markers(endpoints)

            all_points = [point for points in self._points for point in points]
            if all_points:
                self.map.fit_bounds(all_points, self.padding)

            logger.info(f"Displayed {drawn}/{len(routes)} routes, shortest is route {primary}")
            return True

    def highlight(self, index: int) -> bool:
        """Emphasise route ``index`` and zoom to it.

        Raises:
            IndexOutOfRange: ``index`` is not a position in the current route set
        """
        with self.lock:
            if not self._map_ready("highlight"):
                return False
            if not self.is_valid_index(index):
                raise IndexOutOfRange(
                    f"Route index {index!r} out of range for {len(self._routes)} route(s)"
                )

            self._remove_all()
            for idx, points in enumerate(self._points):
                if not points:
                    continue
                style = highlight_style(idx == self._primary_index, idx == index)
                self._draw_route(idx, points, style)

            selected_points = self._points[index]
            self._draw_markers(selected_points)
            if selected_points:
                self.map.fit_bounds(selected_points, self.padding)
            else:
                logger.warning(f"Route {index} has no drawable points; viewport unchanged")

            self._selected_index = index
            logger.debug(f"Highlighted route {index}")
            return True

    def clear(self) -> None:
        """Remove every overlay and marker and forget the route set."""
        with self.lock:
            self._remove_all()
            had_routes = bool(self._routes)
            self._routes = []
            self._points = []
            self._primary_index = None
            self._selected_index = None
            if had_routes:
                logger.debug("Cleared route set")

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _map_ready(self, operation: str) -> bool:
        if self.map.is_ready():
            return True
        logger.warning(f"Map is not ready; ignoring {operation}()")
        return False

    @staticmethod
    def _decode(idx: int, route: Route) -> List[Coordinate]:
        if not route.polyline:
            logger.info(f"Route {idx} has no polyline data")
            return []
        try:
            return decode(route.polyline)
        except MalformedPolyline as exc:
            logger.error(f"Skipping route {idx}: {exc}")
            return []

    def _draw_route(self, idx: int, points: List[Coordinate], style: Dict[str, Any]) -> None:
        style = dict(style, route_index=idx)
        self._overlays.append(self.map.draw_polyline(points, style))

    def _draw_markers(self, points: List[Coordinate]) -> None:
        if not points:
            return
        self._markers.append(self.map.draw_marker(points[0], START_MARKER_STYLE))
        self._markers.append(self.map.draw_marker(points[-1], END_MARKER_STYLE))

    def _remove_all(self) -> None:
        for handle in self._overlays + self._markers:
            self.map.remove_overlay(handle)
        self._overlays = []
        self._markers = []


__all__ = [
    "RouteSelectionStateMachine",
    "SelectionState",
    "load_style",
    "highlight_style",
    "START_MARKER_STYLE",
    "END_MARKER_STYLE",
]
