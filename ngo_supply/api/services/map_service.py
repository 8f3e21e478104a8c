# ngo_supply/api/services/map_service.py
"""Map rendering collaborators.

The routing core only talks to ``MapProvider``. ``SocketIOMapProvider``
forwards every drawing command to the browser that owns the map, which
answers with ``map_ready`` once its Leaflet surface exists.
"""

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Sequence

from ngo_supply.api.models import Coordinate
from ngo_supply.api.polyline import bounds

logger = logging.getLogger(__name__)


class MapProvider(ABC):
    """Drawing surface for route overlays and markers."""

    def __init__(self):
        self._ready = threading.Event()

    def is_ready(self) -> bool:
        return self._ready.is_set()

    def mark_ready(self) -> None:
        """Resolve the readiness future. Later calls are no-ops."""
        if not self._ready.is_set():
            logger.info(f"Map surface ready: {self!r}")
        self._ready.set()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the map is ready or ``timeout`` seconds pass."""
        return self._ready.wait(timeout)

    @abstractmethod
    def draw_polyline(self, points: Sequence[Coordinate], style: Dict[str, Any]) -> str:
        """Draw a polyline and return its overlay handle."""

    @abstractmethod
    def remove_overlay(self, handle: str) -> None:
        """Remove a polyline or marker by handle."""

    @abstractmethod
    def draw_marker(self, point: Coordinate, style: Dict[str, Any]) -> str:
        """Draw a circle marker and return its handle."""

    @abstractmethod
    def fit_bounds(self, points: Sequence[Coordinate], padding: int) -> None:
        """Fit the viewport around ``points``."""

    @abstractmethod
    def invalidate_size(self) -> None:
        """Ask the map to re-measure its container."""


class SocketIOMapProvider(MapProvider):
    """Map provider that emits overlay commands to one Socket.IO client."""

    def __init__(self, socketio, room: str, namespace: str = "/supply/ws"):
        super().__init__()
        self.socketio = socketio
        self.room = room
        self.namespace = namespace
        self._handles = itertools.count(1)

    def __repr__(self):
        return f"SocketIOMapProvider(room={self.room!r})"

    def _emit(self, event: str, data: Dict[str, Any]) -> None:
        try:
            self.socketio.emit(event, data, room=self.room, namespace=self.namespace)
        except Exception as exc:
            logger.exception("Failed emitting %s: %s", event, exc)

    def _new_handle(self, kind: str) -> str:
        return f"{kind}-{next(self._handles)}"

    def draw_polyline(self, points, style):
        handle = self._new_handle("route")
        self._emit("draw_polyline", {
            "handle": handle,
            "points": [list(p) for p in points],
            "style": dict(style),
        })
        return handle

    def remove_overlay(self, handle):
        self._emit("remove_overlay", {"handle": handle})

    def draw_marker(self, point, style):
        handle = self._new_handle("marker")
        self._emit("draw_marker", {
            "handle": handle,
            "point": list(point),
            "style": dict(style),
        })
        return handle

    def fit_bounds(self, points, padding):
        box = bounds(list(points))
        if not box:
            return
        self._emit("fit_bounds", {
            "bounds": [[box["south"], box["west"]], [box["north"], box["east"]]],
            "padding": [padding, padding],
        })

    def invalidate_size(self):
        self._emit("invalidate_size", {})


__all__ = ["MapProvider", "SocketIOMapProvider"]
