import pytest
from googlemaps.convert import encode_polyline

from ngo_supply.api.models import Route
from ngo_supply.api.services.map_service import MapProvider

START = (16.8409, 96.1735)
END = (16.7800, 96.1500)

# Three alternatives sharing their endpoints, with distances 5.2, 3.1 and 7.8 km.
ROUTE_POINTS = [
    [START, (16.8300, 96.1900), (16.8000, 96.1800), END],
    [START, (16.8100, 96.1600), END],
    [START, (16.8600, 96.2200), (16.8200, 96.2300), (16.7900, 96.1900), END],
]
ROUTE_METERS = [5200, 3100, 7800]


class FakeMapProvider(MapProvider):
    """Records every drawing command."""

    def __init__(self, ready=True):
        super().__init__()
        self.calls = []
        self.polylines = {}
        self.markers = {}
        self._counter = 0
        if ready:
            self.mark_ready()

    def _handle(self, kind):
        self._counter += 1
        return f"{kind}-{self._counter}"

    def draw_polyline(self, points, style):
        handle = self._handle("route")
        self.polylines[handle] = (list(points), dict(style))
        self.calls.append(("draw_polyline", handle))
        return handle

    def remove_overlay(self, handle):
        self.polylines.pop(handle, None)
        self.markers.pop(handle, None)
        self.calls.append(("remove_overlay", handle))

    def draw_marker(self, point, style):
        handle = self._handle("marker")
        self.markers[handle] = (point, dict(style))
        self.calls.append(("draw_marker", handle))
        return handle

    def fit_bounds(self, points, padding):
        self.calls.append(("fit_bounds", list(points), padding))

    def invalidate_size(self):
        self.calls.append(("invalidate_size",))

    def last_fit(self):
        fits = [c for c in self.calls if c[0] == "fit_bounds"]
        return fits[-1] if fits else None

    def styles_by_route(self):
        return {style["route_index"]: style for _, style in self.polylines.values()}


def provider_route(points, meters, seconds=900, summary=""):
    """A directions-provider route object."""
    return {
        "summary": summary,
        "legs": [{
            "distance": {"value": meters, "text": f"{meters / 1000:.1f} km"},
            "duration": {"value": seconds, "text": f"{round(seconds / 60)} mins"},
            "start_address": "Sule Pagoda Rd, Yangon",
            "end_address": "Strand Rd, Yangon",
        }],
        "overview_polyline": {"points": encode_polyline(points)},
    }


def make_route(distance_km, polyline="", charge=None):
    return Route(
        start="Sule Pagoda Rd, Yangon",
        end="Strand Rd, Yangon",
        distance_km=distance_km,
        duration_text="15 mins",
        duration_minutes=15,
        charge=round(distance_km * 550) if charge is None else charge,
        polyline=polyline,
    )


@pytest.fixture
def map_provider():
    return FakeMapProvider()


@pytest.fixture
def directions_result():
    return [
        provider_route(points, meters, seconds=600 + i * 120)
        for i, (points, meters) in enumerate(zip(ROUTE_POINTS, ROUTE_METERS))
    ]


@pytest.fixture
def candidate_routes():
    return [
        make_route(meters / 1000, encode_polyline(points))
        for points, meters in zip(ROUTE_POINTS, ROUTE_METERS)
    ]
