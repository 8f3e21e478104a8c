"""Shared data structures for route calculation and supply requests.

Routes keep their distance at full precision; the two-decimal strings the
dashboard shows are produced only when a route is serialised.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, NamedTuple, Optional

KM_TO_MILES = 0.621371


class Coordinate(NamedTuple):
    """A (lat, lng) pair in decimal degrees."""

    lat: float
    lng: float

    def to_list(self) -> list:
        return [self.lat, self.lng]


def round_half_up(value: float) -> int:
    """Round the exact binary value to the nearest integer, halves up."""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_decimal(value: float, places: int = 2) -> str:
    """Round the exact binary value half-up to ``places`` decimals.

    Works on the float itself rather than its shortest repr, so 1.005
    (stored as 1.00499...) gives "1.00".
    """
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class Route:
    """One itinerary option between two addresses."""

    start: str
    end: str
    distance_km: float  # full precision
    duration_text: str
    duration_minutes: int
    charge: int
    polyline: str = ""

    @property
    def distance_mi(self) -> float:
        return self.distance_km * KM_TO_MILES

    @property
    def distance_km_text(self) -> str:
        return format_decimal(self.distance_km)

    @property
    def distance_mi_text(self) -> str:
        return format_decimal(self.distance_mi)

    def to_dict(self) -> dict:
        return {
            "start": self.start,
            "end": self.end,
            "distance_km": self.distance_km_text,
            "distance_miles": self.distance_mi_text,
            "duration": self.duration_text,
            "duration_minutes": self.duration_minutes,
            "charge": self.charge,
            "polyline": self.polyline,
        }


@dataclass
class ItemSelection:
    """A single item picked from a warehouse for a supply request."""

    item_id: int
    warehouse_id: int
    max_quantity: int
    quantity: int = 1

    def to_dict(self) -> dict:
        return {
            "item_id": self.item_id,
            "ware_house_id": self.warehouse_id,
            "quantity": self.quantity,
            "max_quantity": self.max_quantity,
        }


@dataclass(frozen=True)
class SupplyRequestPayload:
    """Everything the backend needs to create a supply request."""

    warehouse_id: int
    items: List[ItemSelection]
    route: Route
    ngo_id: Optional[int] = None

    def to_dict(self) -> dict:
        payload = {
            "ngo_id": self.ngo_id,
            "ware_house_id": self.warehouse_id,
            "items": [
                {
                    "ware_house_id": item.warehouse_id,
                    "item_id": item.item_id,
                    "quantity": item.quantity,
                }
                for item in self.items
            ],
        }
        payload.update(self.route.to_dict())
        return payload


@dataclass
class RouteCalculationResult:
    """Outcome of one applied route calculation."""

    sequence: int
    routes: List[Route] = field(default_factory=list)
    default_index: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "sequence": self.sequence,
            "routes": [route.to_dict() for route in self.routes],
            "default_index": self.default_index,
        }
