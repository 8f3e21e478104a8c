# ngo_supply/api/services/route_metrics.py
"""Turn directions-provider legs into Route objects with distance, duration and charge."""

import logging
import math
import numbers
from typing import Any, Dict, List, Optional

from ngo_supply.api.config import get_tariff_config
from ngo_supply.api.errors import InvalidLegData
from ngo_supply.api.models import Route, round_half_up

logger = logging.getLogger(__name__)


def _numeric_value(leg: Dict[str, Any], key: str) -> float:
    """Return ``leg[key]["value"]`` as a number or raise InvalidLegData."""
    block = leg.get(key) if isinstance(leg, dict) else None
    value = block.get("value") if isinstance(block, dict) else None
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise InvalidLegData(f"Leg {key}.value is missing or not numeric: {value!r}")
    return float(value)


def compute(leg: Dict[str, Any], polyline: str, tariff_per_km: float) -> Route:
    """Build a Route from one provider leg.

    Args:
        leg: ``legs[0]`` of a provider route
        polyline: ``overview_polyline.points`` of the same provider route
        tariff_per_km: Charge per kilometre

    Returns:
        Route with full-precision distance; the charge is rounded once from
        the unrounded distance.

    Raises:
        InvalidLegData: distance or duration value is missing or non-numeric
    """
    meters = _numeric_value(leg, "distance")
    seconds = _numeric_value(leg, "duration")

    distance_km = meters / 1000

    return Route(
        start=leg.get("start_address", ""),
        end=leg.get("end_address", ""),
        distance_km=distance_km,
        duration_text=(leg.get("duration") or {}).get("text", ""),
        duration_minutes=round_half_up(seconds / 60),
        charge=round_half_up(distance_km * tariff_per_km),
        polyline=polyline or "",
    )


def routes_from_directions(directions: List[Dict[str, Any]],
                           tariff_per_km: Optional[float] = None) -> List[Route]:
    """Compute a Route for every alternative in a directions response.

    Args:
        directions: Provider route objects, each with ``legs`` and ``overview_polyline``
        tariff_per_km: Charge per kilometre; defaults to ROUTE_RATE_PER_KM

    Returns:
        Routes in provider order
    """
    if tariff_per_km is None:
        tariff_per_km = get_tariff_config()["rate_per_km"]

    routes = []
    for idx, provider_route in enumerate(directions):
        legs = provider_route.get("legs") or []
        if not legs:
            raise InvalidLegData(f"Route {idx} has no legs")
        polyline = (provider_route.get("overview_polyline") or {}).get("points", "")
        route = compute(legs[0], polyline, tariff_per_km)
        logger.debug(
            f"Route {idx}: {route.distance_km_text} km, "
            f"{route.duration_minutes} min, charge {route.charge}"
        )
        routes.append(route)

    return routes


__all__ = ["compute", "routes_from_directions"]
