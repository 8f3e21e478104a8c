# ngo_supply/api/services/route_ranking.py
"""Default route selection."""

from typing import Sequence

from ngo_supply.api.errors import EmptyRouteSet
from ngo_supply.api.models import Route


def pick_default(routes: Sequence[Route]) -> int:
    """Index of the shortest route by full-precision distance.

    The first of several equally short routes wins.

    Raises:
        EmptyRouteSet: ``routes`` is empty
    """
    if not routes:
        raise EmptyRouteSet("No routes to rank")

    best = 0
    for idx in range(1, len(routes)):
        if routes[idx].distance_km < routes[best].distance_km:
            best = idx
    return best


__all__ = ["pick_default"]
