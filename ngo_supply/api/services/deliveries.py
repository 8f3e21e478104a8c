# ngo_supply/api/services/deliveries.py
"""Delivery cost lookups on stored supply requests.

The backend stores the chosen route of a request as ``route_infos[0]``;
its charge is the delivery cost.
"""

from typing import Any, Dict, Optional


def primary_route_info(supply_request: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    infos = (supply_request or {}).get("route_infos") or []
    return infos[0] if infos else None


def delivery_cost(supply_request: Dict[str, Any]) -> int:
    route = primary_route_info(supply_request)
    if not route:
        return 0
    return route.get("charge") or 0


def build_delivery_payload(supply_request: Dict[str, Any], truck_id: int,
                           delivery_date: str, status: str = "pending") -> Dict[str, Any]:
    """Delivery record for a supply request, costed from its route."""
    return {
        "supply_request_id": supply_request["id"],
        "truck_id": truck_id,
        "delivery_date": delivery_date,
        "status": status,
        "delivery_cost": delivery_cost(supply_request),
    }


__all__ = ["primary_route_info", "delivery_cost", "build_delivery_payload"]
