# ngo_supply/routes/routing.py
"""Routing HTTP endpoints and blueprint configuration."""

import logging

from flask import Blueprint, jsonify, request

from ngo_supply.api.backend import BackendClient, SUPPLY_REQUESTS
from ngo_supply.api.config import get_google_maps_config, get_map_config, get_tariff_config
from ngo_supply.api.errors import (
    BackendError,
    InvalidLegData,
    UpstreamProviderError,
    ValidationError,
)
from ngo_supply.api.places import GooglePlacesAutocomplete
from ngo_supply.api.services.deliveries import build_delivery_payload
from ngo_supply.api.services.route_service import RouteCalculationService

logger = logging.getLogger(__name__)


def create_routing_blueprint(route_service=None, places=None, backend_factory=BackendClient):
    """Create and configure the routing blueprint.

    Args:
        route_service: RouteCalculationService used by /calculate-route
        places: PlacesAutocompleteProvider used by the address fields
        backend_factory: Callable returning a BackendClient

    Returns:
        Configured Flask Blueprint
    """
    routing_bp = Blueprint("routing", __name__)
    route_service = route_service or RouteCalculationService()
    places = places or GooglePlacesAutocomplete()

    @routing_bp.route("/calculate-route")
    def calculate_route():
        """Alternative routes between two addresses, with distance and charge."""
        start = request.args.get("start", "").strip()
        end = request.args.get("end", "").strip()

        try:
            routes = route_service.calculate(start, end)
        except ValidationError as e:
            return jsonify({"error": e.message}), 400
        except UpstreamProviderError as e:
            return jsonify({"error": e.message, "detail": e.detail}), 500
        except InvalidLegData as e:
            logger.error(f"Directions response unusable: {e}")
            return jsonify({"error": "Failed to fetch route", "detail": e.message}), 500

        return jsonify({"routes": [route.to_dict() for route in routes]})

    @routing_bp.route("/api/places/autocomplete")
    def places_autocomplete():
        """Address suggestions for the start/end inputs."""
        try:
            predictions = places.predictions(request.args.get("input", ""))
        except UpstreamProviderError as e:
            return jsonify({"error": e.message, "detail": e.detail}), 502
        return jsonify({"predictions": predictions})

    @routing_bp.route("/api/config")
    def api_config():
        """Return map configuration for the frontend."""
        map_config = get_map_config()
        tariff = get_tariff_config()
        return jsonify({
            "google_maps_configured": bool(get_google_maps_config().get("api_key")),
            "tile_url": map_config["tile_url"],
            "tile_max_zoom": map_config["tile_max_zoom"],
            "default_center": map_config["default_center"],
            "default_zoom": map_config["default_zoom"],
            "fit_padding": map_config["fit_padding"],
            "rate_per_km": tariff["rate_per_km"],
            "currency": tariff["currency"],
        })

    @routing_bp.route("/api/warehouse-items")
    def available_items():
        """Warehouse stock an NGO can request, optionally for one warehouse."""
        warehouse_id = request.args.get("warehouse_id", type=int)
        backend = backend_factory()
        try:
            items = backend.list_warehouse_items()
        except BackendError as e:
            return jsonify({"error": e.message}), 502
        finally:
            backend.close()

        available = [
            item for item in items
            if (item.get("quantity") or 0) > 0
            and (warehouse_id is None or item.get("ware_house_id") == warehouse_id)
        ]
        return jsonify({"items": available})

    @routing_bp.route("/api/deliveries", methods=["POST"])
    def create_delivery():
        """Schedule a delivery costed from the request's chosen route."""
        data = request.get_json(silent=True) or {}
        missing = [k for k in ("supply_request_id", "truck_id", "delivery_date") if not data.get(k)]
        if missing:
            return jsonify({"error": f"Missing fields: {', '.join(missing)}"}), 400

        backend = backend_factory()
        try:
            supply_request = backend.get(SUPPLY_REQUESTS, data["supply_request_id"])
            if isinstance(supply_request, dict) and "data" in supply_request:
                supply_request = supply_request["data"]
            payload = build_delivery_payload(
                supply_request,
                truck_id=data["truck_id"],
                delivery_date=data["delivery_date"],
                status=data.get("status", "pending"),
            )
            created = backend.create_delivery(payload)
        except BackendError as e:
            return jsonify({"error": e.message}), e.status_code or 502
        finally:
            backend.close()

        return jsonify(created), 201

    @routing_bp.route("/health")
    def health():
        """Health check endpoint."""
        return jsonify({"status": "ok", "service": "supply-routing"})

    return routing_bp


__all__ = ['create_routing_blueprint']
