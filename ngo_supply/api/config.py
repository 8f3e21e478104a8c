# ngo_supply/api/config.py
"""Configuration management for the supply routing API."""
import os
from dotenv import load_dotenv

load_dotenv()


def get_google_maps_config():
    """Get Google Maps configuration."""
    return {
        "api_key": os.getenv("GOOGLE_MAPS_API_KEY", ""),
        "timeout": float(os.getenv("GOOGLE_MAPS_TIMEOUT", "10")),
    }


def get_google_maps_api_key():
    return os.getenv("GOOGLE_MAPS_API_KEY", "")


def get_tariff_config():
    """Get delivery tariff configuration.

    The rate is charged per kilometre of the chosen route.
    """
    return {
        "rate_per_km": float(os.getenv("ROUTE_RATE_PER_KM", "550")),
        "currency": os.getenv("ROUTE_CURRENCY", "MMK"),
    }


def get_backend_config():
    """Get backend persistence API configuration."""
    return {
        "base_url": os.getenv("BACKEND_API_URL", "http://127.0.0.1:8000/api").rstrip("/"),
        "token": os.getenv("BACKEND_API_TOKEN") or None,
        "timeout": float(os.getenv("BACKEND_TIMEOUT", "10")),
    }


def _parse_center(raw):
    lat, lng = (float(part) for part in raw.split(","))
    return {"lat": lat, "lng": lng}


def get_map_config():
    """Get map rendering configuration shared with the browser."""
    return {
        "fit_padding": int(os.getenv("MAP_FIT_PADDING", "50")),
        "ready_timeout": float(os.getenv("MAP_READY_TIMEOUT", "3.0")),
        "default_center": _parse_center(os.getenv("MAP_DEFAULT_CENTER", "16.8409,96.1735")),
        "default_zoom": int(os.getenv("MAP_DEFAULT_ZOOM", "11")),
        "tile_url": os.getenv(
            "MAP_TILE_URL", "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
        ),
        "tile_max_zoom": int(os.getenv("MAP_TILE_MAX_ZOOM", "19")),
    }


def get_places_config():
    """Get place autocomplete configuration."""
    return {
        "country": [c.strip() for c in os.getenv("PLACES_COUNTRY", "mm").split(",") if c.strip()],
        "types": os.getenv("PLACES_TYPES", "geocode|establishment"),
        "language": os.getenv("PLACES_LANGUAGE", "en"),
    }


def get_port():
    """Get port configuration."""
    return int(os.getenv("PORT", 5000))


def get_websocket_config():
    """Get WebSocket configuration."""
    return {
        "ping_interval": int(os.getenv("WEBSOCKET_PING_INTERVAL", "25")),
        "ping_timeout": int(os.getenv("WEBSOCKET_PING_TIMEOUT", "60")),
        "cors_allowed_origins": os.getenv("WEBSOCKET_CORS_ORIGINS", "*").split(","),
    }


def validate_routing_config():
    """Validate routing configuration is properly set."""
    if not get_google_maps_api_key():
        raise ValueError("GOOGLE_MAPS_API_KEY not set")

    tariff = get_tariff_config()
    if tariff["rate_per_km"] < 0:
        raise ValueError("ROUTE_RATE_PER_KM must not be negative")

    if get_map_config()["fit_padding"] < 0:
        raise ValueError("MAP_FIT_PADDING must not be negative")

    return True
