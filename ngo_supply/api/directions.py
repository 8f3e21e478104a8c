# ngo_supply/api/directions.py
from __future__ import annotations

import logging
import time
from typing import Any, Dict, List

import googlemaps
from googlemaps import exceptions as gmaps_exceptions

from ngo_supply.api.config import get_google_maps_config
from ngo_supply.api.errors import UpstreamProviderError, ValidationError

logger = logging.getLogger(__name__)

_gmaps: googlemaps.Client | None = None

MISSING_ENDPOINTS_MESSAGE = "Start and end parameters are required."


def get_client() -> googlemaps.Client:
    """Return a cached googlemaps.Client instance."""
    global _gmaps
    if _gmaps is None:
        cfg = get_google_maps_config()
        api_key = cfg.get("api_key", "")
        if not api_key:
            logger.error("No Google Maps API key found in config")
            raise UpstreamProviderError(
                "Failed to fetch route", detail="Google Maps API key is not configured"
            )
        logger.info(f"Initializing Google Maps client with key: {api_key[:10]}...")
        try:
            _gmaps = googlemaps.Client(key=api_key, timeout=cfg.get("timeout"))
        except ValueError as e:
            logger.error(f"Failed to initialize Google Maps client: {e}")
            raise UpstreamProviderError("Failed to fetch route", detail=str(e)) from e
    return _gmaps


def reset_client() -> None:
    """Drop the cached client so the next call re-reads configuration."""
    global _gmaps
    _gmaps = None


def fetch_directions(start: str, end: str) -> List[Dict[str, Any]]:
    """Fetch alternative driving routes between two free-text addresses.

    Returns the provider's list of route objects. Either every alternative is
    returned or an error is raised; there is no partial result.

    Raises:
        ValidationError: start or end is blank
        UpstreamProviderError: non-OK provider status, no routes, or network failure
    """
    start = (start or "").strip()
    end = (end or "").strip()
    if not start or not end:
        raise ValidationError(MISSING_ENDPOINTS_MESSAGE)

    client = get_client()
    started = time.time()

    try:
        logger.debug(f"Requesting directions: {start!r} -> {end!r}")
        routes = client.directions(start, end, alternatives=True)
    except gmaps_exceptions.ApiError as e:
        logger.error(f"Google Directions API Error: {e.status} {e.message}")
        raise UpstreamProviderError(
            "Google Directions API Error",
            detail={"status": e.status, "error_message": e.message},
        ) from e
    except (gmaps_exceptions.TransportError, gmaps_exceptions.Timeout) as e:
        logger.error(f"Error fetching route from Google: {e}")
        raise UpstreamProviderError("Failed to fetch route", detail=str(e) or e.__class__.__name__) from e

    if not routes:
        logger.warning(f"No routes found between {start!r} and {end!r}")
        raise UpstreamProviderError(
            "Google Directions API Error", detail={"status": "ZERO_RESULTS"}
        )

    duration = time.time() - started
    logger.info(f"Fetched {len(routes)} route(s) in {duration:.2f}s")
    return routes


__all__ = ["fetch_directions", "get_client", "reset_client", "MISSING_ENDPOINTS_MESSAGE"]
