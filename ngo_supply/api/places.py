# ngo_supply/api/places.py
"""Place autocomplete for the start/end address fields."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from googlemaps import exceptions as gmaps_exceptions

from ngo_supply.api.config import get_places_config
from ngo_supply.api.directions import get_client
from ngo_supply.api.errors import UpstreamProviderError

logger = logging.getLogger(__name__)


class PlacesAutocompleteProvider(ABC):
    """Source of address suggestions for free-text input."""

    @abstractmethod
    def predictions(self, text: str) -> List[Dict[str, Any]]:
        """Return suggestions for ``text``; an empty list when there are none."""


def _simplify(prediction: Dict[str, Any]) -> Dict[str, Any]:
    formatting = prediction.get("structured_formatting") or {}
    description = prediction.get("description", "")
    return {
        "place_id": prediction.get("place_id"),
        "description": description,
        "main_text": formatting.get("main_text") or description,
        "secondary_text": formatting.get("secondary_text", ""),
        "is_establishment": "establishment" in (prediction.get("types") or []),
    }


class GooglePlacesAutocomplete(PlacesAutocompleteProvider):
    """Autocomplete backed by the Google Places API, restricted by country."""

    def __init__(self, client_factory: Callable = get_client, config: Optional[Dict[str, Any]] = None):
        self._client_factory = client_factory
        self.config = config or get_places_config()

    def predictions(self, text: str) -> List[Dict[str, Any]]:
        text = (text or "").strip()
        if not text:
            return []

        client = self._client_factory()
        try:
            results = client.places_autocomplete(
                text,
                components={"country": self.config["country"]},
                types=self.config["types"] or None,
                language=self.config.get("language"),
            )
        except gmaps_exceptions.ApiError as e:
            logger.error(f"Places autocomplete error for {text!r}: {e.status} {e.message}")
            raise UpstreamProviderError(
                "Places autocomplete failed", detail={"status": e.status, "error_message": e.message}
            ) from e
        except (gmaps_exceptions.TransportError, gmaps_exceptions.Timeout) as e:
            logger.error(f"Places autocomplete transport error for {text!r}: {e}")
            raise UpstreamProviderError("Places autocomplete failed", detail=str(e)) from e

        logger.debug(f"{len(results)} prediction(s) for {text!r}")
        return [_simplify(p) for p in results]


__all__ = ["PlacesAutocompleteProvider", "GooglePlacesAutocomplete"]
