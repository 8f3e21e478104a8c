from unittest.mock import MagicMock, patch

import pytest
from googlemaps import exceptions as gmaps_exceptions

from ngo_supply.api import directions
from ngo_supply.api.errors import UpstreamProviderError, ValidationError


@pytest.fixture
def client():
    mock_client = MagicMock()
    with patch("ngo_supply.api.directions.get_client", return_value=mock_client):
        yield mock_client


@pytest.mark.parametrize("start, end", [("", "Strand Rd"), ("Sule", "   "), (None, "x")])
def test_blank_endpoints(client, start, end):
    with pytest.raises(ValidationError) as exc:
        directions.fetch_directions(start, end)
    assert exc.value.message == "Start and end parameters are required."
    client.directions.assert_not_called()


def test_requests_alternatives(client, directions_result):
    client.directions.return_value = directions_result
    assert directions.fetch_directions("  Sule Pagoda ", "Strand Rd") == directions_result
    client.directions.assert_called_once_with("Sule Pagoda", "Strand Rd", alternatives=True)


def test_provider_status_error(client):
    client.directions.side_effect = gmaps_exceptions.ApiError("NOT_FOUND", "Origin not found")
    with pytest.raises(UpstreamProviderError) as exc:
        directions.fetch_directions("nowhere", "Strand Rd")
    assert exc.value.message == "Google Directions API Error"
    assert exc.value.detail == {"status": "NOT_FOUND", "error_message": "Origin not found"}


def test_transport_error(client):
    client.directions.side_effect = gmaps_exceptions.Timeout()
    with pytest.raises(UpstreamProviderError) as exc:
        directions.fetch_directions("a", "b")
    assert exc.value.message == "Failed to fetch route"


def test_no_routes(client):
    client.directions.return_value = []
    with pytest.raises(UpstreamProviderError) as exc:
        directions.fetch_directions("a", "b")
    assert exc.value.detail == {"status": "ZERO_RESULTS"}


def test_missing_api_key(monkeypatch):
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "")
    directions.reset_client()
    try:
        with pytest.raises(UpstreamProviderError):
            directions.fetch_directions("a", "b")
    finally:
        directions.reset_client()
