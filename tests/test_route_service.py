import threading

import pytest

from conftest import FakeMapProvider
from ngo_supply.api.errors import UpstreamProviderError, ValidationError
from ngo_supply.api.services.route_selection import RouteSelectionStateMachine, SelectionState
from ngo_supply.api.services.route_service import RouteCalculationService


@pytest.fixture
def machine(map_provider):
    return RouteSelectionStateMachine(map_provider, padding=50)


def test_calculate_and_display(machine, map_provider, directions_result):
    calls = []

    def fetch(start, end):
        calls.append((start, end))
        return directions_result

    service = RouteCalculationService(fetch=fetch, tariff_per_km=550)
    result = service.calculate_and_display("Sule Pagoda", "Strand Rd", machine, ready_timeout=0)

    assert calls == [("Sule Pagoda", "Strand Rd")]
    assert result.default_index == 1
    assert [r.charge for r in result.routes] == [2860, 1705, 4290]
    assert result.to_dict()["routes"][1]["distance_km"] == "3.10"
    assert machine.state is SelectionState.DISPLAYED
    assert machine.selected_index == 1
    assert map_provider.styles_by_route()[1]["color"] == "#1565C0"


def test_stale_response_is_dropped(machine, map_provider, directions_result):
    service = RouteCalculationService(tariff_per_km=550)

    def fetch(start, end):
        # The user resubmits the form while this fetch is in flight.
        service.next_sequence()
        return directions_result

    service._fetch = fetch
    assert service.calculate_and_display("a", "b", machine, ready_timeout=0) is None
    assert machine.state is SelectionState.EMPTY
    assert map_provider.calls == []


def test_later_calculation_wins(machine, directions_result):
    release_first = threading.Event()
    first_started = threading.Event()
    results = {}

    def fetch(start, end):
        if start == "first":
            first_started.set()
            release_first.wait(5)
            return directions_result[:1]
        return directions_result

    service = RouteCalculationService(fetch=fetch, tariff_per_km=550)
    worker = threading.Thread(
        target=lambda: results.setdefault(
            "first", service.calculate_and_display("first", "x", machine, ready_timeout=0)
        )
    )
    worker.start()
    assert first_started.wait(5)

    results["second"] = service.calculate_and_display("second", "x", machine, ready_timeout=0)
    release_first.set()
    worker.join(5)

    assert results["first"] is None
    assert len(results["second"].routes) == 3
    assert len(machine.routes) == 3


def test_map_never_ready(directions_result):
    provider = FakeMapProvider(ready=False)
    machine = RouteSelectionStateMachine(provider, padding=50)
    service = RouteCalculationService(fetch=lambda s, e: directions_result, tariff_per_km=550)

    assert service.calculate_and_display("a", "b", machine, ready_timeout=0.01) is None
    assert machine.state is SelectionState.EMPTY
    assert provider.calls == []


def test_waits_for_map_readiness(directions_result):
    provider = FakeMapProvider(ready=False)
    machine = RouteSelectionStateMachine(provider, padding=50)
    service = RouteCalculationService(fetch=lambda s, e: directions_result, tariff_per_km=550)

    timer = threading.Timer(0.05, provider.mark_ready)
    timer.start()
    result = service.calculate_and_display("a", "b", machine, ready_timeout=5)
    timer.join()

    assert result is not None
    assert machine.state is SelectionState.DISPLAYED


def test_errors_propagate(machine):
    def fetch(start, end):
        raise UpstreamProviderError("Google Directions API Error", detail={"status": "NOT_FOUND"})

    service = RouteCalculationService(fetch=fetch, tariff_per_km=550)
    with pytest.raises(UpstreamProviderError):
        service.calculate_and_display("a", "b", machine, ready_timeout=0)
    assert machine.state is SelectionState.EMPTY


def test_calculate_validates_through_fetch():
    def fetch(start, end):
        raise ValidationError("Start and end parameters are required.")

    with pytest.raises(ValidationError):
        RouteCalculationService(fetch=fetch, tariff_per_km=550).calculate("", "x")


def test_sequence_is_monotonic():
    service = RouteCalculationService(fetch=lambda s, e: [], tariff_per_km=1)
    first = service.next_sequence()
    second = service.next_sequence()
    assert second > first
    assert service.is_current(second)
    assert not service.is_current(first)
