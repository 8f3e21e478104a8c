import pytest

from ngo_supply.api.errors import InvalidLegData
from ngo_supply.api.services.route_metrics import compute, routes_from_directions


def leg(meters=12340, seconds=1230, duration_text="21 mins"):
    return {
        "distance": {"value": meters, "text": "12.3 km"},
        "duration": {"value": seconds, "text": duration_text},
        "start_address": "Insein Rd, Yangon",
        "end_address": "Pyay Rd, Yangon",
    }


def test_documented_scenario():
    route = compute(leg(), "abc", 550)

    assert route.to_dict() == {
        "start": "Insein Rd, Yangon",
        "end": "Pyay Rd, Yangon",
        "distance_km": "12.34",
        "distance_miles": "7.67",
        "duration": "21 mins",
        "duration_minutes": 21,
        "charge": 6787,
        "polyline": "abc",
    }


def test_distance_kept_at_full_precision():
    route = compute(leg(meters=12345), "", 550)
    assert route.distance_km == pytest.approx(12.345)
    assert route.distance_km_text == "12.34"
    assert route.distance_mi == pytest.approx(12.345 * 0.621371)


@pytest.mark.parametrize("meters, text", [
    (1005, "1.00"),
    (1015, "1.01"),
    (2675, "2.67"),
    (1125, "1.13"),
])
def test_distance_text_rounds_the_stored_float(meters, text):
    # 1.005 is stored as 1.00499..., 1.125 is exact
    assert compute(leg(meters=meters), "", 550).distance_km_text == text


def test_charge_uses_unrounded_distance():
    # 12.345 km * 550 = 6789.75; rounding the distance first would give 6792.5.
    assert compute(leg(meters=12345), "", 550).charge == 6790


def test_duration_minutes_rounds_half_up():
    assert compute(leg(seconds=1230), "", 550).duration_minutes == 21
    assert compute(leg(seconds=1229), "", 550).duration_minutes == 20
    assert compute(leg(seconds=29), "", 550).duration_minutes == 0


def test_tariff_is_a_parameter():
    assert compute(leg(meters=10000), "", 100).charge == 1000
    assert compute(leg(meters=10000), "", 0).charge == 0


def test_charge_monotonic_in_distance():
    charges = [compute(leg(meters=m), "", 550).charge for m in range(0, 50001, 137)]
    assert charges == sorted(charges)


@pytest.mark.parametrize("bad_leg", [
    {"duration": {"value": 60, "text": "1 min"}},
    {"distance": {"value": 1000}},
    {"distance": {"value": "1000"}, "duration": {"value": 60}},
    {"distance": {"value": 1000}, "duration": {"value": None}},
    {"distance": {"value": True}, "duration": {"value": 60}},
    {"distance": {"value": float("nan")}, "duration": {"value": 60}},
    {"distance": 1000, "duration": {"value": 60}},
])
def test_invalid_leg_data(bad_leg):
    with pytest.raises(InvalidLegData):
        compute(bad_leg, "", 550)


def test_routes_from_directions(directions_result):
    routes = routes_from_directions(directions_result, 550)

    assert [r.distance_km_text for r in routes] == ["5.20", "3.10", "7.80"]
    assert [r.charge for r in routes] == [2860, 1705, 4290]
    assert [r.duration_minutes for r in routes] == [10, 12, 14]
    assert all(r.polyline == p["overview_polyline"]["points"]
               for r, p in zip(routes, directions_result))


def test_routes_from_directions_uses_configured_rate(monkeypatch, directions_result):
    monkeypatch.setenv("ROUTE_RATE_PER_KM", "1000")
    routes = routes_from_directions(directions_result)
    assert [r.charge for r in routes] == [5200, 3100, 7800]


def test_route_without_legs_is_invalid():
    with pytest.raises(InvalidLegData):
        routes_from_directions([{"legs": [], "overview_polyline": {"points": ""}}], 550)
