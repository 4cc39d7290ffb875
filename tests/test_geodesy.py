# tests/test_geodesy.py
import pytest

from looproute.models.routing import GeoPoint
from looproute.services.geodesy import (
    angle_difference_deg,
    bearing_deg,
    cumulative_distances_m,
    distance_km,
)
from looproute.services.polyline import decode_polyline
from route_factory import straight_line


def test_distance_known_pair():
    # Seoul City Hall -> Gangnam Station, roughly 8.8 km
    a = GeoPoint(lat=37.5663, lng=126.9779)
    b = GeoPoint(lat=37.4979, lng=127.0276)
    assert distance_km(a, b) == pytest.approx(8.78, abs=0.2)
    assert distance_km(a, b) == pytest.approx(distance_km(b, a))
    assert distance_km(a, a) == 0.0


def test_bearing_cardinal_directions():
    origin = GeoPoint(lat=0.0, lng=0.0)
    assert bearing_deg(origin, GeoPoint(lat=1.0, lng=0.0)) == pytest.approx(0.0)
    assert bearing_deg(origin, GeoPoint(lat=0.0, lng=1.0)) == pytest.approx(90.0)
    assert bearing_deg(origin, GeoPoint(lat=-1.0, lng=0.0)) == pytest.approx(180.0)
    assert bearing_deg(origin, GeoPoint(lat=0.0, lng=-1.0)) == pytest.approx(270.0)


def test_bearing_of_coincident_points_is_zero():
    p = GeoPoint(lat=37.5, lng=127.0)
    assert bearing_deg(p, p) == 0.0


@pytest.mark.parametrize(
    "from_bearing,to_bearing,expected",
    [
        (0.0, 90.0, 90.0),
        (90.0, 0.0, -90.0),
        (350.0, 10.0, 20.0),
        (10.0, 350.0, -20.0),
        (0.0, 180.0, 180.0),
    ],
)
def test_angle_difference_is_signed_and_wrapped(from_bearing, to_bearing, expected):
    assert angle_difference_deg(from_bearing, to_bearing) == pytest.approx(expected)


def test_cumulative_distances_accumulate():
    totals = cumulative_distances_m(straight_line(11))
    assert totals[0] == 0.0
    assert totals[-1] == pytest.approx(100.0, rel=1e-6)
    assert totals == sorted(totals)


def test_decode_polyline():
    points = decode_polyline("_p~iF~ps|U_ulLnnqC_mqNvxq`@")
    assert [(p.lat, p.lng) for p in points] == [
        pytest.approx((38.5, -120.2)),
        pytest.approx((40.7, -120.95)),
        pytest.approx((43.252, -126.453)),
    ]
    assert all(p.elevation is None for p in points)


def test_decode_truncated_polyline_raises():
    with pytest.raises(ValueError):
        decode_polyline("_p~iF")
