from __future__ import annotations

import math

import pytest

from trainbuilder.economy.geometry import (
    NEAREST_POINT_SAMPLES,
    bearing_deg,
    bounding_box,
    distance_km,
    intermediate_point,
    nearest_point_on_segment,
    route_length_km,
    segments_intersect,
)
from trainbuilder.schemas.core import Coordinates


PARIS = Coordinates(lat=48.8566, lon=2.3522)
LONDON = Coordinates(lat=51.5074, lon=-0.1278)
AMSTERDAM = Coordinates(lat=52.3676, lon=4.9041)
BRUSSELS = Coordinates(lat=50.8503, lon=4.3517)


@pytest.mark.parametrize(
    "a,b",
    [
        (PARIS, LONDON),
        (AMSTERDAM, BRUSSELS),
        (Coordinates(lat=-33.9, lon=151.2), Coordinates(lat=40.7, lon=-74.0)),
    ],
)
def test_distance_is_symmetric(a: Coordinates, b: Coordinates) -> None:
    assert distance_km(a, b) == pytest.approx(distance_km(b, a), abs=1e-9)


def test_distance_to_self_is_zero() -> None:
    assert distance_km(PARIS, PARIS) == 0.0


def test_distance_paris_london_is_about_344_km() -> None:
    assert 340 < distance_km(PARIS, LONDON) < 347


def test_distance_along_meridian_matches_arc_length() -> None:
    north = Coordinates(lat=math.degrees(10 / 6371), lon=0.0)
    assert distance_km(Coordinates(lat=0.0, lon=0.0), north) == pytest.approx(10.0, abs=1e-9)


def test_route_length_of_fewer_than_two_points_is_zero() -> None:
    assert route_length_km([]) == 0.0
    assert route_length_km([PARIS]) == 0.0


@pytest.mark.parametrize("split", [1, 2, 3])
def test_route_length_is_additive_over_a_split_point(split: int) -> None:
    points = [PARIS, BRUSSELS, AMSTERDAM, LONDON, PARIS]
    whole = route_length_km(points)
    parts = route_length_km(points[: split + 1]) + route_length_km(points[split:])
    assert whole == pytest.approx(parts, rel=1e-12)


@pytest.mark.parametrize(
    "target,expected",
    [
        (Coordinates(lat=1.0, lon=0.0), 0.0),
        (Coordinates(lat=0.0, lon=1.0), 90.0),
        (Coordinates(lat=-1.0, lon=0.0), 180.0),
        (Coordinates(lat=0.0, lon=-1.0), 270.0),
    ],
)
def test_bearing_cardinal_directions(target: Coordinates, expected: float) -> None:
    assert bearing_deg(Coordinates(lat=0.0, lon=0.0), target) == pytest.approx(expected, abs=1e-9)


def test_bearing_is_within_range() -> None:
    value = bearing_deg(LONDON, PARIS)
    assert 0.0 <= value < 360.0
    assert 130 < value < 160


def test_intermediate_point_endpoints_and_midpoint() -> None:
    a = Coordinates(lat=0.0, lon=0.0)
    b = Coordinates(lat=0.0, lon=10.0)
    assert intermediate_point(a, b, 0.0) == a
    assert intermediate_point(a, b, 1.0) == b

    mid = intermediate_point(a, b, 0.5)
    assert mid.lat == pytest.approx(0.0, abs=1e-9)
    assert mid.lon == pytest.approx(5.0, abs=1e-9)


def test_intermediate_point_of_coincident_endpoints_returns_start() -> None:
    assert intermediate_point(PARIS, PARIS, 0.5) == PARIS


def test_nearest_point_on_segment_samples_the_segment() -> None:
    start = Coordinates(lat=0.0, lon=0.0)
    end = Coordinates(lat=0.0, lon=10.0)
    result = nearest_point_on_segment(Coordinates(lat=1.0, lon=5.0), start, end)

    assert result.point.lat == pytest.approx(0.0, abs=1e-9)
    assert result.point.lon == pytest.approx(5.0, abs=1e-9)
    assert result.distance_km == pytest.approx(6371 * math.radians(1.0), rel=1e-9)


def test_nearest_point_accuracy_is_bounded_by_sampling_resolution() -> None:
    start = Coordinates(lat=0.0, lon=0.0)
    end = Coordinates(lat=0.0, lon=1.0)
    # Closest exact point sits between two samples.
    probe = Coordinates(lat=0.0, lon=0.005)
    result = nearest_point_on_segment(probe, start, end)
    assert result.distance_km <= distance_km(start, end) / NEAREST_POINT_SAMPLES


def test_bounding_box_of_empty_input_is_degenerate() -> None:
    box = bounding_box([])
    assert box.to_dict() == {"minLat": 0.0, "maxLat": 0.0, "minLon": 0.0, "maxLon": 0.0}


def test_bounding_box_covers_points() -> None:
    box = bounding_box([PARIS, LONDON, AMSTERDAM])
    assert box.min_lat == PARIS.lat
    assert box.max_lat == AMSTERDAM.lat
    assert box.min_lon == LONDON.lon
    assert box.max_lon == AMSTERDAM.lon


def test_segments_crossing_intersect() -> None:
    assert segments_intersect(
        Coordinates(lat=0.0, lon=0.0),
        Coordinates(lat=1.0, lon=1.0),
        Coordinates(lat=0.0, lon=1.0),
        Coordinates(lat=1.0, lon=0.0),
    )


def test_segments_with_disjoint_boxes_never_intersect() -> None:
    assert not segments_intersect(
        Coordinates(lat=0.0, lon=0.0),
        Coordinates(lat=1.0, lon=1.0),
        Coordinates(lat=5.0, lon=5.0),
        Coordinates(lat=6.0, lon=6.0),
    )


def test_segments_with_overlapping_boxes_but_no_crossing() -> None:
    assert not segments_intersect(
        Coordinates(lat=0.0, lon=0.0),
        Coordinates(lat=1.0, lon=1.0),
        Coordinates(lat=1.0, lon=0.0),
        Coordinates(lat=0.6, lon=0.3),
    )


def test_segments_sharing_an_endpoint_intersect() -> None:
    shared = Coordinates(lat=1.0, lon=1.0)
    assert segments_intersect(Coordinates(lat=0.0, lon=0.0), shared, shared, Coordinates(lat=2.0, lon=0.0))
