import random

import pytest

from cchkit.geo_position_to_node import GeoPositionToNode, geo_dist


def test_geo_dist_known_values():
    assert abs(geo_dist(49.014139, 8.404696, 49.014192, 8.404806) - 9.99) < 0.1
    assert abs(geo_dist(68.951798, 23.110359, 65.777244, -155.834878) - 5033760) < 100


@pytest.mark.parametrize("lat, lon", [(0, 0), (42, 42), (-42, -42), (89.9, -179.9)])
def test_geo_dist_same_point_is_zero(lat, lon):
    assert geo_dist(lat, lon, lat, lon) == pytest.approx(0.0, abs=1e-6)


def test_geo_dist_symmetric():
    rng = random.Random(7)
    for _ in range(100):
        a = (rng.uniform(-90, 90), rng.uniform(-180, 180))
        b = (rng.uniform(-90, 90), rng.uniform(-180, 180))
        assert geo_dist(*a, *b) == pytest.approx(geo_dist(*b, *a), abs=1e-3)


@pytest.fixture(scope="module")
def points():
    rng = random.Random(42)
    lat = [rng.uniform(49.0, 49.1) for _ in range(300)]
    lon = [rng.uniform(8.3, 8.5) for _ in range(300)]
    return lat, lon


@pytest.fixture(scope="module")
def index(points):
    return GeoPositionToNode(*points)


def test_nearest_matches_brute_force(points, index):
    lat, lon = points
    rng = random.Random(3)
    for _ in range(50):
        q = (rng.uniform(49.0, 49.1), rng.uniform(8.3, 8.5))
        best = min(geo_dist(*q, a, b) for a, b in zip(lat, lon))
        result = index.find_nearest_neighbor_within_radius(*q, 100000)
        assert result.distance == pytest.approx(best)
        assert geo_dist(*q, lat[result.id], lon[result.id]) == pytest.approx(best)


def test_nearest_finds_point_itself(points, index):
    lat, lon = points
    for k in (0, 17, 150, 299):
        result = index.find_nearest_neighbor_within_radius(lat[k], lon[k], 1.0)
        assert result.id == k
        assert result.distance == pytest.approx(0.0, abs=1e-6)


def test_nearest_none_when_radius_too_small(points, index):
    lat, lon = points
    q = (49.5, 8.4)
    best = min(geo_dist(*q, a, b) for a, b in zip(lat, lon))
    assert index.find_nearest_neighbor_within_radius(*q, best / 2) is None


def test_find_all_matches_brute_force(points, index):
    lat, lon = points
    rng = random.Random(11)
    for _ in range(30):
        q = (rng.uniform(49.0, 49.1), rng.uniform(8.3, 8.5))
        radius = rng.uniform(100, 3000)
        expected = {i for i, (a, b) in enumerate(zip(lat, lon)) if geo_dist(*q, a, b) <= radius}
        found = index.find_all_nodes_within_radius(*q, radius)
        assert {r.id for r in found} == expected
        assert len(found) == len(expected)
        assert all(r.distance <= radius for r in found)


def test_empty_index():
    index = GeoPositionToNode([], [])
    assert index.find_nearest_neighbor_within_radius(0.0, 0.0, 1000.0) is None
    assert index.find_all_nodes_within_radius(0.0, 0.0, 1000.0) == []


def test_invalid_input():
    with pytest.raises(ValueError):
        GeoPositionToNode([1.0], [])
    index = GeoPositionToNode([1.0], [2.0])
    with pytest.raises(ValueError):
        index.find_nearest_neighbor_within_radius(1.0, 2.0, -1.0)
    with pytest.raises(ValueError):
        index.find_all_nodes_within_radius(1.0, 2.0, -1.0)