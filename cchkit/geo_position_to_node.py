"""Nearest-node lookup by geographic position using a vantage-point tree."""

import math
from dataclasses import dataclass

_EARTH_RADIUS = 6371000.785  # metres
_MAX_POINTS_PER_LEAF = 8


def geo_dist(a_lat, a_lon, b_lat, b_lon):
    """Great-circle distance in metres between two positions given in degrees."""
    a_lat = math.radians(a_lat)
    a_lon = math.radians(a_lon)
    b_lat = math.radians(b_lat)
    b_lon = math.radians(b_lon)
    dlat = b_lat - a_lat
    dlon = b_lon - a_lon
    h = math.sin(dlat * 0.5) ** 2 + math.sin(dlon * 0.5) ** 2 * math.cos(a_lat) * math.cos(b_lat)
    h = min(max(h, 0.0), 1.0)
    return _EARTH_RADIUS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


@dataclass(frozen=True)
class NearestNeighborhoodQueryResult:
    """A node id together with its distance in metres to the query position."""

    id: int
    distance: float


@dataclass(slots=True)
class _PointData:
    latitude: float
    longitude: float
    id: int
    distance_to_pivot: float


class GeoPositionToNode:
    """Spatial index over node positions answering radius queries."""

    def __init__(self, latitude, longitude):
        if len(latitude) != len(longitude):
            raise ValueError("latitude and longitude must have the same length")
        data = [_PointData(lat, lon, i, 0.0) for i, (lat, lon) in enumerate(zip(latitude, longitude))]
        if data:
            first = data[0]
            for point in data:
                point.distance_to_pivot = geo_dist(first.latitude, first.longitude, point.latitude, point.longitude)
        self._build(data, 0, len(data))
        self._positions = [(p.latitude, p.longitude) for p in data]
        self._ids = [p.id for p in data]

    @property
    def point_count(self):
        return len(self._ids)

    @staticmethod
    def _build(data, begin, end):
        if end - begin <= _MAX_POINTS_PER_LEAF:
            return
        mid = begin + (end - begin) // 2
        data[begin + 1:end] = sorted(data[begin + 1:end], key=lambda p: p.distance_to_pivot)
        GeoPositionToNode._build(data, begin, mid)
        pivot = data[mid]
        for point in data[mid:end]:
            point.distance_to_pivot = geo_dist(pivot.latitude, pivot.longitude, point.latitude, point.longitude)
        GeoPositionToNode._build(data, mid, end)

    def _distance(self, position, index):
        lat, lon = self._positions[index]
        return geo_dist(position[0], position[1], lat, lon)

    def _split(self, query, begin, end):
        mid = begin + (end - begin) // 2
        pivot = self._positions[begin]
        pivot_query = geo_dist(pivot[0], pivot[1], query[0], query[1])
        pivot_boundary = self._distance(pivot, mid)
        return mid, pivot_query, pivot_boundary

    def find_nearest_neighbor_within_radius(self, query_latitude, query_longitude, query_radius):
        """Return the nearest node within ``query_radius`` metres, or ``None``."""
        if query_radius < 0:
            raise ValueError("radius must not be negative")
        query = (query_latitude, query_longitude)
        best_id = None
        best_distance = query_radius

        def recurse(begin, end):
            nonlocal best_id, best_distance
            if end - begin <= _MAX_POINTS_PER_LEAF:
                for i in range(begin, end):
                    distance = self._distance(query, i)
                    if distance <= best_distance:
                        best_id, best_distance = self._ids[i], distance
                return
            mid, pivot_query, pivot_boundary = self._split(query, begin, end)
            if pivot_query >= pivot_boundary:
                recurse(mid, end)
                if pivot_query - pivot_boundary < best_distance:
                    recurse(begin, mid)
            else:
                recurse(begin, mid)
                if pivot_boundary - pivot_query < best_distance:
                    recurse(mid, end)

        recurse(0, self.point_count)
        if best_id is None:
            return None
        return NearestNeighborhoodQueryResult(best_id, best_distance)

    def find_all_nodes_within_radius(self, query_latitude, query_longitude, query_radius):
        """Return every node within ``query_radius`` metres of the query position."""
        if query_radius < 0:
            raise ValueError("radius must not be negative")
        query = (query_latitude, query_longitude)
        result = []

        def recurse(begin, end):
            if end - begin <= _MAX_POINTS_PER_LEAF:
                for i in range(begin, end):
                    distance = self._distance(query, i)
                    if distance <= query_radius:
                        result.append(NearestNeighborhoodQueryResult(self._ids[i], distance))
                return
            mid, pivot_query, pivot_boundary = self._split(query, begin, end)
            if pivot_query - pivot_boundary <= query_radius:
                recurse(begin, mid)
            if pivot_boundary - pivot_query <= query_radius:
                recurse(mid, end)

        recurse(0, self.point_count)
        return result