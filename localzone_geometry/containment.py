"""
Containment Engine Module
=========================

Stateless point-in-region logic - applies geometry to a query point.

Design:
- Bounding-box pre-filter (O(1) reject) before the exact ring test
- Even-odd ray casting over all edges in one vectorized pass
- Union semantics across a multipolygon (holes are not subtracted)
- Thread-safe (no mutations)
"""

import numpy as np

from localzone_geometry.shapes import MultiPolygon, Point, Polygon


def _edge_crossings(ring: np.ndarray, point: Point) -> np.ndarray:
    """
    Evaluate the ray-casting rule for every edge of a ring.

    Edge i runs from vertex i to vertex i+1, the last edge wraps back
    to vertex 0. Each edge is oriented so that its start has the lower
    latitude. While the test latitude equals an endpoint latitude it is
    nudged upward by one ulp, independently per edge.

    Returns:
        Boolean mask of shape (N,) where True = ray crosses that edge
    """
    start = ring
    end = np.roll(ring, -1, axis=0)

    swap = start[:, 1] > end[:, 1]
    lo = np.where(swap[:, None], end, start)
    hi = np.where(swap[:, None], start, end)
    lo_lon, lo_lat = lo[:, 0], lo[:, 1]
    hi_lon, hi_lat = hi[:, 0], hi[:, 1]

    x = point.lon
    y = np.full(len(ring), point.lat, dtype=np.float64)
    on_vertex = (y == lo_lat) | (y == hi_lat)
    while on_vertex.any():
        y = np.where(on_vertex, np.nextafter(y, np.inf), y)
        on_vertex = (y == lo_lat) | (y == hi_lat)

    in_band = (y >= lo_lat) & (y <= hi_lat)
    east_of_edge = x > np.maximum(lo_lon, hi_lon)
    west_of_edge = x < np.minimum(lo_lon, hi_lon)

    # Vertical edges and points level with the edge start divide by zero;
    # the resulting infinities order the same way the slopes do.
    with np.errstate(divide="ignore", invalid="ignore"):
        point_slope = (y - lo_lat) / (x - lo_lon)
        edge_slope = (hi_lat - lo_lat) / (hi_lon - lo_lon)
        left_of_edge = point_slope >= edge_slope

    return in_band & ~east_of_edge & (west_of_edge | left_of_edge)


def ring_contains(ring: np.ndarray, point: Point) -> bool:
    """
    Even-odd test of a point against a ring.

    Rings with fewer than 3 vertices contain nothing.
    """
    if len(ring) < 3:
        return False
    crossings = int(np.count_nonzero(_edge_crossings(ring, point)))
    return crossings % 2 == 1


class ContainmentEngine:
    """
    Stateless detector for applying region geometry to a point.

    Design Philosophy:
    - All methods are static (no instance state)
    - Cheap rejection first, exact test only for bbox candidates
    """

    @staticmethod
    def polygon_contains(polygon: Polygon, point: Point) -> bool:
        """
        Test one polygon: bounding box first, then the outer ring.

        Args:
            polygon: Polygon with precomputed bounding box
            point: Query point (lon, lat)

        Returns:
            True if the point is inside the outer ring
        """
        if not polygon.bbox.contains(point):
            return False
        return ring_contains(polygon.exterior, point)

    @staticmethod
    def contains(shape: MultiPolygon, point: Point) -> bool:
        """True if any constituent polygon contains the point."""
        return any(
            ContainmentEngine.polygon_contains(polygon, point)
            for polygon in shape.polygons
        )
