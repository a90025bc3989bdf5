"""
Geographic Shapes Module
========================

Pure geographic representations - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Rings are read-only Nx2 float64 arrays of (lon, lat)
- Bounding box and centroid computed once per polygon
- Thread-safe by design (immutability)
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

MIN_LON, MAX_LON = -180.0, 180.0
MIN_LAT, MAX_LAT = -90.0, 90.0

# Below this absolute signed area a ring is treated as degenerate
DEGENERATE_AREA = 1e-12


@dataclass(frozen=True)
class Point:
    """
    Geographic point in degrees.

    Attributes:
        lon: Longitude, valid range [-180, 180]
        lat: Latitude, valid range [-90, 90]
    """

    lon: float
    lat: float

    def in_range(self) -> bool:
        """True if both coordinates lie within the valid degree bounds."""
        return MIN_LON <= self.lon <= MAX_LON and MIN_LAT <= self.lat <= MAX_LAT


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box enclosing a ring.

    Invariants:
        - min_lon <= max_lon
        - min_lat <= max_lat
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @classmethod
    def from_ring(cls, ring: np.ndarray) -> "BoundingBox":
        """
        Compute the box of a ring in one pass per axis.

        An empty ring yields a box collapsed to the origin.
        """
        if len(ring) == 0:
            return cls(0.0, 0.0, 0.0, 0.0)

        lo = ring.min(axis=0)
        hi = ring.max(axis=0)
        return cls(
            min_lon=float(lo[0]),
            min_lat=float(lo[1]),
            max_lon=float(hi[0]),
            max_lat=float(hi[1]),
        )

    def contains(self, point: Point) -> bool:
        """Inclusive containment on both axes."""
        if point.lat < self.min_lat or self.max_lat < point.lat:
            return False
        if point.lon < self.min_lon or self.max_lon < point.lon:
            return False
        return True


def _is_number(value) -> bool:
    # bool is an int subclass; JSON true/false are not coordinates
    if isinstance(value, (bool, np.bool_)):
        return False
    return isinstance(value, (int, float, np.integer, np.floating))


def _check_numeric(coordinates) -> None:
    if isinstance(coordinates, np.ndarray):
        if coordinates.dtype.kind not in "iuf":
            raise ValueError(f"ring coordinates must be numeric, got dtype {coordinates.dtype}")
        return

    for vertex in coordinates:
        if not isinstance(vertex, (list, tuple, np.ndarray)):
            raise ValueError(f"ring vertex must be a [lon, lat] pair, got {vertex!r}")
        for value in vertex:
            if not _is_number(value):
                raise ValueError(f"ring coordinate must be a number, got {value!r}")


def as_ring(coordinates) -> np.ndarray:
    """
    Convert a coordinate sequence into a read-only Nx2 ring.

    Extra dimensions (altitude) are dropped.

    Raises:
        ValueError: If coordinates are not a sequence of finite numeric pairs
    """
    _check_numeric(coordinates)
    ring = np.array(coordinates, dtype=np.float64)
    if ring.size == 0:
        ring = ring.reshape((0, 2))
    if ring.ndim != 2 or ring.shape[1] < 2:
        raise ValueError(f"ring must be a sequence of [lon, lat] pairs, got shape {ring.shape}")

    ring = np.ascontiguousarray(ring[:, :2])
    if not np.isfinite(ring).all():
        raise ValueError("ring coordinates must be finite")
    ring.flags.writeable = False
    return ring


def _open_vertices(ring: np.ndarray) -> np.ndarray:
    """Ring vertices without a physically repeated closing vertex."""
    if len(ring) > 1 and np.array_equal(ring[0], ring[-1]):
        return ring[:-1]
    return ring


def centroid(ring: np.ndarray) -> Point:
    """
    Area-weighted centroid of a ring (shoelace formula).

    Degenerate rings (near-zero signed area) fall back to the vertex mean.
    Coordinates are shifted to the first vertex to keep products small.
    """
    if len(ring) == 0:
        return Point(0.0, 0.0)

    origin = ring[0]
    local = ring - origin
    x, y = local[:, 0], local[:, 1]
    x_next, y_next = np.roll(x, -1), np.roll(y, -1)

    cross = x * y_next - x_next * y
    area = cross.sum() / 2.0

    if abs(area) < DEGENERATE_AREA:
        mean = _open_vertices(ring).mean(axis=0)
        return Point(lon=float(mean[0]), lat=float(mean[1]))

    cx = ((x + x_next) * cross).sum() / (6.0 * area)
    cy = ((y + y_next) * cross).sum() / (6.0 * area)
    return Point(lon=float(cx + origin[0]), lat=float(cy + origin[1]))


def planar_distance(a: Point, b: Point) -> float:
    """Euclidean distance in degree space (not geodesic)."""
    return math.hypot(a.lon - b.lon, a.lat - b.lat)


@dataclass(frozen=True, eq=False)
class Polygon:
    """
    Immutable polygon: one outer ring plus optional holes.

    Design:
    - Bounding box and centroid computed once at init
    - Holes are kept in the model but never subtracted during containment

    Attributes:
        exterior: Nx2 read-only ring of (lon, lat)
        holes: Inner rings, same layout as exterior
    """

    exterior: np.ndarray
    holes: Tuple[np.ndarray, ...] = ()

    def __post_init__(self):
        """Freeze rings and precompute bounding box and centroid."""
        object.__setattr__(self, "exterior", as_ring(self.exterior))
        object.__setattr__(self, "holes", tuple(as_ring(h) for h in self.holes))
        object.__setattr__(self, "_bbox", BoundingBox.from_ring(self.exterior))
        object.__setattr__(self, "_centroid", centroid(self.exterior))

    @property
    def bbox(self) -> BoundingBox:
        return self._bbox

    @property
    def centroid(self) -> Point:
        return self._centroid


@dataclass(frozen=True)
class MultiPolygon:
    """Ordered polygons forming one shape (archipelagos, exclaves)."""

    polygons: Tuple[Polygon, ...]

    def __post_init__(self):
        object.__setattr__(self, "polygons", tuple(self.polygons))

    def __len__(self) -> int:
        return len(self.polygons)

    @property
    def centroids(self) -> Tuple[Point, ...]:
        return tuple(p.centroid for p in self.polygons)


class GeometryKind(str, Enum):
    """Geometry variants understood by the catalog."""

    POLYGON = "Polygon"
    MULTIPOLYGON = "MultiPolygon"


@dataclass(frozen=True, eq=False)
class Geometry:
    """
    Tagged geometry variant as it arrives from a feature collection.

    Payload by kind:
    - POLYGON: tuple of rings (exterior first, then holes)
    - MULTIPOLYGON: tuple of polygons, each a tuple of rings

    Example:
        >>> g = Geometry(GeometryKind.POLYGON, (square,))
        >>> shape = g.to_multipolygon()
        >>> len(shape)
        1
    """

    kind: GeometryKind
    coordinates: tuple

    def to_multipolygon(self) -> MultiPolygon:
        """Normalize either variant into a MultiPolygon."""
        if self.kind is GeometryKind.POLYGON:
            polygon_rings = (self.coordinates,)
        elif self.kind is GeometryKind.MULTIPOLYGON:
            polygon_rings = self.coordinates
        else:
            raise ValueError(f"Unsupported geometry kind: {self.kind}")

        polygons = []
        for rings in polygon_rings:
            if len(rings) == 0:
                raise ValueError("polygon must have at least an exterior ring")
            polygons.append(Polygon(exterior=rings[0], holes=tuple(rings[1:])))
        return MultiPolygon(polygons=tuple(polygons))
