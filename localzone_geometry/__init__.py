"""
Geometry Layer
==============

Bounded Context: Pure geographic shapes and point-in-region queries.

Responsibilities:
- Shape representation (immutable)
- Bounding boxes, centroids, planar distance
- Point-in-polygon tests (ray casting)
- NO catalog state, NO I/O

Design Philosophy:
- Pure functions where possible
- Immutable data structures
- Fail-fast validation
- Zero side effects
"""

from localzone_geometry.shapes import (
    BoundingBox,
    Geometry,
    GeometryKind,
    MultiPolygon,
    Point,
    Polygon,
    as_ring,
    centroid,
    planar_distance,
)
from localzone_geometry.containment import ContainmentEngine, ring_contains

__all__ = [
    "Point",
    "BoundingBox",
    "Polygon",
    "MultiPolygon",
    "Geometry",
    "GeometryKind",
    "as_ring",
    "centroid",
    "planar_distance",
    "ContainmentEngine",
    "ring_contains",
]
