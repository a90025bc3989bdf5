"""
Region Catalog - immutable snapshot of all timezone regions.

A Catalog is built once per load and never mutated afterwards; a new load
produces a wholly new Catalog. That is what lets any number of readers
query a published snapshot concurrently.

Invariants:
- zone_ids is sorted and every id appears exactly once
- every id maps to a Region with at least one polygon (and so one centroid)
- the empty Catalog is a valid state
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

import numpy as np

from localzone_geometry import ContainmentEngine, MultiPolygon, Point


@dataclass(frozen=True, eq=False)
class Region:
    """
    Full geometry for one zone identifier.

    Attributes:
        zone_id: Non-empty zone identifier (e.g. "Europe/Riga")
        shape: Normalized multipolygon, at least one polygon
    """

    zone_id: str
    shape: MultiPolygon

    def __post_init__(self):
        if not self.zone_id:
            raise ValueError("Region zone_id cannot be empty")
        if len(self.shape) == 0:
            raise ValueError(f"Region '{self.zone_id}' must have at least one polygon")

    @property
    def centroids(self) -> Tuple[Point, ...]:
        return self.shape.centroids

    def contains(self, point: Point) -> bool:
        return ContainmentEngine.contains(self.shape, point)

    def merged_with(self, other: "Region") -> "Region":
        """Region whose polygons are self's followed by other's."""
        return Region(
            zone_id=self.zone_id,
            shape=MultiPolygon(polygons=self.shape.polygons + other.shape.polygons),
        )


@dataclass(frozen=True, eq=False)
class Catalog:
    """
    Immutable, queryable snapshot mapping zone identifiers to regions.

    Design:
    - Sorted identifiers give deterministic "first match" semantics
    - Centroids are stacked into one (M, 2) matrix in sorted-id order
      so the nearest scan is a single vectorized pass

    Usage:
        catalog = Catalog.from_regions(regions)
        catalog.lookup(Point(24.105078, 56.946285))   # ["Europe/Riga"]
        catalog.nearest(Point(0, 0), max_distance=2.0)  # None
    """

    regions: Mapping[str, Region]
    zone_ids: Tuple[str, ...]

    def __post_init__(self):
        """Freeze the mapping and precompute the centroid matrix."""
        object.__setattr__(self, "regions", MappingProxyType(dict(self.regions)))
        object.__setattr__(self, "zone_ids", tuple(self.zone_ids))

        if sorted(self.regions) != list(self.zone_ids):
            raise ValueError("zone_ids must be the sorted keys of regions")

        coords: List[Tuple[float, float]] = []
        owners: List[int] = []
        for index, zone_id in enumerate(self.zone_ids):
            for c in self.regions[zone_id].centroids:
                coords.append((c.lon, c.lat))
                owners.append(index)

        centroid_matrix = np.array(coords, dtype=np.float64).reshape((-1, 2))
        centroid_matrix.flags.writeable = False
        object.__setattr__(self, "_centroids", centroid_matrix)
        object.__setattr__(self, "_owners", np.array(owners, dtype=np.intp))

    @classmethod
    def empty(cls) -> "Catalog":
        return cls(regions={}, zone_ids=())

    @classmethod
    def from_regions(cls, regions: Iterable[Region]) -> "Catalog":
        """
        Build a catalog, merging regions that share a zone identifier.

        Polygons of a repeated identifier keep their input order.
        """
        merged: Dict[str, Region] = {}
        for region in regions:
            existing = merged.get(region.zone_id)
            merged[region.zone_id] = region if existing is None else existing.merged_with(region)
        return cls(regions=merged, zone_ids=tuple(sorted(merged)))

    def __len__(self) -> int:
        return len(self.zone_ids)

    def __contains__(self, zone_id: object) -> bool:
        return zone_id in self.regions

    @property
    def centroid_count(self) -> int:
        return len(self._centroids)

    def lookup(self, point: Point) -> List[str]:
        """All identifiers whose region contains the point, ascending."""
        return [
            zone_id
            for zone_id in self.zone_ids
            if self.regions[zone_id].contains(point)
        ]

    def lookup_one(self, point: Point) -> Optional[str]:
        """Smallest identifier whose region contains the point, short-circuiting."""
        for zone_id in self.zone_ids:
            if self.regions[zone_id].contains(point):
                return zone_id
        return None

    def nearest(self, point: Point, max_distance: float) -> Optional[str]:
        """
        Identifier owning the centroid closest to the point.

        Exact ties resolve to the lexicographically smallest identifier,
        since centroids are laid out in sorted-id order and argmin returns
        the first minimum.

        Returns:
            Zone identifier, or None if the catalog is empty or the closest
            centroid is farther than max_distance degrees
        """
        if self.centroid_count == 0:
            return None

        deltas = self._centroids - np.array([point.lon, point.lat])
        distances = np.hypot(deltas[:, 0], deltas[:, 1])
        best = int(np.argmin(distances))

        if distances[best] > max_distance:
            return None
        return self.zone_ids[self._owners[best]]
