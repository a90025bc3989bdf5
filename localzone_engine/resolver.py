"""
Fallback resolution when no region contains a point.

Two stages:
- ProximityResolver: nearest precomputed centroid within a bounded radius
- nautical_zone: synthetic "Etc/GMT±N" zone derived from longitude alone
"""

import math
from typing import Optional

from localzone_engine.catalog import Catalog
from localzone_engine.config import DEFAULT_SEARCH_RADIUS_DEG
from localzone_geometry import Point

NAUTICAL_ZONE_WIDTH_DEG = 7.5


class ProximityResolver:
    """
    Nearest-centroid fallback with a fixed search radius.

    Distances are planar, in degrees; they only rank nearby candidates
    and are never reported as physical distances.
    """

    def __init__(self, max_distance: float = DEFAULT_SEARCH_RADIUS_DEG):
        if not max_distance > 0:
            raise ValueError(f"max_distance must be > 0, got {max_distance}")
        self.max_distance = max_distance

    def nearest(self, catalog: Catalog, point: Point) -> Optional[str]:
        """Zone owning the nearest centroid, or None beyond the radius."""
        return catalog.nearest(point, self.max_distance)


def nautical_zone(lon: float) -> str:
    """
    Nautical timezone for a longitude.

    Sign convention follows POSIX Etc/GMT zones: west of Greenwich is "+".

    Examples:
        >>> nautical_zone(0)
        'Etc/GMT'
        >>> nautical_zone(7.5)
        'Etc/GMT-1'
        >>> nautical_zone(-180)
        'Etc/GMT+12'
    """
    z = math.floor((abs(lon / NAUTICAL_ZONE_WIDTH_DEG) + 1) / 2)
    if z == 0:
        return "Etc/GMT"
    if lon < 0:
        return f"Etc/GMT+{z}"
    return f"Etc/GMT-{z}"
