"""
localzone_engine - Offline coordinate to timezone resolution

This package loads a timezone boundary dataset into an immutable Catalog
and resolves points against it.

Architecture:
- TimezoneEngine: Public orchestrator (load, lookup, lookup_one)
- Catalog / Region: Immutable snapshot of all regions
- CatalogLoader: Parallel per-feature build, single publication point
- ProximityResolver / nautical_zone: Fallback chain
- EngineConfig: Configuration management

Threading Model:
- Any number of query threads share the published Catalog
- Loads are exclusive (writer side of a ReadWriteLock)
- Load worker threads (ThreadPoolExecutor) build regions in parallel
"""

from localzone_engine.errors import (
    LocalZoneError,
    NoZoneFoundError,
    OutOfRangeError,
    ParseError,
)
from localzone_engine.config import EngineConfig
from localzone_engine.geojson import Feature, decode_feature_collection
from localzone_engine.catalog import Catalog, Region
from localzone_engine.resolver import ProximityResolver, nautical_zone
from localzone_engine.loader import CatalogLoader
from localzone_engine.datasets import MOCK_ZONE_ID, read_dataset
from localzone_engine.engine import TimezoneEngine

__all__ = [
    "LocalZoneError",
    "NoZoneFoundError",
    "OutOfRangeError",
    "ParseError",
    "EngineConfig",
    "Feature",
    "decode_feature_collection",
    "Catalog",
    "Region",
    "ProximityResolver",
    "nautical_zone",
    "CatalogLoader",
    "MOCK_ZONE_ID",
    "read_dataset",
    "TimezoneEngine",
]

__version__ = "1.0.0"
