"""
Catalog Loader - builds a new Catalog from a feature collection.

Per-feature work (ring conversion, bounding boxes, centroids) is
independent, so it fans out over a thread pool. Every worker writes into
its own result slot; the Catalog is assembled once, after all workers
finish, so there is no partially built state for anyone to observe.

Thread Safety:
- CatalogLoader holds no mutable state between calls
- Publication and serialization of loads belong to TimezoneEngine
"""

import time
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Tuple

from localzone_engine.catalog import Catalog, Region
from localzone_engine.errors import ParseError
from localzone_engine.geojson import Feature, decode_feature_collection
from localzone_logging import LogEvent, StructuredLogger, create_logger


class CatalogLoader:
    """
    Builds immutable catalogs from decoded features.

    Usage:
        loader = CatalogLoader(max_workers=4)
        features = loader.decode(raw_bytes)
        catalog, skipped = loader.build(features)
    """

    def __init__(self, max_workers: int = 4, logger: Optional[StructuredLogger] = None):
        """
        Args:
            max_workers: Threads used to build regions
            logger: Structured logger (default: "loader" component)
        """
        self.max_workers = max_workers
        self.logger = logger or create_logger("loader")

    def decode(self, raw: bytes, zone_property: str = "tzid") -> List[Feature]:
        """
        Decode raw dataset bytes into features.

        Raises:
            ParseError: If the bytes are not a decodable feature collection
        """
        return [
            Feature.from_dict(item, zone_property=zone_property)
            for item in decode_feature_collection(raw)
        ]

    def build(self, features: Iterable[Feature]) -> Tuple[Catalog, int]:
        """
        Build a catalog from features.

        Features without a zone identifier or with an unsupported geometry
        are skipped, not rejected.

        Returns:
            Tuple of (catalog, skipped feature count)

        Raises:
            ParseError: If any feature geometry is malformed
        """
        features = list(features)
        started = time.perf_counter()

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            slots = list(executor.map(self._build_region, features))

        regions = [region for region in slots if region is not None]
        skipped = len(slots) - len(regions)
        catalog = Catalog.from_regions(regions)

        if skipped:
            self.logger.warning(
                event=LogEvent.FEATURE_SKIPPED,
                message=f"Skipped {skipped} feature(s) without zone id or geometry",
                metadata={'skipped': skipped, 'feature_count': len(features)},
            )

        self.logger.info(
            event=LogEvent.CATALOG_LOAD_SUCCESS,
            message="Catalog built",
            metadata={
                'feature_count': len(features),
                'region_count': len(catalog),
                'centroid_count': catalog.centroid_count,
                'duration_ms': round((time.perf_counter() - started) * 1000, 2),
            },
        )
        return catalog, skipped

    @staticmethod
    def _build_region(feature: Feature) -> Optional[Region]:
        """Worker: one feature to one Region, None if unusable."""
        if not feature.is_usable:
            return None

        try:
            shape = feature.geometry.to_multipolygon()
        except (TypeError, ValueError) as e:
            raise ParseError(f"Malformed geometry for zone '{feature.zone_id}': {e}") from e

        if len(shape) == 0:
            return None
        return Region(zone_id=feature.zone_id, shape=shape)
