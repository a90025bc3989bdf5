"""
Timezone Engine - coordinate to timezone identifier resolution.

This module provides the TimezoneEngine class which owns the currently
published Catalog and answers queries against it, falling back to the
nearest centroid and finally to a nautical zone.

Thread Safety:
- Queries take the read side of a ReadWriteLock only long enough to
  snapshot the current Catalog reference (snapshot pattern), then run
  lock-free against the immutable snapshot
- Loads take the write side for the whole build, so concurrent loads
  serialize and queries issued during a load wait for its outcome
- Readers observe either the fully old or the fully new Catalog
"""

import logging
from typing import BinaryIO, Iterable, List, Optional, Tuple

from localzone_engine.catalog import Catalog
from localzone_engine.config import EngineConfig
from localzone_engine.datasets import MOCK_DATASET, read_dataset
from localzone_engine.errors import NoZoneFoundError, OutOfRangeError
from localzone_engine.geojson import Feature
from localzone_engine.loader import CatalogLoader
from localzone_engine.locking import ReadWriteLock
from localzone_engine.resolver import ProximityResolver, nautical_zone
from localzone_geometry import Point
from localzone_logging import LogEvent, create_logger

logger = logging.getLogger(__name__)


class TimezoneEngine:
    """
    Offline point-to-timezone resolver.

    Resolution chain:
    1. Containment: every region whose boundary contains the point
    2. Proximity: region owning the nearest centroid within the radius
    3. Nautical: "Etc/GMT±N" from longitude (total for in-range points)

    Usage:
        engine = TimezoneEngine(dataset_bytes)
        engine.lookup(Point(lon=87.319461, lat=43.419754))
        # ["Asia/Shanghai", "Asia/Urumqi"]
        engine.lookup_one(Point(lon=87.319461, lat=43.419754))
        # "Asia/Shanghai"

        # Reload at runtime (exclusive, atomic publication)
        with open("timezones.geojson.gz", "rb") as f:
            engine.load_stream(f)
    """

    def __init__(
        self,
        dataset: Optional[bytes] = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Create an engine and load its dataset synchronously.

        Args:
            dataset: Raw feature collection bytes (plain or gzipped GeoJSON).
                     When None, the dataset named in config is read.
            config: Engine configuration (default: EngineConfig())

        Raises:
            ParseError: If the dataset is malformed
            FileNotFoundError: If the configured dataset does not exist
        """
        self.config = config or EngineConfig()
        self.logger = create_logger("engine", level=self.config.logging_level)

        self._lock = ReadWriteLock()
        self._catalog = Catalog.empty()
        self._loader = CatalogLoader(
            max_workers=self.config.load_workers,
            logger=create_logger("loader", level=self.config.logging_level),
        )
        self._proximity = ProximityResolver(max_distance=self.config.search_radius_deg)

        if dataset is None:
            dataset = read_dataset(self.config.dataset)
            self.logger.info(
                event=LogEvent.DATASET_READ,
                message="Dataset read",
                metadata={'source': self.config.dataset, 'bytes': len(dataset)},
            )

        self.load_raw(dataset)

    @classmethod
    def mock(cls, config: Optional[EngineConfig] = None) -> "TimezoneEngine":
        """Engine over the packaged single-zone mock dataset."""
        return cls(dataset=read_dataset(MOCK_DATASET), config=config)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, features: Iterable[Feature]) -> None:
        """
        Replace the catalog with one built from already-decoded features.

        Raises:
            ParseError: If a feature geometry is malformed; the catalog is
                        reset to empty
        """
        with self._lock.write_locked():
            self._rebuild(lambda: list(features))

    def load_raw(self, raw: bytes) -> None:
        """
        Replace the catalog with one decoded from raw dataset bytes.

        Raises:
            ParseError: If the bytes cannot be decoded; the catalog is
                        reset to empty
        """
        with self._lock.write_locked():
            self._rebuild(
                lambda: self._loader.decode(raw, zone_property=self.config.zone_property)
            )

    def load_stream(self, stream: BinaryIO) -> None:
        """Read a binary stream to the end, then load_raw() its bytes."""
        raw = stream.read()
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        self.load_raw(raw)

    def _rebuild(self, features_source) -> None:
        """Build and publish; caller holds the write lock."""
        self.logger.info(
            event=LogEvent.CATALOG_LOAD_STARTED,
            message="Building catalog",
            metadata={'previous_region_count': len(self._catalog)},
        )
        try:
            catalog, _ = self._loader.build(features_source())
        except Exception as e:
            self._catalog = Catalog.empty()
            self.logger.error(
                event=LogEvent.CATALOG_LOAD_FAILED,
                message="Dataset rejected",
                exc_info=e,
            )
            self.logger.warning(
                event=LogEvent.CATALOG_RESET,
                message="Empty catalog published after failed load",
            )
            raise

        self._catalog = catalog

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def catalog(self) -> Catalog:
        """Currently published catalog (waits for an in-progress load)."""
        with self._lock.read_locked():
            return self._catalog

    @property
    def region_count(self) -> int:
        return len(self.catalog)

    def zone_ids(self) -> Tuple[str, ...]:
        """Sorted identifiers of the published catalog."""
        return self.catalog.zone_ids

    def lookup(self, point: Point) -> List[str]:
        """
        All zone identifiers for a point, in ascending order.

        Containment matches are returned as-is (several when boundaries
        overlap); otherwise a single fallback zone is returned.

        Raises:
            OutOfRangeError: If |lat| > 90 or |lon| > 180
        """
        self._check_range(point)
        catalog = self.catalog

        matches = catalog.lookup(point)
        if matches:
            return matches

        zone_id = self._fallback(catalog, point)
        return [zone_id] if zone_id is not None else []

    def lookup_one(self, point: Point) -> str:
        """
        The first (lexicographically smallest) zone identifier for a point.

        Stops at the first containing region instead of testing them all.

        Raises:
            OutOfRangeError: If |lat| > 90 or |lon| > 180
            NoZoneFoundError: If nothing matches and nautical fallback is off
        """
        self._check_range(point)
        catalog = self.catalog

        zone_id = catalog.lookup_one(point)
        if zone_id is None:
            zone_id = self._fallback(catalog, point)
        if zone_id is None:
            raise NoZoneFoundError(f"No zone found for ({point.lon}, {point.lat})")
        return zone_id

    def nearest(self, point: Point) -> Optional[str]:
        """Zone owning the nearest centroid within the search radius."""
        self._check_range(point)
        return self._proximity.nearest(self.catalog, point)

    def _fallback(self, catalog: Catalog, point: Point) -> Optional[str]:
        zone_id = self._proximity.nearest(catalog, point)
        if zone_id is not None:
            logger.debug("%s: (%s, %s) -> %s",
                         LogEvent.LOOKUP_FALLBACK_NEAREST.value, point.lon, point.lat, zone_id)
            return zone_id

        if not self.config.nautical_fallback:
            return None

        zone_id = nautical_zone(point.lon)
        logger.debug("%s: (%s, %s) -> %s",
                     LogEvent.LOOKUP_FALLBACK_NAUTICAL.value, point.lon, point.lat, zone_id)
        return zone_id

    @staticmethod
    def _check_range(point: Point) -> None:
        if not point.in_range():
            logger.debug("%s: (%s, %s)",
                         LogEvent.LOOKUP_OUT_OF_RANGE.value, point.lon, point.lat)
            raise OutOfRangeError(
                f"Point out of range: lon={point.lon} (must be in [-180, 180]), "
                f"lat={point.lat} (must be in [-90, 90])"
            )
