"""
Feature Collection Decoding
===========================

Bounded Context: Dataset wire format

Turns raw dataset bytes (plain or gzip-compressed GeoJSON) into Feature
objects carrying a zone identifier and a tagged Geometry. Heavy work
(numpy rings, bounding boxes, centroids) is left to the catalog loader.

Types:
- Feature: zone identifier + tagged geometry
"""

import gzip
import json
import zlib
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from localzone_geometry import Geometry, GeometryKind
from localzone_engine.errors import ParseError

GZIP_MAGIC = b"\x1f\x8b"


@dataclass(frozen=True, eq=False)
class Feature:
    """
    One feature of a boundary dataset.

    Attributes:
        zone_id: Zone identifier, "" when the feature carries none
        geometry: Tagged geometry, None when missing or unsupported
    """

    zone_id: str
    geometry: Optional[Geometry]

    @property
    def is_usable(self) -> bool:
        """True if the feature can become a catalog region."""
        return bool(self.zone_id) and self.geometry is not None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], zone_property: str = "tzid") -> "Feature":
        """
        Deserialize from a GeoJSON feature object.

        Args:
            data: Feature object with "properties" and "geometry"
            zone_property: Property key holding the zone identifier

        Returns:
            Feature instance

        Raises:
            ParseError: If the feature or its geometry is malformed
        """
        if not isinstance(data, dict):
            raise ParseError(f"Feature must be an object, got {type(data).__name__}")

        properties = data.get("properties") or {}
        if not isinstance(properties, dict):
            raise ParseError("Feature properties must be an object")

        zone_id = properties.get(zone_property) or ""
        if not isinstance(zone_id, str):
            raise ParseError(f"Zone identifier must be a string, got {zone_id!r}")

        return cls(zone_id=zone_id, geometry=_geometry_from_dict(data.get("geometry")))


def _geometry_from_dict(data: Any) -> Optional[Geometry]:
    """Classify a GeoJSON geometry; unsupported types yield None."""
    if data is None:
        return None
    if not isinstance(data, dict):
        raise ParseError(f"Geometry must be an object, got {type(data).__name__}")

    try:
        kind = GeometryKind(data.get("type"))
    except ValueError:
        return None

    coordinates = data.get("coordinates")
    if not isinstance(coordinates, list):
        raise ParseError(f"{kind.value} coordinates must be a list")

    if kind is GeometryKind.POLYGON:
        return Geometry(kind=kind, coordinates=_rings(coordinates))

    polygons = []
    for polygon in coordinates:
        if not isinstance(polygon, list):
            raise ParseError("MultiPolygon members must be lists of rings")
        polygons.append(_rings(polygon))
    return Geometry(kind=kind, coordinates=tuple(polygons))


def _rings(polygon: list) -> tuple:
    if not polygon:
        raise ParseError("Polygon must have at least an exterior ring")
    return tuple(polygon)


def decompress(raw: bytes) -> bytes:
    """Gunzip raw bytes if they carry the gzip magic number."""
    if not raw.startswith(GZIP_MAGIC):
        return raw
    try:
        return gzip.decompress(raw)
    except (OSError, EOFError, zlib.error) as e:
        raise ParseError(f"Invalid gzip stream: {e}") from e


def _reject_constant(name: str):
    # json accepts NaN / Infinity / -Infinity literals, GeoJSON does not
    raise ValueError(f"non-finite number literal {name}")


def decode_feature_collection(raw: bytes) -> List[Dict[str, Any]]:
    """
    Decode dataset bytes into raw feature objects.

    Args:
        raw: GeoJSON FeatureCollection, optionally gzip-compressed

    Returns:
        List of feature objects (dicts)

    Raises:
        ParseError: If bytes are not a decodable feature collection
    """
    payload = decompress(bytes(raw))

    try:
        document = json.loads(payload, parse_constant=_reject_constant)
    except ValueError as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise ParseError(f"Invalid JSON: {e}") from e

    if not isinstance(document, dict):
        raise ParseError(f"Feature collection must be an object, got {type(document).__name__}")

    features = document.get("features")
    if not isinstance(features, list):
        raise ParseError("Feature collection is missing a 'features' list")

    return features
