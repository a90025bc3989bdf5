"""
Synthetic timezone boundaries for tests.

Coarse rectangles placed so the reference scenarios hold: Riga inside
Europe/Riga, the Urumqi/Shanghai overlap, a small Pacific island for the
nearest-centroid fallback, and open ocean for the nautical fallback.
"""

import gzip
import json


def rect(min_lon, min_lat, max_lon, max_lat):
    """Closed rectangular ring."""
    return [
        [min_lon, min_lat],
        [max_lon, min_lat],
        [max_lon, max_lat],
        [min_lon, max_lat],
        [min_lon, min_lat],
    ]


def feature(zone_id, geometry_type, coordinates):
    properties = {"tzid": zone_id} if zone_id is not None else {}
    return {
        "type": "Feature",
        "properties": properties,
        "geometry": {"type": geometry_type, "coordinates": coordinates},
    }


def collection(features):
    return {"type": "FeatureCollection", "features": features}


FUNAFUTI_RING = [[177.9, -7.9], [178.3, -7.9], [178.1, -7.5]]


def sample_features():
    return [
        feature("Europe/Riga", "Polygon", [rect(21.0, 55.6, 28.0, 58.1)]),
        feature("Asia/Shanghai", "Polygon", [rect(73.0, 18.0, 135.0, 54.0)]),
        feature("Asia/Urumqi", "Polygon", [rect(73.0, 35.0, 96.0, 49.0)]),
        feature("Asia/Tokyo", "Polygon", [rect(138.5, 35.0, 140.5, 36.5)]),
        # Same zone again: merged into one region
        feature("Asia/Tokyo", "Polygon", [rect(140.0, 41.4, 145.8, 45.5)]),
        feature("Europe/Lisbon", "MultiPolygon", [
            [rect(-9.5, 37.0, -6.2, 42.1)],
            [rect(-17.3, 32.6, -16.6, 33.1)],
        ]),
        # Open ring (no repeated closing vertex)
        feature("Pacific/Funafuti", "Polygon", [FUNAFUTI_RING]),
        # No zone id: skipped
        feature(None, "Polygon", [rect(-60.0, -30.0, -50.0, -20.0)]),
        # Unsupported geometry: skipped
        feature("Etc/Unused", "LineString", [[0.0, 0.0], [1.0, 1.0]]),
    ]


SAMPLE_ZONE_IDS = (
    "Asia/Shanghai",
    "Asia/Tokyo",
    "Asia/Urumqi",
    "Europe/Lisbon",
    "Europe/Riga",
    "Pacific/Funafuti",
)

SAMPLE_SKIPPED = 2


def sample_bytes(compressed=True):
    """Sample dataset as bytes, gzip-compressed by default."""
    raw = json.dumps(collection(sample_features())).encode("utf-8")
    return gzip.compress(raw) if compressed else raw
