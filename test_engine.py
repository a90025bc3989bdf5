"""
Tests for TimezoneEngine: lookups, fallbacks, loading and concurrency.

Usage:
    pytest test_engine.py
    python test_engine.py
"""

import contextlib
import gzip
import io
import json
import logging
import os
import tempfile
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import numpy as np
import pytest

from localzone_cli.cli import main as cli_main
from localzone_engine import (
    MOCK_ZONE_ID,
    CatalogLoader,
    EngineConfig,
    Feature,
    NoZoneFoundError,
    OutOfRangeError,
    ParseError,
    TimezoneEngine,
    read_dataset,
)
from localzone_engine.locking import ReadWriteLock
from localzone_geometry import Geometry, GeometryKind, Point
from localzone_logging import LogEvent, StructuredLogger
from sample_zones import SAMPLE_ZONE_IDS, collection, feature, rect, sample_bytes

RIGA = Point(lon=24.105078, lat=56.946285)
URUMQI = Point(lon=87.319461, lat=43.419754)
NULL_ISLAND = Point(lon=0.0, lat=0.0)
NEAR_FUNAFUTI = Point(lon=179.5, lat=-7.7)
BAKER_ISLAND = Point(lon=-176.474331436, lat=0.190165906)


def _engine(**config):
    return TimezoneEngine(sample_bytes(), config=EngineConfig(**config))


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

def test_lookup_scenarios():
    engine = _engine()
    assert engine.zone_ids() == SAMPLE_ZONE_IDS
    assert engine.region_count == len(SAMPLE_ZONE_IDS)

    assert engine.lookup(RIGA) == ["Europe/Riga"]
    assert engine.lookup(URUMQI) == ["Asia/Shanghai", "Asia/Urumqi"]
    assert engine.lookup(NULL_ISLAND) == ["Etc/GMT"]
    assert engine.lookup(NEAR_FUNAFUTI) == ["Pacific/Funafuti"]
    assert engine.lookup(BAKER_ISLAND) == ["Etc/GMT+12"]


def test_lookup_one():
    engine = _engine()
    assert engine.lookup_one(RIGA) == "Europe/Riga"
    assert engine.lookup_one(URUMQI) == "Asia/Shanghai"
    assert engine.lookup_one(NULL_ISLAND) == "Etc/GMT"
    assert engine.lookup_one(NEAR_FUNAFUTI) == "Pacific/Funafuti"


def test_nearest():
    engine = _engine()
    assert engine.nearest(NEAR_FUNAFUTI) == "Pacific/Funafuti"
    assert engine.nearest(NULL_ISLAND) is None


def test_search_radius_is_configurable():
    engine = _engine(search_radius_deg=1.0)
    # Centroid is ~1.4 degrees away: now beyond the radius
    assert engine.lookup(NEAR_FUNAFUTI) == ["Etc/GMT-12"]


OUT_OF_RANGE_CASES = [
    (181, 0), (-181, 0), (0, 91), (0, -91), (360, 360), (float("nan"), 0),
]


@pytest.mark.parametrize("lon, lat", OUT_OF_RANGE_CASES)
def test_out_of_range(lon, lat):
    engine = _engine()
    with pytest.raises(OutOfRangeError):
        engine.lookup(Point(lon, lat))
    with pytest.raises(OutOfRangeError):
        engine.lookup_one(Point(lon, lat))
    with pytest.raises(OutOfRangeError):
        engine.nearest(Point(lon, lat))


def test_range_bounds_are_valid():
    engine = _engine()
    for point in (Point(180, 0), Point(-180, 0), Point(0, 90), Point(0, -90)):
        assert engine.lookup(point)


def test_totality_and_determinism():
    engine = _engine()
    for lon in np.linspace(-180, 180, 25):
        for lat in np.linspace(-90, 90, 13):
            point = Point(float(lon), float(lat))
            first = engine.lookup(point)
            assert first, point
            assert first == sorted(first)
            assert engine.lookup(point) == first
            assert engine.lookup_one(point) == first[0]


def test_no_zone_found_without_nautical_fallback():
    engine = _engine(nautical_fallback=False)
    assert engine.lookup(NULL_ISLAND) == []
    with pytest.raises(NoZoneFoundError):
        engine.lookup_one(NULL_ISLAND)
    # Containment and proximity are unaffected
    assert engine.lookup(RIGA) == ["Europe/Riga"]
    assert engine.lookup_one(NEAR_FUNAFUTI) == "Pacific/Funafuti"


def test_custom_zone_property():
    features = [{
        "type": "Feature",
        "properties": {"TZID": "Europe/Riga"},
        "geometry": {"type": "Polygon", "coordinates": [rect(21.0, 55.6, 28.0, 58.1)]},
    }]
    raw = json.dumps(collection(features)).encode()
    engine = TimezoneEngine(raw, config=EngineConfig(zone_property="TZID"))
    assert engine.lookup(RIGA) == ["Europe/Riga"]


# ---------------------------------------------------------------------------
# Mock dataset
# ---------------------------------------------------------------------------

def test_mock_dataset():
    engine = TimezoneEngine.mock()
    assert engine.zone_ids() == (MOCK_ZONE_ID,)
    for point in (RIGA, NULL_ISLAND, BAKER_ISLAND,
                  Point(180, 90), Point(-180, -90), Point(-180, 90), Point(180, -90)):
        assert engine.lookup(point) == [MOCK_ZONE_ID]
        assert engine.lookup_one(point) == MOCK_ZONE_ID


def test_dataset_from_config():
    engine = TimezoneEngine(config=EngineConfig(dataset="mock"))
    assert engine.lookup(RIGA) == [MOCK_ZONE_ID]

    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "zones.geojson.gz"
        path.write_bytes(sample_bytes())
        engine = TimezoneEngine(config=EngineConfig(dataset=str(path)))
        assert engine.lookup(RIGA) == ["Europe/Riga"]

    with pytest.raises(FileNotFoundError):
        read_dataset("/nonexistent/zones.geojson.gz")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def test_malformed_load_resets_catalog():
    engine = _engine()
    assert engine.region_count > 0

    with pytest.raises(ParseError):
        engine.load_raw(b"{")
    assert engine.region_count == 0
    # Empty catalog still answers through the fallback chain
    assert engine.lookup(RIGA) == ["Etc/GMT-2"]

    with pytest.raises(ParseError):
        engine.load_raw(gzip.compress(b"asdf"))
    assert engine.region_count == 0

    engine.load_raw(sample_bytes())
    assert engine.zone_ids() == SAMPLE_ZONE_IDS
    assert engine.lookup(RIGA) == ["Europe/Riga"]


def test_malformed_features_reset_catalog():
    engine = _engine()
    bad = Feature(
        zone_id="X",
        geometry=Geometry(GeometryKind.POLYGON, ([[0, 0], [1]],)),
    )
    with pytest.raises(ParseError):
        engine.load([bad])
    assert engine.region_count == 0
    assert engine.zone_ids() == ()


def test_invalid_coordinates_keep_fallbacks_intact():
    bad_ring = [[10.0, 10.0], [12.0, 10.0], [None, 11.0], [10.0, 12.0]]
    raw = json.dumps(collection([
        feature("Europe/Riga", "Polygon", [rect(21, 55.6, 28, 58.1)]),
        feature("Zone/Bad", "Polygon", [bad_ring]),
    ])).encode()
    with pytest.raises(ParseError):
        TimezoneEngine(raw)

    engine = _engine()
    with pytest.raises(ParseError):
        engine.load_raw(raw)
    assert "Zone/Bad" not in engine.zone_ids()
    assert engine.lookup(NULL_ISLAND) == ["Etc/GMT"]
    assert engine.lookup(Point(-120, -60)) == ["Etc/GMT+8"]
    assert engine.lookup(Point(100, -50)) == ["Etc/GMT-7"]


def test_malformed_constructor():
    with pytest.raises(ParseError):
        TimezoneEngine(b"asdf")


def test_load_features_and_stream():
    engine = TimezoneEngine.mock()

    engine.load_stream(io.BytesIO(sample_bytes(compressed=False)))
    assert engine.zone_ids() == SAMPLE_ZONE_IDS

    features = CatalogLoader().decode(
        json.dumps(collection([feature("Asia/Tokyo", "Polygon", [rect(138.5, 35.0, 140.5, 36.5)])])).encode()
    )
    engine.load(features)
    assert engine.zone_ids() == ("Asia/Tokyo",)
    assert engine.lookup(Point(139.76, 35.68)) == ["Asia/Tokyo"]


def test_concurrent_reads_see_whole_catalogs():
    engine = _engine(load_workers=2)
    mock_raw = read_dataset("mock")
    sample_raw = sample_bytes()
    allowed = ({"Europe/Riga"}, {MOCK_ZONE_ID})
    stop = threading.Event()
    seen = []

    def reader():
        while True:
            seen.append(frozenset(engine.lookup(RIGA)))
            if stop.is_set():
                return

    with ThreadPoolExecutor(max_workers=4) as pool:
        readers = [pool.submit(reader) for _ in range(3)]
        for i in range(10):
            engine.load_raw(mock_raw if i % 2 == 0 else sample_raw)
        stop.set()
        for r in readers:
            r.result()

    assert seen
    assert all(set(s) in allowed for s in seen)


def test_concurrent_loads_serialize():
    engine = _engine()
    mock_raw = read_dataset("mock")
    sample_raw = sample_bytes()

    with ThreadPoolExecutor(max_workers=4) as pool:
        futures = [pool.submit(engine.load_raw, mock_raw if i % 2 else sample_raw)
                   for i in range(8)]
        for f in futures:
            f.result()

    assert engine.zone_ids() in (SAMPLE_ZONE_IDS, (MOCK_ZONE_ID,))


def test_write_lock_blocks_readers():
    lock = ReadWriteLock()
    acquired = threading.Event()

    def reader():
        with lock.read_locked():
            acquired.set()

    lock.acquire_write()
    thread = threading.Thread(target=reader)
    thread.start()
    assert not acquired.wait(0.1)
    lock.release_write()
    assert acquired.wait(2)
    thread.join()


def test_readers_share_lock():
    lock = ReadWriteLock()
    both_in = threading.Barrier(2, timeout=2)

    def reader():
        with lock.read_locked():
            both_in.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert not both_in.broken


# ---------------------------------------------------------------------------
# Config, logging, CLI
# ---------------------------------------------------------------------------

def test_config_from_yaml():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "engine.yaml"
        path.write_text(
            "dataset: mock\n"
            "search_radius_deg: 1.5\n"
            "load_workers: 2\n"
            "nautical_fallback: false\n"
            "log_level: debug\n"
        )
        config = EngineConfig.from_yaml(path)

    assert config.dataset == "mock"
    assert config.zone_property == "tzid"
    assert config.search_radius_deg == 1.5
    assert config.load_workers == 2
    assert config.nautical_fallback is False
    assert config.logging_level == logging.DEBUG


def test_config_validation():
    for kwargs in (
        {"dataset": ""},
        {"zone_property": ""},
        {"search_radius_deg": 0},
        {"load_workers": 0},
        {"load_workers": 65},
        {"log_level": "LOUD"},
    ):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)


BAD_CONFIG_LINES = [
    'nautical_fallback: "false"\n',
    "nautical_fallback: 0\n",
    "search_radius_deg: null\n",
    'search_radius_deg: "2.0"\n',
    "search_radius_deg: true\n",
    "load_workers: 2.5\n",
    "dataset: 42\n",
    "log_level: null\n",
    "dataset: [unclosed\n",
]


def test_config_rejects_wrong_types():
    for line in BAD_CONFIG_LINES:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "engine.yaml"
            path.write_text(line)
            with pytest.raises(ValueError):
                EngineConfig.from_yaml(path)

    for kwargs in (
        {"search_radius_deg": None},
        {"nautical_fallback": "false"},
        {"load_workers": "4"},
    ):
        with pytest.raises(ValueError):
            EngineConfig(**kwargs)


def test_cli_rejects_bad_config():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "engine.yaml"
        path.write_text("dataset: mock\nsearch_radius_deg: null\n")

        err = io.StringIO()
        with contextlib.redirect_stderr(err), pytest.raises(SystemExit) as exc:
            cli_main(["--config", str(path), "lookup", "0", "0"])
    assert exc.value.code == 1
    assert "search_radius_deg" in err.getvalue()


def test_structured_log_entries():
    records = []

    class Collect(logging.Handler):
        def emit(self, record):
            records.append(json.loads(record.getMessage()))

    logger = StructuredLogger("test", logger_name="localzone.test.structured")
    logger.logger.addHandler(Collect())
    logger.logger.propagate = False

    logger.info(LogEvent.CATALOG_LOAD_SUCCESS, "Catalog built", {"region_count": 3})
    logger.error(LogEvent.CATALOG_LOAD_FAILED, "Dataset rejected", exc_info=ParseError("bad"))
    logger.debug(LogEvent.LOOKUP_FALLBACK_NEAREST, "suppressed at INFO")

    assert [r["event"] for r in records] == ["catalog.load.success", "catalog.load.failed"]
    assert records[0]["component"] == "test"
    assert records[0]["metadata"] == {"region_count": 3}
    assert records[1]["exception"] == {"type": "ParseError", "message": "bad"}


def test_cli_lookup():
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        cli_main(["--dataset", "mock", "lookup", "-122.4", "37.8"])
    assert json.loads(out.getvalue()) == [MOCK_ZONE_ID]

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "zones.geojson.gz")
        Path(path).write_bytes(sample_bytes())

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            cli_main(["--dataset", path, "lookup", "--one", "87.319461", "43.419754"])
        assert json.loads(out.getvalue()) == "Asia/Shanghai"

        out = io.StringIO()
        with contextlib.redirect_stdout(out):
            cli_main(["--dataset", path, "zones"])
        assert tuple(out.getvalue().split()) == SAMPLE_ZONE_IDS


def test_cli_errors_exit_nonzero():
    err = io.StringIO()
    with contextlib.redirect_stderr(err), pytest.raises(SystemExit) as exc:
        cli_main(["--dataset", "mock", "lookup", "181", "0"])
    assert exc.value.code == 1
    assert "out of range" in err.getvalue()


def main():
    """Run all tests."""
    print("\n🌐 localzone - Engine Tests")
    print("=" * 60)

    try:
        test_lookup_scenarios()
        test_lookup_one()
        test_nearest()
        test_search_radius_is_configurable()
        for lon, lat in OUT_OF_RANGE_CASES:
            test_out_of_range(lon, lat)
        print(f"✓ {len(OUT_OF_RANGE_CASES)} out-of-range points rejected")
        test_range_bounds_are_valid()
        test_totality_and_determinism()
        test_no_zone_found_without_nautical_fallback()
        test_custom_zone_property()
        test_mock_dataset()
        test_dataset_from_config()
        test_malformed_load_resets_catalog()
        test_malformed_features_reset_catalog()
        test_invalid_coordinates_keep_fallbacks_intact()
        test_malformed_constructor()
        test_load_features_and_stream()
        test_concurrent_reads_see_whole_catalogs()
        test_concurrent_loads_serialize()
        test_write_lock_blocks_readers()
        test_readers_share_lock()
        test_config_from_yaml()
        test_config_validation()
        test_config_rejects_wrong_types()
        test_cli_rejects_bad_config()
        test_structured_log_entries()
        test_cli_lookup()
        test_cli_errors_exit_nonzero()

        print("\n" + "=" * 60)
        print("✅ ALL ENGINE TESTS PASSED")
        print("=" * 60)

    except AssertionError as e:
        print(f"\n❌ TEST FAILED: {e}")
        raise


if __name__ == "__main__":
    main()
