"""
Packaged and on-disk boundary datasets.

Datasets are injected into the engine as bytes; this module only knows
where to find them:
- "default": full-coverage dataset, generated offline
- "mock": single zone covering every valid coordinate
- anything else: a filesystem path
"""

from importlib import resources
from pathlib import Path
from typing import Dict

DEFAULT_DATASET = "default"
MOCK_DATASET = "mock"

# Every point resolves to this zone with the mock dataset
MOCK_ZONE_ID = "America/Los_Angeles"

PACKAGED_DATASETS: Dict[str, str] = {
    DEFAULT_DATASET: "timezones.geojson.gz",
    MOCK_DATASET: "mock.geojson.gz",
}


def packaged_path(name: str):
    """Resource handle for a packaged dataset."""
    return resources.files("localzone_engine") / "data" / PACKAGED_DATASETS[name]


def read_dataset(source: str) -> bytes:
    """
    Read dataset bytes from a packaged name or a filesystem path.

    Args:
        source: "default", "mock", or a path to a (gzipped) GeoJSON file

    Returns:
        Raw dataset bytes, decoded later by the catalog loader

    Raises:
        FileNotFoundError: If the dataset does not exist
    """
    if source in PACKAGED_DATASETS:
        resource = packaged_path(source)
        if not resource.is_file():
            raise FileNotFoundError(
                f"Missing packaged dataset '{source}' ({PACKAGED_DATASETS[source]}). "
                f"Place a timezone boundary FeatureCollection (gzipped GeoJSON) at "
                f"localzone_engine/data/{PACKAGED_DATASETS[source]} or configure a dataset path."
            )
        return resource.read_bytes()

    path = Path(source).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Dataset file not found: {path}")
    return path.read_bytes()
