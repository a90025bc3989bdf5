"""
Configuration schema for the timezone engine.

This module defines which dataset the engine loads, how features are read,
how far the nearest-centroid fallback may reach, and how loads fan out.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

DEFAULT_SEARCH_RADIUS_DEG = 2.0


@dataclass(frozen=True)
class EngineConfig:
    """
    Main configuration for TimezoneEngine.

    Loaded from YAML and validated at construction.
    Immutable after construction (frozen dataclass).
    """

    # Packaged dataset name ("default", "mock") or a filesystem path
    dataset: str = "default"

    # Feature property holding the zone identifier
    zone_property: str = "tzid"

    # Nearest-centroid fallback radius, in degrees
    search_radius_deg: float = DEFAULT_SEARCH_RADIUS_DEG

    # Worker threads used to build regions during a load
    load_workers: int = 4

    # Terminal longitude-derived fallback
    nautical_fallback: bool = True

    log_level: str = "INFO"

    def __post_init__(self):
        """Validate engine configuration."""
        if not self.dataset:
            raise ValueError("dataset cannot be empty")

        if not self.zone_property:
            raise ValueError("zone_property cannot be empty")

        if isinstance(self.search_radius_deg, bool) or not isinstance(self.search_radius_deg, (int, float)):
            raise ValueError(
                f"search_radius_deg must be a number, got {self.search_radius_deg!r}"
            )

        if isinstance(self.load_workers, bool) or not isinstance(self.load_workers, int):
            raise ValueError(f"load_workers must be an integer, got {self.load_workers!r}")

        if not isinstance(self.nautical_fallback, bool):
            raise ValueError(
                f"nautical_fallback must be true or false, got {self.nautical_fallback!r}"
            )

        if not isinstance(self.log_level, str):
            raise ValueError(f"log_level must be a string, got {self.log_level!r}")

        if not self.search_radius_deg > 0:
            raise ValueError(
                f"search_radius_deg must be > 0, got {self.search_radius_deg}"
            )

        if not 1 <= self.load_workers <= 64:
            raise ValueError(
                f"load_workers must be in [1, 64], got {self.load_workers}"
            )

        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if self.log_level.upper() not in valid_levels:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of {sorted(valid_levels)}"
            )

    @property
    def logging_level(self) -> int:
        """Numeric level for the standard logging module."""
        return getattr(logging, self.log_level.upper())

    @classmethod
    def from_yaml(cls, yaml_path: Path) -> "EngineConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            dataset: "default"         # or "mock", or "/data/timezones.geojson.gz"
            zone_property: "tzid"
            search_radius_deg: 2.0
            load_workers: 4
            nautical_fallback: true
            log_level: "INFO"
        """
        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        return cls(
            dataset=_typed(data, "dataset", "default", (str,)),
            zone_property=_typed(data, "zone_property", "tzid", (str,)),
            search_radius_deg=float(
                _typed(data, "search_radius_deg", DEFAULT_SEARCH_RADIUS_DEG, (int, float))
            ),
            load_workers=_typed(data, "load_workers", 4, (int,)),
            nautical_fallback=_typed(data, "nautical_fallback", True, (bool,)),
            log_level=_typed(data, "log_level", "INFO", (str,)),
        )


def _typed(data: dict, key: str, default, types: tuple):
    """Read one YAML key, rejecting values of the wrong type instead of coercing."""
    value = data.get(key, default)
    # YAML booleans are ints to isinstance; only accept them where bool is asked for
    if isinstance(value, bool) and bool not in types:
        raise ValueError(f"{key} must be {types[0].__name__}, got {value!r}")
    if not isinstance(value, types):
        raise ValueError(f"{key} must be {types[0].__name__}, got {value!r}")
    return value
