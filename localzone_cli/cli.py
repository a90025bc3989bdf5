"""
localzone CLI - Main entry point.

Resolves coordinates to timezone identifiers from the command line.
"""

import argparse
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from localzone_engine import EngineConfig, LocalZoneError, TimezoneEngine
from localzone_geometry import Point


def build_config(config_path: Optional[str], dataset: Optional[str]) -> EngineConfig:
    """
    Load engine configuration, letting --dataset override the file.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the configuration is invalid
    """
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        config = EngineConfig.from_yaml(path)
    else:
        config = EngineConfig()

    if dataset:
        config = replace(config, dataset=dataset)
    return config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localzone",
        description="localzone - Offline coordinate to timezone lookup",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # All zones containing a point (longitude first)
  localzone lookup 24.105078 56.946285

  # Only the first zone
  localzone lookup --one 87.319461 43.419754

  # Use the single-zone mock dataset or a custom file
  localzone --dataset mock lookup 0 0
  localzone --dataset ./timezones.geojson.gz zones
"""
    )

    parser.add_argument(
        "--config",
        help="Path to engine config YAML"
    )
    parser.add_argument(
        "--dataset",
        help="Dataset name (default, mock) or path; overrides the config"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    lookup = subparsers.add_parser('lookup', help='Resolve a coordinate')
    lookup.add_argument('lon', type=float, help='Longitude in degrees')
    lookup.add_argument('lat', type=float, help='Latitude in degrees')
    lookup.add_argument('--one', action='store_true', help='Print only the first zone')

    subparsers.add_parser('zones', help='List zone identifiers in the dataset')

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        engine = TimezoneEngine(config=build_config(args.config, args.dataset))

        if args.command == 'lookup':
            point = Point(lon=args.lon, lat=args.lat)
            if args.one:
                result = engine.lookup_one(point)
            else:
                result = engine.lookup(point)
            print(json.dumps(result))

        elif args.command == 'zones':
            for zone_id in engine.zone_ids():
                print(zone_id)

    except (LocalZoneError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()
