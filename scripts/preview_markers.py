#!/usr/bin/env python3
"""Preview map markers for a local events file.

Loads events from a JSON file (a list, or an object with an "events"
list), clusters them with the configured area registry, and prints one
line per marker plus the events that pass the given selection.

Usage:
    # Markers for all events
    python scripts/preview_markers.py events.json

    # Select areas and/or a center (lat,lng) with a radius
    python scripts/preview_markers.py events.json --area mission --area soma
    python scripts/preview_markers.py events.json --center 37.7749,-122.4194 --radius 2

    # Wider clusters
    python scripts/preview_markers.py events.json --cluster-radius 250

Environment:
    CONFIG_PATH: Path to config file (default: config/config.yaml)
"""

import argparse
import json
import logging
import os
import sys
from dataclasses import replace

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from eventmap.core.event import parse_events
from eventmap.core.filters import TIME_FILTER_PAST, TIME_FILTER_UPCOMING, EventFilters
from eventmap.core.geo import Coordinates
from eventmap.orchestrator import MapOrchestrator
from eventmap.shell.config_loader import load_config
from eventmap.shell.selection_manager import SelectionStateManager

logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def parse_center(value: str) -> Coordinates:
    """Parse 'lat,lng' into Coordinates."""
    try:
        lat, lng = (float(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected 'lat,lng', got {value!r}")
    return Coordinates(lat=lat, lng=lng)


def load_events_file(path: str) -> list[dict]:
    with open(path, "r") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("events", [])
    return data


def main():
    parser = argparse.ArgumentParser(
        description="Preview map markers and filtered events for an events file",
    )
    parser.add_argument("events_file", help="Path to a JSON events file")
    parser.add_argument(
        "--area", "-a",
        action="append",
        default=[],
        help="Select an area code (repeatable)",
    )
    parser.add_argument(
        "--center", "-c",
        type=parse_center,
        help="Select a center as 'lat,lng'",
    )
    parser.add_argument(
        "--radius", "-r",
        type=float,
        help="Radius in km around --center (default: from config)",
    )
    parser.add_argument(
        "--cluster-radius",
        type=float,
        help="Clustering radius in meters (default: from config)",
    )
    parser.add_argument(
        "--past",
        action="store_true",
        help="List past events instead of upcoming ones",
    )
    args = parser.parse_args()

    config = load_config()
    if args.cluster_radius is not None:
        config = replace(config, cluster_radius_meters=args.cluster_radius)

    manager = SelectionStateManager(default_radius_km=config.default_toggle_radius_km)
    for code in args.area:
        manager.toggle_area(code)
    if args.center is not None:
        manager.toggle_center(args.center, args.radius)

    events = parse_events(load_events_file(args.events_file))
    logger.info("Loaded %d events from %s", len(events), args.events_file)

    orchestrator = MapOrchestrator(config, selection_manager=manager)
    view = orchestrator.build_view(
        events,
        EventFilters(time_filter=TIME_FILTER_PAST if args.past else TIME_FILTER_UPCOMING),
    )

    print(f"\n{view.summary}\n")
    for marker in view.markers:
        flag = "*" if marker.is_selected else " "
        print(
            f"{flag} {marker.id:<30} ({marker.coordinates.lat:.4f}, {marker.coordinates.lng:.4f}) "
            f"{marker.location_type:<11} {marker.primary_category:<12} x{marker.size}"
        )

    if view.unresolved_areas:
        print(f"\nUnknown areas: {', '.join(view.unresolved_areas)}")

    print(f"\nListed events ({len(view.events)}):")
    for event in view.events:
        print(f"  {event.id}  {event.title}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
