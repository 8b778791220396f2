"""Functional Core - Pure functions with no side effects.

This module contains all map-engine logic as pure functions:
- Event data parsing
- Geo/distance calculations
- Area registry lookups and coordinate resolution
- Marker clustering
- Location filter evaluation
- Selection state transitions

All functions here are deterministic and have no I/O.
"""

from eventmap.core.event import Event, parse_event, parse_events
from eventmap.core.geo import Coordinates, calculate_distance, is_within_meters
from eventmap.core.areas import Area, AreaRegistry, build_area_registry
from eventmap.core.resolver import resolve_coordinates
from eventmap.core.clustering import Marker, build_markers, get_marker_stats
from eventmap.core.filters import (
    EventFilters,
    LocationFilter,
    apply_event_filters,
    filter_events_by_location,
    passes_location_filter,
)
from eventmap.core.selection import (
    SelectionState,
    ToggleArea,
    ToggleCenter,
    reduce_selection,
    selection_to_location_filter,
)

__all__ = [
    # Event
    "Event",
    "parse_event",
    "parse_events",
    # Geo
    "Coordinates",
    "calculate_distance",
    "is_within_meters",
    # Areas
    "Area",
    "AreaRegistry",
    "build_area_registry",
    "resolve_coordinates",
    # Clustering
    "Marker",
    "build_markers",
    "get_marker_stats",
    # Filters
    "EventFilters",
    "LocationFilter",
    "apply_event_filters",
    "filter_events_by_location",
    "passes_location_filter",
    # Selection
    "SelectionState",
    "ToggleArea",
    "ToggleCenter",
    "reduce_selection",
    "selection_to_location_filter",
]
