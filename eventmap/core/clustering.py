"""Marker clustering - Pure functions.

Groups events into map markers by proximity. Clustering is a single
greedy pass in input order: each event joins the first existing marker
within the cluster radius, or starts a new one. A marker's position is
that of its first member and is never re-centred as members join.

All functions are pure; markers are built fresh on every call.
"""

from dataclasses import dataclass, field
from typing import Iterable

from eventmap.core.areas import AreaRegistry
from eventmap.core.event import LOCATION_APPROXIMATE, LOCATION_EXACT, Event
from eventmap.core.geo import Coordinates, is_within_meters
from eventmap.core.resolver import resolve_coordinates


DEFAULT_CLUSTER_RADIUS_METERS = 100.0

# Tolerance for matching a marker against the selected center. Independent
# of the cluster radius, which only governs visual grouping.
SELECTION_TOLERANCE_METERS = 50.0


@dataclass
class Marker:
    """A unit placed on the map: one event, or a cluster of events.

    Attributes:
        id: Stable marker ID derived from the first member
        coordinates: Position of the first member
        members: Events in this marker, in input order
        is_cluster: True when there is more than one member
        primary_category: Most common member category
        location_type: 'exact' if the first member had exact coordinates
        area: Area of the first member, if any
        is_selected: True if any member matches the current selection
    """
    id: str
    coordinates: Coordinates
    members: list[Event] = field(default_factory=list)
    is_cluster: bool = False
    primary_category: str = ""
    location_type: str = LOCATION_APPROXIMATE
    area: str | None = None
    is_selected: bool = False

    @property
    def size(self) -> int:
        return len(self.members)

    def add(self, event: Event, selected: bool) -> None:
        """Append an event and refresh the derived attributes."""
        self.members.append(event)
        self.is_cluster = len(self.members) > 1
        self.primary_category = compute_primary_category(self.members)
        self.is_selected = self.is_selected or selected


@dataclass(frozen=True)
class MarkerStats:
    """Summary statistics over a list of markers."""
    total_markers: int
    total_events: int
    clustered_markers: int
    exact_location_markers: int
    approximate_location_markers: int
    average_events_per_marker: float


def compute_primary_category(events: Iterable[Event]) -> str:
    """Pick the most common category among events.

    Pure function. Ties go to the tied category that appears first in
    the input, since dicts keep first-insertion order and max() returns
    the first maximal key.

    Returns:
        The winning category, or "" for no events
    """
    counts: dict[str, int] = {}
    for event in events:
        counts[event.category] = counts.get(event.category, 0) + 1

    if not counts:
        return ""
    return max(counts, key=counts.__getitem__)


def is_event_selected(
    event: Event,
    coordinates: Coordinates,
    selected_areas: Iterable[str],
    selected_center: Coordinates | None,
    tolerance_meters: float = SELECTION_TOLERANCE_METERS,
) -> bool:
    """Check if an event matches the current selection.

    Pure function.

    Args:
        event: The event
        coordinates: The event's resolved coordinate
        selected_areas: Currently selected area codes
        selected_center: Currently selected center, if any
        tolerance_meters: Max distance from the selected center

    Returns:
        True if the event's area is selected or its coordinate lies
        within the tolerance of the selected center
    """
    if event.area is not None and event.area in selected_areas:
        return True

    if selected_center is not None:
        return is_within_meters(coordinates, selected_center, tolerance_meters)

    return False


def build_markers(
    events: Iterable[Event],
    registry: AreaRegistry,
    cluster_radius_meters: float = DEFAULT_CLUSTER_RADIUS_METERS,
    selected_areas: Iterable[str] = (),
    selected_center: Coordinates | None = None,
    selection_tolerance_meters: float = SELECTION_TOLERANCE_METERS,
) -> list[Marker]:
    """Group events into map markers.

    Pure function: deterministic for a given input order. Events whose
    location cannot be resolved are skipped. Cost is O(n*m) where m is
    the number of markers created so far.

    Args:
        events: Events in display order
        registry: Area registry for approximate locations
        cluster_radius_meters: Max distance from a marker's position for
            an event to join it
        selected_areas: Currently selected area codes
        selected_center: Currently selected center, if any
        selection_tolerance_meters: Tolerance for center selection

    Returns:
        Markers in creation order
    """
    selected = frozenset(selected_areas)
    markers: list[Marker] = []

    for event in events:
        coordinates = resolve_coordinates(event, registry)
        if coordinates is None:
            continue

        event_selected = is_event_selected(
            event,
            coordinates,
            selected,
            selected_center,
            selection_tolerance_meters,
        )

        existing = next(
            (
                marker for marker in markers
                if is_within_meters(marker.coordinates, coordinates, cluster_radius_meters)
            ),
            None,
        )

        if existing is not None:
            existing.add(event, event_selected)
            continue

        markers.append(Marker(
            id=f"marker-{event.id}",
            coordinates=coordinates,
            members=[event],
            is_cluster=False,
            primary_category=event.category,
            location_type=(
                LOCATION_EXACT if event.coordinates is not None else LOCATION_APPROXIMATE
            ),
            area=event.area,
            is_selected=event_selected,
        ))

    return markers


def get_marker_stats(markers: list[Marker]) -> MarkerStats:
    """Compute summary statistics for a list of markers.

    Pure function.
    """
    total_events = sum(marker.size for marker in markers)

    return MarkerStats(
        total_markers=len(markers),
        total_events=total_events,
        clustered_markers=sum(1 for m in markers if m.is_cluster),
        exact_location_markers=sum(1 for m in markers if m.location_type == LOCATION_EXACT),
        approximate_location_markers=sum(
            1 for m in markers if m.location_type == LOCATION_APPROXIMATE
        ),
        average_events_per_marker=total_events / len(markers) if markers else 0.0,
    )
