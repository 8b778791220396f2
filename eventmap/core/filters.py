"""Event filter evaluation - Pure functions.

This module decides which events pass the user's filters. The location
filter is a union: an event passes if it is in any selected area OR
within the selected radius, so adding a sub-filter broadens the visible
set rather than narrowing it.
"""

from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Iterable

from eventmap.core.event import LOCATION_APPROXIMATE, Event
from eventmap.core.geo import Coordinates, is_finite_number, is_within_radius_km


TIME_FILTER_UPCOMING = "upcoming"
TIME_FILTER_PAST = "past"
CATEGORY_ALL = "all"


@dataclass(frozen=True)
class LocationFilter:
    """Composite location filter (area set UNION radius).

    The radius part is normalized on construction: it is active only
    with a center and a finite, positive radius. Otherwise both center
    and radius_km are reset to None.

    Attributes:
        areas: Area codes to match
        center: Center of the radius filter
        radius_km: Radius of the radius filter in kilometers
        include_approximate: Whether area-only events may pass
    """
    areas: frozenset[str] = field(default_factory=frozenset)
    center: Coordinates | None = None
    radius_km: float | None = None
    include_approximate: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "areas", frozenset(self.areas or ()))

        radius_ok = (
            self.center is not None
            and self.center.is_finite()
            and is_finite_number(self.radius_km)
            and self.radius_km > 0
        )
        if not radius_ok:
            object.__setattr__(self, "center", None)
            object.__setattr__(self, "radius_km", None)

    @property
    def has_area_filter(self) -> bool:
        return len(self.areas) > 0

    @property
    def has_radius_filter(self) -> bool:
        return self.center is not None and self.radius_km is not None

    @property
    def is_active(self) -> bool:
        """Returns True if any location restriction is set."""
        return self.has_area_filter or self.has_radius_filter


@dataclass(frozen=True)
class EventFilters:
    """All list filters applied to the event feed.

    Attributes:
        time_filter: 'upcoming' or 'past'
        category: Category to keep, or 'all'
        location: Location filter, None for no location restriction
    """
    time_filter: str = TIME_FILTER_UPCOMING
    category: str = CATEGORY_ALL
    location: LocationFilter | None = None


def passes_location_filter(event: Event, location_filter: LocationFilter) -> bool:
    """Check if an event satisfies a location filter.

    Pure function.

    Args:
        event: Event to check
        location_filter: Filter to check against

    Returns:
        True if the event passes
    """
    # No spatial data at all
    if not event.has_location:
        return False

    if (
        event.effective_location_type == LOCATION_APPROXIMATE
        and not location_filter.include_approximate
    ):
        return False

    # No active restriction: anything with spatial data passes
    if not location_filter.is_active:
        return True

    matches_area = (
        location_filter.has_area_filter
        and event.area is not None
        and event.area in location_filter.areas
    )

    # Area-only events never satisfy a radius, even if their area's
    # center lies inside it.
    matches_radius = (
        location_filter.has_radius_filter
        and event.coordinates is not None
        and event.coordinates.is_finite()
        and is_within_radius_km(event.coordinates, location_filter.center, location_filter.radius_km)
    )

    return matches_area or matches_radius


def filter_events_by_location(
    events: Iterable[Event],
    location_filter: LocationFilter,
) -> list[Event]:
    """Filter events to those passing a location filter.

    Pure function. Input order is preserved.
    """
    return [e for e in events if passes_location_filter(e, location_filter)]


def filter_by_time(
    events: Iterable[Event],
    time_filter: str,
    now: datetime,
) -> list[Event]:
    """Filter events to past or upcoming ones.

    Pure function. An event is past if it starts before the start of
    ``now``'s day, upcoming otherwise. Events without a start time count
    as upcoming.

    Args:
        events: Events to filter
        time_filter: 'past' or 'upcoming'
        now: Current time (aware)

    Returns:
        Matching events in input order
    """
    day_start = datetime.combine(now.date(), time.min, tzinfo=now.tzinfo)

    def is_past(event: Event) -> bool:
        return event.start_time is not None and event.start_time < day_start

    if time_filter == TIME_FILTER_PAST:
        return [e for e in events if is_past(e)]
    return [e for e in events if not is_past(e)]


def filter_by_category(events: Iterable[Event], category: str) -> list[Event]:
    """Filter events to a single category ('all' keeps everything).

    Pure function.
    """
    if category == CATEGORY_ALL:
        return list(events)
    return [e for e in events if e.category == category]


def apply_event_filters(
    events: Iterable[Event],
    filters: EventFilters,
    now: datetime,
) -> list[Event]:
    """Apply time, category and location filters, in that order.

    Pure function.

    Args:
        events: Events to filter
        filters: Filters to apply
        now: Current time (aware), used by the time filter

    Returns:
        Events passing every filter, in input order
    """
    filtered = filter_by_time(events, filters.time_filter, now)
    filtered = filter_by_category(filtered, filters.category)

    if filters.location is not None:
        filtered = filter_events_by_location(filtered, filters.location)

    return filtered
