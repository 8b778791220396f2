"""Coordinate resolution - Pure functions.

Resolves an event to the single best coordinate for placing it on the
map. Exact coordinates always win over the area's center.
"""

import logging

from eventmap.core.areas import AreaRegistry
from eventmap.core.event import Event
from eventmap.core.geo import Coordinates


logger = logging.getLogger(__name__)


def resolve_coordinates(event: Event, registry: AreaRegistry) -> Coordinates | None:
    """Resolve an event to a map coordinate.

    Pure function (apart from warning logs).

    Args:
        event: Event to place
        registry: Area registry used for approximate locations

    Returns:
        The event's exact coordinates if present, else its area's
        center, else None when the event has no usable location
    """
    if event.coordinates is not None:
        if event.coordinates.is_finite():
            return event.coordinates
        logger.warning(
            "Event %s has non-finite coordinates (%s, %s), skipping",
            event.id,
            event.coordinates.lat,
            event.coordinates.lng,
        )
        return None

    if event.area is None:
        return None

    center = registry.resolve_flexible(event.area)
    if center is None:
        logger.warning("Event %s has unknown area: %s", event.id, event.area)
    return center


def find_unresolvable_areas(events: list[Event], registry: AreaRegistry) -> list[str]:
    """List area labels that cannot be placed on the map.

    Pure function. Only events without exact coordinates are considered.
    Each label appears once, in order of first occurrence.
    """
    seen: dict[str, None] = {}
    for event in events:
        if event.coordinates is not None or event.area is None:
            continue
        if registry.resolve_code(event.area) is None:
            seen.setdefault(event.area, None)
    return list(seen)
