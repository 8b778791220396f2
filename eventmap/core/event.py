"""Event data models and parsing - Pure functions.

This module handles parsing raw event records (decoded JSON from the
events data layer) into typed Event objects. All functions are pure;
the only side effect is warning-level logging for skipped records.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

from eventmap.core.geo import Coordinates, parse_coordinates


logger = logging.getLogger(__name__)


LOCATION_EXACT = "exact"
LOCATION_APPROXIMATE = "approximate"
LOCATION_TYPES = (LOCATION_EXACT, LOCATION_APPROXIMATE)

DEFAULT_CATEGORY = "Other"


@dataclass(frozen=True)
class Event:
    """Immutable event data model.

    Only the fields the map engine needs are modelled; everything else
    the data layer sends is ignored.

    Attributes:
        id: Unique event ID
        category: Event category (e.g., 'Meetup', 'Workshop')
        title: Human-readable title
        start_time: Event start (UTC), None if unknown
        coordinates: Exact location, if known
        area: Area code or free-text area label, if known
        location_type: 'exact' or 'approximate', None if unspecified
    """
    id: str
    category: str = DEFAULT_CATEGORY
    title: str = ""
    start_time: datetime | None = None
    coordinates: Coordinates | None = None
    area: str | None = None
    location_type: str | None = None

    @property
    def has_location(self) -> bool:
        """Returns True if the event carries any spatial data."""
        return self.coordinates is not None or self.area is not None

    @property
    def effective_location_type(self) -> str:
        """Location type, defaulting to approximate when unspecified."""
        return self.location_type or LOCATION_APPROXIMATE


def _parse_time(value: Any) -> datetime | None:
    """Parse an ISO-8601 string into an aware UTC datetime."""
    if not isinstance(value, str) or not value:
        return None

    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _infer_location_type(
    raw_type: Any,
    coordinates: Coordinates | None,
    area: str | None,
) -> str | None:
    if raw_type in LOCATION_TYPES:
        return raw_type
    if coordinates is not None:
        return LOCATION_EXACT
    if area is not None:
        return LOCATION_APPROXIMATE
    return None


def parse_event(record: dict[str, Any]) -> Event | None:
    """Parse a single raw record into an Event.

    Pure function: takes raw dict, returns typed Event or None if invalid.

    Accepts camelCase keys as sent by the web client (``locationType``,
    ``date``) as well as snake_case. A coordinates object with missing
    or non-numeric components is treated as absent.

    Args:
        record: Raw event dict

    Returns:
        Event object or None if the record has no usable ID
    """
    if not isinstance(record, dict):
        return None

    event_id = record.get("id")
    if event_id is None or event_id == "":
        return None

    coordinates = parse_coordinates(record.get("coordinates"))

    area = record.get("area")
    if not isinstance(area, str) or not area.strip():
        area = None

    raw_type = record.get("location_type", record.get("locationType"))
    start = record.get("start_time", record.get("date"))

    return Event(
        id=str(event_id),
        category=str(record.get("category") or DEFAULT_CATEGORY),
        title=str(record.get("title") or ""),
        start_time=_parse_time(start),
        coordinates=coordinates,
        area=area,
        location_type=_infer_location_type(raw_type, coordinates, area),
    )


def parse_events(records: list[dict[str, Any]]) -> list[Event]:
    """Parse a batch of raw records, skipping invalid ones.

    Pure function: input order is preserved.

    Args:
        records: Raw event dicts

    Returns:
        List of valid Event objects
    """
    events = []
    skipped = 0

    for record in records:
        event = parse_event(record)
        if event is None:
            skipped += 1
            continue
        events.append(event)

    if skipped:
        logger.warning("Skipped %d event records without a usable id", skipped)

    return events


def event_to_dict(event: Event) -> dict[str, Any]:
    """Convert an Event to a JSON-serializable dict.

    Non-finite coordinates are written as null.
    """
    coordinates = event.coordinates
    if coordinates is not None and not coordinates.is_finite():
        coordinates = None

    return {
        "id": event.id,
        "category": event.category,
        "title": event.title,
        "date": event.start_time.isoformat() if event.start_time else None,
        "coordinates": coordinates.to_dict() if coordinates else None,
        "area": event.area,
        "locationType": event.location_type,
    }
