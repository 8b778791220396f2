"""Orchestrator - Wires Functional Core and Imperative Shell.

This module coordinates the flow of data between the pure functional
core and the shell components: fetch events, place them on the map,
and filter the event list by the current selection.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

import requests

from eventmap.core.clustering import Marker, MarkerStats, build_markers, get_marker_stats
from eventmap.core.config import Config
from eventmap.core.event import Event, parse_events
from eventmap.core.filters import EventFilters, apply_event_filters
from eventmap.core.resolver import find_unresolvable_areas
from eventmap.core.selection import SelectionState, selection_to_location_filter
from eventmap.shell.events_client import EventsClient
from eventmap.shell.selection_manager import SelectionStateManager


logger = logging.getLogger(__name__)


@dataclass
class MapView:
    """Everything the map and list layers need to render.

    Attributes:
        markers: Map markers in creation order
        events: Events passing the current filters
        selection: Selection the view was built for
        stats: Marker statistics
        unresolved_areas: Area labels that could not be placed
        errors: Any errors that occurred
    """
    markers: list[Marker]
    events: list[Event]
    selection: SelectionState
    stats: MarkerStats
    unresolved_areas: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Returns True if no errors occurred."""
        return len(self.errors) == 0

    @property
    def summary(self) -> str:
        """Human-readable summary of the view."""
        return (
            f"{self.stats.total_events} events on {self.stats.total_markers} markers "
            f"({self.stats.clustered_markers} clusters), "
            f"{len(self.events)} in list"
        )


class MapOrchestrator:
    """Coordinates building the map view.

    This class wires together:
    - Events client (fetches raw events)
    - Core functions (parsing, clustering, filtering)
    - Selection manager (current selection)
    """

    def __init__(
        self,
        config: Config,
        events_client: EventsClient | None = None,
        selection_manager: SelectionStateManager | None = None,
    ) -> None:
        """Initialize orchestrator with configuration.

        Args:
            config: Application configuration
            events_client: Events client (created from config if not provided)
            selection_manager: Selection holder (created if not provided)
        """
        self.config = config
        if events_client is None and config.events_api_url:
            events_client = EventsClient(config.events_api_url, timeout=config.request_timeout)
        self.events_client = events_client
        self.selection_manager = selection_manager or SelectionStateManager(
            default_radius_km=config.default_toggle_radius_km,
        )

    def fetch_events(self) -> list[Event]:
        """Fetch and parse events from the feed.

        Raises:
            RuntimeError: If no events feed is configured
            requests.RequestException: If the request fails
        """
        if self.events_client is None:
            raise RuntimeError("No events feed configured")

        return parse_events(self.events_client.fetch_events())

    def build_view(
        self,
        events: list[Event],
        filters: EventFilters | None = None,
        now: datetime | None = None,
    ) -> MapView:
        """Build markers and the filtered event list.

        The location part of ``filters`` is always replaced by the one
        derived from the current selection.

        Args:
            events: Parsed events in display order
            filters: Time/category filters (defaults if None)
            now: Current time for the time filter (defaults to now, UTC)

        Returns:
            MapView for the current selection
        """
        selection = self.selection_manager.state
        filters = filters or EventFilters()
        now = now or datetime.now(timezone.utc)

        markers = build_markers(
            events,
            self.config.area_registry,
            cluster_radius_meters=self.config.cluster_radius_meters,
            selected_areas=selection.selected_areas,
            selected_center=selection.selected_center,
            selection_tolerance_meters=self.config.selection_tolerance_meters,
        )

        list_filters = EventFilters(
            time_filter=filters.time_filter,
            category=filters.category,
            location=selection_to_location_filter(selection),
        )
        listed = apply_event_filters(events, list_filters, now)

        unresolved = find_unresolvable_areas(events, self.config.area_registry)
        if unresolved:
            logger.warning("Unknown areas: %s", ", ".join(unresolved))

        view = MapView(
            markers=markers,
            events=listed,
            selection=selection,
            stats=get_marker_stats(markers),
            unresolved_areas=unresolved,
        )
        logger.info("Built map view: %s", view.summary)
        return view

    def process(
        self,
        filters: EventFilters | None = None,
        now: datetime | None = None,
    ) -> MapView:
        """Fetch events and build the view.

        Fetch failures are reported in MapView.errors with an empty view
        rather than raised.
        """
        try:
            events = self.fetch_events()
        except (requests.RequestException, RuntimeError, ValueError) as e:
            logger.error("Failed to fetch events: %s", e)
            view = self.build_view([], filters, now)
            view.errors.append(f"Failed to fetch events: {e}")
            return view

        return self.build_view(events, filters, now)
