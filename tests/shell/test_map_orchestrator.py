"""Tests for the Orchestrator module.

Tests the coordination between functional core and imperative shell.
Uses mocks for the events client to test orchestration logic.
"""

import logging
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from eventmap.core.areas import Area, build_area_registry
from eventmap.core.config import Config
from eventmap.core.event import Event
from eventmap.core.filters import TIME_FILTER_PAST, EventFilters
from eventmap.core.geo import Coordinates
from eventmap.core.selection import SelectionState
from eventmap.orchestrator import MapOrchestrator, MapView
from eventmap.shell.events_client import EventsClient
from eventmap.shell.selection_manager import SelectionStateManager


NOW = datetime(2025, 10, 4, 15, 0, tzinfo=timezone.utc)
SOMA = Coordinates(37.7849, -122.4094)
MISSION = Coordinates(37.7599, -122.4148)


@pytest.fixture
def config():
    """Config with a two-area registry and no feed."""
    return Config(
        area_registry=build_area_registry([
            Area(code="soma", display_name="SoMa", center=SOMA),
            Area(code="mission", display_name="Mission District", center=MISSION),
        ]),
    )


@pytest.fixture
def raw_events():
    """Raw feed records: two Mission events, one exact SoMa event, one unknown area."""
    return [
        {"id": "a", "category": "Meetup", "area": "mission", "date": "2025-10-10T18:00:00Z"},
        {"id": "b", "category": "Workshop", "area": "mission", "date": "2025-10-11T18:00:00Z"},
        {
            "id": "c",
            "category": "Meetup",
            "area": "soma",
            "coordinates": {"lat": 37.7849, "lng": -122.4094},
            "locationType": "exact",
            "date": "2025-09-01T18:00:00Z",
        },
        {"id": "d", "category": "Meetup", "area": "atlantis", "date": "2025-10-12T18:00:00Z"},
    ]


@pytest.fixture
def mock_client(raw_events):
    client = Mock(spec=EventsClient)
    client.fetch_events.return_value = raw_events
    return client


class TestMapView:
    """Tests for MapView."""

    def test_success_without_errors(self, config):
        view = MapOrchestrator(config).build_view([], now=NOW)

        assert view.success is True
        assert view.summary == "0 events on 0 markers (0 clusters), 0 in list"

    def test_failure_with_errors(self, config):
        view = MapOrchestrator(config).build_view([], now=NOW)
        view.errors.append("boom")

        assert view.success is False


class TestMapOrchestratorInit:
    """Tests for orchestrator wiring."""

    def test_creates_client_from_config(self, config):
        config.events_api_url = "https://events.example.com/api/events"
        config.request_timeout = 7

        orchestrator = MapOrchestrator(config)

        assert isinstance(orchestrator.events_client, EventsClient)
        assert orchestrator.events_client.base_url == "https://events.example.com/api/events"
        assert orchestrator.events_client.timeout == 7

    def test_no_client_without_url(self, config):
        assert MapOrchestrator(config).events_client is None

    def test_selection_manager_uses_config_radius(self, config):
        config.default_toggle_radius_km = 2.5

        orchestrator = MapOrchestrator(config)
        orchestrator.selection_manager.toggle_center(SOMA)

        assert orchestrator.selection_manager.state.selected_radius_km == 2.5


class TestFetchEvents:
    """Tests for MapOrchestrator.fetch_events()."""

    def test_parses_feed(self, config, mock_client):
        events = MapOrchestrator(config, events_client=mock_client).fetch_events()

        assert [e.id for e in events] == ["a", "b", "c", "d"]
        assert isinstance(events[0], Event)

    def test_raises_without_client(self, config):
        with pytest.raises(RuntimeError):
            MapOrchestrator(config).fetch_events()


class TestBuildView:
    """Tests for MapOrchestrator.build_view()."""

    def test_markers_without_selection(self, config, mock_client):
        orchestrator = MapOrchestrator(config, events_client=mock_client)

        view = orchestrator.build_view(orchestrator.fetch_events(), now=NOW)

        assert [m.id for m in view.markers] == ["marker-a", "marker-c"]
        assert [e.id for e in view.markers[0].members] == ["a", "b"]
        assert view.markers[0].coordinates == MISSION
        assert view.stats.total_events == 3
        assert view.stats.clustered_markers == 1
        assert view.unresolved_areas == ["atlantis"]
        assert not any(m.is_selected for m in view.markers)

    def test_list_without_selection_applies_time_filter(self, config, mock_client):
        orchestrator = MapOrchestrator(config, events_client=mock_client)

        view = orchestrator.build_view(orchestrator.fetch_events(), now=NOW)

        assert [e.id for e in view.events] == ["a", "b", "d"]

    def test_past_filter(self, config, mock_client):
        orchestrator = MapOrchestrator(config, events_client=mock_client)

        view = orchestrator.build_view(
            orchestrator.fetch_events(),
            EventFilters(time_filter=TIME_FILTER_PAST),
            now=NOW,
        )

        assert [e.id for e in view.events] == ["c"]

    def test_area_selection_filters_list_and_marks_marker(self, config, mock_client):
        manager = SelectionStateManager(SelectionState(selected_areas=("mission",)))
        orchestrator = MapOrchestrator(config, events_client=mock_client, selection_manager=manager)

        view = orchestrator.build_view(orchestrator.fetch_events(), now=NOW)

        assert [e.id for e in view.events] == ["a", "b"]
        assert [m.is_selected for m in view.markers] == [True, False]
        assert view.selection == manager.state

    def test_center_selection(self, config, mock_client):
        manager = SelectionStateManager()
        manager.toggle_center(SOMA, 1.0)
        orchestrator = MapOrchestrator(config, events_client=mock_client, selection_manager=manager)

        view = orchestrator.build_view(
            orchestrator.fetch_events(),
            EventFilters(time_filter=TIME_FILTER_PAST),
            now=NOW,
        )

        assert [e.id for e in view.events] == ["c"]
        assert [m.is_selected for m in view.markers] == [False, True]

    def test_caller_location_filter_is_replaced(self, config, mock_client):
        """The list always follows the selection held by the manager."""
        orchestrator = MapOrchestrator(config, events_client=mock_client)
        events = orchestrator.fetch_events()

        view = orchestrator.build_view(
            events,
            EventFilters(location=Mock()),
            now=NOW,
        )

        assert [e.id for e in view.events] == ["a", "b", "d"]

    def test_cluster_radius_from_config(self, config, mock_client):
        config.cluster_radius_meters = 5000
        orchestrator = MapOrchestrator(config, events_client=mock_client)

        view = orchestrator.build_view(orchestrator.fetch_events(), now=NOW)

        assert len(view.markers) == 1
        assert view.markers[0].size == 3

    def test_logs_unknown_areas(self, config, mock_client, caplog):
        orchestrator = MapOrchestrator(config, events_client=mock_client)

        with caplog.at_level(logging.WARNING):
            orchestrator.build_view(orchestrator.fetch_events(), now=NOW)

        assert "Unknown areas: atlantis" in caplog.text


class TestProcess:
    """Tests for MapOrchestrator.process()."""

    def test_fetches_and_builds(self, config, mock_client):
        view = MapOrchestrator(config, events_client=mock_client).process(now=NOW)

        assert isinstance(view, MapView)
        assert view.success is True
        assert len(view.markers) == 2
        mock_client.fetch_events.assert_called_once_with()

    def test_request_error_is_reported(self, config, mock_client):
        mock_client.fetch_events.side_effect = requests.ConnectionError("unreachable")

        view = MapOrchestrator(config, events_client=mock_client).process(now=NOW)

        assert view.success is False
        assert view.markers == []
        assert view.events == []
        assert "Failed to fetch events" in view.errors[0]
        assert "unreachable" in view.errors[0]

    def test_bad_payload_is_reported(self, config, mock_client):
        mock_client.fetch_events.side_effect = ValueError("not a list")

        view = MapOrchestrator(config, events_client=mock_client).process(now=NOW)

        assert view.errors == ["Failed to fetch events: not a list"]

    def test_missing_feed_is_reported(self, config):
        view = MapOrchestrator(config).process(now=NOW)

        assert view.success is False
        assert "No events feed configured" in view.errors[0]
