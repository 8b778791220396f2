"""Unit tests for marker clustering.

Pure function tests - fast, no mocks needed.

Longitude offsets at SF's latitude: 0.0009 degrees is ~79 m and
0.0018 degrees is ~158 m.
"""

import pytest

from eventmap.core.areas import Area, build_area_registry
from eventmap.core.clustering import (
    Marker,
    build_markers,
    compute_primary_category,
    get_marker_stats,
    is_event_selected,
)
from eventmap.core.event import LOCATION_APPROXIMATE, LOCATION_EXACT, Event
from eventmap.core.geo import Coordinates


SF = Coordinates(lat=37.7749, lng=-122.4194)
SF_NEARBY = Coordinates(lat=37.7750, lng=-122.4195)
EAST_79M = Coordinates(lat=37.7749, lng=-122.4185)
EAST_158M = Coordinates(lat=37.7749, lng=-122.4176)
MISSION = Coordinates(lat=37.7599, lng=-122.4148)


@pytest.fixture
def registry():
    return build_area_registry([
        Area(code="mission", display_name="Mission District", center=MISSION),
        Area(code="soma", display_name="South of Market", center=Coordinates(37.7849, -122.4094)),
    ])


def exact(event_id, coordinates, category="Meetup", area=None):
    return Event(
        id=event_id,
        category=category,
        coordinates=coordinates,
        area=area,
        location_type=LOCATION_EXACT,
    )


def approx(event_id, area, category="Meetup"):
    return Event(id=event_id, category=category, area=area, location_type=LOCATION_APPROXIMATE)


class TestBuildMarkersScenarios:
    """Core clustering scenarios."""

    def test_nearby_events_form_one_cluster(self, registry):
        """Two events ~14 m apart share one marker at radius 100 m."""
        markers = build_markers(
            [exact("a", SF), exact("b", SF_NEARBY)],
            registry,
            cluster_radius_meters=100,
        )

        assert len(markers) == 1
        assert len(markers[0].members) == 2
        assert markers[0].is_cluster is True

    def test_distant_area_event_gets_own_marker(self, registry):
        """An exact event and a Mission area event (>1 km away) stay apart."""
        markers = build_markers(
            [exact("a", SF), approx("b", "mission")],
            registry,
            cluster_radius_meters=100,
        )

        assert len(markers) == 2
        assert markers[0].coordinates == SF
        assert markers[1].coordinates == MISSION
        assert markers[1].location_type == LOCATION_APPROXIMATE

    def test_empty_input(self, registry):
        assert build_markers([], registry) == []


class TestBuildMarkersGreedy:
    """Greedy, first-match, non-recentering behaviour."""

    def test_marker_position_is_first_member(self, registry):
        markers = build_markers([exact("a", SF), exact("b", EAST_79M)], registry)

        assert len(markers) == 1
        assert markers[0].coordinates == SF

    def test_no_recentering_as_members_join(self, registry):
        """A third event near the second member but far from the marker starts a new marker."""
        markers = build_markers(
            [exact("a", SF), exact("b", EAST_79M), exact("c", EAST_158M)],
            registry,
        )

        assert [[e.id for e in m.members] for m in markers] == [["a", "b"], ["c"]]

    def test_joins_first_matching_marker(self, registry):
        """An event within range of two markers joins the first one created."""
        markers = build_markers(
            [exact("a", SF), exact("b", EAST_158M), exact("c", EAST_79M)],
            registry,
        )

        assert [[e.id for e in m.members] for m in markers] == [["a", "c"], ["b"]]

    def test_order_dependent(self, registry):
        """Reordering the input can change membership."""
        forward = build_markers(
            [exact("a", SF), exact("b", EAST_79M), exact("c", EAST_158M)],
            registry,
        )
        backward = build_markers(
            [exact("b", EAST_79M), exact("a", SF), exact("c", EAST_158M)],
            registry,
        )

        assert len(forward) == 2
        assert len(backward) == 1

    def test_output_in_creation_order(self, registry):
        markers = build_markers(
            [approx("m", "mission"), exact("a", SF), approx("s", "soma")],
            registry,
        )

        assert [m.id for m in markers] == ["marker-m", "marker-a", "marker-s"]

    def test_cluster_radius_is_respected(self, registry):
        events = [exact("a", SF), exact("b", EAST_79M)]

        assert len(build_markers(events, registry, cluster_radius_meters=50)) == 2
        assert len(build_markers(events, registry, cluster_radius_meters=100)) == 1

    def test_deterministic(self, registry):
        events = [
            exact("a", SF),
            approx("b", "mission"),
            exact("c", EAST_79M, category="Social"),
            approx("d", "soma"),
            exact("e", EAST_158M),
        ]

        first = build_markers(events, registry)
        second = build_markers(events, registry)

        assert [(m.id, [e.id for e in m.members]) for m in first] == [
            (m.id, [e.id for e in m.members]) for m in second
        ]

    def test_markers_are_rebuilt_from_scratch(self, registry):
        events = [exact("a", SF), exact("b", SF_NEARBY)]

        first = build_markers(events, registry)
        first[0].members.clear()
        second = build_markers(events, registry)

        assert first[0] is not second[0]
        assert len(second[0].members) == 2


class TestBuildMarkersSkipping:
    """Events without a usable location."""

    def test_skips_unresolvable_area(self, registry):
        markers = build_markers([approx("x", "Atlantis"), exact("a", SF)], registry)

        assert [m.id for m in markers] == ["marker-a"]

    def test_skips_events_without_location(self, registry):
        markers = build_markers([Event(id="x"), exact("a", SF)], registry)

        assert len(markers) == 1
        assert markers[0].members[0].id == "a"

    def test_area_events_cluster_together(self, registry):
        markers = build_markers(
            [approx("a", "mission"), approx("b", "Mission")],
            registry,
        )

        assert len(markers) == 1
        assert markers[0].is_cluster is True


class TestMarkerAttributes:
    """Marker attributes computed during clustering."""

    def test_single_event_marker(self, registry):
        marker = build_markers([exact("a", SF, category="Workshop", area="soma")], registry)[0]

        assert marker.id == "marker-a"
        assert marker.is_cluster is False
        assert marker.primary_category == "Workshop"
        assert marker.location_type == LOCATION_EXACT
        assert marker.area == "soma"
        assert marker.is_selected is False

    def test_location_type_follows_first_member(self, registry):
        marker = build_markers(
            [approx("a", "mission"), exact("b", MISSION)],
            registry,
        )[0]

        assert marker.location_type == LOCATION_APPROXIMATE
        assert marker.size == 2

    def test_primary_category_majority(self, registry):
        marker = build_markers(
            [
                exact("a", SF, category="Workshop"),
                exact("b", SF, category="Social"),
                exact("c", SF, category="Social"),
            ],
            registry,
        )[0]

        assert marker.primary_category == "Social"

    def test_primary_category_tie_goes_to_first_seen(self, registry):
        marker = build_markers(
            [exact("a", SF, category="Social"), exact("b", SF, category="Workshop")],
            registry,
        )[0]

        assert marker.primary_category == "Social"


class TestComputePrimaryCategory:
    """Tests for compute_primary_category()."""

    def test_empty(self):
        assert compute_primary_category([]) == ""

    def test_majority_wins(self):
        events = [Event(id=str(i), category=c) for i, c in enumerate(["A", "B", "B"])]
        assert compute_primary_category(events) == "B"

    def test_tie_broken_by_first_occurrence(self):
        events = [
            Event(id=str(i), category=c)
            for i, c in enumerate(["Workshop", "Social", "Social", "Workshop"])
        ]
        assert compute_primary_category(events) == "Workshop"

    def test_tie_ignores_alphabetical_order(self):
        events = [Event(id=str(i), category=c) for i, c in enumerate(["Zeta", "Alpha"])]
        assert compute_primary_category(events) == "Zeta"


class TestSelection:
    """Marker selection flags."""

    def test_selected_by_area(self, registry):
        markers = build_markers(
            [approx("a", "mission"), approx("b", "soma")],
            registry,
            selected_areas=["mission"],
        )

        assert [m.is_selected for m in markers] == [True, False]

    def test_area_match_is_exact(self, registry):
        """Selected codes are compared with the event's area as-is."""
        markers = build_markers([approx("a", "Mission")], registry, selected_areas=["mission"])
        assert markers[0].is_selected is False

    def test_selected_by_center_within_50m(self, registry):
        center = Coordinates(lat=37.7749, lng=-122.4191)  # ~26 m east of SF
        markers = build_markers([exact("a", SF)], registry, selected_center=center)

        assert markers[0].is_selected is True

    def test_center_tolerance_is_independent_of_cluster_radius(self, registry):
        """79 m from the center: same cluster radius bucket, but not selected."""
        markers = build_markers(
            [exact("a", SF)],
            registry,
            cluster_radius_meters=500,
            selected_center=EAST_79M,
        )

        assert markers[0].is_selected is False

    def test_any_selected_member_selects_cluster(self, registry):
        markers = build_markers(
            [exact("a", SF), exact("b", SF_NEARBY, area="soma")],
            registry,
            selected_areas=["soma"],
        )

        assert len(markers) == 1
        assert markers[0].is_selected is True

    def test_selection_is_sticky_within_cluster(self, registry):
        markers = build_markers(
            [exact("a", SF, area="soma"), exact("b", SF_NEARBY)],
            registry,
            selected_areas=["soma"],
        )

        assert markers[0].is_selected is True

    def test_is_event_selected_without_selection(self):
        assert is_event_selected(exact("a", SF), SF, [], None) is False


class TestGetMarkerStats:
    """Tests for get_marker_stats()."""

    def test_empty(self):
        stats = get_marker_stats([])

        assert stats.total_markers == 0
        assert stats.total_events == 0
        assert stats.average_events_per_marker == 0.0

    def test_counts(self, registry):
        markers = build_markers(
            [exact("a", SF), exact("b", SF_NEARBY), approx("c", "mission")],
            registry,
        )

        stats = get_marker_stats(markers)

        assert stats.total_markers == 2
        assert stats.total_events == 3
        assert stats.clustered_markers == 1
        assert stats.exact_location_markers == 1
        assert stats.approximate_location_markers == 1
        assert stats.average_events_per_marker == pytest.approx(1.5)

    def test_marker_add_refreshes_attributes(self):
        marker = Marker(
            id="m",
            coordinates=SF,
            members=[exact("a", SF, category="Workshop")],
            primary_category="Workshop",
        )

        marker.add(exact("b", SF, category="Social"), selected=False)
        marker.add(exact("c", SF, category="Social"), selected=True)

        assert marker.is_cluster is True
        assert marker.primary_category == "Social"
        assert marker.is_selected is True
