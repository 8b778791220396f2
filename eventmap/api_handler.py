"""Web API Handler - Serves map markers and filtered events.

This module provides the HTTP endpoint for the web frontend. The
server is stateless: the client sends its current selection plus any
toggle actions, and gets back the new selection with the view built
for it. Part of the imperative shell - handles HTTP I/O.
"""

import json
import logging
from dataclasses import replace
from typing import Any

from flask import Request, Response

from eventmap.core.clustering import Marker, MarkerStats
from eventmap.core.config import Config
from eventmap.core.event import event_to_dict, parse_events
from eventmap.core.filters import CATEGORY_ALL, TIME_FILTER_PAST, TIME_FILTER_UPCOMING, EventFilters
from eventmap.core.geo import is_finite_number, parse_coordinates
from eventmap.core.selection import (
    SelectionAction,
    SelectionState,
    ToggleArea,
    ToggleCenter,
)
from eventmap.orchestrator import MapOrchestrator, MapView
from eventmap.shell.selection_manager import SelectionStateManager

logger = logging.getLogger(__name__)

# CORS allowed origins
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:3001",
]


class BadRequest(ValueError):
    """The request payload could not be understood."""


def _cors_headers(origin: str | None) -> dict[str, str]:
    """Generate CORS headers for the response."""
    headers = {
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
        "Access-Control-Max-Age": "3600",
    }
    if origin and origin in ALLOWED_ORIGINS:
        headers["Access-Control-Allow-Origin"] = origin
    else:
        headers["Access-Control-Allow-Origin"] = ALLOWED_ORIGINS[0]
    return headers


def _json_response(
    data: dict[str, Any],
    status: int = 200,
    origin: str | None = None,
) -> Response:
    """Create a JSON response with CORS headers."""
    response = Response(
        json.dumps(data, default=str),
        status=status,
        mimetype="application/json",
    )
    for key, value in _cors_headers(origin).items():
        response.headers[key] = value
    return response


def _parse_selection(data: Any) -> SelectionState:
    """Parse the client's current selection."""
    if data is None:
        return SelectionState()
    if not isinstance(data, dict):
        raise BadRequest("selection must be an object")

    areas = data.get("areas") or []
    if not isinstance(areas, list) or not all(isinstance(a, str) for a in areas):
        raise BadRequest("selection.areas must be a list of strings")

    center = None
    radius_km = None
    if data.get("center") is not None:
        center = parse_coordinates(data["center"])
        if center is None or not center.is_finite():
            raise BadRequest("selection.center must have finite numeric lat and lng")
        radius_km = data.get("radius_km")
        if not is_finite_number(radius_km):
            raise BadRequest("selection.radius_km is required with a center")

    # Duplicates would make toggling a code only remove one copy
    return SelectionState(
        selected_areas=tuple(dict.fromkeys(areas)),
        selected_center=center,
        selected_radius_km=radius_km,
    )


def _parse_action(data: Any, default_radius_km: float) -> SelectionAction:
    """Parse a single toggle action."""
    if not isinstance(data, dict):
        raise BadRequest("each action must be an object")

    action_type = data.get("type")
    if action_type == "toggle_area":
        code = data.get("code")
        if not isinstance(code, str) or not code:
            raise BadRequest("toggle_area needs a code")
        return ToggleArea(code)

    if action_type == "toggle_center":
        coordinates = parse_coordinates(data.get("coordinates"))
        if coordinates is None or not coordinates.is_finite():
            raise BadRequest("toggle_center needs coordinates with finite numeric lat and lng")
        radius_km = data.get("radius_km", default_radius_km)
        if not is_finite_number(radius_km):
            raise BadRequest("toggle_center radius_km must be a number")
        return ToggleCenter(coordinates, float(radius_km))

    raise BadRequest(f"Unknown action type: {action_type}")


def _parse_filters(data: Any) -> EventFilters:
    """Parse time/category filters."""
    if data is None:
        return EventFilters()
    if not isinstance(data, dict):
        raise BadRequest("filters must be an object")

    time_filter = data.get("time", TIME_FILTER_UPCOMING)
    if time_filter not in (TIME_FILTER_UPCOMING, TIME_FILTER_PAST):
        raise BadRequest(f"Unknown time filter: {time_filter}")

    return EventFilters(
        time_filter=time_filter,
        category=str(data.get("category") or CATEGORY_ALL),
    )


def _selection_to_dict(state: SelectionState) -> dict[str, Any]:
    return {
        "areas": list(state.selected_areas),
        "center": state.selected_center.to_dict() if state.selected_center else None,
        "radius_km": state.selected_radius_km,
    }


def _marker_to_dict(marker: Marker) -> dict[str, Any]:
    """Convert Marker to JSON-serializable dict."""
    return {
        "id": marker.id,
        "coordinates": marker.coordinates.to_dict(),
        "event_ids": [e.id for e in marker.members],
        "is_cluster": marker.is_cluster,
        "primary_category": marker.primary_category,
        "location_type": marker.location_type,
        "area": marker.area,
        "is_selected": marker.is_selected,
    }


def _stats_to_dict(stats: MarkerStats) -> dict[str, Any]:
    return {
        "total_markers": stats.total_markers,
        "total_events": stats.total_events,
        "clustered_markers": stats.clustered_markers,
        "exact_location_markers": stats.exact_location_markers,
        "approximate_location_markers": stats.approximate_location_markers,
        "average_events_per_marker": stats.average_events_per_marker,
    }


def view_to_dict(view: MapView) -> dict[str, Any]:
    """Convert a MapView to the response body."""
    return {
        "markers": [_marker_to_dict(m) for m in view.markers],
        "events": [event_to_dict(e) for e in view.events],
        "selection": _selection_to_dict(view.selection),
        "stats": _stats_to_dict(view.stats),
        "unresolved_areas": view.unresolved_areas,
        "errors": view.errors,
    }


def handle_map_request(request: Request, config: Config) -> Response:
    """API endpoint: Build the map view for a selection.

    JSON body (all keys optional):
        events: Raw events; fetched from the feed when omitted
        selection: {"areas": [...], "center": {...}, "radius_km": n}
        actions: [{"type": "toggle_area", "code": ...},
                  {"type": "toggle_center", "coordinates": {...}, "radius_km": n}]
        filters: {"time": "upcoming"|"past", "category": ...}
        cluster_radius_meters: Override for the clustering radius

    Returns:
        JSON with markers, filtered events, new selection and stats
    """
    origin = request.headers.get("Origin")

    # Handle CORS preflight
    if request.method == "OPTIONS":
        response = Response("", status=204)
        for key, value in _cors_headers(origin).items():
            response.headers[key] = value
        return response

    body = request.get_json(silent=True)
    if body is None:
        body = {}
    if not isinstance(body, dict):
        return _json_response({"error": "Body must be a JSON object"}, status=400, origin=origin)

    try:
        selection = _parse_selection(body.get("selection"))

        raw_actions = body.get("actions")
        if raw_actions is None:
            raw_actions = []
        if not isinstance(raw_actions, list):
            raise BadRequest("actions must be a list")
        actions = [_parse_action(a, config.default_toggle_radius_km) for a in raw_actions]
        filters = _parse_filters(body.get("filters"))

        radius = body.get("cluster_radius_meters")
        if radius is not None:
            if not is_finite_number(radius) or radius <= 0:
                raise BadRequest("cluster_radius_meters must be a positive number")
            config = replace(config, cluster_radius_meters=float(radius))

        raw_events = body.get("events")
        if raw_events is not None and not isinstance(raw_events, list):
            raise BadRequest("events must be a list")
    except BadRequest as e:
        return _json_response({"error": str(e)}, status=400, origin=origin)

    manager = SelectionStateManager(selection, default_radius_km=config.default_toggle_radius_km)
    for action in actions:
        manager.dispatch(action)

    orchestrator = MapOrchestrator(config, selection_manager=manager)

    if raw_events is not None:
        view = orchestrator.build_view(parse_events(raw_events), filters)
    else:
        view = orchestrator.process(filters)

    status = 200 if view.success else 502
    return _json_response(view_to_dict(view), status=status, origin=origin)
