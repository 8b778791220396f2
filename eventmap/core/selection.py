"""Selection state transitions - Pure functions.

The user's map selection (chosen areas and/or a chosen center with a
radius) is modelled as an immutable SelectionState and changed only by
reduce_selection(state, action). Holding the current state is the
shell's job (see eventmap.shell.selection_manager).

Transition rules:
- ToggleArea removes the code if selected, else appends it. If that
  leaves no areas selected, the whole selection is cleared, including
  any center/radius.
- ToggleCenter on the currently selected center deselects it, keeping
  the areas if there are any. Any other center replaces the current
  center/radius and leaves the areas alone.
"""

from dataclasses import dataclass
from typing import Union

from eventmap.core.filters import LocationFilter
from eventmap.core.geo import Coordinates


DEFAULT_TOGGLE_RADIUS_KM = 1.0


@dataclass(frozen=True)
class SelectionState:
    """Current map selection.

    Attributes:
        selected_areas: Selected area codes, in selection order
        selected_center: Selected center, if any
        selected_radius_km: Radius around the selected center
    """
    selected_areas: tuple[str, ...] = ()
    selected_center: Coordinates | None = None
    selected_radius_km: float | None = None

    @property
    def is_empty(self) -> bool:
        return not self.selected_areas and self.selected_center is None

    def is_area_selected(self, code: str) -> bool:
        return code in self.selected_areas

    def is_center_selected(self, coordinates: Coordinates) -> bool:
        return self.selected_center == coordinates


@dataclass(frozen=True)
class ToggleArea:
    """Select or deselect an area."""
    code: str


@dataclass(frozen=True)
class ToggleCenter:
    """Select or deselect a center point with a radius."""
    coordinates: Coordinates
    radius_km: float = DEFAULT_TOGGLE_RADIUS_KM


SelectionAction = Union[ToggleArea, ToggleCenter]


EMPTY_SELECTION = SelectionState()


def toggle_area(state: SelectionState, code: str) -> SelectionState:
    """Apply an area toggle.

    Pure function.
    """
    if state.is_area_selected(code):
        areas = tuple(a for a in state.selected_areas if a != code)
    else:
        areas = state.selected_areas + (code,)

    # Emptying the area set clears the center too
    if not areas:
        return EMPTY_SELECTION

    return SelectionState(
        selected_areas=areas,
        selected_center=state.selected_center,
        selected_radius_km=state.selected_radius_km,
    )


def toggle_center(
    state: SelectionState,
    coordinates: Coordinates,
    radius_km: float = DEFAULT_TOGGLE_RADIUS_KM,
) -> SelectionState:
    """Apply a center toggle.

    Pure function. Centers are compared exactly.
    """
    if state.is_center_selected(coordinates):
        if state.selected_areas:
            return SelectionState(selected_areas=state.selected_areas)
        return EMPTY_SELECTION

    return SelectionState(
        selected_areas=state.selected_areas,
        selected_center=coordinates,
        selected_radius_km=radius_km,
    )


def reduce_selection(state: SelectionState, action: SelectionAction) -> SelectionState:
    """Compute the next selection state for an action.

    Pure function.

    Args:
        state: Current state
        action: ToggleArea or ToggleCenter

    Returns:
        The new state (the input is never modified)

    Raises:
        TypeError: If the action type is unknown
    """
    if isinstance(action, ToggleArea):
        return toggle_area(state, action.code)
    if isinstance(action, ToggleCenter):
        return toggle_center(state, action.coordinates, action.radius_km)
    raise TypeError(f"Unknown selection action: {action!r}")


def selection_to_location_filter(state: SelectionState) -> LocationFilter | None:
    """Derive the location filter for a selection.

    Pure function.

    Returns:
        LocationFilter mirroring the selection, or None if nothing is
        selected (no location restriction)
    """
    if state.is_empty:
        return None

    return LocationFilter(
        areas=frozenset(state.selected_areas),
        center=state.selected_center,
        radius_km=state.selected_radius_km,
        include_approximate=True,
    )
