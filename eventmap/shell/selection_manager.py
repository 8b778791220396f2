"""Selection State Manager - Imperative Shell.

Holds the one piece of mutable state in the engine: the user's current
map selection. Every change goes through the pure reducer in
eventmap.core.selection; this class only stores the result.
"""

import logging

from eventmap.core.filters import LocationFilter
from eventmap.core.geo import Coordinates
from eventmap.core.selection import (
    DEFAULT_TOGGLE_RADIUS_KM,
    EMPTY_SELECTION,
    SelectionAction,
    SelectionState,
    ToggleArea,
    ToggleCenter,
    reduce_selection,
    selection_to_location_filter,
)


logger = logging.getLogger(__name__)


class SelectionStateManager:
    """Owns the current selection and applies toggle actions."""

    def __init__(
        self,
        initial: SelectionState = EMPTY_SELECTION,
        default_radius_km: float = DEFAULT_TOGGLE_RADIUS_KM,
    ) -> None:
        """Initialize the manager.

        Args:
            initial: Starting selection
            default_radius_km: Radius for toggle_center() calls that
                don't pass one
        """
        self._state = initial
        self.default_radius_km = default_radius_km

    @property
    def state(self) -> SelectionState:
        return self._state

    def dispatch(self, action: SelectionAction) -> SelectionState:
        """Apply an action and store the resulting state."""
        previous = self._state
        self._state = reduce_selection(previous, action)
        logger.debug("Selection %r: %r -> %r", action, previous, self._state)
        return self._state

    def toggle_area(self, code: str) -> SelectionState:
        return self.dispatch(ToggleArea(code))

    def toggle_center(
        self,
        coordinates: Coordinates,
        radius_km: float | None = None,
    ) -> SelectionState:
        if radius_km is None:
            radius_km = self.default_radius_km
        return self.dispatch(ToggleCenter(coordinates, radius_km))

    def clear(self) -> SelectionState:
        self._state = EMPTY_SELECTION
        logger.debug("Selection cleared")
        return self._state

    def location_filter(self) -> LocationFilter | None:
        """Location filter for the current selection (None if empty)."""
        return selection_to_location_filter(self._state)
