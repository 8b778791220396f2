"""Named-area registry - Pure data structures.

Maps area codes (neighborhood slugs such as ``mission``) to a display
name and a canonical center. Labels from upstream sources arrive with
inconsistent casing and spacing, so lookups go through an alias table
first and a normalized code second.

The registry is configuration: it is built once by the shell layer
(see eventmap.shell.config_loader) and passed to whoever needs it.
"""

import logging
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from eventmap.core.geo import Coordinates


logger = logging.getLogger(__name__)


_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass(frozen=True)
class Area:
    """A named area with a fixed canonical center.

    Attributes:
        code: Area code (e.g., 'mission', 'nob-hill')
        display_name: Human-readable name (e.g., 'Nob Hill')
        center: Approximate geographical center
    """
    code: str
    display_name: str
    center: Coordinates


def normalize_area_name(raw_name: str) -> str:
    """Normalize a free-text area label into area-code form.

    Pure function: lowercases, trims, and collapses internal whitespace
    runs into a single hyphen ('Nob  Hill' -> 'nob-hill').
    """
    return _WHITESPACE_RUN.sub("-", raw_name.strip().lower())


@dataclass(frozen=True)
class AreaRegistry:
    """Lookup of area codes to areas, with alias resolution.

    Lookups never raise; unknown names resolve to None and the caller
    decides whether to log or skip.

    Attributes:
        areas: Area code -> Area
        aliases: Exact free-text label -> area code
    """
    areas: Mapping[str, Area] = field(default_factory=dict)
    aliases: Mapping[str, str] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.areas)

    def __contains__(self, code: object) -> bool:
        return code in self.areas

    @property
    def codes(self) -> list[str]:
        """Registered area codes in configuration order."""
        return list(self.areas)

    def get(self, code: str) -> Area | None:
        return self.areas.get(code)

    def center_of(self, code: str) -> Coordinates | None:
        """Get the canonical center of a registered area code."""
        area = self.get(code)
        return area.center if area is not None else None

    def resolve_code(self, raw_name: str) -> str | None:
        """Resolve a free-text area label to an area code.

        1. Exact match against the alias table.
        2. Normalized label tried directly as an area code.
        3. Otherwise None.
        """
        if not raw_name:
            return None

        code = self.aliases.get(raw_name)
        if code is not None and code in self.areas:
            return code

        normalized = normalize_area_name(raw_name)
        if normalized in self.areas:
            return normalized

        return None

    def resolve_flexible(self, raw_name: str) -> Coordinates | None:
        """Resolve a free-text area label to the area's center."""
        code = self.resolve_code(raw_name)
        return self.center_of(code) if code is not None else None

    def display_name_of(self, raw_name: str) -> str | None:
        """Resolve a free-text area label to the area's display name."""
        code = self.resolve_code(raw_name)
        area = self.get(code) if code is not None else None
        return area.display_name if area is not None else None


def build_area_registry(
    areas: Iterable[Area],
    aliases: Mapping[str, str] | None = None,
) -> AreaRegistry:
    """Build an AreaRegistry from areas and an alias table.

    Later areas with a duplicate code replace earlier ones. Aliases
    pointing at unknown codes are dropped with a warning.

    Args:
        areas: Areas in configuration order
        aliases: Free-text label -> area code

    Returns:
        Read-only AreaRegistry
    """
    by_code: dict[str, Area] = {}
    for area in areas:
        by_code[area.code] = area

    valid_aliases: dict[str, str] = {}
    for label, code in (aliases or {}).items():
        if code not in by_code:
            logger.warning("Alias %r points at unknown area code %r, ignoring", label, code)
            continue
        valid_aliases[label] = code

    return AreaRegistry(
        areas=MappingProxyType(by_code),
        aliases=MappingProxyType(valid_aliases),
    )
