"""Configuration models - Pure data structures.

These are domain models for configuration. The actual loading
(I/O) is handled by the shell layer.
"""

from dataclasses import dataclass, field

from eventmap.core.areas import AreaRegistry
from eventmap.core.clustering import DEFAULT_CLUSTER_RADIUS_METERS, SELECTION_TOLERANCE_METERS
from eventmap.core.geo import is_finite_number
from eventmap.core.selection import DEFAULT_TOGGLE_RADIUS_KM


@dataclass
class Config:
    """Application configuration.

    This is a pure data structure - no I/O or side effects.

    Attributes:
        cluster_radius_meters: Max distance for events to share a marker
        selection_tolerance_meters: Max distance from the selected center
            for a marker to be highlighted
        default_toggle_radius_km: Radius used when a center is selected
            without an explicit radius
        events_api_url: URL of the events feed (None to disable fetching)
        request_timeout: Timeout for the events feed in seconds
        area_registry: Named areas and their aliases
    """
    cluster_radius_meters: float = DEFAULT_CLUSTER_RADIUS_METERS
    selection_tolerance_meters: float = SELECTION_TOLERANCE_METERS
    default_toggle_radius_km: float = DEFAULT_TOGGLE_RADIUS_KM
    events_api_url: str | None = None
    request_timeout: int = 30
    area_registry: AreaRegistry = field(default_factory=AreaRegistry)


@dataclass
class ValidationError:
    """A configuration validation error.

    Attributes:
        field: The field that has an error
        message: Human-readable error description
        severity: 'error' or 'warning'
    """
    field: str
    message: str
    severity: str = "error"


@dataclass
class ValidationResult:
    """Result of validating configuration.

    Attributes:
        valid: True if no errors (warnings are OK)
        errors: List of validation errors/warnings
    """
    valid: bool
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def warnings(self) -> list[ValidationError]:
        """Get only warnings."""
        return [e for e in self.errors if e.severity == "warning"]

    @property
    def critical_errors(self) -> list[ValidationError]:
        """Get only critical errors."""
        return [e for e in self.errors if e.severity == "error"]


def validate_coordinates(lat: float, lng: float, field_name: str) -> list[ValidationError]:
    """Validate latitude/longitude coordinates.

    Pure function.

    Args:
        lat: Latitude value
        lng: Longitude value
        field_name: Name of the field for error messages

    Returns:
        List of validation errors (empty if valid)
    """
    if not is_finite_number(lat) or not is_finite_number(lng):
        return [ValidationError(
            field=field_name,
            message=f"Coordinates ({lat}, {lng}) are not finite numbers",
        )]

    errors = []

    if not -90 <= lat <= 90:
        errors.append(ValidationError(
            field=field_name,
            message=f"Latitude {lat} out of range [-90, 90]",
        ))

    if not -180 <= lng <= 180:
        errors.append(ValidationError(
            field=field_name,
            message=f"Longitude {lng} out of range [-180, 180]",
        ))

    return errors


def _validate_positive(value: float, field_name: str) -> list[ValidationError]:
    if is_finite_number(value) and value > 0:
        return []
    return [ValidationError(
        field=field_name,
        message=f"Must be a positive number, got {value}",
    )]


def validate_config(config: Config) -> ValidationResult:
    """Validate configuration for errors and warnings.

    Pure function.

    Args:
        config: Configuration to validate

    Returns:
        ValidationResult with any errors/warnings found
    """
    errors: list[ValidationError] = []

    errors.extend(_validate_positive(config.cluster_radius_meters, "cluster_radius_meters"))
    errors.extend(_validate_positive(
        config.selection_tolerance_meters, "selection_tolerance_meters",
    ))
    errors.extend(_validate_positive(
        config.default_toggle_radius_km, "default_toggle_radius_km",
    ))

    registry = config.area_registry
    for code, area in registry.areas.items():
        errors.extend(validate_coordinates(
            area.center.lat, area.center.lng,
            f"areas[{code}]",
        ))

    # Distinct areas sharing one center are legal (e.g. overlapping
    # neighborhoods) but usually a copy-paste slip.
    seen_centers: dict[tuple[float, float], str] = {}
    for code, area in registry.areas.items():
        key = (area.center.lat, area.center.lng)
        if key in seen_centers:
            errors.append(ValidationError(
                field=f"areas[{code}]",
                message=f"Same center as area '{seen_centers[key]}'",
                severity="warning",
            ))
        else:
            seen_centers[key] = code

    if len(registry) == 0:
        errors.append(ValidationError(
            field="areas",
            message="No areas configured; approximate locations cannot be placed",
            severity="warning",
        ))

    if not config.events_api_url:
        errors.append(ValidationError(
            field="events_api_url",
            message="No events feed configured",
            severity="warning",
        ))

    has_critical = any(e.severity == "error" for e in errors)

    return ValidationResult(
        valid=not has_critical,
        errors=errors,
    )
