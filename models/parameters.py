"""
Input data model for dispersion calculations.

``ModelParameters`` describes a single release point; ``Source`` and
``MultipleSourceParameters`` describe several simultaneous releases under
shared weather.  All are frozen value objects created fresh per call.

Raw parameters are NOT validated on construction: emergency input often
arrives half-filled or from noisy telemetry.  ``sanitize_parameters``
coerces every field to a finite, in-range value with documented defaults,
and the engine only ever works on sanitized parameters.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from config import (
    DEFAULT_CHEMICAL,
    DEFAULT_RELEASE_RATE,
    MIN_RELEASE_RATE,
    DEFAULT_WIND_SPEED,
    MIN_WIND_SPEED,
    DEFAULT_WIND_DIRECTION,
    DEFAULT_STABILITY_CLASS,
    DEFAULT_TEMPERATURE_C,
    AMBIENT_TEMPERATURE_RANGE_C,
    RELEASE_TEMPERATURE_RANGE_C,
    DEFAULT_HUMIDITY,
    DEFAULT_LEAK_DURATION_MIN,
    DEFAULT_SENSOR_THRESHOLD,
    MIN_SENSOR_THRESHOLD,
    DEFAULT_SENSOR_COUNT,
    DEFAULT_MONITORING_MODE,
    DEFAULT_MULTI_SOURCE_HEIGHT_M,
    STABILITY_FACTORS,
)
from models.numeric import is_valid_coordinate, safe_number


logger = logging.getLogger(__name__)

MONITORING_MODES = ("continuous", "batch")


@dataclass(frozen=True)
class Location:
    """A WGS84 coordinate in decimal degrees."""

    lat: float
    lng: float


@dataclass(frozen=True)
class ModelParameters:
    """Parameters of a single chemical release.

    Args:
        chemical: Chemical name, matched case-insensitively.
        release_rate: Release rate in kg/min.
        wind_speed: Wind speed in m/s.
        wind_direction: Meteorological wind direction (degrees, 0=N, wind FROM).
        stability_class: Pasquill-Gifford class A-F.
        temperature: Ambient air temperature (C).
        humidity: Relative humidity (%).
        release_temperature: Temperature of the release (C); ambient if None.
        source_height: Release height above ground (m).
        source_location: Release coordinate.
        ambient_pressure: Ambient pressure (hPa); standard if None.
        terrain: One of urban, suburban, rural, water, forest.
        is_indoor: Release inside a building.
        leak_duration: Release duration (minutes).
        sensor_threshold: Sensor detection threshold (mg/m^3).
        sensor_count: Number of deployed sensors.
        monitoring_mode: ``"continuous"`` or ``"batch"``.
    """

    chemical: str = DEFAULT_CHEMICAL
    release_rate: float = DEFAULT_RELEASE_RATE
    wind_speed: float = DEFAULT_WIND_SPEED
    wind_direction: float = DEFAULT_WIND_DIRECTION
    stability_class: str = DEFAULT_STABILITY_CLASS
    temperature: float = DEFAULT_TEMPERATURE_C
    humidity: Optional[float] = DEFAULT_HUMIDITY
    release_temperature: Optional[float] = None
    source_height: float = 0.0
    source_location: Location = Location(0.0, 0.0)
    ambient_pressure: Optional[float] = None
    terrain: Optional[str] = None
    is_indoor: bool = False
    leak_duration: Optional[float] = None
    sensor_threshold: Optional[float] = None
    sensor_count: Optional[int] = None
    monitoring_mode: str = DEFAULT_MONITORING_MODE


@dataclass(frozen=True)
class Source:
    """One release point in a multi-source scenario.

    ``temperature`` and ``source_height`` override the shared values when set.
    """

    id: str
    location: Location
    chemical: str
    release_rate: float
    temperature: Optional[float] = None
    source_height: Optional[float] = None


@dataclass(frozen=True)
class MultipleSourceParameters:
    """Several simultaneous releases sharing weather and site conditions.

    Args:
        base: Shared weather, terrain and sensor settings.  Its chemical,
              release rate and location are replaced per source.
        sources: The release points.
    """

    base: ModelParameters
    sources: Tuple[Source, ...] = field(default_factory=tuple)

    def params_for(self, source: Source) -> ModelParameters:
        """Return single-source parameters for *source*.

        Sources without their own height are treated as released 2 m above
        ground, the typical height of a tank or pipe rack outlet.
        """
        return replace(
            self.base,
            chemical=source.chemical,
            release_rate=source.release_rate,
            source_location=source.location,
            temperature=(
                source.temperature if source.temperature is not None
                else self.base.temperature
            ),
            source_height=(
                source.source_height if source.source_height is not None
                else DEFAULT_MULTI_SOURCE_HEIGHT_M
            ),
        )


def normalize_stability_class(stability_class) -> str:
    """Upper-case a stability class, falling back to neutral (D) if unknown."""
    sc = stability_class.strip().upper() if isinstance(stability_class, str) else ""
    if sc not in STABILITY_FACTORS:
        logger.warning(
            "Unknown stability class %r; using %s", stability_class, DEFAULT_STABILITY_CLASS
        )
        return DEFAULT_STABILITY_CLASS
    return sc


def sanitize_location(location) -> Location:
    """Coerce a location to finite, in-range coordinates (origin if missing)."""
    lat = getattr(location, "lat", None)
    lng = getattr(location, "lng", None)
    if not is_valid_coordinate(lat, lng):
        logger.warning("Invalid source location %r; using clamped coordinates", location)
    return Location(
        lat=safe_number(lat, 0.0, -90.0, 90.0),
        lng=safe_number(lng, 0.0, -180.0, 180.0),
    )


def sanitize_parameters(params: ModelParameters) -> ModelParameters:
    """
    Return a copy of *params* with every field finite and in range.

    Missing or NaN values take the documented defaults; out-of-range values
    are clamped.  Never raises.

    Args:
        params: Raw model parameters.

    Returns:
        Sanitized ``ModelParameters``.
    """
    chemical = params.chemical.strip().lower() if isinstance(params.chemical, str) else ""
    if not chemical:
        logger.warning("No chemical given; using %s", DEFAULT_CHEMICAL)
        chemical = DEFAULT_CHEMICAL

    temperature = safe_number(params.temperature, DEFAULT_TEMPERATURE_C, *AMBIENT_TEMPERATURE_RANGE_C)
    release_temperature = safe_number(
        params.release_temperature, temperature, *RELEASE_TEMPERATURE_RANGE_C
    )

    pressure = safe_number(params.ambient_pressure, float("nan"), min_value=0.0)
    ambient_pressure = pressure if pressure > 0 else None

    terrain = params.terrain.strip().lower() if isinstance(params.terrain, str) else None

    monitoring_mode = params.monitoring_mode
    if monitoring_mode not in MONITORING_MODES:
        monitoring_mode = DEFAULT_MONITORING_MODE

    sanitized = ModelParameters(
        chemical=chemical,
        release_rate=safe_number(params.release_rate, DEFAULT_RELEASE_RATE, min_value=MIN_RELEASE_RATE),
        wind_speed=safe_number(params.wind_speed, DEFAULT_WIND_SPEED, min_value=MIN_WIND_SPEED),
        wind_direction=safe_number(params.wind_direction, DEFAULT_WIND_DIRECTION) % 360.0,
        stability_class=normalize_stability_class(params.stability_class),
        temperature=temperature,
        humidity=safe_number(params.humidity, DEFAULT_HUMIDITY, 0.0, 100.0),
        release_temperature=release_temperature,
        source_height=safe_number(params.source_height, 0.0, min_value=0.0),
        source_location=sanitize_location(params.source_location),
        ambient_pressure=ambient_pressure,
        terrain=terrain,
        is_indoor=bool(params.is_indoor),
        leak_duration=safe_number(params.leak_duration, DEFAULT_LEAK_DURATION_MIN, min_value=0.0),
        sensor_threshold=safe_number(
            params.sensor_threshold, DEFAULT_SENSOR_THRESHOLD, min_value=MIN_SENSOR_THRESHOLD
        ),
        sensor_count=int(safe_number(params.sensor_count, DEFAULT_SENSOR_COUNT, min_value=0.0)),
        monitoring_mode=monitoring_mode,
    )
    if sanitized != params:
        logger.debug("Sanitized model parameters: %s", sanitized)
    return sanitized
