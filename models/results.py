"""
Output data model for dispersion calculations.

Distances in zone results are meters, areas are km^2 and concentrations
are mg/m^3.  All containers are frozen so a result can be shared between
callers without defensive copies.
"""

from dataclasses import dataclass, field
from typing import Iterator, Tuple

from models.parameters import Location


ZONE_NAMES = ("red", "orange", "yellow")


@dataclass(frozen=True)
class Zone:
    """Boundary of one hazard zone: distance (m) at which *concentration* (mg/m^3) is crossed."""

    distance: float
    concentration: float


@dataclass(frozen=True)
class ZoneData:
    """The three hazard zones, most severe first."""

    red: Zone
    orange: Zone
    yellow: Zone

    def items(self) -> Iterator[Tuple[str, Zone]]:
        for name in ZONE_NAMES:
            yield name, getattr(self, name)


@dataclass(frozen=True)
class DetailedZone:
    """A hazard zone with its (non-overlapping) area and population at risk."""

    distance: float
    concentration: float
    area: float
    population_at_risk: int


@dataclass(frozen=True)
class DispersionCoefficients:
    sigma_y: float
    sigma_z: float


@dataclass(frozen=True)
class ProfilePoint:
    distance: float
    concentration: float


@dataclass(frozen=True)
class SensorRecommendation:
    """A recommended sensor position.

    Args:
        location: Sensor coordinate.
        sensor_type: ``"fixed"`` or ``"mobile"``.
        priority: Rank 1 (most important) to 4.
        coverage: Source ids this sensor monitors (empty for single-source plans).
    """

    location: Location
    sensor_type: str
    priority: int
    coverage: Tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DetectionMetrics:
    """Leak-detection performance estimates for a sensor network."""

    detection_probability: float
    time_to_detection: float
    recommended_sensor_locations: Tuple[SensorRecommendation, ...]
    detection_threshold: float
    false_alarm_rate: float
    evacuation_time: float


@dataclass(frozen=True)
class DetailedCalculationResults:
    """Full result of a single-source dispersion calculation."""

    red_zone: DetailedZone
    orange_zone: DetailedZone
    yellow_zone: DetailedZone
    mass_released: float
    evaporation_rate: float
    dispersion_coefficients: DispersionCoefficients
    maximum_concentration: float
    lethal_distance: float
    concentration_profile: Tuple[ProfilePoint, ...]
    detection_probability: float
    time_to_detection: float
    recommended_sensor_locations: Tuple[SensorRecommendation, ...]
    detection_threshold: float
    false_alarm_rate: float
    evacuation_time: float

    def zones(self) -> Iterator[Tuple[str, DetailedZone]]:
        for name in ZONE_NAMES:
            yield name, getattr(self, f"{name}_zone")

    @property
    def total_population_at_risk(self) -> int:
        return sum(zone.population_at_risk for _, zone in self.zones())


@dataclass(frozen=True)
class CombinedZone:
    distance: float
    concentration: float
    area: float


@dataclass(frozen=True)
class CombinedZones:
    red: CombinedZone
    orange: CombinedZone
    yellow: CombinedZone


@dataclass(frozen=True)
class EvacuationZone:
    """Circle to evacuate around one source; priority is high, medium or low."""

    source_id: str
    center: Location
    radius: float
    priority: str


@dataclass(frozen=True)
class SourceResult:
    source_id: str
    results: DetailedCalculationResults


@dataclass(frozen=True)
class MultipleSourceResults:
    """Combined hazard picture for several simultaneous releases."""

    combined_zones: CombinedZones
    individual_sources: Tuple[SourceResult, ...]
    total_mass_released: float
    max_concentration: float
    affected_population: int
    priority_evacuation_zones: Tuple[EvacuationZone, ...]


@dataclass(frozen=True)
class HealthImpact:
    severity: str
    description: str


@dataclass(frozen=True)
class ProtectiveActionAssessment:
    effectiveness_percent: int
    casualty_reduction_percent: int
    recommendation: str
