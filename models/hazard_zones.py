"""
Hazard Zone Resolver.

Combines the environmental multipliers, chemical hazard, release rate,
wind and plume geometry into a single base hazard distance, then splits it
into red / orange / yellow zones:

    base_km = F_stability * F_chemical * sqrt(Q / Q_ref) * u^-0.8
              * F_environment * F_height * 5

    red    = max(0.2 km, 0.3 * base)
    orange = max(1.5 * red, 0.6 * base)
    yellow = max(1.3 * orange, 1.0 * base)

The max() terms keep the zones strictly ordered for any input.  Zone
boundaries are labelled with the chemical's exposure guidelines (AEGL-3 /
AEGL-2 / AEGL-1) converted to mg/m^3.

Areas use an elongated ellipse whose width shrinks and length grows with
wind speed; each outer zone excludes the inner zones so the three areas
partition the affected region.
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from config import (
    REFERENCE_RELEASE_RATE,
    WIND_DISTANCE_EXPONENT,
    BASE_DISTANCE_SCALE_KM,
    CHEMICAL_FACTOR_BOUNDS,
    FALLBACK_CHEMICAL_FACTORS,
    DEFAULT_CHEMICAL_FACTOR,
    RED_ZONE_FRACTION,
    ORANGE_ZONE_FRACTION,
    YELLOW_ZONE_FRACTION,
    MIN_RED_DISTANCE_KM,
    ORANGE_MIN_RATIO,
    YELLOW_MIN_RATIO,
    DEFAULT_RED_CONCENTRATION,
    ORANGE_FALLBACK_RATIO,
    YELLOW_FALLBACK_RATIO,
    MIN_ZONE_CONCENTRATION,
    MIN_WIND_SPREAD_FACTOR,
    MAX_PLUME_ASPECT_RATIO,
    POPULATION_DENSITY,
)
from data.chemicals import ChemicalProperties, ppm_to_mg_m3
from models.environment import EnvironmentalFactors
from models.numeric import clamp
from models.plume_geometry import PlumeGeometry, effective_wind_speed


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ZoneDistances:
    """Zone radii in kilometers."""

    red: float
    orange: float
    yellow: float


@dataclass(frozen=True)
class ZoneConcentrations:
    """Zone boundary concentrations in mg/m^3."""

    red: float
    orange: float
    yellow: float


def chemical_hazard_factor(chemical: Optional[ChemicalProperties], name: str = "") -> float:
    """
    Hazard multiplier from molecular weight and volatility.

        F_chem = clamp(sqrt(MW) / 10 * log10(max(1, VP)) / 3, 0.8, 2.0)

    Unknown chemicals use a small fallback table (chlorine 1.5, ammonia 1.3)
    and 1.2 otherwise.

    Args:
        chemical: Chemical properties, or None if the lookup failed.
        name: Lowercase chemical name for the fallback table.
    """
    if chemical is None or not chemical.molecular_weight > 0:
        factor = FALLBACK_CHEMICAL_FACTORS.get(name, DEFAULT_CHEMICAL_FACTOR)
        logger.warning("No chemical data for %r; using hazard factor %.2f", name, factor)
        return factor
    mw_factor = math.sqrt(chemical.molecular_weight) / 10.0
    vp = chemical.vapor_pressure if math.isfinite(chemical.vapor_pressure) else 1.0
    vp_factor = math.log10(max(1.0, vp)) / 3.0
    return clamp(mw_factor * vp_factor, *CHEMICAL_FACTOR_BOUNDS)


def release_rate_factor(release_rate: float) -> float:
    """sqrt(Q / Q_ref) with Q_ref = 10 kg/min."""
    return math.sqrt(release_rate / REFERENCE_RELEASE_RATE)


def wind_factor(wind_speed: float) -> float:
    """u^-0.8: stronger wind dilutes faster."""
    return math.pow(effective_wind_speed(wind_speed), WIND_DISTANCE_EXPONENT)


def compute_base_distance(
    factors: EnvironmentalFactors,
    chemical_factor: float,
    release_rate: float,
    geometry: PlumeGeometry,
) -> float:
    """
    Base hazard distance in kilometers.

    Args:
        factors: Resolved environmental multipliers (including stability).
        chemical_factor: Output of ``chemical_hazard_factor``.
        release_rate: Release rate in kg/min (> 0).
        geometry: Resolved plume geometry (wind speed, height factor).

    Returns:
        Base distance (km).
    """
    return (
        factors.stability_factor
        * chemical_factor
        * release_rate_factor(release_rate)
        * wind_factor(geometry.wind_speed)
        * factors.environmental_factor
        * geometry.height_distance_factor
        * BASE_DISTANCE_SCALE_KM
    )


def resolve_zone_distances(base_distance_km: float) -> ZoneDistances:
    """Split the base distance into strictly ordered zone radii (km)."""
    red = max(MIN_RED_DISTANCE_KM, base_distance_km * RED_ZONE_FRACTION)
    orange = max(red * ORANGE_MIN_RATIO, base_distance_km * ORANGE_ZONE_FRACTION)
    yellow = max(orange * YELLOW_MIN_RATIO, base_distance_km * YELLOW_ZONE_FRACTION)
    return ZoneDistances(red=red, orange=orange, yellow=yellow)


def _guideline_mg_m3(chemical: Optional[ChemicalProperties], *keys: str) -> Optional[float]:
    """First established guideline among *keys*, converted from ppm to mg/m^3."""
    if chemical is None or not chemical.molecular_weight > 0:
        return None
    for key in keys:
        ppm = chemical.guideline(key)
        if ppm is not None:
            return ppm_to_mg_m3(ppm, chemical.molecular_weight)
    return None


def resolve_zone_concentrations(
    chemical: Optional[ChemicalProperties],
    ground_reduction: float = 1.0,
) -> ZoneConcentrations:
    """
    Threshold concentration (mg/m^3) labelling each zone boundary.

    red uses AEGL-3, then IDLH, then 50 mg/m^3; orange uses AEGL-2, then
    half of red; yellow uses AEGL-1, then a quarter of red.  Each is scaled
    by the ground-reduction factor and floored at 1 mg/m^3.  Outer zones are
    capped at the inner zone's value so a table entry with inverted
    guidelines cannot make concentration rise away from the source.
    """
    red_base = _guideline_mg_m3(chemical, "aegl3", "idlh")
    if red_base is None:
        red_base = DEFAULT_RED_CONCENTRATION
    orange_base = _guideline_mg_m3(chemical, "aegl2")
    if orange_base is None:
        orange_base = red_base * ORANGE_FALLBACK_RATIO
    yellow_base = _guideline_mg_m3(chemical, "aegl1")
    if yellow_base is None:
        yellow_base = red_base * YELLOW_FALLBACK_RATIO

    red = max(MIN_ZONE_CONCENTRATION, red_base * ground_reduction)
    orange = min(red, max(MIN_ZONE_CONCENTRATION, orange_base * ground_reduction))
    yellow = min(orange, max(MIN_ZONE_CONCENTRATION, yellow_base * ground_reduction))
    return ZoneConcentrations(red=red, orange=orange, yellow=yellow)


def wind_spread_factor(wind_speed: float) -> float:
    """Plume width factor: narrower at high wind, never below 0.2."""
    return max(MIN_WIND_SPREAD_FACTOR, 1.0 / math.sqrt(effective_wind_speed(wind_speed)))


def plume_aspect_ratio(wind_speed: float) -> float:
    """Plume length/width ratio: longer at high wind, capped at 3."""
    return min(MAX_PLUME_ASPECT_RATIO, effective_wind_speed(wind_speed) / 2.0)


def ellipse_area(distance_km: float, wind_speed: float) -> float:
    """Area (km^2) of the elongated plume ellipse reaching *distance_km*."""
    return (
        math.pi * distance_km ** 2
        * wind_spread_factor(wind_speed)
        * plume_aspect_ratio(wind_speed)
    )


def zone_areas(distances: ZoneDistances, wind_speed: float) -> Tuple[float, float, float]:
    """
    Non-overlapping (red, orange, yellow) areas in km^2.

    Each outer area excludes the zones inside it.
    """
    red = ellipse_area(distances.red, wind_speed)
    orange = ellipse_area(distances.orange, wind_speed) - red
    yellow = ellipse_area(distances.yellow, wind_speed) - red - orange
    return red, orange, yellow


def population_density(terrain: Optional[str]) -> int:
    """People per km^2 for a terrain type (500 if unknown)."""
    key = terrain.lower() if isinstance(terrain, str) else "default"
    return POPULATION_DENSITY.get(key, POPULATION_DENSITY["default"])


def population_at_risk(area_km2: float, terrain: Optional[str]) -> int:
    return int(round(max(0.0, area_km2) * population_density(terrain)))
