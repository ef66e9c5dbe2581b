"""
Dispersion entry points.

``calculate_dispersion`` turns a release description into three ordered
hazard zones; ``calculate_detailed_dispersion`` adds areas, population,
mass balance, dispersion coefficients, the concentration profile and
leak-detection metrics.

Both are total functions: inputs are sanitized first, and any failure
inside the pipeline is logged and replaced by a fixed conservative result,
so a caller always gets usable numbers back.

Example:
    >>> from models.parameters import ModelParameters
    >>> zones = calculate_dispersion(ModelParameters(chemical="chlorine"))
    >>> zones.red.distance < zones.orange.distance < zones.yellow.distance
    True
"""

import logging
import math
from typing import Optional, Tuple

from config import (
    FALLBACK_ZONES,
    LETHAL_DISTANCE_RATIO,
    PROFILE_EXTENT_RATIO,
    PROFILE_INTERVALS,
)
from data.chemicals import ChemicalLookup, get_chemical
from models.concentration_profile import generate_concentration_profile
from models.environment import resolve_environmental_factors
from models.hazard_zones import (
    ZoneDistances,
    ZoneConcentrations,
    chemical_hazard_factor,
    compute_base_distance,
    resolve_zone_distances,
    resolve_zone_concentrations,
    zone_areas,
    population_at_risk,
)
from models.numeric import all_finite, round_to
from models.parameters import ModelParameters, sanitize_parameters
from models.plume_geometry import compute_sigma, effective_wind_speed, resolve_plume_geometry
from models.results import (
    DetailedCalculationResults,
    DetailedZone,
    DispersionCoefficients,
    Zone,
    ZoneData,
)
from optimization.leak_detection import calculate_leak_detection


logger = logging.getLogger(__name__)


def default_zone_data() -> ZoneData:
    """Conservative zones returned when a calculation cannot be completed."""
    return ZoneData(**{
        name: Zone(distance=distance, concentration=concentration)
        for name, (distance, concentration) in FALLBACK_ZONES.items()
    })


def _resolve_zones(
    params: ModelParameters,
    lookup: Optional[ChemicalLookup],
) -> Tuple[float, ZoneDistances, ZoneConcentrations]:
    chemical = get_chemical(params.chemical, lookup)
    factors = resolve_environmental_factors(params)
    geometry = resolve_plume_geometry(params)
    chem_factor = chemical_hazard_factor(chemical, params.chemical)

    base_km = compute_base_distance(factors, chem_factor, params.release_rate, geometry)
    distances = resolve_zone_distances(base_km)
    concentrations = resolve_zone_concentrations(chemical, geometry.ground_reduction_factor)

    logger.debug(
        "%s at %.2f kg/min: base distance %.3f km (stability %.2f, chemical %.2f, "
        "environment %.3f, height %.3f)",
        params.chemical, params.release_rate, base_km, factors.stability_factor,
        chem_factor, factors.environmental_factor, geometry.height_distance_factor,
    )
    return base_km, distances, concentrations


def calculate_base_distance(
    params: ModelParameters,
    lookup: Optional[ChemicalLookup] = None,
) -> float:
    """Base hazard distance (km) before it is split into zones."""
    base_km, _, _ = _resolve_zones(sanitize_parameters(params), lookup)
    return base_km


def calculate_dispersion(
    params: ModelParameters,
    lookup: Optional[ChemicalLookup] = None,
) -> ZoneData:
    """
    Compute red / orange / yellow hazard zones for a release.

    Args:
        params: Release and weather description; invalid fields are
                clamped or defaulted.
        lookup: Chemical table to use (built-in table if None).

    Returns:
        ``ZoneData`` with distances in meters (rounded to whole meters) and
        concentrations in mg/m^3.  Distances strictly increase and
        concentrations never increase from red to yellow.
    """
    try:
        params = sanitize_parameters(params)
        _, distances, concentrations = _resolve_zones(params, lookup)
        zones = ZoneData(
            red=Zone(round_to(distances.red * 1000.0), round_to(concentrations.red, 2)),
            orange=Zone(round_to(distances.orange * 1000.0), round_to(concentrations.orange, 2)),
            yellow=Zone(round_to(distances.yellow * 1000.0), round_to(concentrations.yellow, 2)),
        )
    except Exception:
        logger.exception("Dispersion calculation failed; returning default zones")
        return default_zone_data()

    if not all_finite(*(v for _, z in zones.items() for v in (z.distance, z.concentration))):
        logger.warning("Non-finite hazard zones for %s; returning default zones", params.chemical)
        return default_zone_data()
    return zones


def maximum_concentration(
    release_rate: float,
    wind_speed: float,
    sigma_y: float,
    sigma_z: float,
) -> float:
    """
    Centerline ground concentration (mg/m^3) for a ground-level release.

        C = Q / (pi * u * sigma_y * sigma_z)

    with Q converted from kg/min to mg/s.
    """
    emission_mg_s = release_rate * 1e6 / 60.0
    return emission_mg_s / (math.pi * effective_wind_speed(wind_speed) * sigma_y * sigma_z)


def _build_detailed(params: ModelParameters, zones: ZoneData) -> DetailedCalculationResults:
    """Derive every detailed quantity from sanitized parameters and zones."""
    wind = effective_wind_speed(params.wind_speed)

    sigma_y, sigma_z = compute_sigma(zones.yellow.distance, params.stability_class)
    sigma_y = round_to(float(sigma_y), 2)
    sigma_z = round_to(float(sigma_z), 2)

    distances_km = ZoneDistances(
        red=zones.red.distance / 1000.0,
        orange=zones.orange.distance / 1000.0,
        yellow=zones.yellow.distance / 1000.0,
    )
    areas = tuple(round_to(a, 2) for a in zone_areas(distances_km, wind))

    detailed_zones = {}
    for (name, zone), area in zip(zones.items(), areas):
        detailed_zones[f"{name}_zone"] = DetailedZone(
            distance=round_to(zone.distance, 2),
            concentration=zone.concentration,
            area=area,
            population_at_risk=population_at_risk(area, params.terrain),
        )

    profile = generate_concentration_profile(
        params.stability_class,
        wind,
        zones.red.concentration,
        zones.yellow.distance * PROFILE_EXTENT_RATIO,
        PROFILE_INTERVALS,
    )
    detection = calculate_leak_detection(params, zones)

    return DetailedCalculationResults(
        mass_released=round_to(params.release_rate * params.leak_duration),
        evaporation_rate=round_to(params.release_rate / 60.0, 2),
        dispersion_coefficients=DispersionCoefficients(sigma_y=sigma_y, sigma_z=sigma_z),
        maximum_concentration=round_to(
            maximum_concentration(params.release_rate, wind, sigma_y, sigma_z)
        ),
        lethal_distance=round_to(zones.red.distance * LETHAL_DISTANCE_RATIO, 2),
        concentration_profile=profile,
        detection_probability=detection.detection_probability,
        time_to_detection=detection.time_to_detection,
        recommended_sensor_locations=detection.recommended_sensor_locations,
        detection_threshold=detection.detection_threshold,
        false_alarm_rate=detection.false_alarm_rate,
        evacuation_time=detection.evacuation_time,
        **detailed_zones,
    )


def default_detailed_results() -> DetailedCalculationResults:
    """Detailed results for the default zones under default conditions."""
    return _build_detailed(sanitize_parameters(ModelParameters()), default_zone_data())


def _detailed_is_finite(results: DetailedCalculationResults) -> bool:
    values = [
        results.mass_released,
        results.evaporation_rate,
        results.maximum_concentration,
        results.lethal_distance,
        results.dispersion_coefficients.sigma_y,
        results.dispersion_coefficients.sigma_z,
        results.evacuation_time,
    ]
    for _, zone in results.zones():
        values.extend((zone.distance, zone.concentration, zone.area))
    return all_finite(*values)


def calculate_detailed_dispersion(
    params: ModelParameters,
    lookup: Optional[ChemicalLookup] = None,
) -> DetailedCalculationResults:
    """
    Compute hazard zones together with areas, population and detection metrics.

    Args:
        params: Release and weather description; invalid fields are
                clamped or defaulted.
        lookup: Chemical table to use (built-in table if None).

    Returns:
        ``DetailedCalculationResults``.  Zone areas (km^2) partition the
        affected region; population is area times the terrain density.
    """
    try:
        params = sanitize_parameters(params)
        results = _build_detailed(params, calculate_dispersion(params, lookup))
    except Exception:
        logger.exception("Detailed dispersion calculation failed; returning default results")
        return default_detailed_results()

    if not _detailed_is_finite(results):
        logger.warning("Non-finite detailed results for %s; returning defaults", params.chemical)
        return default_detailed_results()
    return results
