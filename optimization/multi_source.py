"""
Multi-Source Aggregator.

Combines several simultaneous releases that share the same weather:

  * zone extents are combined conservatively (largest distance and
    concentration, summed area);
  * evacuation circles are listed per source;
  * sensors are planned across all sources;
  * point concentrations are the superposition of each source's Gaussian
    plume.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np
from scipy.spatial.distance import cdist

from config import (
    DEFAULT_MULTI_SOURCE_SENSOR_COUNT,
    MAX_PERIMETER_SENSORS,
    PERIMETER_BASE_DISTANCE_KM,
    PERIMETER_DISTANCE_STEP_KM,
    RECEPTOR_HEIGHT_M,
)
from data.chemicals import ChemicalLookup
from models.dispersion import calculate_detailed_dispersion
from models.numeric import round_to, safe_number
from models.parameters import Location, MultipleSourceParameters, sanitize_parameters
from models.plume_geometry import gaussian_plume, resolve_plume_geometry
from models.results import (
    CombinedZone,
    CombinedZones,
    DetailedCalculationResults,
    EvacuationZone,
    MultipleSourceResults,
    SensorRecommendation,
    SourceResult,
    ZONE_NAMES,
)
from optimization.geo import (
    centroid,
    destination_point,
    downwind_bearing,
    round_location,
    to_local_meters,
)


logger = logging.getLogger(__name__)

_PRIORITY_BY_ZONE = {"red": "high", "orange": "medium", "yellow": "low"}


def _combine_zones(results: List[DetailedCalculationResults]) -> CombinedZones:
    combined = {}
    for name in ZONE_NAMES:
        zones = [getattr(r, f"{name}_zone") for r in results]
        combined[name] = CombinedZone(
            distance=round_to(max((z.distance for z in zones), default=0.0), 4),
            concentration=round_to(max((z.concentration for z in zones), default=0.0), 4),
            area=round_to(sum(z.area for z in zones), 4),
        )
    return CombinedZones(**combined)


def _evacuation_zones(source_id: str, center: Location,
                      results: DetailedCalculationResults) -> List[EvacuationZone]:
    """One circle per zone that reaches beyond the zone inside it."""
    zones = []
    inner = 0.0
    for name, zone in results.zones():
        if zone.distance > inner:
            zones.append(EvacuationZone(
                source_id=source_id,
                center=center,
                radius=round_to(zone.distance, 4),
                priority=_PRIORITY_BY_ZONE[name],
            ))
        inner = zone.distance
    return zones


def calculate_multiple_source_dispersion(
    params: MultipleSourceParameters,
    lookup: Optional[ChemicalLookup] = None,
) -> MultipleSourceResults:
    """
    Run the detailed calculation for every source and combine the results.

    Args:
        params: Shared conditions and the release points.
        lookup: Chemical table to use (built-in table if None).

    Returns:
        ``MultipleSourceResults``.  Combined zone distances and
        concentrations are the maxima over sources, areas, released mass and
        affected population are sums.
    """
    individual = []
    evacuation = []
    for source in params.sources:
        source_params = params.params_for(source)
        results = calculate_detailed_dispersion(source_params, lookup)
        individual.append(SourceResult(source_id=source.id, results=results))
        evacuation.extend(_evacuation_zones(
            source.id, sanitize_parameters(source_params).source_location, results
        ))

    all_results = [s.results for s in individual]
    if not all_results:
        logger.warning("Multi-source calculation requested with no sources")

    return MultipleSourceResults(
        combined_zones=_combine_zones(all_results),
        individual_sources=tuple(individual),
        total_mass_released=round_to(sum(r.mass_released for r in all_results), 4),
        max_concentration=round_to(
            max((r.maximum_concentration for r in all_results), default=0.0), 4
        ),
        affected_population=sum(r.total_population_at_risk for r in all_results),
        priority_evacuation_zones=tuple(evacuation),
    )


def _perimeter_coverage(
    sensor_locations: List[Location],
    source_ids: Tuple[str, ...],
    source_locations: List[Location],
    yellow_radii_m: np.ndarray,
) -> List[Tuple[str, ...]]:
    """
    Sources each perimeter sensor can see.

    A sensor covers every source whose yellow zone reaches it; a sensor
    outside all yellow zones is assigned to its nearest source.
    """
    origin = centroid(source_locations)
    sx, sy = to_local_meters(
        origin,
        [loc.lat for loc in source_locations],
        [loc.lng for loc in source_locations],
    )
    px, py = to_local_meters(
        origin,
        [loc.lat for loc in sensor_locations],
        [loc.lng for loc in sensor_locations],
    )
    # (n_sensors, n_sources) distance matrix
    dists = cdist(np.column_stack([px, py]), np.column_stack([sx, sy]))

    coverage = []
    for row in dists:
        covered = np.flatnonzero(row <= yellow_radii_m)
        if covered.size == 0:
            covered = [int(np.argmin(row))]
        coverage.append(tuple(source_ids[j] for j in covered))
    return coverage


def optimize_sensor_placement_multiple_sources(
    params: MultipleSourceParameters,
    sensor_count: int = DEFAULT_MULTI_SOURCE_SENSOR_COUNT,
    lookup: Optional[ChemicalLookup] = None,
) -> List[SensorRecommendation]:
    """
    Plan a sensor network covering several release points.

    Placement order:
      1. a fixed sensor on every source (priority 1);
      2. a mobile sensor midway between each consecutive pair of sources
         (priority 2);
      3. up to ten mobile perimeter sensors around the sources' centroid,
         fanned across the downwind half-plane at 2 km + 0.5 km steps
         (priority 3).

    Args:
        params: Shared conditions and the release points.
        sensor_count: Sensor budget; the result never exceeds it.
        lookup: Chemical table to use (built-in table if None).

    Returns:
        List of ``SensorRecommendation`` with source coverage, by priority.
    """
    sensor_count = int(safe_number(sensor_count, DEFAULT_MULTI_SOURCE_SENSOR_COUNT, min_value=0))
    sources = params.sources
    if not sources or sensor_count == 0:
        return []

    base = sanitize_parameters(params.base)
    source_ids = tuple(s.id for s in sources)
    locations = [sanitize_parameters(params.params_for(s)).source_location for s in sources]

    recommendations = [
        SensorRecommendation(round_location(loc), "fixed", 1, (source.id,))
        for source, loc in zip(sources, locations)
    ]

    for (first, a), (second, b) in zip(zip(sources, locations), zip(sources[1:], locations[1:])):
        midpoint = Location(lat=(a.lat + b.lat) / 2.0, lng=(a.lng + b.lng) / 2.0)
        recommendations.append(
            SensorRecommendation(round_location(midpoint), "mobile", 2, (first.id, second.id))
        )

    remaining = sensor_count - len(recommendations)
    perimeter_n = min(max(0, remaining), MAX_PERIMETER_SENSORS)
    if perimeter_n > 0:
        center = centroid(locations)
        bearing = downwind_bearing(base.wind_direction)
        perimeter = []
        for i in range(perimeter_n):
            angle = bearing + np.pi * (i - (perimeter_n - 1) / 2.0) / perimeter_n
            distance_km = PERIMETER_BASE_DISTANCE_KM + i * PERIMETER_DISTANCE_STEP_KM
            perimeter.append(destination_point(center, distance_km, angle))

        yellow_radii = np.array([
            calculate_detailed_dispersion(params.params_for(s), lookup).yellow_zone.distance
            for s in sources
        ])
        coverage = _perimeter_coverage(perimeter, source_ids, locations, yellow_radii)
        recommendations.extend(
            SensorRecommendation(loc, "mobile", 3, cov) for loc, cov in zip(perimeter, coverage)
        )

    return recommendations[:sensor_count]


def combined_concentration(
    params: MultipleSourceParameters,
    receptor_lat,
    receptor_lng,
    receptor_z: float = RECEPTOR_HEIGHT_M,
) -> np.ndarray:
    """
    Superposed ground-reflected Gaussian plume concentration of all sources.

    Each source emits ``release_rate / 60`` kg/s from its effective height
    (physical height plus buoyant rise).  Receptors upwind of a source get
    nothing from it.

    Args:
        params: Shared conditions and the release points.
        receptor_lat, receptor_lng: Receptor coordinates, scalar or array.
        receptor_z: Receptor height above ground (m).

    Returns:
        Concentration in mg/m^3, same shape as the receptor arrays.
    """
    receptor_lat = np.asarray(receptor_lat, dtype=float)
    receptor_lng = np.asarray(receptor_lng, dtype=float)
    shape = np.broadcast(receptor_lat, receptor_lng).shape
    if not params.sources:
        return np.zeros(shape, dtype=float)

    per_source = [sanitize_parameters(params.params_for(s)) for s in params.sources]
    origin = centroid([p.source_location for p in per_source])
    rx, ry = to_local_meters(origin, receptor_lat, receptor_lng)
    rx, ry = np.broadcast_arrays(np.atleast_1d(rx), np.atleast_1d(ry))
    total = np.zeros(rx.shape, dtype=float)

    for p in per_source:
        geometry = resolve_plume_geometry(p)
        sx, sy = to_local_meters(origin, p.source_location.lat, p.source_location.lng)
        total += gaussian_plume(
            rx, ry, receptor_z,
            float(sx), float(sy), geometry.effective_height,
            emission_rate=p.release_rate / 60.0,
            wind_speed=p.wind_speed,
            wind_direction_deg=p.wind_direction,
            stability_class=p.stability_class,
        )

    # kg/m^3 -> mg/m^3
    return (total * 1e6).reshape(shape)
