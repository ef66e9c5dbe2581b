"""
Sensor Placement Planner.

Deterministic geometric placement of gas sensors around a release:

  * ``place_detection_sensors``: the compact network reported with every
    detailed calculation.  One sensor at the source, then sensors stepping
    out along the downwind bearing at quarters of the yellow radius,
    alternating 0.3 rad either side of the plume axis.
  * ``generate_sensor_recommendations``: a four-tier plan for a sensor
    budget.  Source (priority 1), downwind line inside the orange zone
    (priority 2), crosswind flanks (priority 3) and a perimeter arc near
    the yellow boundary (priority 4).  Priorities 1-2 are fixed sensors,
    3-4 mobile.
"""

import logging
import math
from typing import List, Tuple

from config import (
    DETECTION_SENSOR_LIMIT,
    SENSOR_BEARING_OFFSET_RAD,
    DEFAULT_RECOMMENDATION_COUNT,
    DOWNWIND_SENSOR_SHARE,
    CROSSWIND_SENSOR_SHARE,
    MAX_TIER_SENSORS,
    PERIMETER_DISTANCE_RATIO,
)
from models.numeric import safe_number
from models.parameters import ModelParameters, sanitize_parameters
from models.results import SensorRecommendation, ZoneData
from optimization.geo import destination_point, downwind_bearing, round_location


logger = logging.getLogger(__name__)


def _sensor_type(priority: int) -> str:
    return "fixed" if priority <= 2 else "mobile"


def place_detection_sensors(
    params: ModelParameters,
    zones: ZoneData,
) -> Tuple[SensorRecommendation, ...]:
    """
    Place up to five sensors for leak detection.

    Args:
        params: Sanitized model parameters.
        zones: Hazard zones for the release (distances in meters).

    Returns:
        Tuple of sensors, the first at the source.
    """
    center = params.source_location
    bearing = downwind_bearing(params.wind_direction)
    yellow_km = zones.yellow.distance / 1000.0

    sensors = [SensorRecommendation(round_location(center), "fixed", 1)]
    for i in range(1, min(DETECTION_SENSOR_LIMIT, params.sensor_count)):
        offset = SENSOR_BEARING_OFFSET_RAD if i % 2 == 0 else -SENSOR_BEARING_OFFSET_RAD
        distance_km = i * yellow_km / 4.0
        priority = 2 if i < 3 else 3
        sensors.append(SensorRecommendation(
            location=destination_point(center, distance_km, bearing + offset),
            sensor_type=_sensor_type(priority),
            priority=priority,
        ))
    return tuple(sensors)


def tier_sizes(sensor_count: int) -> Tuple[int, int, int]:
    """
    Split a sensor budget into (downwind, crosswind, perimeter) tier sizes.

    One sensor is reserved for the source.  Downwind gets at most 40 % of the
    budget and crosswind at most 30 % (each capped at three, at least one);
    the perimeter takes the remainder.
    """
    downwind = max(1, min(MAX_TIER_SENSORS, int(math.floor(sensor_count * DOWNWIND_SENSOR_SHARE))))
    crosswind = max(1, min(MAX_TIER_SENSORS, int(math.floor(sensor_count * CROSSWIND_SENSOR_SHARE))))
    perimeter = max(1, sensor_count - downwind - crosswind - 1)
    return downwind, crosswind, perimeter


def generate_sensor_recommendations(
    params: ModelParameters,
    zones: ZoneData,
    sensor_count: int = DEFAULT_RECOMMENDATION_COUNT,
) -> List[SensorRecommendation]:
    """
    Recommend sensor positions for a release, most important first.

    Args:
        params: Model parameters (sanitized internally).
        zones: Hazard zones for the release (distances in meters).
        sensor_count: Sensor budget; the result never exceeds it.

    Returns:
        List of ``SensorRecommendation`` ordered by priority.
    """
    sensor_count = int(safe_number(sensor_count, DEFAULT_RECOMMENDATION_COUNT, min_value=1))
    params = sanitize_parameters(params)
    center = params.source_location
    bearing = downwind_bearing(params.wind_direction)
    orange_km = zones.orange.distance / 1000.0
    yellow_km = zones.yellow.distance / 1000.0
    downwind_n, crosswind_n, perimeter_n = tier_sizes(sensor_count)

    recommendations = [SensorRecommendation(round_location(center), _sensor_type(1), 1)]

    # Downwind line within the orange zone
    for i in range(downwind_n):
        distance_km = orange_km * (i + 1) / downwind_n
        recommendations.append(SensorRecommendation(
            location=destination_point(center, distance_km, bearing),
            sensor_type=_sensor_type(2),
            priority=2,
        ))

    # Crosswind flanks, alternating sides
    for i in range(crosswind_n):
        side = 1.0 if i % 2 == 0 else -1.0
        distance_km = yellow_km * 0.5 * (i + 1) / crosswind_n
        recommendations.append(SensorRecommendation(
            location=destination_point(center, distance_km, bearing + side * math.pi / 2.0),
            sensor_type=_sensor_type(3),
            priority=3,
        ))

    # Perimeter arc near the yellow boundary
    for i in range(perimeter_n):
        angle = bearing + math.pi * (i + 1) / (perimeter_n + 1) - math.pi / 2.0
        recommendations.append(SensorRecommendation(
            location=destination_point(center, yellow_km * PERIMETER_DISTANCE_RATIO, angle),
            sensor_type=_sensor_type(4),
            priority=4,
        ))

    if len(recommendations) > sensor_count:
        logger.debug(
            "Sensor plan trimmed from %d to budget of %d", len(recommendations), sensor_count
        )
    return recommendations[:sensor_count]
