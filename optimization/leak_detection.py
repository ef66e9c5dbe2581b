"""
Leak Detection Planner.

Heuristic performance estimates for a sensor network watching a release:
detection probability, time to detection, false-alarm rate and the time
needed to evacuate the yellow zone.

    P_detect = 0.75 * min(1, n / 10) * min(1, Q / 50) * (0.7 if batch)
    t_detect = max(1, 10 * threshold / max(0.1, Q) * (5 if batch))    [min]
    false_alarm = 2 / (4 * threshold)
    t_evac = 20 + sqrt(pi * yellow_km^2 * 500 / 100)                 [min]
"""

import logging
import math
from typing import Optional

import numpy as np

from config import (
    BASE_DETECTION_PROBABILITY,
    FULL_COVERAGE_SENSOR_COUNT,
    FULL_DETECTION_RELEASE_RATE,
    BATCH_DETECTION_PENALTY,
    BATCH_DETECTION_DELAY,
    MIN_DETECTION_RELEASE_RATE,
    BASE_EVACUATION_TIME_MIN,
    EVACUATION_POPULATION_DENSITY,
)
from models.numeric import clamp, round_to
from models.parameters import ModelParameters, sanitize_parameters
from models.results import DetectionMetrics, ZoneData
from optimization.sensor_placement import place_detection_sensors


logger = logging.getLogger(__name__)


def detection_probability(params: ModelParameters) -> float:
    """Probability in [0, 1] that the network detects the release."""
    p = BASE_DETECTION_PROBABILITY
    p *= min(1.0, params.sensor_count / FULL_COVERAGE_SENSOR_COUNT)
    p *= min(1.0, params.release_rate / FULL_DETECTION_RELEASE_RATE)
    if params.monitoring_mode == "batch":
        p *= BATCH_DETECTION_PENALTY
    return clamp(p, 0.0, 1.0)


def time_to_detection(params: ModelParameters) -> float:
    """Minutes until the release is detected, at least one."""
    delay = BATCH_DETECTION_DELAY if params.monitoring_mode == "batch" else 1.0
    rate = max(MIN_DETECTION_RELEASE_RATE, params.release_rate)
    return max(1.0, 10.0 * (params.sensor_threshold / rate) * delay)


def false_alarm_rate(sensor_threshold: float) -> float:
    """Expected false alarms, falling as the threshold rises."""
    return 2.0 / (sensor_threshold * 4.0)


def evacuation_time(yellow_distance_km: float) -> float:
    """Minutes to evacuate the circle reaching the yellow boundary."""
    population = math.pi * yellow_distance_km ** 2 * EVACUATION_POPULATION_DENSITY
    return BASE_EVACUATION_TIME_MIN + math.sqrt(population / 100.0)


def calculate_leak_detection(params: ModelParameters, zones: ZoneData) -> DetectionMetrics:
    """
    Estimate how well the configured sensor network detects a release.

    Args:
        params: Model parameters (sanitized internally).
        zones: Hazard zones of the release (distances in meters).

    Returns:
        ``DetectionMetrics`` rounded for reporting.
    """
    params = sanitize_parameters(params)
    return DetectionMetrics(
        detection_probability=round_to(detection_probability(params), 2),
        time_to_detection=round_to(time_to_detection(params)),
        recommended_sensor_locations=place_detection_sensors(params, zones),
        detection_threshold=round_to(params.sensor_threshold, 2),
        false_alarm_rate=round_to(false_alarm_rate(params.sensor_threshold), 2),
        evacuation_time=round_to(evacuation_time(zones.yellow.distance / 1000.0)),
    )


def simulate_leak_detection(
    params: ModelParameters,
    rng: Optional[np.random.Generator] = None,
) -> bool:
    """
    Simulate whether the network detects the release in one trial.

    Args:
        params: Model parameters.
        rng: Random generator; a fresh unseeded one if None.

    Returns:
        True if the leak was detected.
    """
    if rng is None:
        rng = np.random.default_rng()
    params = sanitize_parameters(params)
    p = detection_probability(params)
    detected = bool(rng.random() < p)
    logger.debug("Simulated detection with p=%.3f: %s", p, detected)
    return detected
