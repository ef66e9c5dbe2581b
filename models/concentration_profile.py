"""
Concentration Profile Generator.

Produces the distance -> concentration curve shown alongside the hazard
zones.  The decay follows

    C(x) = C0 * exp(-k * (x / x_max)^n)

where (k, n) depend on the stability class: unstable air (A) decays fast
and steeply, stable air (F) decays slowly.  Higher wind speed increases k.
"""

from typing import Tuple

import numpy as np

from config import (
    PROFILE_DECAY_PARAMETERS,
    DEFAULT_STABILITY_CLASS,
    PROFILE_INTERVALS,
    PROFILE_WIND_BOUNDS,
)
from models.numeric import clamp, round_to
from models.results import ProfilePoint


def decay_parameters(stability_class: str, wind_speed: float) -> Tuple[float, float]:
    """
    Return the (k, n) decay parameters for a stability class and wind speed.

    The class value of k is scaled by ``0.7 + 0.3 * clamp(u, 1, 10) / 5``,
    so k is unchanged at 5 m/s.
    """
    sc = stability_class.upper() if isinstance(stability_class, str) else ""
    k, n = PROFILE_DECAY_PARAMETERS.get(sc, PROFILE_DECAY_PARAMETERS[DEFAULT_STABILITY_CLASS])
    wind_adjust = clamp(wind_speed, *PROFILE_WIND_BOUNDS) / 5.0
    return k * (0.7 + wind_adjust * 0.3), n


def generate_concentration_profile(
    stability_class: str,
    wind_speed: float,
    max_concentration: float,
    max_distance: float,
    intervals: int = PROFILE_INTERVALS,
) -> Tuple[ProfilePoint, ...]:
    """
    Sample the concentration profile from the source out to *max_distance*.

    Args:
        stability_class: Pasquill-Gifford class A-F.
        wind_speed: Wind speed (m/s).
        max_concentration: Concentration at the source, C0 (mg/m^3).
        max_distance: Last sampled distance, x_max (m).
        intervals: Number of intervals; ``intervals + 1`` samples are returned.

    Returns:
        Tuple of ``ProfilePoint`` ordered by distance, first at distance 0
        with concentration C0.
    """
    intervals = max(1, int(intervals))
    k, n = decay_parameters(stability_class, wind_speed)

    distances = np.linspace(0.0, max_distance, intervals + 1)
    normalized = np.linspace(0.0, 1.0, intervals + 1)
    concentrations = max_concentration * np.exp(-k * np.power(normalized, n))

    return tuple(
        ProfilePoint(
            distance=round_to(float(d), 2),
            concentration=round_to(float(c), 3),
        )
        for d, c in zip(distances, concentrations)
    )
