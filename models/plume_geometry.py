"""
Plume Geometry Calculator.

Dispersion coefficients, buoyant plume rise and the effective release
height, plus the ground-reflected Gaussian plume equation built on them.

Convention:
  - Wind direction uses METEOROLOGICAL convention (direction wind comes FROM).
  - Wind blows in the opposite direction (FROM 270 = blowing East = +x direction).
  - Local coordinates in meters (x = East, y = North), concentrations in kg/m^3.
  - Wind speed is floored at 0.5 m/s before it appears in any denominator.
"""

import logging
from dataclasses import dataclass

import numpy as np

from config import (
    DISPERSION_COEFFICIENTS,
    DEFAULT_STABILITY_CLASS,
    MIN_EFFECTIVE_WIND_SPEED,
    KELVIN_OFFSET,
    BUOYANCY_COEFFICIENT,
    HEIGHT_DISTANCE_SCALE_M,
    HEIGHT_DISTANCE_WEIGHT,
    GROUND_REDUCTION_HEIGHT_M,
    GROUND_REDUCTION_FLOOR,
)
from models.parameters import ModelParameters


logger = logging.getLogger(__name__)


def _get_dispersion_coeffs(stability_class: str) -> dict:
    """Return (a, b) coefficients for sigma_y and sigma_z, neutral if unknown."""
    sc = stability_class.upper() if isinstance(stability_class, str) else ""
    if sc not in DISPERSION_COEFFICIENTS:
        logger.warning(
            "Unknown stability class %r for dispersion coefficients; using %s",
            stability_class, DEFAULT_STABILITY_CLASS,
        )
        sc = DEFAULT_STABILITY_CLASS
    return DISPERSION_COEFFICIENTS[sc]


def compute_sigma(distance_downwind, stability_class: str):
    """
    Compute lateral (sigma_y) and vertical (sigma_z) dispersion parameters.

        sigma = a * x * (1 + b * x)^-0.5

    Args:
        distance_downwind: Downwind distance(s) in meters, scalar or array.
        stability_class: Pasquill-Gifford class A-F (unknown -> D).

    Returns:
        (sigma_y, sigma_z) arrays in meters, same shape as the input.
    """
    coeffs = _get_dispersion_coeffs(stability_class)
    a_y, b_y = coeffs["sigma_y"]
    a_z, b_z = coeffs["sigma_z"]

    # Clamp distance; negative distances mean upwind (no plume)
    x_safe = np.maximum(np.asarray(distance_downwind, dtype=float), 1.0)

    sigma_y = a_y * x_safe * np.power(1.0 + b_y * x_safe, -0.5)
    sigma_z = a_z * x_safe * np.power(1.0 + b_z * x_safe, -0.5)

    return sigma_y, sigma_z


def effective_wind_speed(wind_speed: float) -> float:
    """Wind speed floored at 0.5 m/s for use in denominators."""
    return max(MIN_EFFECTIVE_WIND_SPEED, wind_speed)


def buoyancy_rise(release_temp_c: float, ambient_temp_c: float, wind_speed: float) -> float:
    """
    Additional height (m) gained by a warm release before the plume levels off.

    Simplified Briggs relation:
        dh = 2.6 * ((dT / T_amb) * 1000)^(1/3) * 10 / u

    Cold or ambient-temperature releases get no rise.
    """
    delta_t = max(0.0, release_temp_c - ambient_temp_c)
    if delta_t <= 0:
        return 0.0
    ambient_k = ambient_temp_c + KELVIN_OFFSET
    u = effective_wind_speed(wind_speed)
    return BUOYANCY_COEFFICIENT * np.cbrt((delta_t / ambient_k) * 1000.0) * 10.0 / u


def height_distance_factor(effective_height: float) -> float:
    """Elevated releases push the ground-level maximum further downwind (1.0 at H=0)."""
    if effective_height <= 0:
        return 1.0
    return 1.0 + np.sqrt(effective_height / HEIGHT_DISTANCE_SCALE_M) * HEIGHT_DISTANCE_WEIGHT


def ground_reduction_factor(effective_height: float) -> float:
    """Elevated releases dilute before reaching the ground (1.0 at H=0, floor 0.3)."""
    if effective_height <= 0:
        return 1.0
    return max(GROUND_REDUCTION_FLOOR, 1.0 - effective_height / GROUND_REDUCTION_HEIGHT_M)


@dataclass(frozen=True)
class PlumeGeometry:
    """Release-height geometry of a plume."""

    wind_speed: float            # effective (floored) wind speed, m/s
    buoyancy_rise: float         # m
    effective_height: float      # m
    height_distance_factor: float
    ground_reduction_factor: float


def resolve_plume_geometry(params: ModelParameters) -> PlumeGeometry:
    """Derive plume rise and height factors from sanitized parameters."""
    u = effective_wind_speed(params.wind_speed)
    release_temp = (
        params.release_temperature if params.release_temperature is not None
        else params.temperature
    )
    rise = float(buoyancy_rise(release_temp, params.temperature, u))
    h_eff = params.source_height + rise
    return PlumeGeometry(
        wind_speed=u,
        buoyancy_rise=rise,
        effective_height=h_eff,
        height_distance_factor=float(height_distance_factor(h_eff)),
        ground_reduction_factor=float(ground_reduction_factor(h_eff)),
    )


def gaussian_plume(
    receptor_x: np.ndarray,
    receptor_y: np.ndarray,
    receptor_z: float,
    source_x: float,
    source_y: float,
    source_z: float,
    emission_rate: float,
    wind_speed: float,
    wind_direction_deg: float,
    stability_class: str,
) -> np.ndarray:
    """
    Calculate concentration at receptor points from a single point source.

    Uses the standard Gaussian plume equation with ground reflection:
        C = (Q / (2*pi*u*sigma_y*sigma_z)) *
            exp(-0.5*(crosswind/sigma_y)^2) *
            [exp(-0.5*((z-H)/sigma_z)^2) + exp(-0.5*((z+H)/sigma_z)^2)]

    Args:
        receptor_x, receptor_y: Receptor coordinates (meters), can be 2D grids.
        receptor_z: Receptor height above ground (meters), scalar.
        source_x, source_y: Source location (meters).
        source_z: Effective release height (meters).
        emission_rate: Emission rate Q in kg/s.
        wind_speed: Wind speed in m/s (floored at 0.5).
        wind_direction_deg: Meteorological wind direction (degrees, 0=N, 90=E, etc.).
        stability_class: Pasquill-Gifford stability class (A-F).

    Returns:
        concentration: Array of concentrations in kg/m^3, same shape as receptor_x.
    """
    receptor_x = np.asarray(receptor_x, dtype=float)
    receptor_y = np.asarray(receptor_y, dtype=float)
    u = effective_wind_speed(wind_speed)

    # Convert meteorological direction to the direction wind is blowing TOWARD
    wind_toward_rad = np.radians((wind_direction_deg + 180.0) % 360.0)

    # Unit vector of wind direction (toward); x=East, y=North
    wind_ux = np.sin(wind_toward_rad)
    wind_uy = np.cos(wind_toward_rad)

    dx = receptor_x - source_x
    dy = receptor_y - source_y

    # Project onto downwind (along wind) and crosswind (perpendicular) axes
    downwind = dx * wind_ux + dy * wind_uy
    crosswind = -dx * wind_uy + dy * wind_ux

    sigma_y, sigma_z = compute_sigma(downwind, stability_class)

    concentration = np.zeros_like(receptor_x, dtype=float)

    # Only compute where receptor is at least 1m downwind of source
    mask = downwind > 1.0

    if np.any(mask):
        sy = sigma_y[mask]
        sz = sigma_z[mask]
        cw = crosswind[mask]

        norm = emission_rate / (2.0 * np.pi * u * sy * sz)
        lateral = np.exp(-0.5 * (cw / sy) ** 2)

        # Vertical Gaussian with ground reflection (image source method)
        z = receptor_z
        H = source_z
        vertical = np.exp(-0.5 * ((z - H) / sz) ** 2) + np.exp(
            -0.5 * ((z + H) / sz) ** 2
        )

        concentration[mask] = norm * lateral * vertical

    return concentration
