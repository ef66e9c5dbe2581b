"""
Environmental Factor Resolver.

Turns weather and site conditions into dimensionless multipliers on the
hazard distance.  Each factor is 1.0 under reference conditions (neutral
stability, 20 C, standard pressure, rural open terrain, outdoors) and
their product is the single ``environmental_factor`` used downstream.

Stability is reported separately from ``environmental_factor``: the hazard
zone resolver applies it as its own term.
"""

import math
from dataclasses import dataclass
from typing import Optional

from config import (
    STABILITY_FACTORS,
    STABILITY_DESCRIPTIONS,
    DEFAULT_STABILITY_CLASS,
    KELVIN_OFFSET,
    REFERENCE_TEMPERATURE_K,
    AMBIENT_TEMPERATURE_EXPONENT,
    RELEASE_TEMPERATURE_EXPONENT,
    DEFAULT_TEMPERATURE_C,
    AMBIENT_TEMPERATURE_RANGE_C,
    RELEASE_TEMPERATURE_RANGE_C,
    DEFAULT_HUMIDITY,
    HUMIDITY_FACTOR_DRY,
    HUMIDITY_FACTOR_SPAN,
    STANDARD_PRESSURE_HPA,
    PRESSURE_FACTOR_BOUNDS,
    TERRAIN_FACTORS,
    INDOOR_CONTAINMENT_FACTOR,
)
from models.numeric import safe_number, clamp
from models.parameters import ModelParameters


@dataclass(frozen=True)
class EnvironmentalFactors:
    """Dimensionless multipliers on the hazard distance."""

    stability_factor: float
    temperature_factor: float
    humidity_factor: float
    pressure_factor: float
    terrain_factor: float
    containment_factor: float

    @property
    def environmental_factor(self) -> float:
        """Product of every factor except stability."""
        return (
            self.temperature_factor
            * self.humidity_factor
            * self.pressure_factor
            * self.terrain_factor
            * self.containment_factor
        )


def stability_factor(stability_class: str) -> float:
    """Spread factor for a Pasquill class; unknown classes count as neutral."""
    sc = stability_class.upper() if isinstance(stability_class, str) else ""
    return STABILITY_FACTORS.get(sc, STABILITY_FACTORS[DEFAULT_STABILITY_CLASS])


def describe_stability_class(stability_class: str) -> str:
    """Plain-language description of a Pasquill class (neutral if unknown)."""
    sc = stability_class.strip().upper() if isinstance(stability_class, str) else ""
    return STABILITY_DESCRIPTIONS.get(sc, STABILITY_DESCRIPTIONS[DEFAULT_STABILITY_CLASS])


def temperature_factor(ambient_c: float, release_c: Optional[float] = None) -> float:
    """
    Temperature multiplier relative to a 20 C reference.

        F_T = (T_amb / 293.15)^0.8 * (T_rel / 293.15)^0.5

    Warmer ambient air mixes more turbulently; a hotter release gains
    buoyancy and evaporates faster.  Both raise the factor.

    Args:
        ambient_c: Ambient temperature (C), default 20, clamped to [-50, 60].
        release_c: Release temperature (C), defaults to ambient, clamped to [-50, 200].

    Returns:
        Temperature factor (> 0).
    """
    ambient = safe_number(ambient_c, DEFAULT_TEMPERATURE_C, *AMBIENT_TEMPERATURE_RANGE_C)
    release = safe_number(release_c, ambient, *RELEASE_TEMPERATURE_RANGE_C)
    ambient_k = ambient + KELVIN_OFFSET
    release_k = release + KELVIN_OFFSET
    return (
        math.pow(ambient_k / REFERENCE_TEMPERATURE_K, AMBIENT_TEMPERATURE_EXPONENT)
        * math.pow(release_k / REFERENCE_TEMPERATURE_K, RELEASE_TEMPERATURE_EXPONENT)
    )


def humidity_factor(humidity: float) -> float:
    """Washout multiplier: 1.4 at 0 % RH falling linearly to 0.6 at 100 % RH."""
    rh = safe_number(humidity, DEFAULT_HUMIDITY, 0.0, 100.0)
    return HUMIDITY_FACTOR_DRY - (rh / 100.0) * HUMIDITY_FACTOR_SPAN


def pressure_factor(ambient_pressure_hpa: Optional[float] = None) -> float:
    """Ratio to standard pressure, clamped to [0.8, 1.2]; 1.0 if unknown."""
    pressure = safe_number(ambient_pressure_hpa, 0.0)
    if pressure <= 0:
        return 1.0
    return clamp(pressure / STANDARD_PRESSURE_HPA, *PRESSURE_FACTOR_BOUNDS)


def terrain_factor(terrain: Optional[str] = None) -> float:
    key = terrain.lower() if isinstance(terrain, str) else "default"
    return TERRAIN_FACTORS.get(key, TERRAIN_FACTORS["default"])


def containment_factor(is_indoor: bool) -> float:
    return INDOOR_CONTAINMENT_FACTOR if is_indoor else 1.0


def resolve_environmental_factors(params: ModelParameters) -> EnvironmentalFactors:
    """Compute every environmental multiplier for a set of model parameters."""
    return EnvironmentalFactors(
        stability_factor=stability_factor(params.stability_class),
        temperature_factor=temperature_factor(params.temperature, params.release_temperature),
        humidity_factor=humidity_factor(params.humidity),
        pressure_factor=pressure_factor(params.ambient_pressure),
        terrain_factor=terrain_factor(params.terrain),
        containment_factor=containment_factor(params.is_indoor),
    )
