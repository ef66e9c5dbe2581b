"""
Health Impact Classifier.

Maps an exposure (concentration and duration) to a severity band, and
estimates how much a protective action (evacuation, sheltering indoors,
sheltering in a vehicle) reduces casualties for a release.
"""

import logging
from typing import Optional

from config import (
    DOSAGE_BANDS,
    TIME_BEFORE_SIGNIFICANT_EXPOSURE_MIN,
    DEFAULT_BUILDING_PROTECTION,
    GAS_BUILDING_PROTECTION,
    LIQUID_BUILDING_PROTECTION,
)
from data.chemicals import ChemicalLookup, get_chemical, mg_m3_to_ppm
from models.dispersion import calculate_detailed_dispersion
from models.numeric import round_to, safe_number
from models.parameters import ModelParameters
from models.results import HealthImpact, ProtectiveActionAssessment


logger = logging.getLogger(__name__)

SHELTER_TYPES = ("fullEvacuation", "indoor", "vehicle")

# (guideline key, severity, label, effect) from most to least severe
_GUIDELINE_BANDS = (
    ("aegl3", "fatal", "AEGL-3", "Life-threatening health effects or death possible"),
    ("aegl2", "high", "AEGL-2", "Long-lasting adverse health effects possible"),
    ("aegl1", "medium", "AEGL-1", "Notable discomfort, irritation, or non-disabling effects"),
)

_DOSAGE_DESCRIPTIONS = {
    "fatal": "Potentially fatal exposure",
    "high": "Serious health effects",
    "medium": "Moderate health effects",
    "low": "Minor irritation possible",
}


def calculate_health_impact(
    concentration: float,
    exposure_minutes: float,
    chemical: str,
    lookup: Optional[ChemicalLookup] = None,
) -> HealthImpact:
    """
    Classify an exposure as low, medium, high or fatal.

    With chemical data, the concentration is converted to ppm and compared
    against AEGL-3, AEGL-2 and AEGL-1 in turn; guidelines that are not
    established are skipped.  Without chemical data, or when none of the
    three guidelines is established, the dosage (mg/m^3 x minutes) is
    compared against fixed bands of 1000, 500 and 100.  A failing chemical
    table also falls back to the dosage bands.

    Args:
        concentration: Concentration in mg/m^3.
        exposure_minutes: Exposure duration in minutes.
        chemical: Chemical name.
        lookup: Chemical table to use (built-in table if None).

    Returns:
        ``HealthImpact`` with severity and a short description.
    """
    concentration = safe_number(concentration, 0.0, min_value=0.0)
    exposure_minutes = safe_number(exposure_minutes, 0.0, min_value=0.0)

    try:
        props = get_chemical(chemical, lookup)
        levels = []
        if props is not None and props.molecular_weight > 0:
            levels = [
                (props.guideline(key), severity, label, effect)
                for key, severity, label, effect in _GUIDELINE_BANDS
            ]
        if any(level is not None for level, _, _, _ in levels):
            ppm = mg_m3_to_ppm(concentration, props.molecular_weight)
            for level, severity, label, effect in levels:
                if level is not None and ppm > level:
                    return HealthImpact(
                        severity=severity,
                        description=f"Exceeds {label} ({int(round_to(level))} ppm): {effect}",
                    )
            return HealthImpact(severity="low", description="Below all applicable exposure guidelines")
    except Exception:
        logger.exception("Health impact lookup failed for %r; classifying by dosage", chemical)
        return _classify_by_dosage(concentration, exposure_minutes)

    logger.warning("No exposure guidelines for %r; classifying by dosage", chemical)
    return _classify_by_dosage(concentration, exposure_minutes)


def _classify_by_dosage(concentration: float, exposure_minutes: float) -> HealthImpact:
    dosage = concentration * exposure_minutes
    for severity in ("fatal", "high", "medium"):
        if dosage > DOSAGE_BANDS[severity]:
            return HealthImpact(severity=severity, description=_DOSAGE_DESCRIPTIONS[severity])
    return HealthImpact(severity="low", description=_DOSAGE_DESCRIPTIONS["low"])


def building_protection_factor(
    chemical: str,
    lookup: Optional[ChemicalLookup] = None,
) -> float:
    """Fraction of outdoor concentration that reaches a building's interior."""
    props = get_chemical(chemical, lookup)
    if props is None:
        return DEFAULT_BUILDING_PROTECTION
    if props.boiling_point < 20:
        return GAS_BUILDING_PROTECTION
    if props.boiling_point > 100:
        return LIQUID_BUILDING_PROTECTION
    return DEFAULT_BUILDING_PROTECTION


def evaluate_protective_actions(
    params: ModelParameters,
    evacuation_time: float,
    shelter_type: str,
    lookup: Optional[ChemicalLookup] = None,
) -> ProtectiveActionAssessment:
    """
    Estimate the effectiveness of a protective action.

    Full evacuation compares the time left before significant exposure
    (10 minutes minus the time to detection) with *evacuation_time*.
    Indoor sheltering depends on how easily the chemical enters buildings.
    Vehicles give little protection.

    Args:
        params: Release description.
        evacuation_time: Minutes needed to evacuate.
        shelter_type: ``"fullEvacuation"``, ``"indoor"`` or ``"vehicle"``.
        lookup: Chemical table to use (built-in table if None).

    Returns:
        ``ProtectiveActionAssessment`` with whole-percent figures.  If the
        assessment cannot be completed, the shelter-in-place fallback.
    """
    try:
        return _assess_protective_action(params, evacuation_time, shelter_type, lookup)
    except Exception:
        logger.exception("Protective action assessment failed for %r", shelter_type)
        return _insufficient_time()


def _insufficient_time() -> ProtectiveActionAssessment:
    return ProtectiveActionAssessment(
        30, 40, "Insufficient time for evacuation - shelter in place"
    )


def _assess_protective_action(
    params: ModelParameters,
    evacuation_time: float,
    shelter_type: str,
    lookup: Optional[ChemicalLookup],
) -> ProtectiveActionAssessment:
    if shelter_type == "fullEvacuation":
        results = calculate_detailed_dispersion(params, lookup)
        evacuation_time = safe_number(evacuation_time, results.evacuation_time, min_value=0.0)
        available = TIME_BEFORE_SIGNIFICANT_EXPOSURE_MIN - results.time_to_detection
        if available > evacuation_time:
            return ProtectiveActionAssessment(
                95, 98, "Full evacuation recommended - sufficient time available"
            )
        if available > evacuation_time * 0.7:
            return ProtectiveActionAssessment(
                75, 85, "Partial evacuation possible - prioritize vulnerable populations"
            )
        return _insufficient_time()

    if shelter_type == "indoor":
        effectiveness = int(round_to((1.0 - building_protection_factor(params.chemical, lookup)) * 100))
        return ProtectiveActionAssessment(
            effectiveness,
            effectiveness + 10,
            "Shelter in place - close all windows and doors, turn off ventilation",
        )

    if shelter_type != "vehicle":
        logger.warning("Unknown shelter type %r; assessing as vehicle", shelter_type)
    return ProtectiveActionAssessment(
        20, 30, "Vehicle provides minimal protection - evacuate if possible"
    )
