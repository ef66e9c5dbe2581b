"""
Chemical property table for hazard modelling.

Provides the read-only lookup the dispersion engine consumes: molecular
weight, volatility and exposure guideline levels keyed by lowercase common
name.  Guideline levels (IDLH, AEGL, ERPG) are in ppm; a value of 0 means
"not established" and is treated as missing.

Lookups are pluggable so a site-specific table can be loaded from JSON
without changing downstream code.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from config import MOLAR_VOLUME_L


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChemicalProperties:
    """Physical and toxicological properties of a single chemical.

    Args:
        name: Display name.
        cas: CAS registry number.
        molecular_weight: g/mol.
        boiling_point: Celsius.
        vapor_pressure: mmHg at 20 C.
        specific_gravity: Relative to water.
        idlh: Immediately Dangerous to Life or Health (ppm).
        aegl1, aegl2, aegl3: Acute Exposure Guideline Levels (ppm, 60 min).
        erpg1, erpg2, erpg3: Emergency Response Planning Guidelines (ppm).
    """

    name: str
    cas: str
    molecular_weight: float
    boiling_point: float
    vapor_pressure: float
    specific_gravity: float
    idlh: float = 0.0
    lel: float = 0.0
    uel: float = 0.0
    aegl1: float = 0.0
    aegl2: float = 0.0
    aegl3: float = 0.0
    erpg1: Optional[float] = None
    erpg2: Optional[float] = None
    erpg3: Optional[float] = None
    description: str = ""
    hazards: Tuple[str, ...] = field(default_factory=tuple)

    def guideline(self, key: str) -> Optional[float]:
        """Return a guideline level in ppm, or None if it is not established."""
        value = getattr(self, key, None)
        if value is None or not value > 0:
            return None
        return float(value)


_CHEMICALS = {
    "chlorine": ChemicalProperties(
        name="Chlorine", cas="7782-50-5",
        molecular_weight=70.91, boiling_point=-34.04,
        vapor_pressure=5168, specific_gravity=1.41,
        idlh=10, aegl1=0.5, aegl2=2.0, aegl3=20.0,
        erpg1=1, erpg2=3, erpg3=20,
        description="Greenish-yellow gas with a pungent, irritating odor.",
        hazards=("Respiratory irritant", "Oxidizer", "Environmental hazard"),
    ),
    "ammonia": ChemicalProperties(
        name="Ammonia", cas="7664-41-7",
        molecular_weight=17.03, boiling_point=-33.34,
        vapor_pressure=6870, specific_gravity=0.682,
        idlh=300, lel=15, uel=28, aegl1=30, aegl2=160, aegl3=1100,
        erpg1=25, erpg2=150, erpg3=750,
        description="Colorless gas with a strong, pungent odor.",
        hazards=("Respiratory irritant", "Corrosive", "Flammable at high concentrations"),
    ),
    "hydrogen sulfide": ChemicalProperties(
        name="Hydrogen Sulfide", cas="7783-06-4",
        molecular_weight=34.08, boiling_point=-60.33,
        vapor_pressure=15600, specific_gravity=0.92,
        idlh=100, lel=4, uel=44, aegl1=0.51, aegl2=27, aegl3=50,
        description="Colorless gas with a strong rotten egg odor.",
        hazards=("Respiratory irritant", "Neurotoxic", "Flammable", "Odor fatigue risk"),
    ),
    "sulfur dioxide": ChemicalProperties(
        name="Sulfur Dioxide", cas="7446-09-5",
        molecular_weight=64.07, boiling_point=-10.0,
        vapor_pressure=2538, specific_gravity=1.434,
        idlh=100, aegl1=0.2, aegl2=0.75, aegl3=30,
        description="Colorless gas with a strong, suffocating odor.",
        hazards=("Respiratory irritant", "Corrosive to tissue", "Environmental hazard"),
    ),
    "methane": ChemicalProperties(
        name="Methane", cas="74-82-8",
        molecular_weight=16.04, boiling_point=-161.5,
        vapor_pressure=760000, specific_gravity=0.42,
        lel=5, uel=15,
        description="Colorless, odorless gas. Primarily an asphyxiation and fire hazard.",
        hazards=("Asphyxiant", "Highly flammable", "Explosion hazard"),
    ),
    "carbon monoxide": ChemicalProperties(
        name="Carbon Monoxide", cas="630-08-0",
        molecular_weight=28.01, boiling_point=-191.5,
        vapor_pressure=760000, specific_gravity=0.97,
        idlh=1200, lel=12.5, uel=74, aegl2=83, aegl3=330,
        description="Colorless, odorless gas produced by incomplete combustion.",
        hazards=("Asphyxiant", "Hemoglobin binding", "Flammable", "Difficult to detect"),
    ),
    "benzene": ChemicalProperties(
        name="Benzene", cas="71-43-2",
        molecular_weight=78.11, boiling_point=80.1,
        vapor_pressure=75, specific_gravity=0.88,
        idlh=500, lel=1.2, uel=7.8, aegl1=52, aegl2=800, aegl3=4000,
        description="Colorless liquid with a sweet odor, used as a solvent.",
        hazards=("Carcinogen", "Central nervous system depressant", "Flammable"),
    ),
    "ethylene oxide": ChemicalProperties(
        name="Ethylene Oxide", cas="75-21-8",
        molecular_weight=44.05, boiling_point=10.4,
        vapor_pressure=1095, specific_gravity=0.882,
        idlh=800, lel=3, uel=100, aegl1=5, aegl2=45, aegl3=85,
        description="Colorless gas with a sweet ether-like odor.",
        hazards=("Carcinogen", "Mutagen", "Highly flammable", "Explosive", "Reactive"),
    ),
    "hydrogen cyanide": ChemicalProperties(
        name="Hydrogen Cyanide", cas="74-90-8",
        molecular_weight=27.03, boiling_point=25.6,
        vapor_pressure=630, specific_gravity=0.687,
        idlh=50, lel=5.6, uel=40, aegl1=1.0, aegl2=7.1, aegl3=15,
        description="Colorless liquid or gas with bitter almond odor.",
        hazards=("Highly toxic", "Metabolic poison", "Flammable", "Rapid acting"),
    ),
    "phosgene": ChemicalProperties(
        name="Phosgene", cas="75-44-5",
        molecular_weight=98.92, boiling_point=8.3,
        vapor_pressure=1173, specific_gravity=1.432,
        idlh=2, aegl2=0.2, aegl3=0.59,
        description="Colorless gas with a suffocating odor like musty hay.",
        hazards=("Pulmonary edema", "Delayed effects", "Corrosive"),
    ),
}

CHEMICAL_DATABASE: Mapping[str, ChemicalProperties] = MappingProxyType(_CHEMICALS)

THRESHOLD_DESCRIPTIONS = MappingProxyType({
    "idlh": "Immediately Dangerous to Life or Health",
    "aegl1": "Notable discomfort, irritation, or non-sensory effects. "
             "Effects are not disabling and are reversible upon cessation of exposure.",
    "aegl2": "Irreversible or other serious, long-lasting adverse health effects "
             "or an impaired ability to escape.",
    "aegl3": "Life-threatening health effects or death.",
    "erpg1": "Maximum concentration with mild, transient health effects.",
    "erpg2": "Maximum concentration below which most could be exposed up to "
             "1 hour without serious health effects.",
    "erpg3": "Maximum concentration below which most could be exposed up to "
             "1 hour without life-threatening health effects.",
})


class ChemicalLookup(ABC):
    """Abstract base class for chemical property sources."""

    @abstractmethod
    def lookup(self, chemical: Optional[str]) -> Optional[ChemicalProperties]:
        """Return properties for a chemical name, or None if unknown.

        Names are matched case-insensitively after stripping whitespace.
        """
        ...

    def names(self) -> Tuple[str, ...]:
        """Return the lowercase keys this lookup can resolve."""
        return ()


class BuiltinChemicalLookup(ChemicalLookup):
    """Lookup backed by the built-in ``CHEMICAL_DATABASE`` table."""

    def lookup(self, chemical: Optional[str]) -> Optional[ChemicalProperties]:
        return CHEMICAL_DATABASE.get(_normalize(chemical))

    def names(self) -> Tuple[str, ...]:
        return tuple(CHEMICAL_DATABASE.keys())


class FileChemicalLookup(ChemicalLookup):
    """Load a chemical table from a JSON file on disk.

    The file holds an object keyed by chemical name; each value carries the
    ``ChemicalProperties`` fields.  Entries in the file take precedence;
    names not found fall back to the built-in table when ``include_builtin``
    is set.

    Args:
        path: Path to the JSON file.
        include_builtin: Fall back to ``CHEMICAL_DATABASE`` for unknown names.

    Raises:
        ValueError: If the file is not a JSON object or an entry is invalid.
        FileNotFoundError: If the file does not exist.
    """

    _REQUIRED_KEYS = {
        "name", "cas", "molecular_weight", "boiling_point",
        "vapor_pressure", "specific_gravity",
    }

    def __init__(self, path: str, include_builtin: bool = True):
        self._table = self._load_table(path)
        self.include_builtin = include_builtin

    @classmethod
    def _load_table(cls, path: str) -> Dict[str, ChemicalProperties]:
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, dict) or len(data) == 0:
            raise ValueError(f"Chemical file must contain a non-empty JSON object: {path}")
        table = {}
        for key, entry in data.items():
            missing = cls._REQUIRED_KEYS - set(entry.keys())
            if missing:
                raise ValueError(
                    f"Chemical '{key}' missing required keys {missing} in {path}"
                )
            if not float(entry["molecular_weight"]) > 0:
                raise ValueError(
                    f"Chemical '{key}' must have a positive molecular_weight in {path}"
                )
            entry = dict(entry)
            entry["hazards"] = tuple(entry.get("hazards", ()))
            try:
                table[_normalize(key)] = ChemicalProperties(**entry)
            except TypeError as exc:
                raise ValueError(f"Chemical '{key}' has invalid fields in {path}: {exc}") from exc
        return table

    def lookup(self, chemical: Optional[str]) -> Optional[ChemicalProperties]:
        key = _normalize(chemical)
        if key in self._table:
            return self._table[key]
        if self.include_builtin:
            return CHEMICAL_DATABASE.get(key)
        return None

    def names(self) -> Tuple[str, ...]:
        names = list(self._table.keys())
        if self.include_builtin:
            names += [k for k in CHEMICAL_DATABASE if k not in self._table]
        return tuple(names)


DEFAULT_LOOKUP = BuiltinChemicalLookup()


def _normalize(chemical: Optional[str]) -> str:
    if not isinstance(chemical, str):
        return ""
    return chemical.strip().lower()


def get_chemical(
    chemical: Optional[str],
    lookup: Optional[ChemicalLookup] = None,
) -> Optional[ChemicalProperties]:
    """Resolve a chemical through *lookup* (built-in table by default)."""
    return (lookup or DEFAULT_LOOKUP).lookup(chemical)


def get_exposure_guidelines(
    chemical: str,
    lookup: Optional[ChemicalLookup] = None,
) -> Optional[Dict[str, Optional[float]]]:
    """Return the exposure guideline levels (ppm) for a chemical, or None."""
    props = get_chemical(chemical, lookup)
    if props is None:
        return None
    return {
        key: props.guideline(key)
        for key in ("idlh", "aegl1", "aegl2", "aegl3", "erpg1", "erpg2", "erpg3")
    }


def ppm_to_mg_m3(ppm: float, molecular_weight: float) -> float:
    """mg/m^3 = ppm * MW / 24.45"""
    return ppm * molecular_weight / MOLAR_VOLUME_L


def mg_m3_to_ppm(mg_m3: float, molecular_weight: float) -> float:
    """ppm = mg/m^3 * 24.45 / MW"""
    return mg_m3 * MOLAR_VOLUME_L / molecular_weight


_UNITS = ("mg/m3", "ppm", "percent")


def convert_concentration_unit(
    value: float,
    chemical: str,
    from_unit: str,
    to_unit: str,
    lookup: Optional[ChemicalLookup] = None,
) -> float:
    """
    Convert a concentration between mg/m^3, ppm and percent by volume.

    Conversion goes through mg/m^3 using the chemical's molecular weight
    (1 % = 10,000 ppm).  If the chemical is unknown or a unit is not
    recognised, the value is returned unchanged.

    Args:
        value: Concentration in ``from_unit``.
        chemical: Chemical name for the molecular weight.
        from_unit: One of ``"mg/m3"``, ``"ppm"``, ``"percent"``.
        to_unit: One of ``"mg/m3"``, ``"ppm"``, ``"percent"``.

    Returns:
        Concentration in ``to_unit``.
    """
    if from_unit == to_unit:
        return value
    if from_unit not in _UNITS or to_unit not in _UNITS:
        logger.warning("Unknown concentration unit %r -> %r; value left unchanged", from_unit, to_unit)
        return value

    props = get_chemical(chemical, lookup)
    if props is None or not props.molecular_weight > 0:
        logger.warning("No molecular weight for %r; concentration left unchanged", chemical)
        return value
    mw = props.molecular_weight

    if from_unit == "ppm":
        mg_m3 = ppm_to_mg_m3(value, mw)
    elif from_unit == "percent":
        mg_m3 = ppm_to_mg_m3(value * 10000.0, mw)
    else:
        mg_m3 = value

    if to_unit == "ppm":
        return mg_m3_to_ppm(mg_m3, mw)
    if to_unit == "percent":
        return mg_m3_to_ppm(mg_m3, mw) / 10000.0
    return mg_m3
