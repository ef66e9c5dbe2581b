"""
Global configuration and constants for the Chemical Release Dispersion Engine.
"""

# --- Input Defaults ---
DEFAULT_CHEMICAL = "ammonia"
DEFAULT_RELEASE_RATE = 10.0      # kg/min
MIN_RELEASE_RATE = 0.01          # kg/min
DEFAULT_WIND_SPEED = 5.0         # m/s
MIN_WIND_SPEED = 0.1             # m/s  (input clamp)
MIN_EFFECTIVE_WIND_SPEED = 0.5   # m/s  (floor before any denominator)
DEFAULT_WIND_DIRECTION = 270.0   # Meteorological convention: direction wind comes FROM (degrees)
DEFAULT_STABILITY_CLASS = "D"    # Neutral stability
DEFAULT_TEMPERATURE_C = 20.0
AMBIENT_TEMPERATURE_RANGE_C = (-50.0, 60.0)
RELEASE_TEMPERATURE_RANGE_C = (-50.0, 200.0)
DEFAULT_HUMIDITY = 50.0          # % RH
DEFAULT_LEAK_DURATION_MIN = 60.0

# --- Physical Constants ---
KELVIN_OFFSET = 273.15
REFERENCE_TEMPERATURE_K = 293.15   # 20 C
STANDARD_PRESSURE_HPA = 1013.25
MOLAR_VOLUME_L = 24.45             # L/mol at 25 C, 1 atm (ppm <-> mg/m^3)
KM_PER_DEGREE_LAT = 111.32

# --- Environmental Factors ---
# Stable air spreads a hazardous cloud further before it dilutes
STABILITY_FACTORS = {
    "A": 0.5,   # Very unstable
    "B": 0.7,   # Unstable
    "C": 0.9,   # Slightly unstable
    "D": 1.0,   # Neutral
    "E": 1.2,   # Stable
    "F": 1.5,   # Very stable
}

STABILITY_DESCRIPTIONS = {
    "A": "Very unstable - strong convection, rapid mixing",
    "B": "Unstable - moderate convection",
    "C": "Slightly unstable - weak convection",
    "D": "Neutral - overcast or windy conditions",
    "E": "Slightly stable - light winds at night",
    "F": "Stable - calm night, minimal mixing",
}

AMBIENT_TEMPERATURE_EXPONENT = 0.8   # warmer air = more turbulent mixing
RELEASE_TEMPERATURE_EXPONENT = 0.5   # hotter release = more buoyancy/evaporation

# Humidity factor = HUMIDITY_FACTOR_DRY - HUMIDITY_FACTOR_SPAN * RH/100
# 0% RH -> 1.4x, 50% RH -> 1.0x, 100% RH -> 0.6x
HUMIDITY_FACTOR_DRY = 1.4
HUMIDITY_FACTOR_SPAN = 0.8

PRESSURE_FACTOR_BOUNDS = (0.8, 1.2)

TERRAIN_FACTORS = {
    "urban": 0.8,
    "suburban": 0.9,
    "rural": 1.0,
    "water": 1.2,
    "forest": 0.7,
    "default": 1.0,
}

INDOOR_CONTAINMENT_FACTOR = 0.3

# --- Pasquill-Gifford Stability Classes ---
# Coefficients for sigma_y and sigma_z: sigma = a * x * (1 + b*x)^-0.5
# x in meters, sigma in meters
DISPERSION_COEFFICIENTS = {
    "A": {"sigma_y": (0.22, 0.0001), "sigma_z": (0.20, 0.0)},
    "B": {"sigma_y": (0.16, 0.0001), "sigma_z": (0.12, 0.0)},
    "C": {"sigma_y": (0.11, 0.0001), "sigma_z": (0.08, 0.0002)},
    "D": {"sigma_y": (0.08, 0.0001), "sigma_z": (0.06, 0.0003)},
    "E": {"sigma_y": (0.06, 0.0001), "sigma_z": (0.03, 0.0004)},
    "F": {"sigma_y": (0.04, 0.0001), "sigma_z": (0.016, 0.0005)},
}

# --- Plume Rise (simplified Briggs) ---
BUOYANCY_COEFFICIENT = 2.6
HEIGHT_DISTANCE_SCALE_M = 10.0     # height_factor = 1 + 0.5 * sqrt(H / scale)
HEIGHT_DISTANCE_WEIGHT = 0.5
GROUND_REDUCTION_HEIGHT_M = 150.0  # ground_factor = max(floor, 1 - H / height)
GROUND_REDUCTION_FLOOR = 0.3

# --- Hazard Zones ---
REFERENCE_RELEASE_RATE = 10.0      # kg/min
WIND_DISTANCE_EXPONENT = -0.8
BASE_DISTANCE_SCALE_KM = 5.0
CHEMICAL_FACTOR_BOUNDS = (0.8, 2.0)
FALLBACK_CHEMICAL_FACTORS = {
    "chlorine": 1.5,
    "ammonia": 1.3,
}
DEFAULT_CHEMICAL_FACTOR = 1.2

RED_ZONE_FRACTION = 0.3
ORANGE_ZONE_FRACTION = 0.6
YELLOW_ZONE_FRACTION = 1.0
MIN_RED_DISTANCE_KM = 0.2
ORANGE_MIN_RATIO = 1.5             # orange >= 1.5 x red
YELLOW_MIN_RATIO = 1.3             # yellow >= 1.3 x orange

DEFAULT_RED_CONCENTRATION = 50.0   # mg/m^3 when no AEGL-3 / IDLH is known
ORANGE_FALLBACK_RATIO = 0.5
YELLOW_FALLBACK_RATIO = 0.25
MIN_ZONE_CONCENTRATION = 1.0       # mg/m^3

MIN_WIND_SPREAD_FACTOR = 0.2
MAX_PLUME_ASPECT_RATIO = 3.0

# Population density by terrain type (people/km^2)
POPULATION_DENSITY = {
    "urban": 3000,
    "suburban": 1000,
    "rural": 100,
    "water": 10,
    "forest": 50,
    "default": 500,
}

# Conservative result returned when a calculation cannot complete (meters, mg/m^3)
FALLBACK_ZONES = {
    "red": (500.0, 100.0),
    "orange": (1000.0, 50.0),
    "yellow": (1500.0, 25.0),
}

LETHAL_DISTANCE_RATIO = 0.7        # lethal distance as a fraction of the red radius

# --- Concentration Profile ---
# C(x) = C0 * exp(-k * (x / x_max)^n)
PROFILE_DECAY_PARAMETERS = {
    "A": (4.0, 1.5),   # Very unstable, rapid dispersion
    "B": (3.5, 1.6),
    "C": (3.0, 1.7),
    "D": (2.5, 1.8),   # Neutral
    "E": (2.0, 1.9),
    "F": (1.5, 2.0),   # Very stable, slower dispersion
}
PROFILE_INTERVALS = 20
PROFILE_EXTENT_RATIO = 1.2         # profile runs to 1.2 x yellow distance
PROFILE_WIND_BOUNDS = (1.0, 10.0)

# --- Detection ---
DEFAULT_SENSOR_THRESHOLD = 0.5     # mg/m^3
MIN_SENSOR_THRESHOLD = 0.01        # mg/m^3
DEFAULT_SENSOR_COUNT = 5
DEFAULT_MONITORING_MODE = "continuous"
BASE_DETECTION_PROBABILITY = 0.75
FULL_COVERAGE_SENSOR_COUNT = 10
FULL_DETECTION_RELEASE_RATE = 50.0  # kg/min
BATCH_DETECTION_PENALTY = 0.7
BATCH_DETECTION_DELAY = 5.0
MIN_DETECTION_RELEASE_RATE = 0.1   # kg/min
BASE_EVACUATION_TIME_MIN = 20.0
EVACUATION_POPULATION_DENSITY = 500  # people/km^2, average assumed for evacuation time

# --- Sensor Placement ---
DETECTION_SENSOR_LIMIT = 5          # sensors placed by the detection planner
SENSOR_BEARING_OFFSET_RAD = 0.3
DEFAULT_RECOMMENDATION_COUNT = 8
DOWNWIND_SENSOR_SHARE = 0.4
CROSSWIND_SENSOR_SHARE = 0.3
MAX_TIER_SENSORS = 3
PERIMETER_DISTANCE_RATIO = 0.9
COORDINATE_DECIMALS = 4

# --- Multi-Source ---
DEFAULT_MULTI_SOURCE_SENSOR_COUNT = 15
DEFAULT_MULTI_SOURCE_HEIGHT_M = 2.0
MAX_PERIMETER_SENSORS = 10
PERIMETER_BASE_DISTANCE_KM = 2.0
PERIMETER_DISTANCE_STEP_KM = 0.5
RECEPTOR_HEIGHT_M = 1.5            # breathing height for superposed concentration fields

# --- Health Impact ---
DOSAGE_BANDS = {
    "fatal": 1000.0,
    "high": 500.0,
    "medium": 100.0,
}
TIME_BEFORE_SIGNIFICANT_EXPOSURE_MIN = 10.0
DEFAULT_BUILDING_PROTECTION = 0.5
GAS_BUILDING_PROTECTION = 0.7       # boiling point below 20 C
LIQUID_BUILDING_PROTECTION = 0.3    # boiling point above 100 C
