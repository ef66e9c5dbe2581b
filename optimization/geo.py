"""
Equirectangular coordinate helpers.

At the sub-100 km scales of a chemical release, a flat-earth projection
(111.32 km per degree of latitude, longitude scaled by cos(latitude)) is
accurate enough for sensor placement and evacuation circles.
"""

import math
from typing import Tuple

import numpy as np

from config import KM_PER_DEGREE_LAT, COORDINATE_DECIMALS
from models.numeric import clamp, round_to
from models.parameters import Location

# Keeps the longitude scale finite at the poles
_MIN_COS_LAT = 1e-6


def _km_per_degree_lng(lat: float) -> float:
    return KM_PER_DEGREE_LAT * max(_MIN_COS_LAT, math.cos(math.radians(lat)))


def downwind_bearing(wind_direction_deg: float) -> float:
    """Bearing (radians, clockwise from North) the wind blows TOWARD."""
    return math.radians((wind_direction_deg + 180.0) % 360.0)


def destination_point(
    origin: Location,
    distance_km: float,
    bearing_rad: float,
    decimals: int = COORDINATE_DECIMALS,
) -> Location:
    """
    Point *distance_km* from *origin* along *bearing_rad*.

    Args:
        origin: Start coordinate.
        distance_km: Distance in kilometers.
        bearing_rad: Bearing in radians, clockwise from North.
        decimals: Rounding applied to the result (None to skip).

    Returns:
        Destination coordinate, latitude clamped to [-90, 90] and longitude
        wrapped into [-180, 180).
    """
    lat = origin.lat + distance_km * math.cos(bearing_rad) / KM_PER_DEGREE_LAT
    lng = origin.lng + distance_km * math.sin(bearing_rad) / _km_per_degree_lng(origin.lat)
    lat = clamp(lat, -90.0, 90.0)
    lng = (lng + 180.0) % 360.0 - 180.0
    if decimals is None:
        return Location(lat=lat, lng=lng)
    return Location(lat=round_to(lat, decimals), lng=round_to(lng, decimals))


def round_location(location: Location, decimals: int = COORDINATE_DECIMALS) -> Location:
    return Location(lat=round_to(location.lat, decimals), lng=round_to(location.lng, decimals))


def to_local_meters(
    origin: Location,
    lats: np.ndarray,
    lngs: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Project coordinates onto a local East/North plane centered on *origin*.

    Returns:
        (x, y) arrays in meters, x = East, y = North.
    """
    lats = np.asarray(lats, dtype=float)
    lngs = np.asarray(lngs, dtype=float)
    x = (lngs - origin.lng) * _km_per_degree_lng(origin.lat) * 1000.0
    y = (lats - origin.lat) * KM_PER_DEGREE_LAT * 1000.0
    return x, y


def centroid(locations) -> Location:
    """Arithmetic mean of a non-empty sequence of locations."""
    lats = [loc.lat for loc in locations]
    lngs = [loc.lng for loc in locations]
    return Location(lat=float(np.mean(lats)), lng=float(np.mean(lngs)))
