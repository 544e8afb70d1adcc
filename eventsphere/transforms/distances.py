"""
Great-circle distance between venue coordinates, used to confirm that two
listings with similar titles are at the same place.
"""

import math
from typing import Optional


EARTH_RADIUS_MI = 3958.7613


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in miles between two lat/lon points (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    half_dphi = math.radians(lat2 - lat1) / 2
    half_dlambda = math.radians(lon2 - lon1) / 2

    h = math.sin(half_dphi) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(half_dlambda) ** 2
    return 2 * EARTH_RADIUS_MI * math.asin(min(1.0, math.sqrt(h)))


def within_radius(lat1: Optional[float], lon1: Optional[float],
                  lat2: Optional[float], lon2: Optional[float], radius_miles: float) -> bool:
    """True when both points are known and no further apart than radius_miles."""
    if None in (lat1, lon1, lat2, lon2):
        return False
    return haversine_miles(lat1, lon1, lat2, lon2) <= radius_miles
