"""Great-circle geometry — haversine distance and detour estimation.

There is no road graph: straight-line distance plus a detour tolerance is
the approximation the cost and time estimates are calibrated against.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np

from ev_planner.models.results import Detour
from ev_planner.models.station import GeoPoint

EARTH_RADIUS_KM = 6371.0


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance between two points in kilometres."""
    lat1, lat2 = math.radians(a.lat), math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distances_km(origin: GeoPoint, points: Sequence[GeoPoint]) -> np.ndarray:
    """Vectorised ``distance_km`` from one origin to many points."""
    if not points:
        return np.zeros(0)
    lats = np.radians(np.array([p.lat for p in points], dtype=float))
    lngs = np.radians(np.array([p.lng for p in points], dtype=float))
    lat0 = math.radians(origin.lat)
    lng0 = math.radians(origin.lng)

    h = np.sin((lats - lat0) / 2) ** 2 + math.cos(lat0) * np.cos(lats) * np.sin((lngs - lng0) / 2) ** 2
    return EARTH_RADIUS_KM * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def detour(origin: GeoPoint, destination: GeoPoint, via: GeoPoint) -> Detour:
    """Extra km of origin → via → destination over the direct path.

    The percentage is relative to the direct distance; for a zero-length
    trip it is 0 when ``via`` sits on the origin and infinite otherwise.
    """
    direct = distance_km(origin, destination)
    to_via = distance_km(origin, via)
    extra = to_via + distance_km(via, destination) - direct
    # floating noise can make a collinear waypoint come out a hair negative
    extra = max(0.0, extra)

    if direct > 0:
        pct = extra / direct * 100.0
    else:
        pct = 0.0 if extra == 0 else math.inf

    return Detour(
        direct_km=direct,
        detour_km=extra,
        detour_pct=pct,
        distance_from_origin_km=to_via,
    )


def is_along_route(
    origin: GeoPoint,
    destination: GeoPoint,
    via: GeoPoint,
    max_detour_percent: float = 30.0,
) -> bool:
    """True when routing through ``via`` costs at most ``max_detour_percent``."""
    return detour(origin, destination, via).detour_pct <= max_detour_percent
