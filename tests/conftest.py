"""Shared test fixtures — stations laid out along a north-south line.

The test route runs due north from (0, 0).  Along a meridian the haversine
distance is exactly R × Δlat, so a station placed ``km`` north of the
origin is ``km`` away from it.
"""

from __future__ import annotations

import math

import pytest

from ev_planner.config import PlannerSettings
from ev_planner.engine.catalog import StationCatalog
from ev_planner.models import Charger, GeoPoint, Station, UsageStats

KM_PER_DEG_LAT = 6371.0 * math.pi / 180.0


def north(km: float, lng_km: float = 0.0) -> GeoPoint:
    """Point ``km`` north of the origin (and ``lng_km`` east, at the equator)."""
    return GeoPoint(lat=km / KM_PER_DEG_LAT, lng=lng_km / KM_PER_DEG_LAT)


def build_station(
    station_id: str,
    km: float,
    chargers: list[tuple[str, float, str]] | None = None,
    wait: float = 5.0,
    amenities: tuple[str, ...] = (),
    lng_km: float = 0.0,
    queue: int = 0,
) -> Station:
    """A station ``km`` north of the origin.  ``chargers`` are (kind, kW, status)."""
    chargers = chargers if chargers is not None else [("fast", 150.0, "available")]
    return Station(
        id=station_id,
        name=f"Station {station_id}",
        address=f"Route km {km:g}",
        location=north(km, lng_km),
        chargers=tuple(
            Charger(id=f"{station_id}-{i}", kind=kind, power_kw=kw, status=status)
            for i, (kind, kw, status) in enumerate(chargers, start=1)
        ),
        usage=UsageStats(avg_wait_minutes=wait, amenities=amenities, current_queue=queue),
    )


@pytest.fixture
def origin() -> GeoPoint:
    return north(0.0)


@pytest.fixture
def settings() -> PlannerSettings:
    return PlannerSettings()


@pytest.fixture
def make_station():
    return build_station


@pytest.fixture
def route_catalog() -> StationCatalog:
    """Stations at 30, 120 and 200 km along a 250 km route."""
    return StationCatalog((
        build_station("A-030", 30),
        build_station("A-120", 120),
        build_station("A-200", 200),
    ))


@pytest.fixture
def corridor_catalog() -> StationCatalog:
    """A station every 100 km up to 500 km."""
    return StationCatalog(tuple(build_station(f"C-{km:03d}", km) for km in (100, 200, 300, 400, 500)))


@pytest.fixture
def city_catalog() -> StationCatalog:
    """Urban stations within a few km of the origin."""
    return StationCatalog((
        build_station(
            "NEAR-BUSY", 1,
            chargers=[("fast", 150.0, "occupied"), ("fast", 150.0, "occupied")],
            wait=10,
        ),
        build_station(
            "FAR-FREE", 8,
            chargers=[("slow", 50.0, "available")] * 3,
            wait=10,
        ),
        build_station(
            "MID-FAST", 2,
            chargers=[("fast", 150.0, "available"), ("slow", 22.0, "available")],
            wait=4,
            amenities=("Coffee shop", "Restrooms", "WiFi", "Convenience store"),
        ),
    ))


@pytest.fixture
def raw_catalog_records() -> list[dict]:
    """Station records in the raw feed shape."""
    return [
        {
            "id": "R-1",
            "name": "Raw One",
            "address": "Somewhere 1",
            "location": {"lat": -33.4263, "lng": -70.6150},
            "chargers": [
                {"id": "R-1-A", "type": "fast", "power": 150, "connector": "CCS2", "status": "available"},
                {"id": "R-1-B", "type": "slow", "power": 50, "connector": "Type2", "status": "occupied"},
            ],
            "usage_factors": {
                "peak_hours": ["07:30-09:30"],
                "avg_wait_time": 6,
                "nearby_amenities": ["Coffee shop", "Restrooms"],
            },
        },
        {
            "id": "R-2",
            "name": "Raw Two",
            "location": {"lat": -33.4103, "lng": -70.5776},
            "chargers": [
                {"type": "fast", "power": 120, "status": "occupied"},
            ],
            "usage_factors": {"avg_wait_time": 18},
        },
    ]
