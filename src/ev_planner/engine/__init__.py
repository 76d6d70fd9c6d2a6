"""Engine — pure, synchronous computation over an explicit catalog snapshot."""

from ev_planner.engine.geo import detour, distance_km, distances_km, is_along_route
from ev_planner.engine.catalog import (
    CatalogHolder,
    StationCatalog,
    find_nearby_stations,
    load_catalog,
    station_availability,
)
from ev_planner.engine.scoring import score_station, score_stations
from ev_planner.engine.cost import estimate_charging_cost
from ev_planner.engine.routing import estimate_route, traffic_multiplier
from ev_planner.engine.planner import plan_trip_charging
from ev_planner.engine.recommend import assemble_recommendations, recommend_stations

__all__ = [
    "CatalogHolder",
    "StationCatalog",
    "assemble_recommendations",
    "detour",
    "distance_km",
    "distances_km",
    "estimate_charging_cost",
    "estimate_route",
    "find_nearby_stations",
    "is_along_route",
    "load_catalog",
    "plan_trip_charging",
    "recommend_stations",
    "score_station",
    "score_stations",
    "station_availability",
    "traffic_multiplier",
]
