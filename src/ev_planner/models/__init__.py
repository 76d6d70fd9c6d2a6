"""Data models — catalog records, request context and result contracts."""

from ev_planner.models.station import Charger, GeoPoint, Station, StationFilters, UsageStats
from ev_planner.models.user import Preferences, UserContext
from ev_planner.models.results import (
    AvailabilitySummary,
    BatteryAnalysis,
    ChargingStop,
    CostEstimate,
    Detour,
    NearbyStation,
    ReasonFact,
    Recommendation,
    RouteEstimate,
    ScoreBreakdown,
    ScoreResult,
    StatusCounts,
    TripPlan,
)

__all__ = [
    "AvailabilitySummary",
    "BatteryAnalysis",
    "Charger",
    "ChargingStop",
    "CostEstimate",
    "Detour",
    "GeoPoint",
    "NearbyStation",
    "Preferences",
    "ReasonFact",
    "Recommendation",
    "RouteEstimate",
    "ScoreBreakdown",
    "ScoreResult",
    "Station",
    "StationFilters",
    "StatusCounts",
    "TripPlan",
    "UsageStats",
    "UserContext",
]
