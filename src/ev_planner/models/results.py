"""Result types — the contract between engine, API and presentation.

The UI and the LLM prompt builder read these records; field names are
stable.  Prose is never produced here: reasons are structured facts and
rendering them is the caller's concern.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from ev_planner.config.pricing import ChargerKind, UserTier
from ev_planner.config.scoring import Urgency
from ev_planner.models.station import Charger, GeoPoint, Station


# ═══════════════════════════════════════════════════════════════════════════
# Geo
# ═══════════════════════════════════════════════════════════════════════════

class Detour(BaseModel):
    """Extra distance incurred by routing origin → via → destination."""

    direct_km: float
    detour_km: float
    detour_pct: float
    """Detour as a percentage of the direct distance (inf when direct is 0)."""
    distance_from_origin_km: float


# ═══════════════════════════════════════════════════════════════════════════
# Scoring
# ═══════════════════════════════════════════════════════════════════════════

class ScoreBreakdown(BaseModel):
    """Per-factor scores, each clamped to [0, 100] before weighting."""

    distance_score: float
    availability_score: float
    wait_score: float
    charger_type_score: float
    amenity_score: float


class ScoreResult(BaseModel):
    """Weighted suitability of one station for one user location."""

    station_id: str
    station_name: str
    urgency: Urgency
    breakdown: ScoreBreakdown
    total: int
    """Σ component × weight, rounded half-up."""

    distance_km: float
    available_chargers: int
    total_chargers: int
    fast_available: int
    slow_available: int


# ═══════════════════════════════════════════════════════════════════════════
# Cost
# ═══════════════════════════════════════════════════════════════════════════

class CostEstimate(BaseModel):
    """One charging session: energy, time and tier-discounted price."""

    from_percent: float
    to_percent: float
    energy_kwh: float
    charger_kind: ChargerKind
    charger_power_kw: float
    price_per_kwh: float
    time_minutes: int
    base_cost: float
    tier: UserTier
    discount_fraction: float
    discount: float
    final_cost: float
    """base_cost − discount."""
    points_earned: int
    """floor(final_cost / currency_per_point)."""
    currency: str


# ═══════════════════════════════════════════════════════════════════════════
# Trip planning
# ═══════════════════════════════════════════════════════════════════════════

TripStatus = Literal["no_charge_needed", "stops_planned", "fallback"]


class ChargingStop(BaseModel):
    """A planned stop.  ``battery_out_percent`` > ``battery_in_percent``."""

    station_id: str
    station_name: str
    address: str
    location: GeoPoint
    distance_from_origin_km: float
    detour_km: float
    battery_in_percent: float
    battery_out_percent: float
    charger_kind: ChargerKind
    charger_power_kw: float
    time_minutes: int
    cost: float
    reason: str
    amenities: list[str] = Field(default_factory=list)


class TripPlan(BaseModel):
    """A single linear trip with its ordered charging stops."""

    origin: GeoPoint
    destination: GeoPoint
    status: TripStatus
    needs_charging: bool
    start_battery_percent: float
    total_distance_km: float
    driving_time_minutes: int
    traffic_multiplier: float
    stops: list[ChargingStop] = Field(default_factory=list)
    total_charging_minutes: int = 0
    total_time_minutes: int = 0
    total_cost: float = 0.0
    currency: str = "CLP"
    arrival_battery_percent: float
    """Projected SoC at the destination after all stops."""
    confidence: Literal["high", "low"] = "high"
    """``low`` when the projected arrival breaches the arrival floor."""


# ═══════════════════════════════════════════════════════════════════════════
# Recommendations
# ═══════════════════════════════════════════════════════════════════════════

ReasonType = Literal["distance", "fast_chargers", "low_wait", "amenities", "availability"]


class ReasonFact(BaseModel):
    """A structured reason a station was recommended."""

    type: ReasonType
    value: float
    unit: str = ""


class Recommendation(BaseModel):
    """User-facing recommendation record."""

    station_id: str
    station_name: str
    address: str
    location: GeoPoint
    score: int
    score_breakdown: ScoreBreakdown
    reasons: list[ReasonFact]
    reasoning: str
    distance_km: float
    eta_minutes: int
    charging_time_minutes: int
    wait_minutes: float
    total_time_minutes: float
    estimated_cost: float
    currency: str
    charger_kind: ChargerKind | None
    available_chargers: list[Charger]
    amenities: list[str]


# ═══════════════════════════════════════════════════════════════════════════
# Route estimate and availability
# ═══════════════════════════════════════════════════════════════════════════

class BatteryAnalysis(BaseModel):
    """Whether the current charge covers a route, with a safety margin."""

    current_range_km: int
    battery_needed_percent: int
    estimated_battery_at_arrival: int
    can_complete_trip: bool
    needs_charging: bool
    safety_margin_percent: float
    recommended_charge_within_km: int | None = None


class RouteEstimate(BaseModel):
    """Point-to-point distance and time with a road-factor approximation."""

    origin: GeoPoint
    destination: GeoPoint
    straight_line_km: float
    estimated_road_km: float
    base_minutes: int
    traffic_multiplier: float
    traffic_condition: Literal["light", "moderate", "heavy"]
    estimated_minutes: int
    route_type: Literal["urban", "highway"]
    battery_analysis: BatteryAnalysis | None = None


class NearbyStation(BaseModel):
    """A catalog search hit."""

    station: Station
    distance_km: float
    available: int
    fast_available: int
    route: Detour | None = None
    """Detour figures when searching along a route."""


class StatusCounts(BaseModel):
    """Charger counts by status for one charger kind."""

    total: int = 0
    available: int = 0
    occupied: int = 0
    maintenance: int = 0


class AvailabilitySummary(BaseModel):
    """Live availability view of one station."""

    station_id: str
    station_name: str
    total_chargers: int
    total_available: int
    is_available: bool
    fast: StatusCounts
    slow: StatusCounts
    queue_length: int
    trend: str
    estimated_wait_minutes: int
    wait_advice: str
    peak_hours: list[str]
    is_peak: bool | None = None
    """``None`` when no clock time was supplied."""
