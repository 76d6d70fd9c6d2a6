"""Quick route estimate — road-factor distance, traffic-adjusted time.

The departure hour is an explicit argument so that estimates stay
deterministic; the API boundary supplies the current hour when the caller
does not.
"""

from __future__ import annotations

from ev_planner.config.trip import RouteConfig
from ev_planner.engine.geo import distance_km
from ev_planner.errors import ValidationError
from ev_planner.models.results import BatteryAnalysis, RouteEstimate
from ev_planner.models.station import GeoPoint


def traffic_multiplier(hour: int | None) -> float:
    """Congestion factor for a departure hour (0-23).  ``None`` → 1.0."""
    if hour is None:
        return 1.0
    if not 0 <= hour <= 23:
        raise ValidationError("departure_hour", f"must be within 0-23, got {hour}")
    if 7 <= hour <= 9:
        return 1.4
    if 17 <= hour <= 20:
        return 1.5
    if 10 <= hour <= 16:
        return 1.2
    if 21 <= hour <= 23:
        return 1.1
    return 1.0


def traffic_condition(multiplier: float) -> str:
    if multiplier > 1.3:
        return "heavy"
    if multiplier > 1.1:
        return "moderate"
    return "light"


def analyze_battery(
    road_km: float,
    battery_percent: float,
    vehicle_range_km: float,
    config: RouteConfig | None = None,
) -> BatteryAnalysis:
    """Does the current charge cover ``road_km`` with the safety margin left?"""
    cfg = config or RouteConfig()
    if not 0 <= battery_percent <= 100:
        raise ValidationError("battery_percent", "must be within [0, 100]")
    if vehicle_range_km <= 0:
        raise ValidationError("vehicle_range_km", "must be positive")

    current_range = battery_percent / 100.0 * vehicle_range_km
    needed = road_km / vehicle_range_km * 100.0
    at_arrival = battery_percent - needed
    can_complete = at_arrival >= cfg.battery_safety_margin_pct

    return BatteryAnalysis(
        current_range_km=round(current_range),
        battery_needed_percent=round(needed),
        estimated_battery_at_arrival=round(at_arrival),
        can_complete_trip=can_complete,
        needs_charging=not can_complete,
        safety_margin_percent=cfg.battery_safety_margin_pct,
        recommended_charge_within_km=None if can_complete else round(current_range * cfg.charge_before_fraction),
    )


def estimate_route(
    origin: GeoPoint,
    destination: GeoPoint,
    departure_hour: int | None = None,
    battery_percent: float | None = None,
    vehicle_range_km: float | None = None,
    config: RouteConfig | None = None,
) -> RouteEstimate:
    """Straight-line distance scaled to an estimated road distance and time.

    Battery analysis is attached only when both ``battery_percent`` and
    ``vehicle_range_km`` are given.
    """
    cfg = config or RouteConfig()

    straight = distance_km(origin, destination)
    factor = cfg.highway_road_factor if straight > cfg.highway_threshold_km else cfg.urban_road_factor
    road_km = round(straight * factor, 1)

    highway = road_km > cfg.highway_speed_threshold_km
    speed = cfg.highway_speed_kmh if highway else cfg.urban_speed_kmh
    base_minutes = round(road_km / speed * 60)

    multiplier = traffic_multiplier(departure_hour)

    analysis = None
    if battery_percent is not None and vehicle_range_km is not None:
        analysis = analyze_battery(road_km, battery_percent, vehicle_range_km, cfg)

    return RouteEstimate(
        origin=origin,
        destination=destination,
        straight_line_km=round(straight, 1),
        estimated_road_km=road_km,
        base_minutes=base_minutes,
        traffic_multiplier=multiplier,
        traffic_condition=traffic_condition(multiplier),
        estimated_minutes=round(base_minutes * multiplier),
        route_type="highway" if highway else "urban",
        battery_analysis=analysis,
    )
