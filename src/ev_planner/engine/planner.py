"""Trip charging planner — where to stop, how much to charge, what it costs.

State machine over one linear trip:

  feasibility ── range ≥ distance × 1.2 ──▶ no_charge_needed
       │
       ▼
  candidates (along route, ≥1 free charger, nearest-to-origin first)
       │
       ▼
  greedy walk ──▶ stops_planned
       │ zero stops
       ▼
  fallback (nearest free station, any detour, charge to 80%) ──▶ fallback

Battery use is linear in great-circle km: km / vehicle_range × 100.
Nothing here raises for a hard-to-serve trip; a plan whose projected
arrival breaches the arrival floor is returned with ``confidence="low"``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import pydantic

from ev_planner.config.pricing import UserTier
from ev_planner.config.settings import PlannerSettings
from ev_planner.config.trip import TripConfig
from ev_planner.engine.catalog import StationCatalog
from ev_planner.engine.cost import estimate_charging_cost
from ev_planner.engine.geo import detour, distance_km
from ev_planner.engine.routing import traffic_multiplier
from ev_planner.errors import ValidationError
from ev_planner.models.results import ChargingStop, Detour, TripPlan
from ev_planner.models.station import Charger, GeoPoint, Station
from ev_planner.models.user import Preferences

logger = logging.getLogger(__name__)

REASON_NEEDED = "charge needed before continuing"
REASON_LOW_BATTERY = "low battery stop"
REASON_FALLBACK = "recommended stop"

# smallest top-up worth planning (SoC points)
MIN_CHARGE_PCT = 1.0


@dataclass(frozen=True)
class Candidate:
    """A station that qualifies as a charging stop for this trip."""

    station: Station
    route: Detour
    charger: Charger

    @property
    def progress_km(self) -> float:
        return self.route.distance_from_origin_km


@dataclass(frozen=True)
class _PlannedStop:
    candidate: Candidate
    battery_in: float
    battery_out: float
    reason: str


# ═══════════════════════════════════════════════════════════════════════════
# Candidate selection
# ═══════════════════════════════════════════════════════════════════════════

def select_candidates(
    origin: GeoPoint,
    destination: GeoPoint,
    catalog: StationCatalog,
    prefer_fast: bool = False,
    max_detour_pct: float = 30.0,
) -> list[Candidate]:
    """Stations along the route with a free charger, nearest-to-origin first.

    A station must lie between the endpoints: no further from the origin
    than the destination is, and no further from the destination than the
    origin is.  With ``prefer_fast`` a station with a free fast charger
    wins a tie on distance from origin.
    """
    candidates = []
    for station in catalog:
        charger = station.best_available_charger()
        if charger is None:
            continue
        route = detour(origin, destination, station.location)
        if route.detour_pct > max_detour_pct:
            continue
        if route.distance_from_origin_km >= route.direct_km:
            continue
        if distance_km(station.location, destination) > route.direct_km:
            continue
        candidates.append(Candidate(station=station, route=route, charger=charger))

    def key(c: Candidate):
        fast_rank = 0 if (not prefer_fast or c.station.fast_available > 0) else 1
        return (c.progress_km, fast_rank, c.station.id)

    candidates.sort(key=key)
    return candidates


# ═══════════════════════════════════════════════════════════════════════════
# Greedy stop placement
# ═══════════════════════════════════════════════════════════════════════════

def _charge_target(level_in: float, remaining_pct: float, cfg: TripConfig) -> float | None:
    """SoC to charge to before the remaining leg, or None if no useful target exists."""
    wanted = remaining_pct + max(cfg.charge_buffer_pct, cfg.arrival_floor_pct)
    target = min(cfg.max_charge_pct, wanted)
    if target <= level_in:
        # already above the normal ceiling; only a charge past it helps
        target = min(100.0, wanted)
    if target - level_in < MIN_CHARGE_PCT:
        target = min(100.0, level_in + MIN_CHARGE_PCT)
    return target if target > level_in else None


def place_stops(
    origin: GeoPoint,
    destination: GeoPoint,
    battery_percent: float,
    vehicle_range_km: float,
    candidates: list[Candidate],
    cfg: TripConfig,
) -> tuple[list[_PlannedStop], float]:
    """Walk the candidates and decide where to charge.

    Returns the planned stops and the projected arrival SoC.  A stop is
    inserted at the last candidate that was still reached above the
    mid-trip floor when the next waypoint (or the destination) would
    breach its floor.  If no such candidate exists but the breaching one
    is still reachable, the stop goes there instead.
    """

    def used(a: GeoPoint, b: GeoPoint) -> float:
        return distance_km(a, b) / vehicle_range_km * 100.0

    planned: list[_PlannedStop] = []
    position = origin
    progress = 0.0
    level = battery_percent
    previous: tuple[Candidate, float] | None = None

    # None marks the destination as the final waypoint
    waypoints: list[Candidate | None] = [*candidates, None]
    i = 0
    while i < len(waypoints):
        at_destination = level - used(position, destination)
        if at_destination >= cfg.arrival_floor_pct:
            return planned, at_destination

        wp = waypoints[i]
        if wp is not None and wp.progress_km <= progress:
            i += 1
            continue

        if wp is not None:
            arrive = level - used(position, wp.station.location)
            if arrive >= cfg.mid_trip_floor_pct:
                previous = (wp, arrive)
                i += 1
                continue
        else:
            arrive = at_destination

        # the next waypoint breaches its floor: charge before it
        if previous is not None:
            stop_at, level_in = previous
            reason = REASON_NEEDED
        elif wp is not None and arrive >= 0:
            stop_at, level_in = wp, arrive
            reason = REASON_LOW_BATTERY
        else:
            logger.debug("Coverage gap after %.1f km; no reachable candidate", progress)
            break

        remaining = used(stop_at.station.location, destination)
        target = _charge_target(level_in, remaining, cfg)
        if target is None:
            break

        planned.append(_PlannedStop(stop_at, level_in, target, reason))
        logger.debug(
            "Stop at %s (%.1f km): %.1f%% → %.1f%%",
            stop_at.station.id, stop_at.progress_km, level_in, target,
        )
        position = stop_at.station.location
        progress = stop_at.progress_km
        level = target
        previous = None

    return planned, level - used(position, destination)


# ═══════════════════════════════════════════════════════════════════════════
# Fallback
# ═══════════════════════════════════════════════════════════════════════════

def nearest_available(origin: GeoPoint, destination: GeoPoint, catalog: StationCatalog) -> Candidate | None:
    """Nearest station to the origin with a free charger, ignoring detour."""
    best: Candidate | None = None
    for station in catalog:
        charger = station.best_available_charger()
        if charger is None:
            continue
        route = detour(origin, destination, station.location)
        if best is None or (route.distance_from_origin_km, station.id) < (best.progress_km, best.station.id):
            best = Candidate(station=station, route=route, charger=charger)
    return best


# ═══════════════════════════════════════════════════════════════════════════
# Public entry point
# ═══════════════════════════════════════════════════════════════════════════

def _coerce_point(value: Any, field: str) -> GeoPoint:
    if value is None:
        raise ValidationError(field, "required")
    if isinstance(value, GeoPoint):
        return value
    try:
        return GeoPoint.model_validate(value)
    except pydantic.ValidationError as exc:
        err = exc.errors()[0]
        loc = ".".join(str(p) for p in err["loc"])
        raise ValidationError(f"{field}.{loc}" if loc else field, err["msg"]) from exc


def plan_trip_charging(
    origin: GeoPoint | dict,
    destination: GeoPoint | dict,
    battery_percent: float,
    vehicle_range_km: float,
    preferences: Preferences | None,
    catalog: StationCatalog,
    *,
    battery_capacity_kwh: float = 60.0,
    tier: UserTier = "individual",
    departure_hour: int | None = None,
    settings: PlannerSettings | None = None,
) -> TripPlan:
    """Plan the charging stops for one trip.

    Raises ``ValidationError`` for a missing origin/destination or
    out-of-range battery, range or capacity.  Everything else returns a
    plan: ``status`` tells which branch produced it.
    """
    origin = _coerce_point(origin, "origin")
    destination = _coerce_point(destination, "destination")
    if not 0 <= battery_percent <= 100:
        raise ValidationError("battery_percent", f"must be within [0, 100], got {battery_percent}")
    if vehicle_range_km <= 0:
        raise ValidationError("vehicle_range_km", "must be positive")
    if battery_capacity_kwh <= 0:
        raise ValidationError("battery_capacity_kwh", "must be positive")

    settings = settings or PlannerSettings()
    cfg = settings.trip
    prefs = preferences or Preferences()

    total_km = distance_km(origin, destination)
    multiplier = traffic_multiplier(departure_hour)
    driving_minutes = round(total_km / cfg.avg_speed_kmh * 60 * multiplier)
    current_range = battery_percent / 100.0 * vehicle_range_km

    base = dict(
        origin=origin,
        destination=destination,
        start_battery_percent=battery_percent,
        total_distance_km=round(total_km, 2),
        driving_time_minutes=driving_minutes,
        traffic_multiplier=multiplier,
        currency=settings.pricing.currency,
    )

    # 1. Feasibility
    if current_range >= total_km * cfg.range_safety_factor:
        return TripPlan(
            **base,
            status="no_charge_needed",
            needs_charging=False,
            total_time_minutes=driving_minutes,
            arrival_battery_percent=round(battery_percent - total_km / vehicle_range_km * 100.0, 2),
        )

    # 2-3. Candidates and greedy walk
    candidates = select_candidates(origin, destination, catalog, prefs.prefer_fast, cfg.max_detour_pct)
    planned, arrival = place_stops(origin, destination, battery_percent, vehicle_range_km, candidates, cfg)
    status = "stops_planned"
    reachable = True

    # 4. Fallback
    if not planned:
        status = "fallback"
        fallback = nearest_available(origin, destination, catalog)
        if fallback is not None:
            level_in = battery_percent - fallback.progress_km / vehicle_range_km * 100.0
            reachable = level_in >= 0
            level_in = max(0.0, level_in)
            target = cfg.fallback_charge_pct if cfg.fallback_charge_pct > level_in else 100.0
            if target > level_in:
                planned = [_PlannedStop(fallback, level_in, target, REASON_FALLBACK)]
                arrival = target - distance_km(fallback.station.location, destination) / vehicle_range_km * 100.0
        logger.info(
            "Fallback plan for %.1f km trip: %s",
            total_km, planned[0].candidate.station.id if planned else "no station available",
        )

    # 5. Costing
    stops = [_cost_stop(p, battery_capacity_kwh, tier, settings) for p in planned]
    charging_minutes = sum(s.time_minutes for s in stops)
    confidence = "high" if reachable and arrival >= cfg.arrival_floor_pct else "low"

    return TripPlan(
        **base,
        status=status,
        needs_charging=True,
        stops=stops,
        total_charging_minutes=charging_minutes,
        total_time_minutes=driving_minutes + charging_minutes,
        total_cost=round(sum(s.cost for s in stops), 2),
        arrival_battery_percent=round(arrival, 2),
        confidence=confidence,
    )


def _cost_stop(p: _PlannedStop, capacity_kwh: float, tier: UserTier, settings: PlannerSettings) -> ChargingStop:
    c = p.candidate
    estimate = estimate_charging_cost(
        p.battery_in,
        p.battery_out,
        capacity_kwh,
        c.charger.kind,
        tier,
        settings.pricing,
        charger_power_kw=c.charger.power_kw,
    )
    return ChargingStop(
        station_id=c.station.id,
        station_name=c.station.name,
        address=c.station.address,
        location=c.station.location,
        distance_from_origin_km=round(c.progress_km, 2),
        detour_km=round(c.route.detour_km, 2),
        battery_in_percent=round(p.battery_in, 2),
        battery_out_percent=round(p.battery_out, 2),
        charger_kind=c.charger.kind,
        charger_power_kw=c.charger.power_kw,
        time_minutes=estimate.time_minutes,
        cost=estimate.final_cost,
        reason=p.reason,
        amenities=list(c.station.usage.amenities),
    )
