"""Recommendation assembly — scores + cost estimates → ranked records.

Pure and idempotent: identical inputs over the same catalog snapshot give
identical recommendations.  Reasons are emitted as structured facts and a
short deterministic sentence; richer prose belongs to the caller.
"""

from __future__ import annotations

from collections.abc import Mapping

from ev_planner.config.recommend import RecommendConfig
from ev_planner.config.settings import PlannerSettings
from ev_planner.engine.catalog import StationCatalog, passes_filters
from ev_planner.engine.cost import estimate_charging_cost
from ev_planner.engine.scoring import rank_scores, score_stations
from ev_planner.errors import ValidationError
from ev_planner.models.results import CostEstimate, ReasonFact, Recommendation, ScoreResult
from ev_planner.models.station import GeoPoint, Station, StationFilters
from ev_planner.models.user import UserContext


def eta_minutes(distance_km: float, speed_kmh: float = 30.0) -> int:
    return round(distance_km / speed_kmh * 60)


def build_reasons(score: ScoreResult, station: Station, config: RecommendConfig | None = None) -> list[ReasonFact]:
    """Threshold rules → reason facts, strongest first."""
    cfg = config or RecommendConfig()
    facts: list[ReasonFact] = []

    if score.distance_km < cfg.near_distance_km:
        facts.append(ReasonFact(type="distance", value=round(score.distance_km, 1), unit="km"))
    if score.fast_available > 0:
        facts.append(ReasonFact(type="fast_chargers", value=score.fast_available, unit="chargers"))
    if station.usage.avg_wait_minutes < cfg.low_wait_minutes:
        facts.append(ReasonFact(type="low_wait", value=station.usage.avg_wait_minutes, unit="min"))
    if len(station.usage.amenities) > cfg.many_amenities:
        facts.append(ReasonFact(type="amenities", value=len(station.usage.amenities), unit="services"))

    if not facts:
        facts.append(ReasonFact(type="availability", value=score.available_chargers, unit="chargers"))
    return facts


def _plural(n: int, word: str) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {word}s"


def render_reason(fact: ReasonFact, distance_km: float, config: RecommendConfig | None = None) -> str:
    cfg = config or RecommendConfig()
    if fact.type == "distance":
        return f"Within {cfg.near_distance_km:g} km ({fact.value:g} km away)"
    if fact.type == "fast_chargers":
        return f"{_plural(int(fact.value), 'fast charger')} available"
    if fact.type == "low_wait":
        return f"Short wait (about {fact.value:g} min)"
    if fact.type == "amenities":
        return f"{int(fact.value)} services on site"
    return f"{_plural(int(fact.value), 'charger')} available, {distance_km:.1f} km away"


def render_reasoning(facts: list[ReasonFact], distance_km: float, config: RecommendConfig | None = None) -> str:
    cfg = config or RecommendConfig()
    parts = [render_reason(f, distance_km, cfg) for f in facts[: cfg.max_reasons]]
    return ". ".join(parts) + "."


def assemble_recommendations(
    scored: list[ScoreResult],
    costs: Mapping[str, CostEstimate | None],
    catalog: StationCatalog,
    limit: int = 3,
    config: RecommendConfig | None = None,
) -> list[Recommendation]:
    """Combine scores and cost estimates into the top ``limit`` records.

    ``costs`` is keyed by station id; a missing or ``None`` entry means the
    station has no charger to estimate against (zero time and cost).
    Total time = ETA + charging time + average wait.
    """
    cfg = config or RecommendConfig()
    out: list[Recommendation] = []

    for score in rank_scores(scored)[:limit]:
        station = catalog.get(score.station_id)
        cost = costs.get(score.station_id)
        eta = eta_minutes(score.distance_km, cfg.urban_speed_kmh)
        charging = cost.time_minutes if cost else 0
        wait = station.usage.avg_wait_minutes
        facts = build_reasons(score, station, cfg)

        out.append(Recommendation(
            station_id=station.id,
            station_name=station.name,
            address=station.address,
            location=station.location,
            score=score.total,
            score_breakdown=score.breakdown,
            reasons=facts,
            reasoning=render_reasoning(facts, score.distance_km, cfg),
            distance_km=round(score.distance_km, 1),
            eta_minutes=eta,
            charging_time_minutes=charging,
            wait_minutes=wait,
            total_time_minutes=eta + charging + wait,
            estimated_cost=cost.final_cost if cost else 0.0,
            currency=cost.currency if cost else "",
            charger_kind=cost.charger_kind if cost else None,
            available_chargers=station.available_chargers,
            amenities=list(station.usage.amenities),
        ))
    return out


def estimate_for_station(station: Station, user: UserContext, settings: PlannerSettings) -> CostEstimate | None:
    """Cost of charging the user to target on the station's best charger.

    A free charger is preferred; with everything busy the best charger on
    site is used so the user still sees what the session would cost.
    """
    charger = station.best_available_charger() or station.best_charger()
    if charger is None:
        return None
    return estimate_charging_cost(
        user.battery_percent,
        user.target_percent,
        user.battery_capacity_kwh,
        charger.kind,
        user.tier,
        settings.pricing,
        charger_power_kw=charger.power_kw,
    )


def recommend_stations(
    catalog: StationCatalog,
    location: GeoPoint,
    user: UserContext,
    settings: PlannerSettings | None = None,
    limit: int | None = None,
    filters: StationFilters | None = None,
) -> list[Recommendation]:
    """Score the catalog for ``user`` at ``location`` and return the top K."""
    settings = settings or PlannerSettings()
    if limit is None:
        limit = settings.scoring.top_k
    elif limit < 0:
        raise ValidationError("limit", f"must not be negative, got {limit}")

    stations = list(catalog)
    if filters is not None:
        stations = [s for s in stations if passes_filters(s, filters)]

    top = score_stations(stations, location, user.preferences, settings.scoring, limit=limit)
    costs = {s.station_id: estimate_for_station(catalog.get(s.station_id), user, settings) for s in top}
    return assemble_recommendations(top, costs, catalog, limit, settings.recommend)
