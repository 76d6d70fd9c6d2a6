"""Station scorer — weighted multi-factor suitability (urgency-conditioned).

Five components, each clamped to [0, 100]:

  distance      max(0, 100 − km × 10)             → 0 at 10 km
  availability  free / total × 100                 → 0 for no chargers
  wait          max(0, 100 − avg_wait_min × 3)     → 0 at ~33 min
  charger type  100 fast wanted & free, 70 slow free, else 30
  amenity       matched / requested × 100          → 0 if none requested

The total is the weighted sum for the request's urgency, rounded half-up.
A station with nothing free still scores; excluding it is a caller filter.
"""

from __future__ import annotations

import math
from collections.abc import Iterable

from ev_planner.config.scoring import ScoringConfig
from ev_planner.engine.catalog import amenity_matches
from ev_planner.engine.geo import distance_km
from ev_planner.models.results import ScoreBreakdown, ScoreResult
from ev_planner.models.station import GeoPoint, Station
from ev_planner.models.user import Preferences


def _clamp(value: float) -> float:
    return min(100.0, max(0.0, value))


def round_half_up(value: float) -> int:
    """Integer rounding with .5 going up (``round`` would go to even)."""
    return int(math.floor(value + 0.5))


def score_station(
    station: Station,
    user_location: GeoPoint,
    preferences: Preferences | None = None,
    config: ScoringConfig | None = None,
) -> ScoreResult:
    """Score one station for one user location."""
    prefs = preferences or Preferences()
    cfg = config or ScoringConfig()

    dist = distance_km(user_location, station.location)
    total_chargers = len(station.chargers)
    available = len(station.available_chargers)
    fast_available = station.fast_available
    slow_available = station.slow_available

    if prefs.prefer_fast and fast_available > 0:
        charger_type = cfg.fast_match_score
    elif slow_available > 0:
        charger_type = cfg.slow_available_score
    else:
        charger_type = cfg.no_match_score

    amenity = 0.0
    if prefs.amenities:
        matched = sum(1 for tag in prefs.amenities if amenity_matches(station, tag))
        amenity = matched / len(prefs.amenities) * 100.0

    breakdown = ScoreBreakdown(
        distance_score=_clamp(100.0 - dist * cfg.distance_decay_per_km),
        availability_score=_clamp(available / total_chargers * 100.0 if total_chargers else 0.0),
        wait_score=_clamp(100.0 - station.usage.avg_wait_minutes * cfg.wait_decay_per_minute),
        charger_type_score=_clamp(charger_type),
        amenity_score=_clamp(amenity),
    )

    w = cfg.weights_for(prefs.urgency)
    weighted = (
        breakdown.distance_score * w.distance
        + breakdown.availability_score * w.availability
        + breakdown.wait_score * w.wait
        + breakdown.charger_type_score * w.charger_type
        + breakdown.amenity_score * w.amenity
    )

    return ScoreResult(
        station_id=station.id,
        station_name=station.name,
        urgency=prefs.urgency,
        breakdown=breakdown,
        total=round_half_up(weighted),
        distance_km=round(dist, 4),
        available_chargers=available,
        total_chargers=total_chargers,
        fast_available=fast_available,
        slow_available=slow_available,
    )


def rank_scores(results: Iterable[ScoreResult]) -> list[ScoreResult]:
    """Highest total first; ties by nearest, then by station id."""
    return sorted(results, key=lambda r: (-r.total, r.distance_km, r.station_id))


def score_stations(
    stations: Iterable[Station],
    user_location: GeoPoint,
    preferences: Preferences | None = None,
    config: ScoringConfig | None = None,
    limit: int | None = None,
) -> list[ScoreResult]:
    """Score and rank stations.

    ``limit`` trims to the top K; pass ``config.top_k`` for the default
    recommendation size.  ``None`` returns every station.
    """
    cfg = config or ScoringConfig()
    ranked = rank_scores(score_station(s, user_location, preferences, cfg) for s in stations)
    return ranked if limit is None else ranked[:limit]
