"""Configuration models — every tunable threshold, weight and tariff."""

from ev_planner.config.scoring import ScoringConfig, ScoringWeights, Urgency
from ev_planner.config.pricing import ChargerKind, PricingConfig, UserTier
from ev_planner.config.trip import RouteConfig, TripConfig
from ev_planner.config.recommend import RecommendConfig
from ev_planner.config.settings import PlannerSettings

__all__ = [
    "ChargerKind",
    "PlannerSettings",
    "PricingConfig",
    "RecommendConfig",
    "RouteConfig",
    "ScoringConfig",
    "ScoringWeights",
    "TripConfig",
    "Urgency",
    "UserTier",
]
