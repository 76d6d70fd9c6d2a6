"""Top-level settings — bundles every tunable section."""

from pydantic import BaseModel, Field

from ev_planner.config.pricing import PricingConfig
from ev_planner.config.recommend import RecommendConfig
from ev_planner.config.scoring import ScoringConfig
from ev_planner.config.trip import RouteConfig, TripConfig


class PlannerSettings(BaseModel):
    """Complete configuration for one planner deployment."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    trip: TripConfig = Field(default_factory=TripConfig)
    route: RouteConfig = Field(default_factory=RouteConfig)
    recommend: RecommendConfig = Field(default_factory=RecommendConfig)
