"""Station scoring weights — one row per urgency level."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator

Urgency = Literal["low", "normal", "high"]


class ScoringWeights(BaseModel):
    """Weight of each score component.  A row must sum to 1.0."""

    distance: float = Field(ge=0, le=1.0, description="Weight of proximity")
    availability: float = Field(ge=0, le=1.0, description="Weight of free-charger ratio")
    wait: float = Field(ge=0, le=1.0, description="Weight of average queue wait")
    charger_type: float = Field(ge=0, le=1.0, description="Weight of charger kind match")
    amenity: float = Field(ge=0, le=1.0, description="Weight of requested amenities matched")

    @model_validator(mode="after")
    def _check_sum(self) -> "ScoringWeights":
        if abs(self.total() - 1.0) > 1e-9:
            raise ValueError(f"weights must sum to 1.0, got {self.total():.6f}")
        return self

    def total(self) -> float:
        return self.distance + self.availability + self.wait + self.charger_type + self.amenity


def _default_weights() -> dict[str, ScoringWeights]:
    return {
        "high": ScoringWeights(distance=0.35, availability=0.35, wait=0.20, charger_type=0.10, amenity=0.00),
        "normal": ScoringWeights(distance=0.25, availability=0.30, wait=0.20, charger_type=0.15, amenity=0.10),
        "low": ScoringWeights(distance=0.15, availability=0.20, wait=0.15, charger_type=0.20, amenity=0.30),
    }


class ScoringConfig(BaseModel):
    """Scorer tunables.  Component curves are linear decays clamped to [0, 100]."""

    weights: dict[Urgency, ScoringWeights] = Field(default_factory=_default_weights)
    distance_decay_per_km: float = Field(
        default=10.0, gt=0,
        description="Points lost per km of distance (10 → score reaches 0 at 10 km)",
    )
    wait_decay_per_minute: float = Field(
        default=3.0, gt=0,
        description="Points lost per minute of average wait (3 → 0 at ~33 min)",
    )
    fast_match_score: float = Field(default=100.0, ge=0, le=100, description="Fast wanted and available")
    slow_available_score: float = Field(default=70.0, ge=0, le=100, description="A slow charger is free")
    no_match_score: float = Field(default=30.0, ge=0, le=100, description="Nothing suitable free")
    top_k: int = Field(default=3, ge=1, description="Stations returned by default")

    @model_validator(mode="after")
    def _check_levels(self) -> "ScoringConfig":
        missing = {"low", "normal", "high"} - set(self.weights)
        if missing:
            raise ValueError(f"missing weight rows for urgency: {sorted(missing)}")
        return self

    def weights_for(self, urgency: Urgency) -> ScoringWeights:
        return self.weights[urgency]
