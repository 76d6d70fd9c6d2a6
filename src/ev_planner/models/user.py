"""Request-scoped driver context."""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator

from ev_planner.config.pricing import UserTier
from ev_planner.config.scoring import Urgency


class Preferences(BaseModel):
    """What the driver cares about for this request."""

    urgency: Urgency = Field(default="normal", description="Time pressure; reweights scoring")
    prefer_fast: bool = Field(default=False, description="Prefer DC fast chargers")
    amenities: list[str] = Field(
        default_factory=list,
        description="Wanted amenity tags, matched case-insensitively as substrings",
    )


class UserContext(BaseModel):
    """Battery state, vehicle and account for one request."""

    battery_percent: float = Field(ge=0, le=100, description="Current state of charge")
    target_percent: float = Field(default=80.0, gt=0, le=100, description="Desired SoC after charging")
    vehicle_range_km: float = Field(default=400.0, gt=0, description="Range on a full battery (km)")
    battery_capacity_kwh: float = Field(default=60.0, gt=0, description="Usable battery capacity (kWh)")
    tier: UserTier = Field(default="individual", description="Account tier; sets the discount")
    preferences: Preferences = Field(default_factory=Preferences)

    @model_validator(mode="after")
    def _check_target(self) -> "UserContext":
        if self.target_percent <= self.battery_percent:
            raise ValueError("target_percent must be greater than battery_percent")
        return self

    @property
    def current_range_km(self) -> float:
        return self.battery_percent / 100.0 * self.vehicle_range_km
