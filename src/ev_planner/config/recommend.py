"""Recommendation assembly thresholds."""

from pydantic import BaseModel, Field


class RecommendConfig(BaseModel):
    """ETA assumption and the threshold rules that produce reason facts."""

    urban_speed_kmh: float = Field(default=30.0, gt=0, description="Average city speed for ETA")
    near_distance_km: float = Field(default=3.0, gt=0, description="'Close by' reason below this distance")
    low_wait_minutes: float = Field(default=10.0, ge=0, description="'Short wait' reason below this wait")
    many_amenities: int = Field(default=3, ge=0, description="'Many services' reason above this count")
    max_reasons: int = Field(default=2, ge=1, description="Reasons rendered into the reasoning string")
