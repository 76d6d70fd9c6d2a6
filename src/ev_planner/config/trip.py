"""Trip planner safety margins, detour tolerance and driving assumptions."""

from pydantic import BaseModel, Field, model_validator


class TripConfig(BaseModel):
    """Thresholds for the charging-stop planner.

    Battery figures are state-of-charge percentages.  Distances are
    great-circle km; there is no road graph behind them.
    """

    range_safety_factor: float = Field(
        default=1.2, ge=1.0,
        description="Trip needs no charging when current range ≥ distance × this factor",
    )
    max_detour_pct: float = Field(
        default=30.0, gt=0,
        description="A station is 'along the route' when the detour is at most this % of the direct distance",
    )
    mid_trip_floor_pct: float = Field(
        default=20.0, ge=0, le=100,
        description="Never plan to reach an intermediate station below this SoC",
    )
    arrival_floor_pct: float = Field(
        default=15.0, ge=0, le=100,
        description="Minimum SoC projected at the destination",
    )
    charge_buffer_pct: float = Field(
        default=20.0, ge=0, le=100,
        description="Extra SoC added on top of what the remaining leg needs",
    )
    max_charge_pct: float = Field(
        default=80.0, gt=0, le=100,
        description="Normal charge ceiling (fast charging tapers above it)",
    )
    fallback_charge_pct: float = Field(
        default=80.0, gt=0, le=100,
        description="Target SoC for the single fallback stop",
    )
    avg_speed_kmh: float = Field(default=60.0, gt=0, description="Average trip driving speed")

    @model_validator(mode="after")
    def _check_floors(self) -> "TripConfig":
        if self.mid_trip_floor_pct >= self.max_charge_pct:
            raise ValueError("mid_trip_floor_pct must be below max_charge_pct")
        return self


class RouteConfig(BaseModel):
    """Assumptions for the quick point-to-point route estimate."""

    highway_threshold_km: float = Field(
        default=50.0, gt=0,
        description="Straight-line distance above which the highway road factor applies",
    )
    highway_road_factor: float = Field(default=1.2, ge=1.0, description="Road km per straight km on highways")
    urban_road_factor: float = Field(default=1.35, ge=1.0, description="Road km per straight km in cities")
    highway_speed_threshold_km: float = Field(
        default=100.0, gt=0,
        description="Road distance above which the highway speed applies",
    )
    highway_speed_kmh: float = Field(default=80.0, gt=0)
    urban_speed_kmh: float = Field(default=45.0, gt=0)
    battery_safety_margin_pct: float = Field(
        default=10.0, ge=0, le=100,
        description="SoC required at arrival for the route to count as completable",
    )
    charge_before_fraction: float = Field(
        default=0.8, gt=0, le=1.0,
        description="Share of current range usable before a charge is recommended",
    )
