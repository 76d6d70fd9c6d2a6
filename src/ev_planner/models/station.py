"""Station catalog records.

Everything here is frozen: a catalog snapshot is read-only for the whole
request.  Charger status changes arrive as a *new* catalog from the
external feed, never as in-place edits.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ev_planner.config.pricing import ChargerKind

ChargerStatus = Literal["available", "occupied", "maintenance"]


class GeoPoint(BaseModel):
    """A WGS-84 coordinate, optionally labelled."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(ge=-90.0, le=90.0, description="Latitude (decimal degrees)")
    lng: float = Field(ge=-180.0, le=180.0, description="Longitude (decimal degrees)")
    name: str | None = Field(default=None, description="Optional display label")


class Charger(BaseModel):
    """One charging point at a station."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: ChargerKind = Field(description="'fast' (DC) or 'slow' (AC)")
    power_kw: float = Field(gt=0, description="Rated output power (kW)")
    connector: str = Field(default="CCS2", description="Connector standard, e.g. CCS2 or Type2")
    status: ChargerStatus = Field(default="available")

    @property
    def is_available(self) -> bool:
        return self.status == "available"


class UsageStats(BaseModel):
    """Historic and live usage signals for one station."""

    model_config = ConfigDict(frozen=True)

    peak_hours: tuple[str, ...] = Field(default=(), description="Ranges like '07:00-09:00'")
    avg_wait_minutes: float = Field(default=0.0, ge=0, description="Average queue wait (minutes)")
    amenities: tuple[str, ...] = Field(default=(), description="Nearby amenity tags")
    current_queue: int = Field(default=0, ge=0, description="Vehicles waiting right now")
    trend: str = Field(default="stable", description="Queue trend: rising / stable / falling")


class Station(BaseModel):
    """A charging station with its chargers and usage stats."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    address: str = ""
    location: GeoPoint
    chargers: tuple[Charger, ...] = ()
    usage: UsageStats = Field(default_factory=UsageStats)

    @property
    def available_chargers(self) -> list[Charger]:
        return [c for c in self.chargers if c.is_available]

    @property
    def fast_available(self) -> int:
        return sum(1 for c in self.chargers if c.kind == "fast" and c.is_available)

    @property
    def slow_available(self) -> int:
        return sum(1 for c in self.chargers if c.kind == "slow" and c.is_available)

    def best_available_charger(self) -> Charger | None:
        """Fast before slow, then the highest power.  ``None`` if all are busy."""
        available = self.available_chargers
        if not available:
            return None
        return max(available, key=lambda c: (c.kind == "fast", c.power_kw))

    def best_charger(self) -> Charger | None:
        """Like ``best_available_charger`` but ignoring status."""
        if not self.chargers:
            return None
        return max(self.chargers, key=lambda c: (c.kind == "fast", c.power_kw))


class StationFilters(BaseModel):
    """Optional narrowing for catalog searches."""

    only_available: bool = Field(default=False, description="Drop stations with no free charger")
    charger_kind: ChargerKind | None = Field(
        default=None,
        description="Keep stations with at least one free charger of this kind",
    )
    min_available: int = Field(default=0, ge=0, description="Minimum free chargers")
    amenities: list[str] = Field(
        default_factory=list,
        description="Every tag must match a station amenity (case-insensitive substring)",
    )
