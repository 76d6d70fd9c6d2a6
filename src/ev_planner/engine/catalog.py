"""Station catalog — normalisation, lookup, search and availability.

Raw station JSON (as shipped by the station feed) is normalised exactly
once, here, into frozen ``Station`` records.  Core code downstream never
fills defaults or guesses field names.

Raw station shape::

    {"id": "...", "name": "...", "address": "...",
     "location": {"lat": -33.4, "lng": -70.6},
     "chargers": [{"id": "...", "type": "fast", "power": 150,
                   "connector": "CCS2", "status": "available"}],
     "usage_factors": {"peak_hours": ["07:00-09:00"], "avg_wait_time": 8,
                       "nearby_amenities": ["Pronto", "Baños"]}}
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pydantic

from ev_planner.engine.geo import detour, distances_km
from ev_planner.errors import NotFoundError, ValidationError
from ev_planner.models.results import AvailabilitySummary, NearbyStation, StatusCounts
from ev_planner.models.station import GeoPoint, Station, StationFilters, UsageStats

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent.parent / "data" / "stations.json"

_CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


# ═══════════════════════════════════════════════════════════════════════════
# Catalog snapshot
# ═══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StationCatalog:
    """Immutable snapshot of every known station, indexed by id."""

    stations: tuple[Station, ...] = ()
    _index: dict[str, Station] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "stations", tuple(self.stations))
        index: dict[str, Station] = {}
        for station in self.stations:
            if station.id in index:
                raise ValidationError("stations", f"duplicate station id {station.id!r}")
            index[station.id] = station
        object.__setattr__(self, "_index", index)

    def __len__(self) -> int:
        return len(self.stations)

    def __iter__(self):
        return iter(self.stations)

    def __contains__(self, station_id: object) -> bool:
        return station_id in self._index

    def get(self, station_id: str) -> Station:
        """Station by id; raises ``NotFoundError`` when absent."""
        try:
            return self._index[station_id]
        except KeyError:
            raise NotFoundError(station_id) from None

    @classmethod
    def from_records(
        cls,
        records: Iterable[Mapping[str, Any]],
        venues: Mapping[str, Any] | None = None,
        queue_metrics: Mapping[str, Any] | None = None,
    ) -> "StationCatalog":
        """Normalise raw station records into a catalog.

        ``venues`` maps station id → venue info whose available
        ``services`` become extra amenity tags.  ``queue_metrics`` maps
        station id → live queue info that overrides the historic wait.
        """
        venues = venues or {}
        queue_metrics = queue_metrics or {}
        if not isinstance(venues, Mapping):
            raise ValidationError("venues", "must be an object keyed by station id")
        if not isinstance(queue_metrics, Mapping):
            raise ValidationError("queue_density", "must be an object keyed by station id")
        stations = []
        for i, raw in enumerate(records):
            path = f"stations[{i}]"
            if not isinstance(raw, Mapping):
                raise ValidationError(path, "station record must be an object")
            sid = raw.get("id")
            stations.append(
                normalize_station(raw, path, venues.get(sid), queue_metrics.get(sid))
            )
        return cls(tuple(stations))


def normalize_station(
    raw: Mapping[str, Any],
    path: str = "station",
    venue: Mapping[str, Any] | None = None,
    queue: Mapping[str, Any] | None = None,
) -> Station:
    """Turn one raw station record into a ``Station`` (fail fast on bad numbers)."""
    for key in ("id", "name"):
        if not raw.get(key):
            raise ValidationError(f"{path}.{key}", "required")

    location = raw.get("location")
    if not isinstance(location, Mapping):
        raise ValidationError(f"{path}.location", "required")
    lat = _number(location, "lat", f"{path}.location")
    lng = _number(location, "lng", f"{path}.location")

    chargers = []
    for j, ch in enumerate(raw.get("chargers") or []):
        cpath = f"{path}.chargers[{j}]"
        if not isinstance(ch, Mapping):
            raise ValidationError(cpath, "charger record must be an object")
        power_key = "power_kw" if "power_kw" in ch else "power"
        chargers.append({
            "id": str(ch.get("id") or f"{raw['id']}-{j + 1}"),
            "kind": ch.get("kind", ch.get("type")),
            "power_kw": _number(ch, power_key, cpath),
            "connector": ch.get("connector") or "CCS2",
            "status": ch.get("status") or "available",
        })

    usage_raw = raw.get("usage_factors") or raw.get("usage") or {}
    upath = f"{path}.usage_factors"
    if not isinstance(usage_raw, Mapping):
        raise ValidationError(upath, "must be an object")
    wait_key = "avg_wait_minutes" if "avg_wait_minutes" in usage_raw else "avg_wait_time"
    avg_wait = _number(usage_raw, wait_key, upath) if wait_key in usage_raw else 0.0
    amenities = list(usage_raw.get("nearby_amenities") or usage_raw.get("amenities") or [])
    current_queue = 0
    trend = "stable"

    if venue:
        vpath = f"venues.{raw['id']}"
        if not isinstance(venue, Mapping):
            raise ValidationError(vpath, "must be an object")
        services = venue.get("services") or {}
        if not isinstance(services, Mapping):
            raise ValidationError(f"{vpath}.services", "must be an object")
        for name, service in services.items():
            if isinstance(service, Mapping) and service.get("available"):
                tag = name.replace("_", " ")
                if tag.lower() not in {a.lower() for a in amenities}:
                    amenities.append(tag)

    if queue:
        qpath = f"queue_density.{raw['id']}"
        if not isinstance(queue, Mapping):
            raise ValidationError(qpath, "must be an object")
        if "avg_wait_minutes" in queue:
            avg_wait = _number(queue, "avg_wait_minutes", qpath)
        if "current_queue" in queue:
            current_queue = int(_number(queue, "current_queue", qpath))
        trend = str(queue.get("trend") or trend)

    try:
        return Station(
            id=str(raw["id"]),
            name=str(raw["name"]),
            address=str(raw.get("address") or ""),
            location=GeoPoint(lat=lat, lng=lng, name=raw.get("name")),
            chargers=tuple(chargers),
            usage=UsageStats(
                peak_hours=tuple(usage_raw.get("peak_hours") or ()),
                avg_wait_minutes=avg_wait,
                amenities=tuple(amenities),
                current_queue=current_queue,
                trend=trend,
            ),
        )
    except pydantic.ValidationError as exc:
        err = exc.errors()[0]
        loc = ".".join(str(part) for part in err["loc"])
        raise ValidationError(f"{path}.{loc}" if loc else path, err["msg"]) from exc


def _number(raw: Mapping[str, Any], key: str, path: str) -> float:
    value = raw.get(key)
    if value is None:
        raise ValidationError(f"{path}.{key}", "required numeric field is missing")
    # bool is an int subclass; a True power rating is a data bug
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{path}.{key}", f"expected a number, got {value!r}")
    return float(value)


def load_catalog(path: str | Path | None = None) -> StationCatalog:
    """Load a catalog JSON file (bundled sample when ``path`` is None).

    The file holds either a bare list of stations or an object with a
    ``stations`` list plus optional ``venues`` and ``queue_density`` maps.
    """
    path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    except OSError as exc:
        raise ValidationError("path", f"cannot read {path}: {exc.strerror or exc}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ValidationError("path", f"{path} is not valid JSON") from exc

    if isinstance(data, list):
        catalog = StationCatalog.from_records(data)
    elif isinstance(data, Mapping) and isinstance(data.get("stations"), list):
        catalog = StationCatalog.from_records(
            data["stations"],
            venues=data.get("venues"),
            queue_metrics=data.get("queue_density"),
        )
    else:
        raise ValidationError("stations", f"{path} has no station list")

    logger.info("Loaded %d stations from %s", len(catalog), path)
    return catalog


class CatalogHolder:
    """Boundary-side owner of the current snapshot.

    Readers call ``snapshot()`` once per request and work on that object;
    ``replace()`` swaps in a whole new catalog.  Reference assignment is
    atomic, so no reader ever sees a half-updated catalog.
    """

    def __init__(self, catalog: StationCatalog):
        self._catalog = catalog

    def snapshot(self) -> StationCatalog:
        return self._catalog

    def replace(self, catalog: StationCatalog) -> None:
        logger.info("Catalog replaced: %d → %d stations", len(self._catalog), len(catalog))
        self._catalog = catalog


# ═══════════════════════════════════════════════════════════════════════════
# Search
# ═══════════════════════════════════════════════════════════════════════════

def amenity_matches(station: Station, wanted: str) -> bool:
    """Case-insensitive substring match of one wanted tag against the station's."""
    needle = wanted.lower()
    return any(needle in tag.lower() for tag in station.usage.amenities)


def passes_filters(station: Station, filters: StationFilters) -> bool:
    available = len(station.available_chargers)
    if filters.only_available and available == 0:
        return False
    if filters.charger_kind == "fast" and station.fast_available == 0:
        return False
    if filters.charger_kind == "slow" and station.slow_available == 0:
        return False
    if available < filters.min_available:
        return False
    return all(amenity_matches(station, tag) for tag in filters.amenities)


def find_nearby_stations(
    catalog: StationCatalog,
    location: GeoPoint,
    radius_km: float = 10.0,
    filters: StationFilters | None = None,
    limit: int | None = 5,
    along_route: tuple[GeoPoint, GeoPoint] | None = None,
    max_detour_pct: float = 30.0,
) -> list[NearbyStation]:
    """Stations within ``radius_km`` of ``location`` that pass ``filters``.

    Results are nearest-first.  With ``along_route=(origin, destination)``
    only stations within the detour tolerance are kept, ordered by distance
    from the route origin instead.
    """
    if radius_km <= 0:
        raise ValidationError("radius_km", "must be positive")
    filters = filters or StationFilters()

    stations = list(catalog.stations)
    dists = distances_km(location, [s.location for s in stations])

    hits: list[NearbyStation] = []
    for station, dist in zip(stations, dists):
        if dist > radius_km or not passes_filters(station, filters):
            continue
        route = None
        if along_route is not None:
            route = detour(along_route[0], along_route[1], station.location)
            if route.detour_pct > max_detour_pct:
                continue
        hits.append(NearbyStation(
            station=station,
            distance_km=round(float(dist), 4),
            available=len(station.available_chargers),
            fast_available=station.fast_available,
            route=route,
        ))

    if along_route is not None:
        hits.sort(key=lambda h: (h.route.distance_from_origin_km, h.station.id))
    else:
        hits.sort(key=lambda h: (h.distance_km, h.station.id))

    return hits if limit is None else hits[:limit]


# ═══════════════════════════════════════════════════════════════════════════
# Availability
# ═══════════════════════════════════════════════════════════════════════════

FAST_SESSION_MINUTES = 25
SLOW_SESSION_MINUTES = 45


def _wait_advice(wait_minutes: int, available: int) -> str:
    if available > 0:
        return "Chargers are free now; you can go straight away."
    if wait_minutes <= 10:
        return "Short wait, worth queueing."
    if wait_minutes <= 20:
        return "Moderate wait. Consider other nearby stations."
    return "Long wait. We recommend looking for another station."


def is_peak_time(peak_hours: Iterable[str], clock: str) -> bool:
    """True when ``clock`` ("HH:MM") falls inside any "HH:MM-HH:MM" range.

    Ranges whose end precedes their start wrap past midnight.
    """
    if not _CLOCK_RE.match(clock):
        raise ValidationError("clock", f"expected HH:MM, got {clock!r}")
    for span in peak_hours:
        start, sep, end = span.partition("-")
        if not sep:
            continue
        start, end = start.strip(), end.strip()
        if start <= end:
            if start <= clock <= end:
                return True
        elif clock >= start or clock <= end:
            return True
    return False


def station_availability(station: Station, clock: str | None = None) -> AvailabilitySummary:
    """Status counts per charger kind plus an estimated wait.

    The wait is only estimated when nothing is free and a queue exists:
    queue × average session length / number of chargers.
    """
    counts = {"fast": StatusCounts(), "slow": StatusCounts()}
    for ch in station.chargers:
        c = counts[ch.kind]
        c.total += 1
        setattr(c, ch.status, getattr(c, ch.status) + 1)

    total_available = counts["fast"].available + counts["slow"].available
    queue = station.usage.current_queue

    wait = 0
    if total_available == 0 and queue > 0 and station.chargers:
        session = FAST_SESSION_MINUTES if counts["fast"].total > 0 else SLOW_SESSION_MINUTES
        wait = round(queue * session / len(station.chargers))

    return AvailabilitySummary(
        station_id=station.id,
        station_name=station.name,
        total_chargers=len(station.chargers),
        total_available=total_available,
        is_available=total_available > 0,
        fast=counts["fast"],
        slow=counts["slow"],
        queue_length=queue,
        trend=station.usage.trend,
        estimated_wait_minutes=wait,
        wait_advice=_wait_advice(wait, total_available),
        peak_hours=list(station.usage.peak_hours),
        is_peak=is_peak_time(station.usage.peak_hours, clock) if clock is not None else None,
    )
