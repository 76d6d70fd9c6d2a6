"""FastAPI server — HTTP boundary for the EV charge planner.

Run with:
    uvicorn ev_planner.api.server:app --reload --port 8000

Or:
    python -m ev_planner.api.server

Endpoints:
    GET  /stations/nearby               — catalog search around a point
    GET  /stations/{id}                 — one station record
    GET  /stations/{id}/availability    — live counts, wait estimate, peak check
    POST /recommend                     — top-K scored stations with cost and reasons
    POST /cost/estimate                 — charging session cost
    POST /route                         — road distance / time / battery estimate
    POST /trips/plan                    — charging stops for a trip + summary
    POST /trips                         — save a trip for a user
    GET  /trips/{user_id}               — a user's saved trips, newest first
    POST /catalog/reload                — re-read EV_PLANNER_CATALOG and swap it in
"""

from __future__ import annotations

import logging
import os
from datetime import datetime
from typing import Any

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ev_planner.config.pricing import ChargerKind, UserTier
from ev_planner.config.settings import PlannerSettings
from ev_planner.engine.catalog import CatalogHolder, find_nearby_stations, load_catalog, station_availability
from ev_planner.engine.cost import estimate_charging_cost
from ev_planner.engine.planner import plan_trip_charging
from ev_planner.engine.recommend import recommend_stations
from ev_planner.engine.routing import estimate_route
from ev_planner.errors import NotFoundError, ValidationError
from ev_planner.models.results import CostEstimate, NearbyStation, Recommendation, RouteEstimate, TripPlan
from ev_planner.models.station import GeoPoint, Station, StationFilters
from ev_planner.models.user import Preferences, UserContext
from ev_planner.api.narrative import generate_recommendation_narrative, generate_trip_narrative, summarize_trip
from ev_planner.api.store import SavedTrip, TripStore

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════
# App setup
# ═══════════════════════════════════════════════════════════════════════════

app = FastAPI(
    title="EV Charge Planner API",
    version="1.0",
    description=(
        "Charging station recommendations, charging cost estimates and "
        "trip charging-stop planning over a catalog of stations."
    ),
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

SETTINGS = PlannerSettings()
CATALOG = CatalogHolder(load_catalog(os.getenv("EV_PLANNER_CATALOG")))
TRIPS = TripStore()


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError):
    logger.info("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content={"error": exc.message, "field": exc.field})


@app.exception_handler(NotFoundError)
async def _not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"error": str(exc), "station_id": exc.station_id})


# ═══════════════════════════════════════════════════════════════════════════
# Request / response models
# ═══════════════════════════════════════════════════════════════════════════

class RecommendRequest(BaseModel):
    """Request body for /recommend."""
    location: GeoPoint
    user: UserContext
    max_results: int | None = Field(default=None, ge=1, le=20, description="Defaults to the configured top K")
    filters: StationFilters | None = None


class RecommendResponse(BaseModel):
    """Response from /recommend."""
    recommendations: list[Recommendation]
    narrative: str = ""


class CostRequest(BaseModel):
    """Request body for /cost/estimate. Range checks happen in the estimator."""
    from_percent: float
    to_percent: float
    battery_capacity_kwh: float = 60.0
    charger_kind: str = Field(default="fast", description="'fast' or 'slow'")
    tier: str = Field(default="individual", description="individual | premium | fleet | business")
    charger_power_kw: float | None = None


class RouteRequest(BaseModel):
    """Request body for /route."""
    origin: GeoPoint
    destination: GeoPoint
    departure_hour: int | None = Field(default=None, description="0-23; omit for no traffic adjustment")
    use_current_time: bool = Field(default=False, description="Use the server's current hour when no departure_hour")
    battery_percent: float | None = Field(default=None, ge=0, le=100)
    vehicle_range_km: float | None = Field(default=None, gt=0)


class TripPlanRequest(BaseModel):
    """Request body for /trips/plan. Origin and destination are checked by the planner."""
    origin: dict[str, Any] | None = None
    destination: dict[str, Any] | None = None
    battery_percent: float = 50.0
    vehicle_range_km: float = 400.0
    battery_capacity_kwh: float = 60.0
    tier: UserTier = "individual"
    preferences: Preferences = Field(default_factory=Preferences)
    departure_hour: int | None = Field(default=None, description="0-23; omit for no traffic adjustment")
    use_current_time: bool = False


class TripPlanResponse(BaseModel):
    """Response from /trips/plan."""
    plan: TripPlan
    summary: str
    narrative: str


class SaveTripRequest(BaseModel):
    """Request body for POST /trips."""
    user_id: str = Field(min_length=1)
    origin: GeoPoint
    destination: GeoPoint
    plan: TripPlan | None = None


# ═══════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════

def _departure_hour(hour: int | None, use_current_time: bool) -> int | None:
    if hour is None and use_current_time:
        return datetime.now().hour
    return hour


# ═══════════════════════════════════════════════════════════════════════════
# Endpoints
# ═══════════════════════════════════════════════════════════════════════════

@app.get("/health")
def health_check():
    """Health check for deployment platforms."""
    return {"status": "ok", "stations": len(CATALOG.snapshot())}


@app.get("/")
def root():
    """API root — name, version and a pointer to the docs."""
    return {
        "name": "EV Charge Planner API",
        "version": "1.0",
        "docs": "GET /docs (interactive Swagger UI)",
        "description": "Recommend charging stations, estimate charging cost and plan trip charging stops.",
    }


@app.get("/stations/nearby", response_model=list[NearbyStation])
def stations_nearby(
    lat: float = Query(ge=-90, le=90),
    lng: float = Query(ge=-180, le=180),
    radius_km: float = Query(default=10.0, description="Search radius; must be positive"),
    only_available: bool = False,
    charger_kind: ChargerKind | None = None,
    min_available: int = Query(default=0, ge=0),
    amenities: list[str] | None = Query(default=None),
    limit: int = Query(default=5, ge=1, le=50),
    dest_lat: float | None = Query(default=None, ge=-90, le=90),
    dest_lng: float | None = Query(default=None, ge=-180, le=180),
):
    """Stations around (lat, lng), nearest first.

    Pass ``dest_lat``/``dest_lng`` to keep only stations along the route
    from (lat, lng) to the destination, ordered by distance from the start.
    """
    location = GeoPoint(lat=lat, lng=lng)
    along = None
    if dest_lat is not None and dest_lng is not None:
        along = (location, GeoPoint(lat=dest_lat, lng=dest_lng))
    filters = StationFilters(
        only_available=only_available,
        charger_kind=charger_kind,
        min_available=min_available,
        amenities=amenities or [],
    )
    return find_nearby_stations(
        CATALOG.snapshot(), location, radius_km, filters, limit,
        along_route=along, max_detour_pct=SETTINGS.trip.max_detour_pct,
    )


@app.get("/stations/{station_id}", response_model=Station)
def get_station(station_id: str):
    return CATALOG.snapshot().get(station_id)


@app.get("/stations/{station_id}/availability")
def get_availability(
    station_id: str,
    clock: str | None = Query(default=None, description="Local time as HH:MM for the peak-hour check"),
):
    """Charger counts by status, queue-based wait estimate and advice."""
    station = CATALOG.snapshot().get(station_id)
    return station_availability(station, clock)


@app.post("/recommend", response_model=RecommendResponse)
def recommend(req: RecommendRequest):
    """Top stations for the user at ``location``, best first.

    Each record carries the score breakdown, ETA, charging time, wait,
    estimated cost and short reasoning.
    """
    recs = recommend_stations(
        CATALOG.snapshot(), req.location, req.user, SETTINGS,
        limit=req.max_results, filters=req.filters,
    )
    return RecommendResponse(recommendations=recs, narrative=generate_recommendation_narrative(recs))


@app.post("/cost/estimate", response_model=CostEstimate)
def cost_estimate(req: CostRequest):
    return estimate_charging_cost(
        req.from_percent,
        req.to_percent,
        req.battery_capacity_kwh,
        req.charger_kind,
        req.tier,
        SETTINGS.pricing,
        charger_power_kw=req.charger_power_kw,
    )


@app.post("/route", response_model=RouteEstimate)
def route(req: RouteRequest):
    return estimate_route(
        req.origin,
        req.destination,
        departure_hour=_departure_hour(req.departure_hour, req.use_current_time),
        battery_percent=req.battery_percent,
        vehicle_range_km=req.vehicle_range_km,
        config=SETTINGS.route,
    )


@app.post("/trips/plan", response_model=TripPlanResponse)
def trips_plan(req: TripPlanRequest):
    """Plan charging stops between origin and destination.

    Returns the structured plan plus a one-line summary and a multi-line
    itinerary.  An infeasible trip still returns 200 with
    ``confidence="low"`` or ``status="fallback"``.
    """
    plan = plan_trip_charging(
        req.origin,
        req.destination,
        req.battery_percent,
        req.vehicle_range_km,
        req.preferences,
        CATALOG.snapshot(),
        battery_capacity_kwh=req.battery_capacity_kwh,
        tier=req.tier,
        departure_hour=_departure_hour(req.departure_hour, req.use_current_time),
        settings=SETTINGS,
    )
    logger.info(
        "Planned %.1f km trip: status=%s stops=%d confidence=%s",
        plan.total_distance_km, plan.status, len(plan.stops), plan.confidence,
    )
    return TripPlanResponse(plan=plan, summary=summarize_trip(plan), narrative=generate_trip_narrative(plan))


@app.post("/trips", response_model=SavedTrip, status_code=201)
def save_trip(req: SaveTripRequest):
    return TRIPS.save(req.user_id, req.origin, req.destination, req.plan)


@app.get("/trips/{user_id}", response_model=list[SavedTrip])
def list_trips(user_id: str, limit: int = Query(default=10, ge=1, le=10)):
    """A user's saved trips, newest first."""
    return TRIPS.list_for_user(user_id, limit)


@app.post("/catalog/reload")
def reload_catalog():
    """Re-read the configured catalog file and swap it in atomically.

    The file is always ``EV_PLANNER_CATALOG`` (bundled sample when unset);
    callers cannot name another path.
    """
    catalog = load_catalog(os.getenv("EV_PLANNER_CATALOG"))
    CATALOG.replace(catalog)
    return {"status": "ok", "stations": len(catalog)}


# ═══════════════════════════════════════════════════════════════════════════
# CLI entry point
# ═══════════════════════════════════════════════════════════════════════════

def main():
    """Run the API server."""
    import uvicorn
    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "ev_planner.api.server:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "false").lower() == "true",
    )


if __name__ == "__main__":
    main()
