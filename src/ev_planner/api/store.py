"""In-memory trip store for the API boundary.

Saved trips live for the lifetime of the process.  Each user keeps at
most ``max_per_user`` trips; saving past that drops the oldest.  Listing
returns a user's most recent trips first.
"""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from ev_planner.models.results import TripPlan
from ev_planner.models.station import GeoPoint

logger = logging.getLogger(__name__)

MAX_TRIPS_PER_USER = 10


class SavedTrip(BaseModel):
    """A trip a user chose to keep."""

    trip_id: str
    user_id: str
    origin: GeoPoint
    destination: GeoPoint
    plan: TripPlan | None = None
    status: str = "planned"
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TripStore:
    """Thread-safe per-user trip lists; FastAPI runs sync endpoints in a pool."""

    def __init__(self, max_per_user: int = MAX_TRIPS_PER_USER):
        if max_per_user < 1:
            raise ValueError(f"max_per_user must be >= 1, got {max_per_user}")
        self.max_per_user = max_per_user
        # oldest first within each user
        self._trips: dict[str, list[SavedTrip]] = {}
        self._lock = threading.Lock()

    def save(
        self,
        user_id: str,
        origin: GeoPoint,
        destination: GeoPoint,
        plan: TripPlan | None = None,
    ) -> SavedTrip:
        trip = SavedTrip(
            trip_id=str(uuid.uuid4()),
            user_id=user_id,
            origin=origin,
            destination=destination,
            plan=plan,
        )
        with self._lock:
            mine = self._trips.setdefault(user_id, [])
            mine.append(trip)
            dropped = len(mine) - self.max_per_user
            if dropped > 0:
                del mine[:dropped]
        logger.info("Saved trip %s for user %s", trip.trip_id, user_id)
        return trip

    def list_for_user(self, user_id: str, limit: int = MAX_TRIPS_PER_USER) -> list[SavedTrip]:
        with self._lock:
            mine = list(self._trips.get(user_id, ()))
        # insertion order breaks created_at ties
        mine.reverse()
        mine.sort(key=lambda t: t.created_at, reverse=True)
        return mine[:limit]

    def clear(self) -> None:
        with self._lock:
            self._trips.clear()

    def __len__(self) -> int:
        with self._lock:
            return sum(len(trips) for trips in self._trips.values())
