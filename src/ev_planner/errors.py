"""Error taxonomy shared by the engine and the API boundary.

Only hard input problems are exceptions.  An infeasible trip is *not* an
error: the planner degrades to a fallback stop or a low-confidence plan.
"""

from __future__ import annotations


class PlannerError(Exception):
    """Base class for every error raised by ``ev_planner``."""


class ValidationError(PlannerError, ValueError):
    """Malformed or missing input.  ``field`` names the offending input."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class NotFoundError(PlannerError, LookupError):
    """A station id is absent from the catalog snapshot."""

    def __init__(self, station_id: str):
        self.station_id = station_id
        super().__init__(f"station {station_id!r} not found")
