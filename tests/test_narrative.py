"""Tests for plain-English rendering and the in-memory trip store."""

from __future__ import annotations

from ev_planner.api.narrative import (
    format_currency,
    format_duration,
    generate_recommendation_narrative,
    generate_trip_narrative,
    summarize_trip,
)
from ev_planner.api.store import TripStore
from ev_planner.engine.catalog import StationCatalog
from ev_planner.engine.planner import plan_trip_charging
from ev_planner.engine.recommend import recommend_stations
from ev_planner.models import UserContext

from conftest import north


class TestFormatting:
    def test_duration(self):
        assert format_duration(45) == "45 min"
        assert format_duration(60) == "1h"
        assert format_duration(135) == "2h 15min"

    def test_pesos_use_dot_grouping(self):
        assert format_currency(10125.0) == "$10.125 CLP"
        assert format_currency(900) == "$900 CLP"

    def test_other_currency_keeps_cents(self):
        assert format_currency(1234.5, "USD") == "1,234.50 USD"


class TestTripNarrative:
    def test_no_charge_summary(self, corridor_catalog):
        plan = plan_trip_charging(north(0), north(120), 90, 500, None, corridor_catalog)
        assert "without charging" in summarize_trip(plan)
        assert "Stop 1" not in generate_trip_narrative(plan)

    def test_single_stop(self, route_catalog):
        plan = plan_trip_charging(north(0), north(250), 15, 400, None, route_catalog)
        summary = summarize_trip(plan)
        assert summary.startswith("250 km trip with 1 charging stop at Station A-030")
        text = generate_trip_narrative(plan)
        assert "Stop 1: Station A-030" in text
        assert "% → 75%" in text
        assert "Expected battery on arrival: 20%" in text

    def test_multi_stop(self, corridor_catalog):
        plan = plan_trip_charging(north(0), north(600), 50, 300, None, corridor_catalog)
        assert f"{len(plan.stops)} charging stops" in summarize_trip(plan)

    def test_no_station_available(self):
        plan = plan_trip_charging(north(0), north(250), 15, 400, None, StationCatalog())
        assert "no station with a free charger" in summarize_trip(plan)

    def test_traffic_shown_only_when_adjusted(self, route_catalog):
        plan = plan_trip_charging(north(0), north(250), 15, 400, None, route_catalog, departure_hour=8)
        assert "traffic ×1.4" in generate_trip_narrative(plan)


class TestRecommendationNarrative:
    def test_numbered_list(self, city_catalog, origin):
        recs = recommend_stations(city_catalog, origin, UserContext(battery_percent=20))
        lines = generate_recommendation_narrative(recs).splitlines()
        assert len(lines) == 3
        assert lines[0].startswith(f"1. {recs[0].station_name} (score {recs[0].score}/100)")

    def test_empty(self):
        assert generate_recommendation_narrative([]) == "No charging stations match your search."


class TestTripStore:
    def test_newest_first(self):
        store = TripStore()
        for km in (10, 20, 30):
            store.save("u1", north(0), north(km))
        store.save("u2", north(0), north(99))
        trips = store.list_for_user("u1")
        assert [round(t.destination.lat * 111.19) for t in trips] == [30, 20, 10]
        assert all(t.user_id == "u1" for t in trips)

    def test_limit(self):
        store = TripStore()
        for _ in range(12):
            store.save("u1", north(0), north(5))
        assert len(store.list_for_user("u1")) == 10
        assert len(store.list_for_user("u1", limit=3)) == 3

    def test_oldest_dropped_past_cap(self):
        store = TripStore(max_per_user=3)
        for km in (10, 20, 30, 40, 50):
            store.save("u1", north(0), north(km))
        store.save("u2", north(0), north(99))
        trips = store.list_for_user("u1")
        assert [round(t.destination.lat * 111.19) for t in trips] == [50, 40, 30]
        assert len(store) == 4

    def test_default_cap_matches_listing_limit(self):
        store = TripStore()
        for _ in range(15):
            store.save("u1", north(0), north(5))
        assert len(store) == 10

    def test_clear(self):
        store = TripStore()
        store.save("u1", north(0), north(5))
        store.clear()
        assert len(store) == 0
        assert store.list_for_user("u1") == []

    def test_unique_ids_and_plan_kept(self, route_catalog):
        store = TripStore()
        plan = plan_trip_charging(north(0), north(250), 15, 400, None, route_catalog)
        a = store.save("u1", plan.origin, plan.destination, plan)
        b = store.save("u1", plan.origin, plan.destination)
        assert a.trip_id != b.trip_id
        assert a.plan == plan
        assert b.plan is None
        assert a.status == "planned"

    def test_unknown_user(self):
        assert TripStore().list_for_user("nobody") == []
