"""Tests for the quick route estimate and traffic model."""

from __future__ import annotations

import pytest

from ev_planner.engine.routing import analyze_battery, estimate_route, traffic_condition, traffic_multiplier
from ev_planner.errors import ValidationError

from conftest import north


class TestTraffic:
    @pytest.mark.parametrize("hour,expected", [
        (None, 1.0),
        (3, 1.0),
        (7, 1.4),
        (9, 1.4),
        (12, 1.2),
        (17, 1.5),
        (20, 1.5),
        (22, 1.1),
        (0, 1.0),
    ])
    def test_multiplier_by_hour(self, hour, expected):
        assert traffic_multiplier(hour) == expected

    @pytest.mark.parametrize("hour", [-1, 24])
    def test_hour_out_of_range(self, hour):
        with pytest.raises(ValidationError) as exc:
            traffic_multiplier(hour)
        assert exc.value.field == "departure_hour"

    def test_condition_labels(self):
        assert traffic_condition(1.5) == "heavy"
        assert traffic_condition(1.2) == "moderate"
        assert traffic_condition(1.1) == "light"
        assert traffic_condition(1.0) == "light"


class TestRouteEstimate:
    def test_short_trip_is_urban(self):
        est = estimate_route(north(0), north(10))
        assert est.straight_line_km == 10.0
        assert est.estimated_road_km == 13.5
        assert est.route_type == "urban"
        assert est.base_minutes == 18
        assert est.estimated_minutes == 18
        assert est.battery_analysis is None

    def test_long_trip_is_highway(self):
        est = estimate_route(north(0), north(100))
        assert est.estimated_road_km == 120.0
        assert est.route_type == "highway"
        assert est.base_minutes == 90

    def test_rush_hour(self):
        est = estimate_route(north(0), north(100), departure_hour=8)
        assert est.traffic_multiplier == 1.4
        assert est.traffic_condition == "heavy"
        assert est.estimated_minutes == 126

    def test_battery_analysis_attached(self):
        est = estimate_route(north(0), north(100), battery_percent=50, vehicle_range_km=400)
        ba = est.battery_analysis
        assert ba is not None
        assert ba.battery_needed_percent == 30
        assert ba.estimated_battery_at_arrival == 20
        assert ba.can_complete_trip
        assert ba.recommended_charge_within_km is None


class TestBatteryAnalysis:
    def test_below_safety_margin_needs_charging(self):
        ba = analyze_battery(120, 35, 400)
        assert ba.current_range_km == 140
        assert ba.estimated_battery_at_arrival == 5
        assert not ba.can_complete_trip
        assert ba.needs_charging
        assert ba.recommended_charge_within_km == 112

    def test_exactly_at_margin_completes(self):
        assert analyze_battery(100, 35, 400).can_complete_trip

    def test_bad_inputs(self):
        with pytest.raises(ValidationError):
            analyze_battery(100, 120, 400)
        with pytest.raises(ValidationError):
            analyze_battery(100, 50, 0)
