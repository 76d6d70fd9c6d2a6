"""Tests for the urgency-weighted station scorer."""

from __future__ import annotations

import pytest

from ev_planner.config import ScoringConfig
from ev_planner.engine.scoring import rank_scores, round_half_up, score_station, score_stations
from ev_planner.models import Preferences


class TestWeights:
    @pytest.mark.parametrize("urgency", ["low", "normal", "high"])
    def test_rows_sum_to_one(self, urgency):
        assert ScoringConfig().weights_for(urgency).total() == pytest.approx(1.0, abs=1e-9)

    def test_high_urgency_ignores_amenities(self):
        assert ScoringConfig().weights_for("high").amenity == 0.0


class TestComponents:
    def test_every_component_in_range(self, city_catalog, origin):
        prefs = Preferences(prefer_fast=True, amenities=["coffee", "wifi", "sauna"])
        for station in city_catalog:
            b = score_station(station, origin, prefs).breakdown
            for value in (b.distance_score, b.availability_score, b.wait_score,
                          b.charger_type_score, b.amenity_score):
                assert 0.0 <= value <= 100.0

    def test_distance_decays_to_zero_at_ten_km(self, make_station, origin):
        assert score_station(make_station("S", 12), origin).breakdown.distance_score == 0.0
        assert score_station(make_station("S", 4), origin).breakdown.distance_score == pytest.approx(60.0)

    def test_wait_decay(self, make_station, origin):
        s = make_station("S", 1, wait=20)
        assert score_station(s, origin).breakdown.wait_score == pytest.approx(40.0)
        s = make_station("S", 1, wait=45)
        assert score_station(s, origin).breakdown.wait_score == 0.0

    def test_no_chargers_scores_zero_availability(self, make_station, origin):
        s = make_station("EMPTY", 1, chargers=[])
        result = score_station(s, origin)
        assert result.breakdown.availability_score == 0.0
        assert result.total_chargers == 0

    def test_charger_type_rules(self, city_catalog, origin):
        fast = Preferences(prefer_fast=True)
        busy = city_catalog.get("NEAR-BUSY")
        mixed = city_catalog.get("MID-FAST")
        slow = city_catalog.get("FAR-FREE")
        assert score_station(mixed, origin, fast).breakdown.charger_type_score == 100.0
        assert score_station(slow, origin, fast).breakdown.charger_type_score == 70.0
        assert score_station(mixed, origin).breakdown.charger_type_score == 70.0
        assert score_station(busy, origin, fast).breakdown.charger_type_score == 30.0

    def test_amenity_match_ratio(self, city_catalog, origin):
        prefs = Preferences(amenities=["coffee", "WIFI", "sauna", "gym"])
        result = score_station(city_catalog.get("MID-FAST"), origin, prefs)
        assert result.breakdown.amenity_score == pytest.approx(50.0)

    def test_no_amenities_requested(self, city_catalog, origin):
        result = score_station(city_catalog.get("MID-FAST"), origin)
        assert result.breakdown.amenity_score == 0.0


class TestTotal:
    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(62.49) == 62

    def test_weighted_total(self, city_catalog, origin):
        # 8 km, 3/3 slow free, 10 min wait, high urgency:
        # 20×.35 + 100×.35 + 70×.20 + 70×.10 = 63
        result = score_station(city_catalog.get("FAR-FREE"), origin, Preferences(urgency="high"))
        assert result.total == 63

    def test_availability_beats_proximity_under_high_urgency(self, city_catalog, origin):
        prefs = Preferences(urgency="high")
        near = score_station(city_catalog.get("NEAR-BUSY"), origin, prefs)
        far = score_station(city_catalog.get("FAR-FREE"), origin, prefs)
        assert near.available_chargers == 0
        assert far.total > near.total
        ids = [r.station_id for r in score_stations(
            [city_catalog.get("NEAR-BUSY"), city_catalog.get("FAR-FREE")], origin, prefs,
        )]
        assert ids == ["FAR-FREE", "NEAR-BUSY"]

    def test_busy_station_still_scored(self, city_catalog, origin):
        ids = {r.station_id for r in score_stations(city_catalog, origin)}
        assert "NEAR-BUSY" in ids


class TestRanking:
    def test_equal_totals_tie_break_by_distance(self, make_station, origin):
        # both beyond 10 km, so distance no longer changes the score
        farther = make_station("A-FAR", 15)
        nearer = make_station("Z-NEAR", 12)
        ranked = score_stations([farther, nearer], origin)
        assert ranked[0].total == ranked[1].total
        assert [r.station_id for r in ranked] == ["Z-NEAR", "A-FAR"]

    def test_equal_distance_tie_break_by_id(self, make_station, origin):
        ranked = score_stations([make_station("B", 12), make_station("A", 12)], origin)
        assert [r.station_id for r in ranked] == ["A", "B"]

    def test_sorted_descending(self, city_catalog, origin):
        totals = [r.total for r in score_stations(city_catalog, origin)]
        assert totals == sorted(totals, reverse=True)

    def test_limit(self, city_catalog, origin):
        assert len(score_stations(city_catalog, origin, limit=2)) == 2

    def test_idempotent(self, city_catalog, origin):
        prefs = Preferences(urgency="low", amenities=["coffee"])
        first = score_stations(city_catalog, origin, prefs)
        second = score_stations(city_catalog, origin, prefs)
        assert [r.model_dump() for r in first] == [r.model_dump() for r in second]

    def test_rank_scores_does_not_mutate(self, city_catalog, origin):
        results = [score_station(s, origin) for s in city_catalog]
        snapshot = [r.station_id for r in results]
        rank_scores(results)
        assert [r.station_id for r in results] == snapshot
