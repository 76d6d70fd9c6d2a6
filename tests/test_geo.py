"""Tests for great-circle distance and detour estimation."""

from __future__ import annotations

import math

import pytest

from ev_planner.engine.geo import EARTH_RADIUS_KM, detour, distance_km, distances_km, is_along_route
from ev_planner.models import GeoPoint

from conftest import north


class TestDistance:
    def test_same_point_is_zero(self):
        p = GeoPoint(lat=-33.45, lng=-70.66)
        assert distance_km(p, p) == 0.0

    def test_meridian_distance(self):
        assert distance_km(north(0), north(250)) == pytest.approx(250.0, abs=1e-6)

    def test_symmetric(self):
        a = GeoPoint(lat=-33.4263, lng=-70.6150)
        b = GeoPoint(lat=-33.0472, lng=-71.6127)
        assert distance_km(a, b) == pytest.approx(distance_km(b, a))

    def test_santiago_valparaiso(self):
        santiago = GeoPoint(lat=-33.4489, lng=-70.6693)
        valparaiso = GeoPoint(lat=-33.0472, lng=-71.6127)
        assert distance_km(santiago, valparaiso) == pytest.approx(98.5, abs=1.5)

    def test_antipodes(self):
        d = distance_km(GeoPoint(lat=0, lng=0), GeoPoint(lat=0, lng=180))
        assert d == pytest.approx(math.pi * EARTH_RADIUS_KM)

    def test_vectorised_matches_scalar(self):
        origin = GeoPoint(lat=-33.45, lng=-70.66)
        points = [GeoPoint(lat=-33.41, lng=-70.57), GeoPoint(lat=-34.17, lng=-70.74), origin]
        out = distances_km(origin, points)
        assert out.shape == (3,)
        for p, d in zip(points, out):
            assert d == pytest.approx(distance_km(origin, p), abs=1e-9)

    def test_vectorised_empty(self):
        assert distances_km(GeoPoint(lat=0, lng=0), []).shape == (0,)


class TestDetour:
    def test_collinear_waypoint_costs_nothing(self):
        d = detour(north(0), north(200), north(80))
        assert d.detour_km == pytest.approx(0.0, abs=1e-6)
        assert d.detour_pct == pytest.approx(0.0, abs=1e-6)
        assert d.distance_from_origin_km == pytest.approx(80.0)

    def test_never_negative(self):
        d = detour(north(0), north(100), north(50))
        assert d.detour_km >= 0.0

    def test_behind_origin(self):
        # 50 km back, then 150 km forward: 100 km extra on a 100 km trip
        d = detour(north(0), north(100), north(-50))
        assert d.detour_pct == pytest.approx(100.0, abs=1e-6)

    def test_zero_length_trip(self):
        p = north(0)
        assert detour(p, p, p).detour_pct == 0.0
        assert math.isinf(detour(p, p, north(5)).detour_pct)

    def test_along_route_threshold(self):
        assert is_along_route(north(0), north(200), north(100, lng_km=10))
        assert not is_along_route(north(0), north(200), north(-60))
        assert is_along_route(north(0), north(100), north(-50), max_detour_percent=101.0)
