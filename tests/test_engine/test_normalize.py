"""Tests for market cap normalization."""

import math

import pytest

from doom_index.engine.normalize import clamp01, normalize_mc_map, normalize_value
from doom_index.engine.tokens import TOKEN_TICKERS


class TestNormalizeValue:
    def test_sqrt_easing(self):
        assert normalize_value(250, 0, 1000) == pytest.approx(0.5)

    def test_bounds(self):
        assert normalize_value(0, 0, 1000) == 0
        assert normalize_value(1000, 0, 1000) == 1

    def test_out_of_range_clamps(self):
        assert normalize_value(-50, 0, 1000) == 0
        assert normalize_value(5000, 0, 1000) == 1

    def test_monotonic_and_bounded(self):
        values = [normalize_value(raw, 100, 900) for raw in range(0, 1001, 25)]
        assert values == sorted(values)
        assert all(0 <= v <= 1 for v in values)

    def test_non_finite_input(self):
        assert normalize_value(math.nan, 0, 1000) == 0
        assert normalize_value(math.inf, 0, 1000) == 0
        assert normalize_value(10, 0, math.inf) == 0

    def test_degenerate_bounds(self):
        assert normalize_value(5, 10, 10) == 0
        assert normalize_value(5, 10, 1) == 0


def test_clamp01():
    assert clamp01(-0.1) == 0
    assert clamp01(0.25) == 0.25
    assert clamp01(7) == 1
    assert clamp01(math.nan) == 0


def test_normalize_mc_map_covers_roster():
    result = normalize_mc_map({"CO2": 500_000_000, "UNKNOWN": 1e12})
    assert list(result) == list(TOKEN_TICKERS)
    assert result["CO2"] == pytest.approx(0.5)
    assert result["ICE"] == 0
    assert "UNKNOWN" not in result


def test_normalize_mc_map_none_reads_as_zero():
    assert normalize_mc_map({"HOPE": None})["HOPE"] == 0
