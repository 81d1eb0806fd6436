"""Tests for the visual parameter mapping table."""

import pytest

from doom_index.engine.mapping import VISUAL_PARAM_KEYS, VisualParams, ease, lift, map_to_visual_params
from doom_index.engine.tokens import TOKEN_AXIS_MAP, TOKEN_TICKERS


def _all(value):
    return {t: value for t in TOKEN_TICKERS}


def test_sixteen_params_in_order():
    assert len(VISUAL_PARAM_KEYS) == 16
    assert VISUAL_PARAM_KEYS[:4] == ("fog_density", "sky_tint", "reflectivity", "blue_balance")
    assert list(VisualParams().as_dict()) == list(VISUAL_PARAM_KEYS)


def test_roster_axes_cover_every_param():
    axes = [axis for t in TOKEN_TICKERS for axis in TOKEN_AXIS_MAP[t]]
    assert tuple(axes) == VISUAL_PARAM_KEYS


def test_all_zero():
    params = map_to_visual_params(_all(0.0)).as_dict()
    expected = {
        "fog_density": 0, "sky_tint": 0.15,
        "reflectivity": 0, "blue_balance": 0.4,
        "vegetation_density": 0, "organic_pattern": 0.3,
        "radiation_glow": 0, "debris_intensity": 0.2,
        "mechanical_pattern": 0, "metallic_ratio": 0.3,
        "fractal_density": 0, "bioluminescence": 0.2,
        "shadow_depth": 0, "red_highlight": 0.3,
        "light_intensity": 0, "warm_hue": 0.4,
    }
    assert params == pytest.approx(expected)


def test_all_one():
    params = map_to_visual_params(_all(1.0)).as_dict()
    expected = {
        "fog_density": 1, "sky_tint": 0.9,
        "reflectivity": 1, "blue_balance": 0.9,
        "vegetation_density": 1, "organic_pattern": 0.9,
        "radiation_glow": 1, "debris_intensity": 0.95,
        "mechanical_pattern": 1, "metallic_ratio": 0.9,
        "fractal_density": 1, "bioluminescence": 0.9,
        "shadow_depth": 1, "red_highlight": 0.9,
        "light_intensity": 1, "warm_hue": 0.9,
    }
    assert params == pytest.approx(expected)


def test_missing_tickers_read_as_zero():
    assert map_to_visual_params({}) == map_to_visual_params(_all(0.0))


def test_ease_and_lift():
    assert ease(0.25, 0.5) == pytest.approx(0.5)
    assert ease(2.0, 0.5) == 1
    assert lift(0.5, 0.2, 0.4) == pytest.approx(0.4)
    assert lift(1.0, 0.8, 0.5) == 1
