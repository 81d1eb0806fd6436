"""Tests for stable serialization and fingerprints."""

import math

from doom_index.engine.hashing import (
    compute_stable_hash,
    fnv1a32,
    hash_visual_params,
    seed_for_minute,
    stable_stringify,
)
from doom_index.engine.mapping import VisualParams
from doom_index.engine.rounding import round_mc_map


class TestStableStringify:
    def test_key_order_invariant(self):
        assert stable_stringify({"a": 1, "b": 2}) == stable_stringify({"b": 2, "a": 1})
        assert stable_stringify({"b": 2, "a": 1}) == '{"a":1,"b":2}'

    def test_nested(self):
        text = stable_stringify({"z": [3, {"y": 1, "x": 0.5}], "a": None})
        assert text == '{"a":null,"z":[3,{"x":0.5,"y":1}]}'

    def test_numbers(self):
        assert stable_stringify(2.0) == "2"
        assert stable_stringify(math.nan) == "null"
        assert stable_stringify(True) == "true"

    def test_number_text_matches_json_stringify(self):
        assert stable_stringify(0.00001) == "0.00001"
        assert stable_stringify(0.000001) == "0.000001"
        assert stable_stringify(1e-7) == "1e-7"
        assert stable_stringify(-2.5e-8) == "-2.5e-8"
        assert stable_stringify(1e21) == "1e+21"
        assert stable_stringify(1e303) == "1e+303"
        assert stable_stringify(123456.789) == "123456.789"
        assert stable_stringify(-0.0) == "0"

    def test_strings_not_ascii_escaped(self):
        assert stable_stringify("→") == '"→"'


class TestFnv1a:
    def test_known_vectors(self):
        assert fnv1a32("") == 0x811C9DC5
        assert fnv1a32("a") == 0xE40C292C
        assert fnv1a32("foobar") == 0xBF9CF968

    def test_hash_format(self):
        fp = compute_stable_hash({"CO2": 1.5})
        assert len(fp) == 8
        assert fp == fp.lower()
        int(fp, 16)


class TestFingerprintStability:
    def test_difference_below_precision(self):
        a = round_mc_map({"CO2": 1.23456789})
        b = round_mc_map({"CO2": 1.23456791})
        assert a == b
        assert compute_stable_hash(a) == compute_stable_hash(b)

    def test_difference_at_precision(self):
        a = round_mc_map({"CO2": 1.234567})
        b = round_mc_map({"CO2": 1.234568})
        assert a != b
        assert compute_stable_hash(a) != compute_stable_hash(b)

    def test_insertion_order(self):
        assert compute_stable_hash({"ICE": 2, "CO2": 1}) == compute_stable_hash({"CO2": 1, "ICE": 2})


def test_params_hash_and_seed():
    params = VisualParams(fog_density=0.5)
    params_hash = hash_visual_params(params)
    assert len(params_hash) == 8
    assert hash_visual_params(VisualParams(fog_density=0.5000001)) == params_hash
    assert hash_visual_params(VisualParams(fog_density=0.6)) != params_hash

    seed = seed_for_minute("2025-11-14T12:34", params_hash)
    assert len(seed) == 12
    assert seed == seed_for_minute("2025-11-14T12:34", params_hash.upper())
    assert seed != seed_for_minute("2025-11-14T12:35", params_hash)
