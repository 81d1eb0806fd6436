"""Tests for market cap and trade activity sources."""

import asyncio
import json

from doom_index.models.errors import ExternalApiError, ValidationError
from doom_index.models.result import Err, Ok
from doom_index.services.sources import (
    JsonFileMarketDataSource,
    JsonFileTradeActivitySource,
    StaticMarketDataSource,
)


def test_static_source_returns_copy():
    source = StaticMarketDataSource({"CO2": 1.0})
    result = asyncio.run(source.get_mc_map())
    result.value["CO2"] = 99
    assert asyncio.run(source.get_mc_map()) == Ok({"CO2": 1.0})


def test_json_file_market_source(tmp_path):
    path = tmp_path / "mc.json"
    path.write_text(json.dumps({"ICE": 5, "CO2": 2.5}))
    assert asyncio.run(JsonFileMarketDataSource(path).get_mc_map()) == Ok({"CO2": 2.5, "ICE": 5.0})


def test_json_file_market_source_missing(tmp_path):
    result = asyncio.run(JsonFileMarketDataSource(tmp_path / "missing.json").get_mc_map())
    assert isinstance(result, Err)
    assert isinstance(result.error, ExternalApiError)
    assert result.error.provider == "market-data"


def test_json_file_market_source_invalid(tmp_path):
    path = tmp_path / "mc.json"
    path.write_text(json.dumps({"DOGE": 1}))
    result = asyncio.run(JsonFileMarketDataSource(path).get_mc_map())
    assert isinstance(result.error, ValidationError)


def test_json_file_trade_source(tmp_path):
    path = tmp_path / "trades.json"
    path.write_text(json.dumps([{"ticker": "HOPE", "trades_per_minute": 2, "average_trade_usd": 50}]))
    snapshots = asyncio.run(JsonFileTradeActivitySource(path).fetch_snapshots())
    assert [s.ticker for s in snapshots] == ["HOPE"]


def test_json_file_trade_source_degrades_to_empty(tmp_path):
    path = tmp_path / "trades.json"
    path.write_text("{broken")
    assert asyncio.run(JsonFileTradeActivitySource(path).fetch_snapshots()) == []
    assert asyncio.run(JsonFileTradeActivitySource(tmp_path / "none.json").fetch_snapshots()) == []
