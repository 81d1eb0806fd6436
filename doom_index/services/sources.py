"""Market cap and trade activity inputs.

The feeds themselves are external; these sources hand their latest output to
the engine as plain maps. File sources re-read the JSON on every call so an
external writer can update it between ticks.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Protocol

from doom_index.models.domain import TradeSnapshot, parse_mc_map, parse_trade_snapshots
from doom_index.models.errors import ExternalApiError
from doom_index.models.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class MarketDataSource(Protocol):
    async def get_mc_map(self) -> Result[dict[str, float]]: ...


class TradeActivitySource(Protocol):
    async def fetch_snapshots(self) -> list[TradeSnapshot]: ...


class StaticMarketDataSource:
    def __init__(self, values: Mapping[str, float] | None = None) -> None:
        self.values = dict(values or {})

    async def get_mc_map(self) -> Result[dict[str, float]]:
        return Ok(dict(self.values))


class JsonFileMarketDataSource:
    """Reads ``{ticker: market_cap}`` from a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    async def get_mc_map(self) -> Result[dict[str, float]]:
        try:
            text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            payload = json.loads(text)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("market-data.read.error path=%s: %s", self.path, e)
            return Err(ExternalApiError(provider="market-data", message=f"Cannot read {self.path}: {e}"))
        return parse_mc_map(payload)


class StaticTradeActivitySource:
    def __init__(self, snapshots: list[TradeSnapshot] | None = None) -> None:
        self.snapshots = list(snapshots or [])

    async def fetch_snapshots(self) -> list[TradeSnapshot]:
        return list(self.snapshots)


class JsonFileTradeActivitySource:
    """Reads a list of trade snapshot dicts; unreadable or invalid input yields no snapshots."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    async def fetch_snapshots(self) -> list[TradeSnapshot]:
        try:
            text = await asyncio.to_thread(self.path.read_text, encoding="utf-8")
            payload = json.loads(text)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("trade-data.read.error path=%s: %s", self.path, e)
            return []
        result = parse_trade_snapshots(payload)
        if isinstance(result, Err):
            logger.warning("trade-data.invalid path=%s: %s", self.path, result.error.message)
            return []
        return result.value
