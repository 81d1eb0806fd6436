"""Revenue engine — per-token trading fees against image generation cost."""

from __future__ import annotations

import math
from collections.abc import Iterable

from doom_index.engine.rounding import round_value
from doom_index.engine.tokens import TOKEN_TICKERS
from doom_index.models.domain import RevenueReport, TradeSnapshot
from doom_index.models.result import Ok, Result

FEE_RATE = 0.0005
COST_PER_IMAGE = 0.002
MINUTES_PER_DAY = 1440
DAYS_PER_MONTH = 30
OUTPUT_DECIMALS = 6


def _sanitize(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return value if value > 0 else 0.0


def _round(value: float) -> float:
    return round_value(value, OUTPUT_DECIMALS)


class RevenueEngine:
    def calculate_minute_revenue(
        self,
        snapshots: Iterable[TradeSnapshot],
        generation_rate: float,
    ) -> Result[RevenueReport]:
        """Fees per roster token, total, monthly generation cost and net profit.

        Always Ok: every input is sanitized (non-finite or negative → 0).
        """
        by_ticker: dict[str, TradeSnapshot] = {}
        for snapshot in snapshots:
            by_ticker.setdefault(snapshot.ticker, snapshot)

        per_token_fee: dict[str, float] = {}
        for ticker in TOKEN_TICKERS:
            snapshot = by_ticker.get(ticker)
            if snapshot is None:
                per_token_fee[ticker] = 0.0
                continue
            trades = _sanitize(snapshot.trades_per_minute)
            average = _sanitize(snapshot.average_trade_usd)
            per_token_fee[ticker] = _round(trades * average * FEE_RATE)

        rate = generation_rate if math.isfinite(generation_rate) else 0.0
        total_fee = _round(sum(per_token_fee.values()))
        monthly_cost = _round(COST_PER_IMAGE * MINUTES_PER_DAY * DAYS_PER_MONTH * max(rate, 0.0))
        net_profit = _round(total_fee - monthly_cost)

        return Ok(RevenueReport(
            per_token_fee=per_token_fee,
            total_fee=total_fee,
            monthly_cost=monthly_cost,
            net_profit=net_profit,
        ))
