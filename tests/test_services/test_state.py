"""Tests for the state service."""

import asyncio

from doom_index.engine.tokens import TOKEN_TICKERS
from doom_index.models.domain import GlobalState, RevenueReport, TokenState
from doom_index.models.errors import StorageError
from doom_index.models.result import Err, Ok
from doom_index.services.state import GLOBAL_STATE_KEY, StateService, revenue_key, token_state_key


def test_empty_state_reads_none(store):
    service = StateService(store)
    assert asyncio.run(service.read_global_state()) == Ok(None)
    assert asyncio.run(service.read_token_state("CO2")) == Ok(None)


def test_global_state_round_trip(store):
    service = StateService(store)
    state = GlobalState(prev_fingerprint="abcd1234", last_timestamp="2025-11-14T12:34:00Z", image_url="/x")
    assert asyncio.run(service.write_global_state(state)) == Ok(None)
    assert asyncio.run(service.read_global_state()).value == state


class TestCompareAndSwap:
    def test_first_write_expects_none(self, store):
        service = StateService(store)
        result = asyncio.run(service.write_global_state(GlobalState(prev_fingerprint="aaaa0000"), expected_fingerprint=None))
        assert result == Ok(None)

    def test_matching_fingerprint(self, store):
        service = StateService(store)
        asyncio.run(service.write_global_state(GlobalState(prev_fingerprint="aaaa0000")))
        result = asyncio.run(
            service.write_global_state(GlobalState(prev_fingerprint="bbbb1111"), expected_fingerprint="aaaa0000")
        )
        assert result == Ok(None)
        assert asyncio.run(service.read_global_state()).value.prev_fingerprint == "bbbb1111"

    def test_mismatch_leaves_state(self, store):
        service = StateService(store)
        asyncio.run(service.write_global_state(GlobalState(prev_fingerprint="cccc2222")))
        result = asyncio.run(
            service.write_global_state(GlobalState(prev_fingerprint="bbbb1111"), expected_fingerprint="aaaa0000")
        )
        assert isinstance(result, Err)
        assert result.error.op == "cas"
        assert asyncio.run(service.read_global_state()).value.prev_fingerprint == "cccc2222"


def test_token_states(store):
    service = StateService(store)
    states = [TokenState(ticker=t, thumbnail_url="/img", updated_at="2025-11-14T12:34:00Z") for t in TOKEN_TICKERS]
    assert asyncio.run(service.write_token_states(states)) == Ok(None)
    assert store.keys() == sorted(token_state_key(t) for t in TOKEN_TICKERS)
    assert asyncio.run(service.read_token_state("FEAR")).value.thumbnail_url == "/img"


def test_revenue_round_trip(store):
    service = StateService(store)
    report = RevenueReport(per_token_fee={"CO2": 0.5}, total_fee=0.5, monthly_cost=86.4, net_profit=-85.9)
    asyncio.run(service.write_revenue(report, "2025-11-14T12:34"))
    assert revenue_key("2025-11-14T12:34") == "revenue/2025-11-14T12-34.json"
    assert asyncio.run(service.read_revenue("2025-11-14T12:34")).value == report


def test_invalid_stored_record(store):
    asyncio.run(store.put(GLOBAL_STATE_KEY, b'{"prev_fingerprint": 12}'))
    result = asyncio.run(StateService(store).read_global_state())
    assert isinstance(result, Err)
    assert isinstance(result.error, StorageError)
