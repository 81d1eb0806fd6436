"""Tests for the generation coordinator."""

import asyncio
from datetime import timedelta

from doom_index.engine.pipeline import create_pipeline
from doom_index.engine.tokens import TOKEN_TICKERS
from doom_index.models.domain import GlobalState
from doom_index.models.errors import ExternalApiError, InternalError, StorageError
from doom_index.models.result import Err, Ok
from doom_index.providers.base import ImageResponse
from doom_index.providers.mock import MockImageProvider
from doom_index.services.generation import GenerationState
from doom_index.services.state import StateService, revenue_key
from doom_index.storage.objects import MemoryObjectStore
from tests.conftest import IMAGE_BYTES, NOW, SAMPLE_MC, make_container


class FailingProvider:
    name = "failing"

    def __init__(self):
        self.calls = 0

    async def generate(self, request, options=None):
        self.calls += 1
        return Err(ExternalApiError(provider=self.name, message="quota exceeded", status=429))

    async def aclose(self):
        return None


class SlowProvider(MockImageProvider):
    name = "slow"

    def __init__(self, delay):
        super().__init__(image=IMAGE_BYTES)
        self.delay = delay

    async def generate(self, request, options=None):
        await asyncio.sleep(self.delay)
        return await super().generate(request, options)


class RacingProvider(MockImageProvider):
    """Simulates another writer landing a new global state mid-generation."""

    def __init__(self, state_service):
        super().__init__(image=IMAGE_BYTES)
        self.state_service = state_service

    async def generate(self, request, options=None):
        await self.state_service.write_global_state(GlobalState(prev_fingerprint="ffffffff"))
        return Ok(ImageResponse(image=IMAGE_BYTES))


class ExplodingProvider(MockImageProvider):
    async def generate(self, request, options=None):
        raise RuntimeError("provider bug")


class HangingTrades:
    async def fetch_snapshots(self):
        await asyncio.sleep(3600)
        return []


class BrokenTrades:
    async def fetch_snapshots(self):
        raise ConnectionError("feed reset")


class ImageFailingStore(MemoryObjectStore):
    async def put(self, key, data, content_type="application/octet-stream"):
        if key.startswith("images/"):
            return Err(StorageError("put", key, "bucket unavailable"))
        return await super().put(key, data, content_type)


def _evaluate(container, now=NOW):
    return asyncio.run(container.generation.evaluate_minute(now))


class TestGenerate:
    def test_first_evaluation_generates(self, container, store, mock_provider):
        result = _evaluate(container)
        assert isinstance(result, Ok)
        evaluation = result.value
        assert evaluation.status == "generated"
        assert evaluation.minute_bucket == "2025-11-14T12:34"
        assert evaluation.inconsistencies == []
        assert len(mock_provider.requests) == 1

        request = mock_provider.requests[0]
        assert request.seed == evaluation.seed
        assert f"fingerprint={evaluation.fingerprint}" in request.prompt
        assert request.model == "mock"

        state = asyncio.run(container.state.read_global_state()).value
        assert state.prev_fingerprint == evaluation.fingerprint
        assert state.last_timestamp == "2025-11-14T12:34:00Z"
        assert state.image_url == evaluation.image_url
        assert state.revenue_minute == "2025-11-14T12:34"

        for ticker in TOKEN_TICKERS:
            token = asyncio.run(container.state.read_token_state(ticker)).value
            assert token.thumbnail_url == evaluation.image_url
            assert token.updated_at == "2025-11-14T12:34:00Z"

        assert revenue_key("2025-11-14T12:34") in store.keys()
        assert evaluation.revenue.total_fee > 0
        assert container.generation.current_state == GenerationState.IDLE

    def test_archive_metadata_records_provenance(self, container):
        evaluation = _evaluate(container).value
        item = asyncio.run(container.archive.list_images()).value.items[0]
        assert item.id == evaluation.archive_id
        assert item.fingerprint == evaluation.fingerprint
        assert item.seed == evaluation.seed
        assert item.params_hash == evaluation.params_hash
        assert item.mc_rounded == evaluation.rounded_map
        assert item.file_size == len(IMAGE_BYTES)

    def test_seed_is_deterministic(self):
        a = _evaluate(make_container()).value
        b = _evaluate(make_container()).value
        assert a.seed == b.seed
        assert a.archive_id == b.archive_id

    def test_weighted_prompt_style(self, store, mock_provider):
        container = make_container(store=store, provider=mock_provider, prompt_style="weighted")
        assert _evaluate(container).value.generated
        assert "weights summary" in mock_provider.requests[0].prompt


class TestSkip:
    def test_unchanged_fingerprint_never_calls_provider(self, store, mock_provider):
        fingerprint = create_pipeline().evaluate(SAMPLE_MC).fingerprint
        asyncio.run(StateService(store).write_global_state(GlobalState(prev_fingerprint=fingerprint)))

        container = make_container(store=store, provider=mock_provider)
        evaluation = _evaluate(container).value
        assert evaluation.status == "skipped"
        assert evaluation.skip_reason == "unchanged"
        assert mock_provider.requests == []
        assert store.keys() == ["state/global.json"]

    def test_repeat_in_same_minute(self, container, mock_provider):
        _evaluate(container)
        evaluation = _evaluate(container, NOW + timedelta(seconds=30)).value
        assert evaluation.skip_reason == "unchanged"
        assert len(mock_provider.requests) == 1

    def test_unchanged_data_next_minute(self, container, mock_provider):
        _evaluate(container)
        evaluation = _evaluate(container, NOW + timedelta(minutes=1)).value
        assert evaluation.skip_reason == "unchanged"
        assert len(mock_provider.requests) == 1

    def test_changed_data_next_minute_generates(self, container, mock_provider):
        _evaluate(container)
        container.market_source.values["CO2"] += 1_000_000
        evaluation = _evaluate(container, NOW + timedelta(minutes=1)).value
        assert evaluation.generated
        assert len(mock_provider.requests) == 2

    def test_bucket_already_generated(self, container, mock_provider):
        _evaluate(container)
        container.market_source.values["CO2"] += 1_000_000
        evaluation = _evaluate(container, NOW + timedelta(seconds=20)).value
        assert evaluation.skip_reason == "bucket_already_generated"
        assert len(mock_provider.requests) == 1

    def test_in_flight(self):
        container = make_container(provider=SlowProvider(0.05))

        async def scenario():
            return await asyncio.gather(
                container.generation.evaluate_minute(NOW),
                container.generation.evaluate_minute(NOW),
            )

        first, second = asyncio.run(scenario())
        assert first.value.generated
        assert second.value.skip_reason == "in_flight"


class TestFailures:
    def test_provider_failure_leaves_state_untouched(self, store):
        provider = FailingProvider()
        container = make_container(store=store, provider=provider)
        result = _evaluate(container)
        assert isinstance(result, Err)
        assert result.error.status == 429
        assert store.keys() == []
        assert container.generation.current_state == GenerationState.IDLE

        # next tick retries instead of skipping
        _evaluate(container, NOW + timedelta(minutes=1))
        assert provider.calls == 2

    def test_provider_timeout(self, store):
        container = make_container(store=store, provider=SlowProvider(1.0), generation_timeout_s=0.05)
        result = _evaluate(container)
        assert isinstance(result, Err)
        assert isinstance(result.error, ExternalApiError)
        assert "timed out" in result.error.message
        assert store.keys() == []

    def test_archive_failure_leaves_state_untouched(self):
        store = ImageFailingStore()
        result = _evaluate(make_container(store=store))
        assert isinstance(result, Err)
        assert isinstance(result.error, StorageError)
        assert store.keys() == []

    def test_market_data_failure(self, store):
        class BrokenSource:
            async def get_mc_map(self):
                return Err(ExternalApiError(provider="market-data", message="feed down"))

        container = make_container(store=store)
        container.generation.market_source = BrokenSource()
        result = _evaluate(container)
        assert result.error.provider == "market-data"

    def test_unexpected_exception_is_internal_error(self):
        result = _evaluate(make_container(provider=ExplodingProvider()))
        assert isinstance(result, Err)
        assert isinstance(result.error, InternalError)

    def test_cas_conflict_reported_as_inconsistency(self, store):
        provider = RacingProvider(StateService(store))
        container = make_container(store=store, provider=provider)
        result = _evaluate(container)
        assert isinstance(result, Ok)
        evaluation = result.value
        assert evaluation.generated
        assert any(entry.startswith("global_state") for entry in evaluation.inconsistencies)
        assert asyncio.run(container.state.read_global_state()).value.prev_fingerprint == "ffffffff"
        # token states still land
        assert asyncio.run(container.state.read_token_state("CO2")).value is not None

    def test_hanging_trade_feed_is_bounded(self, store):
        container = make_container(store=store, state_timeout_s=0.05)
        container.generation.trade_source = HangingTrades()
        result = asyncio.run(asyncio.wait_for(container.generation.evaluate_minute(NOW), 2.0))
        assert isinstance(result, Ok)
        evaluation = result.value
        assert evaluation.generated
        assert any(entry.startswith("trade_activity") for entry in evaluation.inconsistencies)
        state = asyncio.run(container.state.read_global_state()).value
        assert state.prev_fingerprint == evaluation.fingerprint
        # lock released, next tick is evaluated normally
        again = _evaluate(container)
        assert again.value.skip_reason == "unchanged"

    def test_failing_trade_feed_still_writes_state(self, store):
        container = make_container(store=store)
        container.generation.trade_source = BrokenTrades()
        result = _evaluate(container)
        assert isinstance(result, Ok)
        evaluation = result.value
        assert evaluation.generated
        assert "trade_activity: feed reset" in evaluation.inconsistencies
        assert evaluation.revenue is not None
        assert evaluation.revenue.total_fee == 0
        state = asyncio.run(container.state.read_global_state()).value
        assert state.image_url == evaluation.image_url
