"""Shared test fixtures."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from doom_index.config import Settings
from doom_index.engine.archive_keys import build_archive_filename, build_archive_id
from doom_index.engine.mapping import VISUAL_PARAM_KEYS
from doom_index.engine.tokens import TOKEN_TICKERS
from doom_index.models.domain import ArchiveMetadata, TradeSnapshot
from doom_index.providers.mock import MockImageProvider
from doom_index.services.container import build_container
from doom_index.services.sources import StaticMarketDataSource, StaticTradeActivitySource
from doom_index.storage.objects import MemoryObjectStore

# Market caps for one tick, as handed over by the market feed
SAMPLE_MC = {
    "CO2": 1_250_000_000.0,
    "ICE": 320_000_000.0,
    "FOREST": 75_000_000.0,
    "NUKE": 980_000_000.0,
    "MACHINE": 1_600_000_000.0,
    "PANDEMIC": 12_500_000.0,
    "FEAR": 500_000_000.0,
    "HOPE": 2_400_000_000.0,
}

SAMPLE_TRADES = [
    TradeSnapshot("CO2", 10, 100),
    TradeSnapshot("HOPE", 4, 250),
]

IMAGE_BYTES = b"RIFF\x00\x00\x00\x00WEBPVP8 "

# 2025-11-14T12:34 bucket
NOW = datetime(2025, 11, 14, 12, 34, 5, tzinfo=timezone.utc)


def make_settings(**overrides) -> Settings:
    values = {
        "storage_backend": "memory",
        "image_provider": "mock",
        "image_model": "mock",
        "generation_timeout_s": 2.0,
        "state_timeout_s": 2.0,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_container(store=None, provider=None, mc=None, trades=None, **settings_overrides):
    return build_container(
        make_settings(**settings_overrides),
        store=store or MemoryObjectStore(),
        provider=provider or MockImageProvider(image=IMAGE_BYTES),
        market_source=StaticMarketDataSource(SAMPLE_MC if mc is None else mc),
        trade_source=StaticTradeActivitySource(SAMPLE_TRADES if trades is None else trades),
    )


def make_metadata(
    minute_bucket: str = "2025-11-14T12:34",
    fingerprint: str = "abcd1234",
    seed: str = "0123456789ab",
    **overrides,
) -> ArchiveMetadata:
    values = {
        "id": build_archive_id(minute_bucket, fingerprint, seed),
        "timestamp": f"{minute_bucket}:00Z",
        "minute_bucket": minute_bucket,
        "fingerprint": fingerprint,
        "params_hash": "deadbeef",
        "seed": seed,
        "mc_rounded": {t: 1.0 for t in TOKEN_TICKERS},
        "visual_params": {k: 0.5 for k in VISUAL_PARAM_KEYS},
        "image_url": "",
        "file_size": 0,
        "prompt": "a prompt",
        "negative": "a negative",
    }
    values.update(overrides)
    return ArchiveMetadata(**values)


def make_filename(minute_bucket: str = "2025-11-14T12:34", fingerprint: str = "abcd1234", seed: str = "0123456789ab") -> str:
    return build_archive_filename(minute_bucket, fingerprint, seed)


@pytest.fixture
def store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture
def mock_provider() -> MockImageProvider:
    return MockImageProvider(image=IMAGE_BYTES)


@pytest.fixture
def container(store, mock_provider):
    return make_container(store=store, provider=mock_provider)
