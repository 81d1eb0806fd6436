"""Service container — builds and owns every collaborator for one process.

Created by the FastAPI lifespan (``app.state.container``) or by the CLI and
closed with ``aclose()``; nothing is cached at module level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from doom_index.config import Settings
from doom_index.engine.config import PipelineConfig
from doom_index.engine.pipeline import SignalPipeline, create_pipeline
from doom_index.providers.base import ImageProvider
from doom_index.providers.router import resolve_provider
from doom_index.services.archive import ArchiveService
from doom_index.services.generation import GenerationService
from doom_index.services.prompt import PromptService
from doom_index.services.revenue import RevenueEngine
from doom_index.services.sources import (
    JsonFileMarketDataSource,
    JsonFileTradeActivitySource,
    MarketDataSource,
    StaticMarketDataSource,
    StaticTradeActivitySource,
    TradeActivitySource,
)
from doom_index.services.state import StateService
from doom_index.storage.objects import FileObjectStore, MemoryObjectStore, ObjectStore

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    settings: Settings
    store: ObjectStore
    provider: ImageProvider
    market_source: MarketDataSource
    trade_source: TradeActivitySource
    pipeline: SignalPipeline
    state: StateService
    archive: ArchiveService
    prompts: PromptService
    revenue: RevenueEngine
    generation: GenerationService

    async def aclose(self) -> None:
        await self.provider.aclose()


def _build_store(settings: Settings) -> ObjectStore:
    if settings.storage_backend == "memory":
        return MemoryObjectStore()
    return FileObjectStore(settings.data_dir)


def _build_market_source(settings: Settings) -> MarketDataSource:
    if settings.market_data_file:
        return JsonFileMarketDataSource(settings.market_data_file)
    logger.warning("No market data file configured; market caps default to 0")
    return StaticMarketDataSource()


def _build_trade_source(settings: Settings) -> TradeActivitySource:
    if settings.trade_data_file:
        return JsonFileTradeActivitySource(settings.trade_data_file)
    return StaticTradeActivitySource()


def build_container(
    settings: Settings,
    store: ObjectStore | None = None,
    provider: ImageProvider | None = None,
    market_source: MarketDataSource | None = None,
    trade_source: TradeActivitySource | None = None,
) -> ServiceContainer:
    """Wire the services from settings; explicit arguments override the configured ones."""
    store = store or _build_store(settings)
    provider = provider or resolve_provider(settings)
    market_source = market_source or _build_market_source(settings)
    trade_source = trade_source or _build_trade_source(settings)

    pipeline = create_pipeline(PipelineConfig(change_buckets=settings.change_buckets))
    state = StateService(store)
    archive = ArchiveService(store, settings.public_base_path)
    prompts = PromptService(
        template=settings.prompt_template,
        style=settings.prompt_style,
        width=settings.image_width,
        height=settings.image_height,
        image_format=settings.image_format,
    )
    revenue = RevenueEngine()
    generation = GenerationService(
        market_source=market_source,
        trade_source=trade_source,
        state=state,
        archive=archive,
        provider=provider,
        prompts=prompts,
        pipeline=pipeline,
        revenue=revenue,
        image_model=settings.image_model,
        generation_timeout_s=settings.generation_timeout_s,
        state_timeout_s=settings.state_timeout_s,
        generation_rate=settings.generation_rate,
    )
    logger.info(
        "Services ready: provider=%s storage=%s template=%s",
        provider.name,
        settings.storage_backend,
        settings.prompt_template,
    )
    return ServiceContainer(
        settings=settings,
        store=store,
        provider=provider,
        market_source=market_source,
        trade_source=trade_source,
        pipeline=pipeline,
        state=state,
        archive=archive,
        prompts=prompts,
        revenue=revenue,
        generation=generation,
    )
