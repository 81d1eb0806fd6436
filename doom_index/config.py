"""Application configuration from environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    doom_env: str = "development"
    doom_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Image provider
    image_provider: Literal["mock", "runware", "smart"] = "mock"
    image_model: str = "runware:100@1"
    runware_api_key: str = ""
    image_width: int = 1024
    image_height: int = 1024
    image_format: Literal["webp", "png"] = "webp"

    # Prompt
    prompt_template: str = "default"
    prompt_style: Literal["narrative", "weighted"] = "narrative"

    # Generation
    generation_timeout_s: float = 15.0
    state_timeout_s: float = 10.0
    generation_rate: float = 1.0
    change_buckets: int = 0

    # Storage
    storage_backend: Literal["file", "memory"] = "file"
    data_dir: Path = Path("data")
    public_base_path: str = "/api/archive/object"

    # Market / trade inputs (JSON files written by the feed collaborators)
    market_data_file: Path | None = None
    trade_data_file: Path | None = None

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()
