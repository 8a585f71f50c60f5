"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    bimisvg_env: str = "development"
    bimisvg_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Engine limits
    measure_step_budget: int = 50_000
    max_document_bytes: int = 5_000_000

    # Validator
    validator_nominal_padding: float = 5.0
    min_canvas_size: float = 16.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
