"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings

APP_VERSION = "1.0.0"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class Settings(BaseSettings):
    app_name: str = "advanced-reason"
    log_level: str = "INFO"

    # Transports
    host: str = "127.0.0.1"
    port: int = 3000

    # Memory persistence
    memory_dir: str = "memory_data"
    default_library: str = "cognitive_memory"

    # Retrieval
    relevance_threshold: float = 0.1
    related_memory_limit: int = 3
    query_memory_limit: int = 10

    # Console rendering of each reasoning step
    disable_reasoning_logging: bool = False

    model_config = {"env_prefix": "REASON_"}


settings = Settings()
