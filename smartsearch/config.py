"""Application configuration using Pydantic Settings."""

import logging
import warnings
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # App
    app_name: str = "Smart Search"
    debug: bool = True
    log_level: str = "INFO"

    # Result cache
    cache_ttl_ms: int = 300_000  # 5 minutes
    cache_max_entries: int = 200

    # Search
    default_max_results: int = 50
    max_results_cap: int = 500
    min_score: float = 0.1
    scoring_profile: Literal["note", "index"] = "note"
    recency_window_days: int = 30
    first_day_of_week: int = 0  # 0 = Monday ... 6 = Sunday

    # Suggestions and history
    suggestion_limit: int = 8
    history_limit: int = 50

    # Live search
    debounce_ms: int = 300

    # Maintenance
    optimize_interval_seconds: int = 600
    stale_index_ms: int = 24 * 60 * 60 * 1000

    # CORS
    cors_origins: list[str] = ["*"]

    def __init__(self, **kwargs):
        """Initialize settings and validate production configuration."""
        super().__init__(**kwargs)
        self._validate_production_settings()

    def _validate_production_settings(self) -> None:
        """Validate and warn about questionable production settings."""
        if self.debug:
            return

        if "*" in self.cors_origins:
            warnings.warn(
                "CORS is configured to allow all origins (*). Restrict this in production!",
                UserWarning,
                stacklevel=2,
            )
            logger.warning(
                "CORS is configured to allow all origins (*). Restrict this in production!"
            )

        if not 100 <= self.cache_max_entries <= 200:
            warnings.warn(
                f"CACHE_MAX_ENTRIES={self.cache_max_entries} is outside the tuned 100-200 range",
                UserWarning,
                stacklevel=2,
            )
            logger.warning(
                f"CACHE_MAX_ENTRIES={self.cache_max_entries} is outside the tuned 100-200 range"
            )


settings = Settings()
