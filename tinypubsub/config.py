"""Runtime settings read from the environment (and a local .env file, if present)."""

import logging
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError, field_validator

DEFAULT_LOG_LEVEL = "WARNING"


class Settings(BaseModel):
    """Knobs for logging and metrics. Registries read these once, at construction."""

    log_level: str = DEFAULT_LOG_LEVEL
    metrics_enabled: bool = True

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level {value!r}")
        return level

    @property
    def log_level_no(self) -> int:
        return logging.getLevelName(self.log_level)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from PUBSUB_* variables; a bad value falls back to its default."""
        values = {}
        raw_level = os.environ.get("PUBSUB_LOG_LEVEL")
        if raw_level:
            values["log_level"] = raw_level
        raw_metrics = os.environ.get("PUBSUB_METRICS_ENABLED")
        if raw_metrics:
            values["metrics_enabled"] = raw_metrics.strip()

        settings = cls()
        for key, value in values.items():
            try:
                settings = cls(**{**settings.model_dump(), key: value})
            except ValidationError:
                logging.getLogger("tinypubsub.config").warning(
                    "ignoring invalid %s=%r", key, value
                )
        return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process. Call get_settings.cache_clear() to reload."""
    load_dotenv()
    return Settings.from_env()
