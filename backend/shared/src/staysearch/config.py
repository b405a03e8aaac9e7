"""Environment-driven configuration for the search service.

Settings are read once from environment variables and cached. Tests call
reset_settings() after changing the environment.
"""

import logging
import os
from functools import lru_cache

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 30
# DynamoDB caps the IN operator at 100 operands
MAX_BATCH_SIZE = 100
DEFAULT_MAX_WORKERS = 8
DEFAULT_TIMEOUT_SECONDS = 10.0


class Settings(BaseModel):
    """Runtime settings for the search service."""

    model_config = ConfigDict(strict=True, frozen=True)

    environment: str = "dev"
    table_prefix: str = "hotel-dev"
    aws_region: str | None = None
    booking_query_batch_size: int = Field(default=DEFAULT_BATCH_SIZE, ge=1, le=MAX_BATCH_SIZE)
    search_max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1)
    search_timeout_seconds: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"]
    )

    @property
    def is_store_configured(self) -> bool:
        """Whether enough configuration exists to reach the data store."""
        return bool(self.aws_region)

    def table_name(self, table: str) -> str:
        """Get full table name with prefix."""
        return f"{self.table_prefix}-{table}"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables.

        Invalid numeric values fall back to defaults with a warning.
        """
        environment = os.getenv("ENVIRONMENT", "dev")
        origins = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:3000")

        return cls(
            environment=environment,
            table_prefix=os.getenv("DYNAMODB_TABLE_PREFIX", f"hotel-{environment}"),
            aws_region=os.getenv("AWS_REGION") or os.getenv("AWS_DEFAULT_REGION") or None,
            booking_query_batch_size=_int_env(
                "BOOKING_QUERY_BATCH_SIZE", DEFAULT_BATCH_SIZE, 1, MAX_BATCH_SIZE
            ),
            search_max_workers=_int_env("SEARCH_MAX_WORKERS", DEFAULT_MAX_WORKERS, 1),
            search_timeout_seconds=_float_env(
                "SEARCH_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS
            ),
            cors_allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
        )


def _int_env(
    name: str,
    default: int,
    minimum: int,
    maximum: int | None = None,
) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %s", name, raw, default)
        return default
    if value < minimum or (maximum is not None and value > maximum):
        logger.warning("Out of range %s=%s, using default %s", name, value, default)
        return default
    return value


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using default %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Out of range %s=%s, using default %s", name, value, default)
        return default
    return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the cached Settings instance."""
    return Settings.from_env()


def reset_settings() -> None:
    """Clear cached settings (for testing only)."""
    get_settings.cache_clear()
