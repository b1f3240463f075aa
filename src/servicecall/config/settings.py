"""Client settings and configuration management.

This module provides Pydantic-based settings that load from environment
variables (prefixed ``SERVICECALL_``) or a ``.env`` file, with validation
and type safety.
"""

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from servicecall.constants import (
    DEFAULT_ASYNC_WORKERS,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_MAX_POOL_CONNECTIONS,
    DEFAULT_READ_TIMEOUT,
)

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    Example:
        >>> settings = Settings()
        >>> print(settings.region)
        'us-east-1'
    """

    model_config = SettingsConfigDict(
        env_prefix="SERVICECALL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Endpoint & Credentials
    # =========================================================================

    region: str = Field(
        default="us-east-1",
        description="Region used for the endpoint and request signing",
    )

    profile: str | None = Field(
        default=None,
        description="Named credentials profile (default credential chain if unset)",
    )

    endpoint_url: str | None = Field(
        default=None,
        description="Endpoint override (derived from the model's endpoint prefix if unset)",
    )

    # =========================================================================
    # Transport
    # =========================================================================

    connect_timeout: float = Field(
        default=DEFAULT_CONNECT_TIMEOUT,
        gt=0.0,
        le=300.0,
        description="Seconds to wait for a connection to be established",
    )

    read_timeout: float = Field(
        default=DEFAULT_READ_TIMEOUT,
        gt=0.0,
        le=900.0,
        description="Seconds to wait for response data",
    )

    max_pool_connections: int = Field(
        default=DEFAULT_MAX_POOL_CONNECTIONS,
        ge=1,
        le=1000,
        description="Maximum pooled HTTP connections",
    )

    async_workers: int = Field(
        default=DEFAULT_ASYNC_WORKERS,
        ge=1,
        le=256,
        description="Worker threads serving non-blocking sends",
    )

    # =========================================================================
    # Waiters
    # =========================================================================

    waiter_delay_override: float | None = Field(
        default=None,
        ge=0.0,
        description="Replace every waiter's delay (seconds), e.g. for tests",
    )

    waiter_max_attempts_override: int | None = Field(
        default=None,
        ge=1,
        description="Replace every waiter's attempt limit",
    )

    # =========================================================================
    # Logging
    # =========================================================================

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level applied by configure_logging()",
    )

    @field_validator("endpoint_url")
    @classmethod
    def validate_endpoint_url(cls, v: str | None) -> str | None:
        """Require an explicit scheme on endpoint overrides.

        Raises:
            ValueError: If the endpoint has no http(s) scheme.
        """
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("SERVICECALL_ENDPOINT_URL must start with http:// or https://")
        return v.rstrip("/")

    def endpoint_for(self, endpoint_prefix: str) -> str:
        """Return the endpoint for a service, honouring the override."""
        if self.endpoint_url:
            return self.endpoint_url
        return f"https://{endpoint_prefix}.{self.region}.amazonaws.com"


@lru_cache
def get_settings() -> Settings:
    """Get cached client settings.

    Returns:
        Validated Settings instance.
    """
    return Settings()
