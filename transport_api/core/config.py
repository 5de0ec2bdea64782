"""Application configuration.

Environment variables are loaded from .env file and can be overridden.
All settings have sensible defaults for local development. Cache ranges are
validated when Settings is constructed so a bad value fails the process at
startup instead of deep inside a request.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================================================
    # Infrastructure
    # ==========================================================================

    environment: str = Field(
        default="development",
        alias="ENVIRONMENT",
        description="Deployment environment: 'development', 'staging', or 'production'.",
    )
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # ==========================================================================
    # Upstream GTFS provider
    # ==========================================================================

    gtfs_base_url: str = Field(
        default="https://www.zet.hr", alias="GTFS_BASE_URL"
    )
    gtfs_realtime_endpoint: str = Field(
        default="/gtfs-rt-protobuf", alias="GTFS_REALTIME_ENDPOINT"
    )
    gtfs_static_endpoint: str = Field(
        default="/gtfs-scheduled/latest", alias="GTFS_STATIC_ENDPOINT"
    )
    gtfs_request_timeout_seconds: float = Field(
        default=30.0, alias="GTFS_REQUEST_TIMEOUT_SECONDS", gt=0
    )
    gtfs_user_agent: str = Field(
        default="TransportApi/1.0", alias="GTFS_USER_AGENT"
    )

    # ==========================================================================
    # Cache
    # ==========================================================================

    # Realtime: short TTL, relies on expiry alone
    cache_realtime_ttl_seconds: int = Field(
        default=30, alias="CACHE_REALTIME_TTL_SECONDS", ge=1, le=3600
    )
    # Static: long TTL, keys also rotate at UTC midnight
    cache_static_ttl_hours: int = Field(
        default=24, alias="CACHE_STATIC_TTL_HOURS", ge=1, le=168
    )
    cache_size_limit: int = Field(
        default=100, alias="CACHE_SIZE_LIMIT", ge=10, le=1000
    )
    cache_compaction_threshold: float = Field(
        default=0.25, alias="CACHE_COMPACTION_THRESHOLD", ge=0.1, le=0.5
    )
    cache_enable_health_check: bool = Field(
        default=True, alias="CACHE_ENABLE_HEALTH_CHECK"
    )
    cache_log_operations: bool = Field(default=False, alias="CACHE_LOG_OPERATIONS")

    # ==========================================================================
    # Cache cleanup job
    # ==========================================================================

    # None means "on in production, off elsewhere"
    cache_cleanup_enabled: bool | None = Field(
        default=None, alias="CACHE_CLEANUP_ENABLED"
    )
    cache_cleanup_interval_minutes: int = Field(
        default=60, alias="CACHE_CLEANUP_INTERVAL_MINUTES", ge=1, le=1440
    )

    # ==========================================================================
    # CORS
    # ==========================================================================

    cors_allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:8000",
            "http://localhost:3000",
            "http://127.0.0.1:8000",
        ],
        alias="CORS_ALLOW_ORIGINS",
    )

    # ==========================================================================
    # OpenTelemetry (optional)
    # ==========================================================================

    otel_enabled: bool = Field(default=False, alias="OTEL_ENABLED")
    otel_service_name: str = Field(default="transport-api", alias="OTEL_SERVICE_NAME")
    otel_service_version: str = Field(default="0.1.0", alias="OTEL_SERVICE_VERSION")
    otel_exporter_otlp_endpoint: str = Field(
        default="http://jaeger:4317", alias="OTEL_EXPORTER_OTLP_ENDPOINT"
    )
    otel_exporter_otlp_headers: str | None = Field(
        default=None, alias="OTEL_EXPORTER_OTLP_HEADERS"
    )

    # ==========================================================================
    # Pydantic Settings Config
    # ==========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: Any) -> list[str]:
        """Parse comma-separated CORS origins, rejecting wildcard '*'."""
        if isinstance(value, str):
            if not value:
                return []
            parsed = [item.strip() for item in value.split(",") if item.strip()]
        else:
            parsed = list(value) if value is not None else []

        if "*" in parsed:
            raise ValueError(
                "Wildcard CORS origin '*' is not allowed. "
                "Specify explicit origins like 'http://localhost:3000'."
            )
        return parsed

    @field_validator("gtfs_base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        """Only http(s) upstreams are accepted."""
        if not value.startswith(("http://", "https://")):
            raise ValueError("GTFS base URL must be http(s)")
        return value.rstrip("/")

    @model_validator(mode="after")
    def resolve_cleanup_default(self) -> "Settings":
        """Turn the background compaction job on by default in production."""
        if self.cache_cleanup_enabled is None:
            self.cache_cleanup_enabled = self.is_production
        return self

    # ==========================================================================
    # Derived values
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def realtime_cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.cache_realtime_ttl_seconds)

    @property
    def static_cache_ttl(self) -> timedelta:
        return timedelta(hours=self.cache_static_ttl_hours)


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
