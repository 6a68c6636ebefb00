"""
Gateway configuration models.

Field names are snake_case; the camelCase names used by downstream
automation (``rateLimits``, ``retryConfig``, ``durationMs`` ...) are accepted
as aliases so existing config files load unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class RateLimitSettings(BaseModel):
    """Token-bucket settings for one category: ``points`` per ``duration_ms``."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    points: int = Field(..., ge=1, description="Bucket capacity")
    duration_ms: int = Field(60_000, ge=1, alias="durationMs", description="Full refill window in ms")

    @model_validator(mode="before")
    @classmethod
    def accept_duration_seconds(cls, data: Any) -> Any:
        # Legacy configs express the window as ``duration`` in seconds
        if isinstance(data, dict) and "duration" in data:
            data = dict(data)
            seconds = data.pop("duration")
            data.setdefault("durationMs", int(float(seconds) * 1000))
        return data


class RetrySettings(BaseModel):
    """Capped exponential backoff settings."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    max_retries: int = Field(3, ge=0, alias="maxRetries")
    base_delay_ms: int = Field(1000, ge=0, alias="baseDelayMs")
    max_delay_ms: int = Field(30_000, ge=0, alias="maxDelayMs")
    jitter_ratio: float = Field(0.0, ge=0.0, le=1.0, alias="jitterRatio",
                                description="Fraction of each delay randomised; 0 disables jitter")

    @model_validator(mode="after")
    def check_delays(self) -> "RetrySettings":
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("maxDelayMs must be >= baseDelayMs")
        return self


class CacheSettings(BaseModel):
    """Response cache settings."""
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    enabled: bool = True
    default_ttl_seconds: float = Field(300, gt=0, alias="defaultTtlSeconds")
    sweep_interval_ms: int = Field(60_000, ge=1, alias="sweepIntervalMs")
    max_entries: Optional[int] = Field(None, ge=1, alias="maxEntries")


def default_rate_limits() -> Dict[str, RateLimitSettings]:
    return {
        "global": RateLimitSettings(points=1000, duration_ms=60_000),
        "authOps": RateLimitSettings(points=500, duration_ms=60_000),
        "storageOps": RateLimitSettings(points=300, duration_ms=60_000),
        "dataOps": RateLimitSettings(points=800, duration_ms=60_000),
        "hostingOps": RateLimitSettings(points=100, duration_ms=60_000),
    }


class GatewayConfig(BaseModel):
    """Top-level gateway configuration."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    rate_limits: Dict[str, RateLimitSettings] = Field(default_factory=default_rate_limits, alias="rateLimits")
    retry: RetrySettings = Field(default_factory=RetrySettings, alias="retryConfig")
    cache: CacheSettings = Field(default_factory=CacheSettings)
    metrics_enabled: bool = Field(True, alias="enableMetrics")

    @field_validator("rate_limits")
    @classmethod
    def require_categories(cls, v: Dict[str, RateLimitSettings]) -> Dict[str, RateLimitSettings]:
        if not v:
            raise ValueError("at least one rate-limit category is required")
        return v

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "GatewayConfig":
        """
        Build a config from a partial mapping layered over the defaults.

        Rate-limit categories given in ``data`` replace or extend the default
        categories; unspecified categories keep their defaults.
        """
        data = dict(data or {})
        limits = data.pop("rateLimits", None) or data.pop("rate_limits", None)
        config = cls.model_validate(data)
        if limits:
            merged = dict(config.rate_limits)
            for category, settings in limits.items():
                merged[category] = RateLimitSettings.model_validate(settings)
            config = config.model_copy(update={"rate_limits": merged})
        return config

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        """Load configuration from the environment (see ``config.loader``)."""
        from ..config.loader import load_config_overrides

        return cls.from_dict(load_config_overrides())

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)
