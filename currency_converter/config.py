"""Configuration settings for the currency converter."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConverterSettings(BaseSettings):
    """Converter settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="CURRENCY_CONVERTER_",
    )

    # Rate provider configuration
    rates_api_base_url: str = "https://api.exchangerate-api.com/v4/latest"
    base_currency: str = "USD"
    request_timeout: float = 10.0

    # Conversion limits
    max_amount: float = 1_000_000_000.0

    # History configuration
    history_capacity: int = 50
    history_file: Path = Path.home() / ".currency_converter" / "history.json"

    # Refresh policy
    refresh_interval_seconds: float = 300.0
    stale_after_seconds: float = 300.0
    reconnect_refresh_after_seconds: float = 60.0

    # Input scheduling
    debounce_seconds: float = 0.5
    throttle_seconds: float = 0.5

    # Observability
    log_level: str = "INFO"
    otlp_endpoint: str | None = None

    @field_validator("rates_api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate the rate provider URL."""
        if not v.startswith(("http://", "https://")):
            msg = "Rates API base URL must start with http:// or https://"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("base_currency")
    @classmethod
    def validate_base_currency(cls, v: str) -> str:
        """Validate and normalize the canonical base currency."""
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            msg = "Base currency must be a 3-letter code"
            raise ValueError(msg)
        return v

    @field_validator("request_timeout", "max_amount")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        """Validate values that must be strictly positive."""
        if v <= 0:
            msg = "Value must be positive"
            raise ValueError(msg)
        return v

    @field_validator("history_capacity")
    @classmethod
    def validate_history_capacity(cls, v: int) -> int:
        """Validate history capacity."""
        if v < 1:
            msg = "History capacity must be at least 1"
            raise ValueError(msg)
        return v

    @field_validator(
        "refresh_interval_seconds",
        "stale_after_seconds",
        "reconnect_refresh_after_seconds",
        "debounce_seconds",
        "throttle_seconds",
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Validate scheduling intervals."""
        if v < 0:
            msg = "Interval must be non-negative"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level name."""
        v = v.upper()
        if v not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Unknown log level: {v}"
            raise ValueError(msg)
        return v


# Global settings instance
settings = ConverterSettings()
