"""Pydantic models for rate tables, conversions and converter state."""

import math
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utc_now() -> datetime:
    return datetime.now(UTC)


def _ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class RateSource(str, Enum):
    """Where the effective rate of a conversion came from."""

    IDENTITY = "identity"
    CACHE = "cache"
    FETCH = "fetch"


class RateTable(BaseModel):
    """Rates for one base currency, as published by the provider."""

    model_config = ConfigDict(frozen=True)

    base_currency: str = Field(..., min_length=3, max_length=3, description="Base currency code")
    rates: dict[str, float] = Field(
        ..., description="Units of each currency per one unit of the base currency"
    )
    fetched_at: datetime = Field(default_factory=_utc_now, description="When rates were fetched")

    @model_validator(mode="before")
    @classmethod
    def inject_base_rate(cls, data: Any) -> Any:
        """Add the base currency at 1.0 when the provider omits it."""
        if isinstance(data, dict) and isinstance(data.get("rates"), dict):
            base = str(data.get("base_currency", "")).upper()
            rates = {str(code).upper(): value for code, value in data["rates"].items()}
            rates.setdefault(base, 1.0)
            data = {**data, "base_currency": base, "rates": rates}
        return data

    @field_validator("rates")
    @classmethod
    def validate_rates(cls, v: dict[str, float]) -> dict[str, float]:
        """Validate every rate is a positive finite number."""
        for code, rate in v.items():
            if not math.isfinite(rate) or rate <= 0:
                msg = f"Rate for {code} must be a positive finite number, got {rate}"
                raise ValueError(msg)
        return v

    @field_validator("fetched_at")
    @classmethod
    def validate_fetched_at(cls, v: datetime) -> datetime:
        """Normalize naive timestamps to UTC."""
        return _ensure_aware(v)

    @model_validator(mode="after")
    def validate_base_is_unity(self) -> "RateTable":
        """Validate the base currency maps to exactly 1.0."""
        if self.rates[self.base_currency] != 1.0:
            msg = (
                f"Base currency {self.base_currency} must have rate 1.0, "
                f"got {self.rates[self.base_currency]}"
            )
            raise ValueError(msg)
        return self

    def get(self, currency: str) -> float | None:
        """Get the rate for a currency, or None when absent."""
        return self.rates.get(currency.upper())

    def __contains__(self, currency: object) -> bool:
        return isinstance(currency, str) and currency.upper() in self.rates

    def __len__(self) -> int:
        return len(self.rates)


class ConversionRecord(BaseModel):
    """A completed conversion as kept in history."""

    model_config = ConfigDict(frozen=True)

    source_amount: float = Field(..., gt=0, allow_inf_nan=False)
    source_currency: str = Field(..., min_length=3, max_length=3)
    target_amount: float = Field(..., gt=0, allow_inf_nan=False)
    target_currency: str = Field(..., min_length=3, max_length=3)
    rate: float = Field(..., gt=0, allow_inf_nan=False)
    timestamp: datetime = Field(default_factory=_utc_now)

    @field_validator("source_currency", "target_currency")
    @classmethod
    def validate_currency_code(cls, v: str) -> str:
        """Validate currency codes are uppercase."""
        return v.upper()

    @field_validator("timestamp")
    @classmethod
    def validate_timestamp(cls, v: datetime) -> datetime:
        """Normalize naive timestamps to UTC."""
        return _ensure_aware(v)

    def to_persisted(self) -> dict[str, Any]:
        """Serialize into the persisted history item shape."""
        return {
            "from": {"amount": self.source_amount, "currency": self.source_currency},
            "to": {"amount": self.target_amount, "currency": self.target_currency},
            "rate": self.rate,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_persisted(cls, item: Any) -> "ConversionRecord":
        """Rebuild a record from a persisted history item.

        Raises:
            pydantic.ValidationError: If the item does not describe a valid record
        """
        if not isinstance(item, dict):
            item = {}
        source = item.get("from") if isinstance(item.get("from"), dict) else {}
        target = item.get("to") if isinstance(item.get("to"), dict) else {}
        return cls(
            source_amount=source.get("amount"),
            source_currency=source.get("currency"),
            target_amount=target.get("amount"),
            target_currency=target.get("currency"),
            rate=item.get("rate"),
            timestamp=item.get("timestamp"),
        )


class ConversionResult(BaseModel):
    """Outcome of a single conversion."""

    model_config = ConfigDict(frozen=True)

    amount: float = Field(..., description="Original amount")
    from_currency: str = Field(..., description="Source currency code")
    to_currency: str = Field(..., description="Target currency code")
    converted_amount: float = Field(..., description="Converted amount")
    effective_rate: float = Field(..., description="Exchange rate used")
    rate_source: RateSource = Field(..., description="Where the rate came from")
    timestamp: datetime = Field(default_factory=_utc_now, description="When conversion happened")

    def to_record(self) -> ConversionRecord:
        """Build the history record for this conversion."""
        return ConversionRecord(
            source_amount=self.amount,
            source_currency=self.from_currency,
            target_amount=self.converted_amount,
            target_currency=self.to_currency,
            rate=self.effective_rate,
            timestamp=self.timestamp,
        )


class ErrorRecord(BaseModel):
    """An error captured in the application state error log."""

    message: str
    operation: str
    timestamp: datetime = Field(default_factory=_utc_now)
    details: dict[str, str] = Field(default_factory=dict)


class AppStats(BaseModel):
    """Snapshot of converter statistics."""

    api_call_count: int
    last_update: datetime | None
    error_count: int
    supported_currency_count: int
    history_count: int
    is_online: bool


class DisplayState(BaseModel):
    """What a front end should currently show."""

    result: ConversionResult | None = None
    error: str | None = None
    advisory: str | None = None
    is_loading: bool = False

    def show_result(self, result: ConversionResult) -> None:
        """Show a result, hiding any previous error."""
        self.result = result
        self.error = None

    def show_error(self, message: str) -> None:
        """Show an error, hiding any previous result."""
        self.error = message
        self.result = None

    def clear(self) -> None:
        """Hide both result and error."""
        self.result = None
        self.error = None
