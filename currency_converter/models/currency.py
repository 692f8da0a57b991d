"""Supported currency table."""

from enum import Enum
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field


class SymbolPlacement(str, Enum):
    """Where the currency symbol goes relative to the amount."""

    BEFORE = "before"
    AFTER = "after"


class CurrencyInfo(BaseModel):
    """Display metadata for a supported currency."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(..., min_length=3, max_length=3, description="ISO-style currency code")
    name: str = Field(..., description="Display name")
    symbol: str = Field(..., description="Currency symbol")
    flag: str = Field(default="", description="Flag emoji")
    placement: SymbolPlacement = Field(
        default=SymbolPlacement.BEFORE, description="Symbol placement rule"
    )


def _currency(
    code: str,
    name: str,
    symbol: str,
    flag: str,
    placement: SymbolPlacement = SymbolPlacement.BEFORE,
) -> tuple[str, CurrencyInfo]:
    return code, CurrencyInfo(code=code, name=name, symbol=symbol, flag=flag, placement=placement)


SUPPORTED_CURRENCIES: MappingProxyType[str, CurrencyInfo] = MappingProxyType(
    dict(
        [
            _currency("USD", "US Dollar", "$", "🇺🇸"),
            _currency("EUR", "Euro", "€", "🇪🇺", SymbolPlacement.AFTER),
            _currency("GBP", "British Pound", "£", "🇬🇧"),
            _currency("JPY", "Japanese Yen", "¥", "🇯🇵"),
            _currency("IDR", "Indonesian Rupiah", "Rp", "🇮🇩"),
            _currency("CNY", "Chinese Yuan", "¥", "🇨🇳"),
            _currency("KRW", "South Korean Won", "₩", "🇰🇷"),
            _currency("SGD", "Singapore Dollar", "S$", "🇸🇬"),
            _currency("MYR", "Malaysian Ringgit", "RM", "🇲🇾"),
            _currency("THB", "Thai Baht", "฿", "🇹🇭"),
            _currency("AUD", "Australian Dollar", "A$", "🇦🇺"),
            _currency("CAD", "Canadian Dollar", "C$", "🇨🇦"),
            _currency("CHF", "Swiss Franc", "CHF", "🇨🇭", SymbolPlacement.AFTER),
            _currency("INR", "Indian Rupee", "₹", "🇮🇳"),
            _currency("HKD", "Hong Kong Dollar", "HK$", "🇭🇰"),
            _currency("NZD", "New Zealand Dollar", "NZ$", "🇳🇿"),
        ]
    )
)


def get_currency_info(code: str) -> CurrencyInfo | None:
    """Look up display metadata for a currency code.

    Args:
        code: Currency code (case-insensitive)

    Returns:
        Currency metadata, or None when the code is not supported
    """
    return SUPPORTED_CURRENCIES.get(code.strip().upper())


def get_supported_codes() -> list[str]:
    """Get the sorted list of supported currency codes."""
    return sorted(SUPPORTED_CURRENCIES)
