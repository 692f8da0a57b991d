"""Display formatting helpers for amounts, rates and timestamps."""

import math
from datetime import datetime

from currency_converter.models.conversion import ConversionRecord, ConversionResult
from currency_converter.models.currency import SymbolPlacement, get_currency_info


def format_number(value: float, decimals: int = 4) -> str:
    """Format a number with thousands separators and up to ``decimals`` places.

    Trailing zeros are trimmed; NaN formats as "0".
    """
    if value is None or math.isnan(value):
        return "0"
    text = f"{value:,.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_currency(amount: float, currency: str) -> str:
    """Format an amount with its currency symbol.

    Unknown currencies use the code as symbol, placed before the amount.
    """
    if amount is None or math.isnan(amount):
        return "0"

    formatted_amount = format_number(amount, 2)
    info = get_currency_info(currency)
    if info is None:
        return f"{currency} {formatted_amount}"
    if info.placement is SymbolPlacement.AFTER:
        return f"{formatted_amount} {info.symbol}"
    return f"{info.symbol} {formatted_amount}"


def format_rate(result: ConversionResult) -> str:
    """Describe the effective rate, e.g. ``1 USD = 15,000 IDR``."""
    return f"1 {result.from_currency} = {format_number(result.effective_rate)} {result.to_currency}"


def format_datetime(value: datetime) -> str:
    """Format a timestamp in local time, e.g. ``18 Oct 2026 14:05``."""
    if not isinstance(value, datetime):
        return ""
    return value.astimezone().strftime("%d %b %Y %H:%M")


def format_history_item(record: ConversionRecord) -> str:
    """Render one history record as a single line."""
    source = get_currency_info(record.source_currency)
    target = get_currency_info(record.target_currency)
    source_flag = f"{source.flag} " if source else ""
    target_flag = f"{target.flag} " if target else ""
    return (
        f"{source_flag}{format_currency(record.source_amount, record.source_currency)} → "
        f"{target_flag}{format_currency(record.target_amount, record.target_currency)}  "
        f"[{format_datetime(record.timestamp)} | Rate: {format_number(record.rate)}]"
    )
