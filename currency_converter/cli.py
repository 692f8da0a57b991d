"""Command-line front end for the currency converter."""

import argparse
import asyncio
import sys
from pathlib import Path

from currency_converter.config import settings
from currency_converter.controller import ConverterController
from currency_converter.exceptions import ConverterError
from currency_converter.formatting import (
    format_currency,
    format_datetime,
    format_history_item,
    format_number,
    format_rate,
)
from currency_converter.logging_config import configure_logging
from currency_converter.models.currency import SUPPORTED_CURRENCIES, SymbolPlacement
from currency_converter.storage import JsonFileHistoryStore
from currency_converter.tracing_config import configure_tracing


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="currency-converter",
        description="Convert amounts between currencies using live exchange rates",
    )
    parser.add_argument(
        "--history-file",
        type=Path,
        default=settings.history_file,
        help=f"Where conversion history is stored (default: {settings.history_file})",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Log level for diagnostic output on stderr (default: WARNING)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    convert_parser = subparsers.add_parser("convert", help="Convert an amount")
    convert_parser.add_argument("amount", type=float, help="Amount to convert")
    convert_parser.add_argument("from_currency", help="Source currency code, e.g. USD")
    convert_parser.add_argument("to_currency", help="Target currency code, e.g. IDR")

    rates_parser = subparsers.add_parser("rates", help="Show current exchange rates")
    rates_parser.add_argument(
        "--base", default=settings.base_currency, help="Base currency for the rates"
    )

    subparsers.add_parser("currencies", help="List supported currencies")

    history_parser = subparsers.add_parser("history", help="Show conversion history")
    history_parser.add_argument("--limit", type=int, default=10, help="Number of items to show")

    subparsers.add_parser("clear-history", help="Delete all conversion history")
    subparsers.add_parser("stats", help="Show converter statistics")

    return parser


async def _convert(controller: ConverterController, args: argparse.Namespace) -> int:
    await controller.start(auto_refresh=False)
    result = await controller.convert(args.amount, args.from_currency, args.to_currency)
    print(
        f"{format_currency(result.amount, result.from_currency)} = "
        f"{format_currency(result.converted_amount, result.to_currency)}"
    )
    print(format_rate(result))
    return 0


async def _rates(controller: ConverterController, args: argparse.Namespace) -> int:
    base = args.base.strip().upper()
    if base == controller.cache.base_currency:
        table = await controller.force_refresh()
    else:
        table = await controller.engine.fetch_table(base)

    print(f"Exchange rates for 1 {base} (updated {format_datetime(table.fetched_at)}):")
    for code in sorted(SUPPORTED_CURRENCIES):
        rate = table.get(code)
        if rate is not None and code != base:
            print(f"  {code}  {format_number(rate)}")
    return 0


def _currencies() -> int:
    for code in sorted(SUPPORTED_CURRENCIES):
        info = SUPPORTED_CURRENCIES[code]
        placement = "after" if info.placement is SymbolPlacement.AFTER else "before"
        print(f"{info.flag} {code}  {info.name}  ({info.symbol}, symbol {placement})")
    return 0


def _history(controller: ConverterController, args: argparse.Namespace) -> int:
    records = controller.get_history()
    if not records:
        print("No conversion history yet")
        return 0
    for record in records[: max(args.limit, 0)]:
        print(format_history_item(record))
    return 0


def _clear_history(controller: ConverterController) -> int:
    if not controller.clear_history():
        print(controller.display.error)
        return 0
    print("History cleared")
    return 0


async def _stats(controller: ConverterController) -> int:
    await controller.start(auto_refresh=False)
    stats = controller.get_stats()
    last_update = format_datetime(stats.last_update) if stats.last_update else "never"
    print(f"API calls:            {stats.api_call_count}")
    print(f"Last update:          {last_update}")
    print(f"Errors:               {stats.error_count}")
    print(f"Supported currencies: {stats.supported_currency_count}")
    print(f"History items:        {stats.history_count}")
    return 0


async def run(args: argparse.Namespace) -> int:
    """Run a parsed command.

    Returns:
        Process exit code
    """
    store = JsonFileHistoryStore(args.history_file)
    controller = ConverterController(history_store=store)
    try:
        if args.command == "convert":
            return await _convert(controller, args)
        if args.command == "rates":
            return await _rates(controller, args)
        if args.command == "currencies":
            return _currencies()
        if args.command == "history":
            return _history(controller, args)
        if args.command == "clear-history":
            return _clear_history(controller)
        if args.command == "stats":
            return await _stats(controller)
        msg = f"Unknown command: {args.command}"
        raise ValueError(msg)
    except ConverterError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await controller.stop()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the ``currency-converter`` command."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    if settings.otlp_endpoint:
        configure_tracing("currency-converter", settings.otlp_endpoint)
    return asyncio.run(run(args))


if __name__ == "__main__":
    sys.exit(main())
