"""Convert amounts from the command line or watch live rates in a terminal."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Sequence, TextIO

from fx_converter import FxConverter
from fx_converter.config import ConverterSettings
from fx_converter.exceptions import ConverterError
from fx_converter.ui.controller import ConverterController
from fx_converter.ui.display import CONVERSION_ERROR
from fx_converter.ui.state import initial_state
from fx_converter.ui.view import ConverterView
from fx_converter.utils.formatting import format_currency, format_input
from fx_converter.utils.logger import get_logger, set_verbosity

LOGGER = get_logger(__name__)

__all__ = ["TerminalRenderer", "parse_args", "run_once", "watch", "main"]


class TerminalRenderer:
    """Print each distinct view as a short block of lines."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream or sys.stdout
        self._last_lines: list[str] | None = None

    def lines_for(self, view: ConverterView) -> list[str]:
        if view.loading_visible:
            return ["Carregando..."]
        if view.error_visible:
            return [f"Erro: {view.error_message}"]
        lines = []
        if view.result:
            lines.append(f"{view.amount} {view.from_currency} = {view.result} {view.to_currency}")
        lines.append(view.rate_display)
        if view.last_update:
            lines.append(view.last_update)
        return lines

    def __call__(self, view: ConverterView) -> None:
        lines = self.lines_for(view)
        if lines == self._last_lines:
            return
        self._last_lines = lines
        for line in lines:
            print(line, file=self.stream)
        self.stream.flush()


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("amount", help="Amount in the source currency, e.g. 100 or 12.50")
    parser.add_argument("from_currency", metavar="FROM", help="Source currency code, e.g. USD")
    parser.add_argument("to_currency", metavar="TO", help="Target currency code, e.g. BRL")
    parser.add_argument(
        "--base-url",
        dest="base_url",
        default=None,
        help="Exchange rate endpoint; the base currency code is appended to it",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds",
    )
    parser.add_argument(
        "--symbol",
        action="store_true",
        help="Prefix the converted amount with the currency symbol",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep running and refresh rates periodically until interrupted",
    )
    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Stop watching after this many seconds",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def run_once(fx: FxConverter, args: argparse.Namespace, stream: TextIO) -> int:
    try:
        result = fx.convert(args.amount, args.from_currency, args.to_currency)
    except ConverterError as exc:
        LOGGER.error("Conversion failed: %s", exc.message)
        print(f"Erro: {CONVERSION_ERROR}", file=sys.stderr)
        return 1
    except ValueError as exc:
        LOGGER.error("Invalid conversion arguments: %s", exc)
        print(f"Erro: {exc}", file=sys.stderr)
        return 1

    to_code = args.to_currency.strip().upper()
    if result is not None:
        if args.symbol:
            converted = format_currency(result.converted_amount, to_code, fx.settings.locale)
        else:
            converted = f"{fx.format(result.converted_amount)} {to_code}"
        print(converted, file=stream)
    print(fx.describe(result, args.from_currency, args.to_currency), file=stream)
    last_update = fx.last_update()
    if last_update:
        print(last_update, file=stream)
    return 0


async def watch(
    controller: ConverterController,
    duration: float | None = None,
) -> None:
    """Drive ``controller`` until cancelled or ``duration`` seconds elapse."""

    await controller.start()
    try:
        if duration is None:
            await asyncio.Event().wait()
        else:
            await asyncio.sleep(duration)
    finally:
        await controller.stop()


def main(argv: Sequence[str] | None = None, *, fx: FxConverter | None = None) -> int:
    args = parse_args(argv)
    set_verbosity(args.verbose)
    settings = ConverterSettings().with_overrides(base_url=args.base_url, timeout=args.timeout)
    converter = fx or FxConverter(settings)

    if not args.watch:
        return run_once(converter, args, sys.stdout)

    controller = ConverterController(
        converter.source,
        settings=converter.settings,
        renderer=TerminalRenderer(),
        state=initial_state(
            args.from_currency,
            args.to_currency,
            format_input(args.amount),
            locale=converter.settings.locale,
        ),
    )
    try:
        asyncio.run(watch(controller, args.duration))
    except KeyboardInterrupt:
        LOGGER.info("Stopped watching rates")
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
