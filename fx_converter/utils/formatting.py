"""Locale aware number formatting for amounts and rates."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

__all__ = [
    "NumberLocale",
    "PT_BR",
    "EN_US",
    "CURRENCY_SYMBOLS",
    "decimals_for",
    "format_number",
    "parse_formatted_number",
    "parse_amount",
    "format_input",
    "currency_symbol",
    "format_currency",
]

# Leading numeric prefix, as a browser's ``parseFloat`` reads it.
_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


@dataclass(frozen=True, slots=True)
class NumberLocale:
    """Grouping and decimal separators used to render numbers."""

    name: str
    group_separator: str
    decimal_separator: str


PT_BR = NumberLocale(name="pt-BR", group_separator=".", decimal_separator=",")
EN_US = NumberLocale(name="en-US", group_separator=",", decimal_separator=".")

CURRENCY_SYMBOLS: dict[str, str] = {
    "USD": "$",
    "EUR": "€",
    "BRL": "R$",
    "GBP": "£",
    "JPY": "¥",
    "CAD": "C$",
    "AUD": "A$",
    "CHF": "CHF",
    "CNY": "¥",
    "INR": "₹",
    "KRW": "₩",
    "MXN": "$",
    "SGD": "S$",
    "NZD": "NZ$",
    "NOK": "kr",
    "SEK": "kr",
    "RUB": "₽",
    "ZAR": "R",
    "TRY": "₺",
    "ARS": "$",
}


def decimals_for(value: float) -> int:
    """Return the precision tier for ``value``: 6, 4 or 2 decimal places."""

    magnitude = abs(value)
    if magnitude < 0.01:
        return 6
    if magnitude < 1:
        return 4
    return 2


def _render(value: float, decimals: int, locale: NumberLocale) -> str:
    quantum = Decimal(1).scaleb(-decimals)
    try:
        rounded: Decimal | float = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        rounded = value
    plain = f"{rounded:,.{decimals}f}"
    integer_part, _, fraction = plain.partition(".")
    integer_part = integer_part.replace(",", locale.group_separator)
    if not fraction:
        return integer_part
    return f"{integer_part}{locale.decimal_separator}{fraction}"


def format_number(value: float | None, locale: NumberLocale = PT_BR) -> str:
    """Format ``value`` with a precision tier chosen by its magnitude.

    ``NaN`` (and ``None``) render as a zero with two decimals.
    """

    if value is None or math.isnan(value):
        return _render(0.0, 2, locale)
    if math.isinf(value):
        return "∞" if value > 0 else "-∞"
    return _render(float(value), decimals_for(value), locale)


def parse_formatted_number(formatted: str | None, locale: NumberLocale = PT_BR) -> str:
    """Turn a locale formatted number back into a plain decimal string.

    Group separators are stripped and the first decimal separator becomes a
    period. Input written with the opposite convention is misread: under
    ``PT_BR`` the string ``"1.5"`` becomes ``"15"``.
    """

    if not formatted:
        return ""
    stripped = formatted.replace(locale.group_separator, "")
    return stripped.replace(locale.decimal_separator, ".", 1)


def parse_amount(value: str | float | int | None) -> float | None:
    """Read a numeric amount from user input.

    Numbers pass through; strings are read up to the first character that is
    not part of a decimal literal, so ``"12abc"`` yields ``12.0`` and ``"1,5"``
    yields ``1.0``. Returns ``None`` when nothing numeric is found.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return None if math.isnan(number) else number
    match = _LEADING_NUMBER.match(value)
    if not match:
        return None
    try:
        return float(match.group(1))
    except ValueError:  # pragma: no cover - regex only admits float literals
        return None


def format_input(value: str) -> str:
    """Normalise a typed amount to two decimals, leaving invalid input untouched."""

    number = parse_amount(value)
    if not number or math.isinf(number):
        return value
    try:
        return f"{Decimal(repr(number)).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):f}"
    except InvalidOperation:
        return f"{number:.2f}"


def currency_symbol(currency: str) -> str:
    """Return the display symbol for ``currency`` or the code itself."""

    return CURRENCY_SYMBOLS.get(currency.upper(), currency)


def format_currency(amount: float, currency: str, locale: NumberLocale = PT_BR) -> str:
    """Format ``amount`` with two decimals prefixed by the currency symbol."""

    return f"{currency_symbol(currency)} {_render(float(amount), 2, locale)}"
