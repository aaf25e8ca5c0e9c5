"""Conversion policy over an explicit :class:`RateTable` snapshot."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from fx_converter.exceptions import FormatError, RateUnavailable
from fx_converter.ingestion.models import (
    ConversionRequest,
    ConversionResult,
    FetchReason,
    NeedsFetch,
    RateTable,
)
from fx_converter.utils.formatting import parse_amount
from fx_converter.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["convert", "resolve_conversion", "ConversionOutcome"]


def convert(
    amount: str | float | None,
    from_currency: str,
    to_currency: str,
    table: RateTable | None,
) -> ConversionResult | NeedsFetch | None:
    """Convert ``amount`` using ``table`` or report what must be fetched first.

    Returns ``None`` when there is nothing to convert (empty, zero, negative or
    non-numeric amount). Same-currency conversions never need rates.
    """

    value = parse_amount(amount)
    if not value or value <= 0:
        return None

    request = ConversionRequest(amount=value, from_currency=from_currency, to_currency=to_currency)
    if from_currency == to_currency:
        return ConversionResult(request=request, converted_amount=value, rate=1.0)

    if table is None or table.is_empty:
        return NeedsFetch(from_currency, FetchReason.EMPTY_TABLE)
    if table.base_currency != from_currency:
        return NeedsFetch(from_currency, FetchReason.BASE_MISMATCH)

    rate = table.get(to_currency)
    if not rate or rate <= 0:
        return NeedsFetch(from_currency, FetchReason.MISSING_RATE)
    return ConversionResult(request=request, converted_amount=value * rate, rate=rate)


@dataclass(frozen=True, slots=True)
class ConversionOutcome:
    """Result of a resolved conversion plus the table it was computed from."""

    result: ConversionResult | None
    table: RateTable | None


def resolve_conversion(
    amount: str | float | None,
    from_currency: str,
    to_currency: str,
    table: RateTable | None,
    fetch: Callable[[str], RateTable],
) -> ConversionOutcome:
    """Run :func:`convert`, fetching rates whenever it asks for them.

    A stale or mismatched table is refreshed once. A missing target rate forces
    one extra fetch even when the base already matches; if the rate is still
    missing afterwards :class:`RateUnavailable` is raised. Fetch errors
    propagate unchanged.
    """

    fetched = False
    forced = False
    while True:
        outcome = convert(amount, from_currency, to_currency, table)
        if not isinstance(outcome, NeedsFetch):
            return ConversionOutcome(result=outcome, table=table)

        reason = outcome.reason
        if fetched and reason is FetchReason.EMPTY_TABLE:
            # An empty fetched table counts as a missing target rate.
            reason = FetchReason.MISSING_RATE

        if reason is FetchReason.MISSING_RATE:
            if forced:
                raise RateUnavailable(from_currency, to_currency)
            forced = True
            LOGGER.info("No %s rate in %s table; forcing a re-fetch", to_currency, from_currency)
        elif fetched:
            base = table.base_currency if table is not None else None
            raise FormatError(f"Rate source returned base {base!r} when {from_currency!r} was requested")

        table = fetch(outcome.base_currency)
        fetched = True
