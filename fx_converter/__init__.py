"""Public interface for the fx_converter package."""

from __future__ import annotations

from datetime import datetime
from importlib import metadata as importlib_metadata
from typing import TYPE_CHECKING

from fx_converter.config import ConverterSettings
from fx_converter.conversion import ConversionOutcome, convert, resolve_conversion
from fx_converter.exceptions import (
    ConverterError,
    FormatError,
    HttpError,
    NetworkError,
    RateUnavailable,
)
from fx_converter.ingestion.models import ConversionRequest, ConversionResult, NeedsFetch, RateTable
from fx_converter.ingestion.rates_api import ExchangeRateApiClient, normalise_currency
from fx_converter.ingestion.strategy import RateSource
from fx_converter.ui.display import last_update_text, rate_display_text
from fx_converter.utils.formatting import format_number, parse_formatted_number
from fx_converter.utils.logger import get_logger

if TYPE_CHECKING:  # pragma: no cover - imported only for type checking
    import requests

    from fx_converter.ui.controller import ConverterController
    from fx_converter.ui.view import Renderer

LOGGER = get_logger(__name__)

__all__ = [
    "__version__",
    "FxConverter",
    "ConverterSettings",
    "ConversionOutcome",
    "ConversionRequest",
    "ConversionResult",
    "NeedsFetch",
    "RateTable",
    "RateSource",
    "ExchangeRateApiClient",
    "ConverterError",
    "NetworkError",
    "HttpError",
    "FormatError",
    "RateUnavailable",
    "convert",
    "resolve_conversion",
    "format_number",
    "parse_formatted_number",
]

try:
    __version__ = importlib_metadata.version("fx-converter")
except importlib_metadata.PackageNotFoundError:  # pragma: no cover - fallback for local runs
    __version__ = "0.1.0"


class FxConverter:
    """Synchronous facade over a rate source and its current table snapshot."""

    __slots__ = ("settings", "source", "_table")

    # Provide direct access to the package version as a class attribute.
    __version__ = __version__

    def __init__(
        self,
        settings: ConverterSettings | None = None,
        *,
        source: RateSource | None = None,
        session: "requests.Session | None" = None,
    ) -> None:
        """Configure where rates come from.

        Without an explicit ``source`` the public exchange rate API is used,
        reached through ``session`` when one is supplied.
        """

        self.settings = settings or ConverterSettings()
        self.source: RateSource = source or ExchangeRateApiClient(
            base_url=self.settings.base_url,
            timeout=self.settings.timeout,
            session=session,
            user_agent=self.settings.user_agent,
        )
        self._table: RateTable | None = None

    @property
    def table(self) -> RateTable | None:
        """The last fetched rate table, if any."""

        return self._table

    def invalidate(self) -> None:
        """Forget the current table so the next conversion fetches again."""

        self._table = None

    def fetch_rates(self, base_currency: str) -> RateTable:
        """Fetch rates for ``base_currency`` and replace the current table."""

        table = self.source.fetch_rates(normalise_currency(base_currency))
        self._table = table
        return table

    def convert(
        self,
        amount: str | float | None,
        from_currency: str,
        to_currency: str,
    ) -> ConversionResult | None:
        """Convert ``amount``; ``None`` means there was nothing to convert."""

        from_code = normalise_currency(from_currency)
        to_code = normalise_currency(to_currency)
        outcome = resolve_conversion(amount, from_code, to_code, self._table, self.fetch_rates)
        return outcome.result

    def rate(self, from_currency: str, to_currency: str) -> float:
        """Return the multiplier from one unit of ``from_currency``."""

        result = self.convert(1, from_currency, to_currency)
        if result is None:
            raise RateUnavailable(normalise_currency(from_currency), normalise_currency(to_currency))
        return result.rate

    def format(self, value: float | None) -> str:
        return format_number(value, self.settings.locale)

    def describe(self, result: ConversionResult | None, from_currency: str, to_currency: str) -> str:
        """Return the ``1 X = Y Z`` line for ``result``."""

        rate = result.rate if result is not None else None
        return rate_display_text(
            normalise_currency(from_currency),
            normalise_currency(to_currency),
            rate,
            self.settings.locale,
        )

    def last_update(self, now: datetime | None = None) -> str | None:
        fetched_at = self._table.fetched_at if self._table is not None else None
        return last_update_text(fetched_at, now)

    def controller(self, renderer: "Renderer | None" = None) -> "ConverterController":
        """Build an asyncio controller sharing this facade's source and settings."""

        from fx_converter.ui.controller import ConverterController

        return ConverterController(self.source, settings=self.settings, renderer=renderer)
