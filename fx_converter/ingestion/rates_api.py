"""requests-based client for the public exchange rate API."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone
from numbers import Real
from typing import Any, Callable, Mapping

import requests

from fx_converter.config import DEFAULT_BASE_URL, DEFAULT_USER_AGENT
from fx_converter.exceptions import FormatError, HttpError, NetworkError
from fx_converter.ingestion.models import RateTable
from fx_converter.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["ExchangeRateApiClient", "parse_rates_payload", "normalise_currency"]


def normalise_currency(code: str) -> str:
    """Upper-case and strip a currency code, rejecting blanks."""

    cleaned = (code or "").strip().upper()
    if not cleaned:
        raise ValueError("Currency code must not be empty")
    return cleaned


def _coerce_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(text), datetime.min.time())
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_rates_payload(
    payload: object,
    base_currency: str,
    *,
    fetched_at: datetime | None = None,
) -> RateTable:
    """Validate a decoded JSON body and build a :class:`RateTable`.

    The body must be an object carrying a ``rates`` object. Entries that are
    not positive numbers are dropped. ``fetched_at`` defaults to the body's
    ``date`` field and then to the current time.
    """

    if not isinstance(payload, Mapping):
        raise FormatError("Exchange rate response must be a JSON object")
    raw_rates = payload.get("rates")
    if not isinstance(raw_rates, Mapping):
        raise FormatError("Exchange rate response is missing the 'rates' field")

    rates: dict[str, float] = {}
    for code, value in raw_rates.items():
        if (
            isinstance(value, bool)
            or not isinstance(value, Real)
            or not math.isfinite(value)
            or value <= 0
        ):
            LOGGER.warning("Dropping invalid %s rate for base %s: %r", code, base_currency, value)
            continue
        rates[str(code).upper()] = float(value)

    timestamp = _coerce_timestamp(payload.get("date")) or fetched_at or datetime.now(timezone.utc)
    return RateTable(base_currency=base_currency, rates=rates, fetched_at=timestamp)


class ExchangeRateApiClient:
    """Fetch rate tables from ``<base_url>/<BASE>`` endpoints."""

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10.0,
        session: requests.Session | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.base_url = base_url if base_url.endswith("/") else f"{base_url}/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)
        self.session.headers.setdefault("Accept", "application/json")
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def url_for(self, base_currency: str) -> str:
        return f"{self.base_url}{normalise_currency(base_currency)}"

    def fetch_rates(self, base_currency: str) -> RateTable:
        """Download the rate table for ``base_currency``.

        Raises :class:`NetworkError`, :class:`HttpError` or :class:`FormatError`.
        Nothing is retried here.
        """

        base = normalise_currency(base_currency)
        url = self.url_for(base)
        LOGGER.info("Fetching %s rates from %s", base, url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            LOGGER.warning("Rate request for %s failed: %s", base, exc)
            raise NetworkError(f"Unable to reach the exchange rate service: {exc}") from exc

        self._raise_with_context(response, url)
        try:
            payload: Any = response.json()
        except ValueError as exc:
            raise FormatError("Exchange rate response is not valid JSON") from exc

        table = parse_rates_payload(payload, base, fetched_at=self._clock())
        LOGGER.info("Loaded %s rates for base %s", len(table), base)
        return table

    @staticmethod
    def _raise_with_context(response: requests.Response, url: str) -> None:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise HttpError(response.status_code, url) from exc
        if not 200 <= response.status_code < 300:
            raise HttpError(response.status_code, url)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "ExchangeRateApiClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
