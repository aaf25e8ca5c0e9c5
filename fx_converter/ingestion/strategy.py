"""Abstractions for pluggable exchange rate sources."""

from __future__ import annotations

from typing import Protocol

from fx_converter.ingestion.models import RateTable


class RateSource(Protocol):
    """Contract for fetching a rate table.

    Implementations return a fresh :class:`RateTable` whose ``base_currency``
    equals the requested code, and raise one of the
    :mod:`fx_converter.exceptions` errors on failure. They must not retry
    internally; callers decide whether to invoke them again.
    """

    def fetch_rates(self, base_currency: str) -> RateTable:
        ...  # pragma: no cover - protocol definition


__all__ = ["RateSource"]
