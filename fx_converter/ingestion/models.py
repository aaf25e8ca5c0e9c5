"""Data models shared by the rate fetcher, converter and UI state machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class RateTable:
    """Snapshot of rates relative to a single base currency.

    Tables are never merged: every fetch produces a new instance which replaces
    the previous one wholesale.
    """

    base_currency: str
    rates: dict[str, float] = field(default_factory=dict)
    fetched_at: datetime = field(default_factory=_utcnow)

    def get(self, currency: str) -> float | None:
        return self.rates.get(currency)

    @property
    def is_empty(self) -> bool:
        return not self.rates

    def __contains__(self, currency: object) -> bool:
        return currency in self.rates

    def __len__(self) -> int:
        return len(self.rates)


@dataclass(frozen=True, slots=True)
class ConversionRequest:
    """A single conversion attempt built from the current form values."""

    amount: float
    from_currency: str
    to_currency: str


@dataclass(frozen=True, slots=True)
class ConversionResult:
    request: ConversionRequest
    converted_amount: float
    rate: float


class FetchReason(str, Enum):
    """Why the converter could not answer from the table it was given."""

    EMPTY_TABLE = "empty_table"
    BASE_MISMATCH = "base_mismatch"
    MISSING_RATE = "missing_rate"


@dataclass(frozen=True, slots=True)
class NeedsFetch:
    """Signal that rates for ``base_currency`` must be fetched before retrying."""

    base_currency: str
    reason: FetchReason


__all__ = [
    "RateTable",
    "ConversionRequest",
    "ConversionResult",
    "FetchReason",
    "NeedsFetch",
]
