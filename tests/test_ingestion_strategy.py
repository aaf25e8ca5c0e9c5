from __future__ import annotations

from datetime import datetime, timezone

from fx_converter.conversion import resolve_conversion
from fx_converter.ingestion.models import RateTable
from fx_converter.ingestion.strategy import RateSource


class _DummySource:
    def fetch_rates(self, base_currency: str) -> RateTable:
        return RateTable(
            base_currency,
            {"EUR": 0.5},
            fetched_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        )


def test_rate_source_contract() -> None:
    source: RateSource = _DummySource()

    table = source.fetch_rates("USD")

    assert table.base_currency == "USD"
    assert table.get("EUR") == 0.5
    assert table.get("JPY") is None
    assert "EUR" in table and len(table) == 1
    assert not table.is_empty


def test_rate_source_plugs_into_resolution() -> None:
    source: RateSource = _DummySource()

    outcome = resolve_conversion(8, "USD", "EUR", None, source.fetch_rates)

    assert outcome.result is not None
    assert outcome.result.converted_amount == 4.0
