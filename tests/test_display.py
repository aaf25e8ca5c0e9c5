from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from fx_converter.ingestion.models import RateTable
from fx_converter.ui.display import SELECT_CURRENCIES, last_update_text, rate_display_text
from fx_converter.ui.state import Phase, initial_state
from fx_converter.ui.view import render_view
from fx_converter.utils.formatting import EN_US

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "from_currency, to_currency, rate, expected",
    [
        ("", "EUR", 0.92, SELECT_CURRENCIES),
        ("USD", None, 0.92, SELECT_CURRENCIES),
        ("USD", "EUR", None, "1 USD = 1 EUR"),
        ("USD", "USD", 1.0, "1 USD = 1 USD"),
        ("USD", "EUR", 0.92, "1 USD = 0,9200 EUR"),
        ("USD", "JPY", 151.234, "1 USD = 151,23 JPY"),
        ("JPY", "USD", 0.0066, "1 JPY = 0,006600 USD"),
    ],
)
def test_rate_display_text(
    from_currency: str | None, to_currency: str | None, rate: float | None, expected: str
) -> None:
    assert rate_display_text(from_currency, to_currency, rate) == expected


def test_rate_display_text_honours_locale() -> None:
    assert rate_display_text("USD", "JPY", 1510.5, EN_US) == "1 USD = 1,510.50 JPY"


@pytest.mark.parametrize(
    "age, expected",
    [
        (timedelta(seconds=30), "Atualizado Agora mesmo"),
        (timedelta(minutes=1), "Atualizado 1 min atrás"),
        (timedelta(minutes=59, seconds=59), "Atualizado 59 min atrás"),
        (timedelta(hours=1), "Atualizado 1h atrás"),
        (timedelta(hours=14, minutes=20), "Atualizado 14h atrás"),
    ],
)
def test_last_update_text_buckets(age: timedelta, expected: str) -> None:
    assert last_update_text(NOW - age, NOW) == expected


def test_last_update_text_without_fetch() -> None:
    assert last_update_text(None, NOW) is None


def test_last_update_text_accepts_naive_datetimes() -> None:
    assert last_update_text(datetime(2024, 5, 1, 11, 55), NOW) == "Atualizado 5 min atrás"


def test_render_view_hides_error_outside_error_phase() -> None:
    table = RateTable("USD", {"EUR": 0.92}, fetched_at=NOW - timedelta(minutes=3))
    state = initial_state("USD", "EUR")

    loading = replace(state, phase=Phase.LOADING, error_message="stale", fetched_at=table.fetched_at)
    view = render_view(loading, NOW)

    assert view.loading_visible is True
    assert view.error_visible is False
    assert view.error_message is None
    assert view.retry_enabled is False
    assert view.last_update == "Atualizado 3 min atrás"

    failed = replace(state, phase=Phase.ERROR, error_message="Erro ao converter moedas")
    view = render_view(failed, NOW)

    assert view.error_visible is True
    assert view.error_message == "Erro ao converter moedas"
    assert view.last_update is None
