"""User facing texts shown by the converter widget."""

from __future__ import annotations

from datetime import datetime, timezone

from fx_converter.utils.formatting import PT_BR, NumberLocale, format_number

INITIAL_LOAD_ERROR = "Erro ao carregar dados iniciais"
CONVERSION_ERROR = "Erro ao converter moedas"
OFFLINE_ERROR = "Sem conexão com a internet"
SELECT_CURRENCIES = "Selecione as moedas para ver a taxa"

__all__ = [
    "INITIAL_LOAD_ERROR",
    "CONVERSION_ERROR",
    "OFFLINE_ERROR",
    "SELECT_CURRENCIES",
    "rate_display_text",
    "last_update_text",
]


def rate_display_text(
    from_currency: str | None,
    to_currency: str | None,
    rate: float | None = None,
    locale: NumberLocale = PT_BR,
) -> str:
    """Describe the rate between two currencies as ``1 X = Y Z``."""

    if not from_currency or not to_currency:
        return SELECT_CURRENCIES
    if not rate or from_currency == to_currency:
        return f"1 {from_currency} = 1 {to_currency}"
    return f"1 {from_currency} = {format_number(rate, locale)} {to_currency}"


def last_update_text(fetched_at: datetime | None, now: datetime | None = None) -> str | None:
    """Return ``Atualizado ...`` relative to ``now`` or ``None`` before any fetch."""

    if fetched_at is None:
        return None
    current = now or datetime.now(timezone.utc)
    if fetched_at.tzinfo is None:
        fetched_at = fetched_at.replace(tzinfo=timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)

    minutes = int((current - fetched_at).total_seconds() // 60)
    if minutes < 1:
        label = "Agora mesmo"
    elif minutes < 60:
        label = f"{minutes} min atrás"
    else:
        label = f"{minutes // 60}h atrás"
    return f"Atualizado {label}"
