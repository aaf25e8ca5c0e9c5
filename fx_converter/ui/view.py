"""Immutable snapshots handed to renderers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from fx_converter.ui.display import last_update_text
from fx_converter.ui.state import State

__all__ = ["ConverterView", "Renderer", "render_view"]


@dataclass(frozen=True, slots=True)
class ConverterView:
    """What a front-end displays for one state of the widget."""

    from_currency: str
    to_currency: str
    amount: str
    result: str
    rate_display: str
    last_update: str | None
    loading_visible: bool
    error_visible: bool
    error_message: str | None
    retry_enabled: bool


class Renderer(Protocol):
    def __call__(self, view: ConverterView) -> None:
        ...  # pragma: no cover - protocol definition


def render_view(state: State, now: datetime | None = None) -> ConverterView:
    return ConverterView(
        from_currency=state.from_currency,
        to_currency=state.to_currency,
        amount=state.amount_text,
        result=state.result_text,
        rate_display=state.rate_display,
        last_update=last_update_text(state.fetched_at, now),
        loading_visible=state.loading_visible,
        error_visible=state.error_visible,
        error_message=state.error_message if state.error_visible else None,
        retry_enabled=state.retry_enabled,
    )
