"""Runtime settings for the converter facade, controller and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

from fx_converter.utils.formatting import PT_BR, NumberLocale

DEFAULT_BASE_URL = "https://api.exchangerate-api.com/v4/latest/"
DEFAULT_USER_AGENT = "fx-converter-rates/1.0"

__all__ = ["ConverterSettings", "DEFAULT_BASE_URL", "DEFAULT_USER_AGENT"]


@dataclass(slots=True)
class ConverterSettings:
    """How the converter talks to the rate service and paces its updates."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 10.0
    debounce_seconds: float = 0.3
    refresh_interval_seconds: float = 300.0
    clock_interval_seconds: float = 60.0
    default_from: str = "USD"
    default_to: str = "BRL"
    locale: NumberLocale = field(default=PT_BR)
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if not self.base_url.endswith("/"):
            self.base_url = f"{self.base_url}/"
        for name in ("timeout", "refresh_interval_seconds", "clock_interval_seconds"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")
        if self.debounce_seconds < 0:
            raise ValueError("debounce_seconds must not be negative")
        self.default_from = self.default_from.strip().upper()
        self.default_to = self.default_to.strip().upper()

    def with_overrides(self, **overrides: Any) -> "ConverterSettings":
        """Return a copy with every non-``None`` override applied."""

        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)
