"""Error taxonomy shared by the rate fetcher, converter and UI controller."""

from __future__ import annotations


class ConverterError(Exception):
    """Base exception for all fx_converter errors."""

    def __init__(self, message: str = "An unspecified currency conversion error occurred.") -> None:
        self.message = message
        super().__init__(self.message)


class NetworkError(ConverterError):
    """Raised when the rate service cannot be reached at the transport level."""

    def __init__(self, message: str = "Unable to reach the exchange rate service.") -> None:
        super().__init__(message)


class HttpError(ConverterError):
    """Raised when the rate service answers with a non-2xx status."""

    def __init__(self, status_code: int, url: str | None = None) -> None:
        self.status_code = status_code
        self.url = url
        target = f" for {url}" if url else ""
        super().__init__(f"Exchange rate service responded with HTTP {status_code}{target}.")


class FormatError(ConverterError):
    """Raised when a rate payload does not have the expected shape."""

    def __init__(self, message: str = "Invalid exchange rate response format.") -> None:
        super().__init__(message)


class RateUnavailable(ConverterError):
    """Raised when a target rate is still missing after a forced re-fetch."""

    def __init__(self, base_currency: str, currency: str) -> None:
        self.base_currency = base_currency
        self.currency = currency
        super().__init__(f"No {currency} rate available for base currency {base_currency}.")


__all__ = ["ConverterError", "NetworkError", "HttpError", "FormatError", "RateUnavailable"]
