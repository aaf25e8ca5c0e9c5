from __future__ import annotations

import pytest

from fx_converter.exceptions import (
    ConverterError,
    FormatError,
    HttpError,
    NetworkError,
    RateUnavailable,
)


@pytest.mark.parametrize(
    "error",
    [NetworkError(), HttpError(404), FormatError(), RateUnavailable("USD", "XAU")],
)
def test_errors_share_base_class(error: ConverterError) -> None:
    assert isinstance(error, ConverterError)
    assert str(error) == error.message


def test_http_error_mentions_status_and_url() -> None:
    error = HttpError(503, "https://rates.test/latest/USD")

    assert error.status_code == 503
    assert error.message == (
        "Exchange rate service responded with HTTP 503 for https://rates.test/latest/USD."
    )


def test_rate_unavailable_names_currencies() -> None:
    error = RateUnavailable("USD", "XAU")

    assert (error.base_currency, error.currency) == ("USD", "XAU")
    assert "XAU" in error.message and "USD" in error.message
