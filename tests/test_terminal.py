from __future__ import annotations

import io
import runpy
from datetime import datetime, timezone

import pytest

from fx_converter import FxConverter, NetworkError, RateTable
from fx_converter.ui import terminal as terminal_module
from fx_converter.ui.terminal import TerminalRenderer, main, parse_args
from fx_converter.ui.view import ConverterView


class _DummySource:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[str] = []

    def fetch_rates(self, base_currency: str) -> RateTable:
        self.calls.append(base_currency)
        if self.error is not None:
            raise self.error
        return RateTable(
            "USD",
            {"EUR": 0.92, "BRL": 5.0},
            fetched_at=datetime.now(timezone.utc),
        )


def _view(**overrides: object) -> ConverterView:
    values: dict[str, object] = {
        "from_currency": "USD",
        "to_currency": "EUR",
        "amount": "100",
        "result": "92,00",
        "rate_display": "1 USD = 0,9200 EUR",
        "last_update": "Atualizado Agora mesmo",
        "loading_visible": False,
        "error_visible": False,
        "error_message": None,
        "retry_enabled": True,
    }
    values.update(overrides)
    return ConverterView(**values)  # type: ignore[arg-type]


def test_parse_args_reads_positionals_and_flags() -> None:
    args = parse_args(["100", "usd", "brl", "--timeout", "3", "--symbol"])

    assert (args.amount, args.from_currency, args.to_currency) == ("100", "usd", "brl")
    assert args.timeout == 3.0
    assert args.symbol is True
    assert args.watch is False


def test_main_prints_conversion(capsys: pytest.CaptureFixture[str]) -> None:
    fx = FxConverter(source=_DummySource())

    exit_code = main(["100", "usd", "eur"], fx=fx)

    lines = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert lines == ["92,00 EUR", "1 USD = 0,9200 EUR", "Atualizado Agora mesmo"]


def test_main_prints_symbol_when_requested(capsys: pytest.CaptureFixture[str]) -> None:
    fx = FxConverter(source=_DummySource())

    main(["2000", "USD", "BRL", "--symbol"], fx=fx)

    assert capsys.readouterr().out.splitlines()[0] == "R$ 10.000,00"


def test_main_without_amount_only_prints_rate_hint(capsys: pytest.CaptureFixture[str]) -> None:
    source = _DummySource()

    exit_code = main(["0", "USD", "EUR"], fx=FxConverter(source=source))

    assert exit_code == 0
    assert capsys.readouterr().out.splitlines() == ["1 USD = 1 EUR"]
    assert source.calls == []


def test_main_reports_fetch_errors(capsys: pytest.CaptureFixture[str]) -> None:
    fx = FxConverter(source=_DummySource(error=NetworkError()))

    exit_code = main(["100", "USD", "EUR"], fx=fx)

    assert exit_code == 1
    assert "Erro ao converter moedas" in capsys.readouterr().err


def test_main_rejects_blank_currency(capsys: pytest.CaptureFixture[str]) -> None:
    source = _DummySource()

    exit_code = main(["100", " ", "EUR"], fx=FxConverter(source=source))

    assert exit_code == 1
    assert "Currency code must not be empty" in capsys.readouterr().err
    assert source.calls == []


def test_main_watch_renders_until_duration(capsys: pytest.CaptureFixture[str]) -> None:
    fx = FxConverter(source=_DummySource())

    exit_code = main(["100", "USD", "EUR", "--watch", "--duration", "0.05"], fx=fx)

    output = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert output[0] == "Carregando..."
    assert "100.00 USD = 92,00 EUR" in output


def test_terminal_renderer_skips_repeated_views() -> None:
    stream = io.StringIO()
    renderer = TerminalRenderer(stream)

    renderer(_view())
    renderer(_view())
    renderer(_view(loading_visible=True))
    renderer(_view(error_visible=True, error_message="Erro ao carregar dados iniciais"))

    assert stream.getvalue().splitlines() == [
        "100 USD = 92,00 EUR",
        "1 USD = 0,9200 EUR",
        "Atualizado Agora mesmo",
        "Carregando...",
        "Erro: Erro ao carregar dados iniciais",
    ]


def test_convert_script_invokes_main(monkeypatch: pytest.MonkeyPatch) -> None:
    called = {"value": False}

    def _fake_main() -> int:
        called["value"] = True
        return 0

    monkeypatch.setattr(terminal_module, "main", _fake_main)

    with pytest.raises(SystemExit) as excinfo:
        runpy.run_module("fx_converter.scripts.convert", run_name="__main__")

    assert excinfo.value.code == 0
    assert called["value"] is True
