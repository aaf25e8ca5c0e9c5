"""Pure state machine behind the converter widget.

``transition(state, event)`` returns the next :class:`State` together with the
commands the surrounding controller has to execute (fetch rates, schedule a
debounced conversion, render). Outcomes of those commands come back in as new
events, so every decision the widget takes can be tested without a UI, a
network or an event loop.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Union

from fx_converter.conversion import convert
from fx_converter.exceptions import ConverterError, RateUnavailable
from fx_converter.ingestion.models import ConversionResult, FetchReason, NeedsFetch, RateTable
from fx_converter.ui.display import (
    CONVERSION_ERROR,
    INITIAL_LOAD_ERROR,
    OFFLINE_ERROR,
    rate_display_text,
)
from fx_converter.utils.formatting import (
    PT_BR,
    NumberLocale,
    format_input,
    format_number,
    parse_formatted_number,
)
from fx_converter.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = [
    "Phase",
    "FetchPurpose",
    "State",
    "initial_state",
    "Started",
    "RetryRequested",
    "AmountChanged",
    "AmountBlurred",
    "FromCurrencyChanged",
    "ToCurrencyChanged",
    "ConversionRequested",
    "SwapRequested",
    "RatesLoaded",
    "RatesFailed",
    "RefreshDue",
    "WentOnline",
    "WentOffline",
    "ClockTicked",
    "Event",
    "FetchRates",
    "ScheduleConversion",
    "Render",
    "Command",
    "transition",
]


class Phase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


class FetchPurpose(str, Enum):
    """Which flow asked for rates; selects the error message on failure."""

    INITIAL = "initial"
    CONVERSION = "conversion"


@dataclass(frozen=True, slots=True)
class State:
    """Everything the widget shows plus the rate snapshot it computes from."""

    from_currency: str = ""
    to_currency: str = ""
    amount_text: str = ""
    result_text: str = ""
    rate_display: str = rate_display_text(None, None)
    phase: Phase = Phase.IDLE
    error_message: str | None = None
    table: RateTable | None = None
    fetched_at: datetime | None = None
    in_flight: tuple[str, ...] = ()
    forced_refetch: bool = False
    locale: NumberLocale = PT_BR

    @property
    def loading_visible(self) -> bool:
        return self.phase is Phase.LOADING

    @property
    def error_visible(self) -> bool:
        return self.phase is Phase.ERROR

    @property
    def retry_enabled(self) -> bool:
        return self.phase is not Phase.LOADING


def initial_state(
    from_currency: str = "USD",
    to_currency: str = "BRL",
    amount_text: str = "",
    *,
    locale: NumberLocale = PT_BR,
) -> State:
    from_code = from_currency.strip().upper()
    to_code = to_currency.strip().upper()
    return State(
        from_currency=from_code,
        to_currency=to_code,
        amount_text=amount_text,
        rate_display=rate_display_text(from_code, to_code, None, locale),
        locale=locale,
    )


# Events ---------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Started:
    pass


@dataclass(frozen=True, slots=True)
class RetryRequested:
    pass


@dataclass(frozen=True, slots=True)
class AmountChanged:
    text: str


@dataclass(frozen=True, slots=True)
class AmountBlurred:
    pass


@dataclass(frozen=True, slots=True)
class FromCurrencyChanged:
    currency: str


@dataclass(frozen=True, slots=True)
class ToCurrencyChanged:
    currency: str


@dataclass(frozen=True, slots=True)
class ConversionRequested:
    pass


@dataclass(frozen=True, slots=True)
class SwapRequested:
    pass


@dataclass(frozen=True, slots=True)
class RatesLoaded:
    table: RateTable
    purpose: FetchPurpose


@dataclass(frozen=True, slots=True)
class RatesFailed:
    base_currency: str
    purpose: FetchPurpose
    error: ConverterError


@dataclass(frozen=True, slots=True)
class RefreshDue:
    visible: bool = True


@dataclass(frozen=True, slots=True)
class WentOnline:
    pass


@dataclass(frozen=True, slots=True)
class WentOffline:
    pass


@dataclass(frozen=True, slots=True)
class ClockTicked:
    now: datetime


Event = Union[
    Started,
    RetryRequested,
    AmountChanged,
    AmountBlurred,
    FromCurrencyChanged,
    ToCurrencyChanged,
    ConversionRequested,
    SwapRequested,
    RatesLoaded,
    RatesFailed,
    RefreshDue,
    WentOnline,
    WentOffline,
    ClockTicked,
]


# Commands -------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FetchRates:
    base_currency: str
    purpose: FetchPurpose


@dataclass(frozen=True, slots=True)
class ScheduleConversion:
    """Restart the debounce window; a ``ConversionRequested`` follows it."""


@dataclass(frozen=True, slots=True)
class Render:
    pass


Command = Union[FetchRates, ScheduleConversion, Render]


# Transitions ----------------------------------------------------------------


def transition(state: State, event: Event) -> tuple[State, list[Command]]:
    """Apply ``event`` to ``state``; a ``Render`` is appended whenever it changed."""

    new_state, commands = _apply(state, event)
    if new_state != state or isinstance(event, ClockTicked):
        commands.append(Render())
    return new_state, commands


def _apply(state: State, event: Event) -> tuple[State, list[Command]]:
    if isinstance(event, (Started, RetryRequested, WentOnline)):
        return _start_load(state)
    if isinstance(event, RefreshDue):
        if not event.visible:
            return state, []
        return _start_load(state)
    if isinstance(event, WentOffline):
        return replace(state, phase=Phase.ERROR, error_message=OFFLINE_ERROR), []
    if isinstance(event, AmountChanged):
        return replace(state, amount_text=event.text), [ScheduleConversion()]
    if isinstance(event, AmountBlurred):
        return replace(state, amount_text=format_input(state.amount_text)), []
    if isinstance(event, FromCurrencyChanged):
        return _convert(replace(state, from_currency=event.currency.strip().upper()))
    if isinstance(event, ToCurrencyChanged):
        return _convert(replace(state, to_currency=event.currency.strip().upper()))
    if isinstance(event, ConversionRequested):
        return _convert(state)
    if isinstance(event, SwapRequested):
        return _swap(state)
    if isinstance(event, RatesLoaded):
        return _rates_loaded(state, event)
    if isinstance(event, RatesFailed):
        return _rates_failed(state, event)
    if isinstance(event, ClockTicked):
        return state, []
    raise TypeError(f"Unsupported event: {event!r}")


def _start_load(state: State) -> tuple[State, list[Command]]:
    base = state.from_currency
    if not base:
        return replace(state, phase=Phase.IDLE, error_message=None), []
    loading = replace(
        state,
        phase=Phase.LOADING,
        error_message=None,
        in_flight=state.in_flight + (base,),
        forced_refetch=False,
    )
    return loading, [FetchRates(base, FetchPurpose.INITIAL)]


def _swap(state: State) -> tuple[State, list[Command]]:
    amount_text = state.amount_text
    if state.result_text:
        amount_text = parse_formatted_number(state.result_text, state.locale)
    swapped = replace(
        state,
        from_currency=state.to_currency,
        to_currency=state.from_currency,
        amount_text=amount_text,
        table=None,
    )
    return _convert(swapped)


def _settled_phase(state: State) -> Phase:
    if state.phase is Phase.LOADING and state.in_flight:
        return Phase.LOADING
    if state.phase is Phase.ERROR:
        return Phase.ERROR
    return Phase.READY if state.table is not None else Phase.IDLE


def _convert(state: State, *, after_fetch: bool = False) -> tuple[State, list[Command]]:
    if not after_fetch:
        state = replace(state, forced_refetch=False)

    from_code, to_code = state.from_currency, state.to_currency
    outcome = None
    if from_code and to_code:
        outcome = convert(state.amount_text, from_code, to_code, state.table)
        if (
            after_fetch
            and isinstance(outcome, NeedsFetch)
            and outcome.reason is FetchReason.EMPTY_TABLE
            and state.table is not None
            and state.table.base_currency == from_code
        ):
            # A fetched table that came back empty counts as a missing rate.
            outcome = NeedsFetch(from_code, FetchReason.MISSING_RATE)

    if outcome is None:
        return (
            replace(
                state,
                result_text="",
                rate_display=rate_display_text(from_code, to_code, None, state.locale),
                phase=_settled_phase(state),
                forced_refetch=False,
            ),
            [],
        )

    if isinstance(outcome, ConversionResult):
        return (
            replace(
                state,
                result_text=format_number(outcome.converted_amount, state.locale),
                rate_display=rate_display_text(from_code, to_code, outcome.rate, state.locale),
                phase=Phase.READY,
                error_message=None,
                forced_refetch=False,
            ),
            [],
        )

    return _request_fetch(state, outcome)


def _request_fetch(state: State, needed: NeedsFetch) -> tuple[State, list[Command]]:
    forced = needed.reason is FetchReason.MISSING_RATE
    if forced and state.forced_refetch:
        error = RateUnavailable(needed.base_currency, state.to_currency)
        LOGGER.warning("%s", error.message)
        return (
            replace(
                state,
                phase=Phase.ERROR,
                error_message=CONVERSION_ERROR,
            ),
            [],
        )

    if not forced and needed.base_currency in state.in_flight:
        return replace(state, phase=Phase.LOADING), []

    loading = replace(
        state,
        phase=Phase.LOADING,
        in_flight=state.in_flight + (needed.base_currency,),
        forced_refetch=forced,
    )
    return loading, [FetchRates(needed.base_currency, FetchPurpose.CONVERSION)]


def _without_one(in_flight: tuple[str, ...], base: str) -> tuple[str, ...]:
    if base not in in_flight:
        return in_flight
    index = in_flight.index(base)
    return in_flight[:index] + in_flight[index + 1 :]


def _rates_loaded(state: State, event: RatesLoaded) -> tuple[State, list[Command]]:
    table = event.table
    state = replace(state, in_flight=_without_one(state.in_flight, table.base_currency))

    if table.base_currency != state.from_currency:
        LOGGER.info(
            "Discarding %s rates; %s is the selected source currency",
            table.base_currency,
            state.from_currency,
        )
        if state.from_currency in state.in_flight:
            return state, []
        return _convert(state, after_fetch=True)

    accepted = replace(
        state,
        table=table,
        fetched_at=table.fetched_at,
        phase=Phase.LOADING if state.in_flight else Phase.READY,
        error_message=None,
    )
    return _convert(accepted, after_fetch=True)


def _rates_failed(state: State, event: RatesFailed) -> tuple[State, list[Command]]:
    state = replace(state, in_flight=_without_one(state.in_flight, event.base_currency))

    if event.base_currency != state.from_currency:
        LOGGER.info("Ignoring failed %s fetch: %s", event.base_currency, event.error.message)
        if state.from_currency in state.in_flight:
            return state, []
        return _convert(state, after_fetch=True)

    LOGGER.warning("Fetching %s rates failed: %s", event.base_currency, event.error.message)
    message = INITIAL_LOAD_ERROR if event.purpose is FetchPurpose.INITIAL else CONVERSION_ERROR
    return (
        replace(state, phase=Phase.ERROR, error_message=message, forced_refetch=False),
        [],
    )
