"""asyncio controller that executes state machine commands."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable

from fx_converter.config import ConverterSettings
from fx_converter.exceptions import ConverterError
from fx_converter.ingestion.strategy import RateSource
from fx_converter.ui.scheduling import Debouncer, PeriodicTask
from fx_converter.ui.state import (
    AmountBlurred,
    AmountChanged,
    ClockTicked,
    Command,
    ConversionRequested,
    Event,
    FetchRates,
    FromCurrencyChanged,
    RatesFailed,
    RatesLoaded,
    RefreshDue,
    Render,
    RetryRequested,
    ScheduleConversion,
    Started,
    State,
    SwapRequested,
    ToCurrencyChanged,
    WentOffline,
    WentOnline,
    initial_state,
    transition,
)
from fx_converter.ui.view import ConverterView, Renderer, render_view
from fx_converter.utils.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = ["ConverterController"]


class ConverterController:
    """Feed UI events through :func:`transition` and carry out its commands.

    Rate fetches run as independent tasks with the blocking source call moved
    to a worker thread. In-flight fetches are never cancelled; their outcomes
    come back as ``RatesLoaded``/``RatesFailed`` events.
    """

    def __init__(
        self,
        source: RateSource,
        *,
        settings: ConverterSettings | None = None,
        renderer: Renderer | None = None,
        state: State | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.settings = settings or ConverterSettings()
        self.source = source
        self.renderer = renderer
        self.state = state or initial_state(
            self.settings.default_from,
            self.settings.default_to,
            locale=self.settings.locale,
        )
        self.visible = True
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._fetches: set[asyncio.Task[None]] = set()
        self._debouncer = Debouncer(self._debounced_conversion, self.settings.debounce_seconds)
        self._refresher = PeriodicTask(
            self._periodic_refresh, self.settings.refresh_interval_seconds, name="rate-refresh"
        )
        self._ticker = PeriodicTask(
            self._clock_tick, self.settings.clock_interval_seconds, name="clock-tick"
        )

    # Lifecycle -----------------------------------------------------------------

    async def start(self) -> None:
        """Load the initial rates and start the refresh and clock timers."""

        await self.dispatch(Started())
        self._refresher.start()
        self._ticker.start()

    async def stop(self) -> None:
        self._debouncer.cancel()
        await self._refresher.stop()
        await self._ticker.stop()
        await self.settle()

    async def settle(self) -> None:
        """Wait until no debounced conversion or fetch is outstanding."""

        while self._debouncer.pending or self._fetches:
            if self._debouncer.pending:
                await self._debouncer.wait()
            if self._fetches:
                await asyncio.gather(*list(self._fetches))

    # UI inputs -----------------------------------------------------------------

    async def set_amount(self, text: str) -> None:
        await self.dispatch(AmountChanged(text))

    async def blur_amount(self) -> None:
        await self.dispatch(AmountBlurred())

    async def set_from_currency(self, currency: str) -> None:
        await self.dispatch(FromCurrencyChanged(currency))

    async def set_to_currency(self, currency: str) -> None:
        await self.dispatch(ToCurrencyChanged(currency))

    async def swap(self) -> None:
        await self.dispatch(SwapRequested())

    async def retry(self) -> None:
        await self.dispatch(RetryRequested())

    async def went_online(self) -> None:
        await self.dispatch(WentOnline())

    async def went_offline(self) -> None:
        await self.dispatch(WentOffline())

    def set_visible(self, visible: bool) -> None:
        self.visible = visible

    # Core loop -----------------------------------------------------------------

    @property
    def view(self) -> ConverterView:
        return render_view(self.state, self._clock())

    async def dispatch(self, event: Event) -> None:
        self.state, commands = transition(self.state, event)
        for command in commands:
            self._execute(command)

    def _execute(self, command: Command) -> None:
        if isinstance(command, FetchRates):
            task = asyncio.get_running_loop().create_task(self._fetch(command))
            self._fetches.add(task)
            task.add_done_callback(self._fetches.discard)
        elif isinstance(command, ScheduleConversion):
            self._debouncer.trigger()
        elif isinstance(command, Render):
            if self.renderer is not None:
                self.renderer(self.view)
        else:  # pragma: no cover - exhaustive over Command
            raise TypeError(f"Unsupported command: {command!r}")

    async def _fetch(self, command: FetchRates) -> None:
        try:
            table = await asyncio.to_thread(self.source.fetch_rates, command.base_currency)
        except ConverterError as exc:
            await self.dispatch(RatesFailed(command.base_currency, command.purpose, exc))
            return
        except Exception as exc:
            LOGGER.exception("Rate source failed unexpectedly for %s", command.base_currency)
            error = ConverterError(f"Unexpected rate source failure: {exc!r}")
            error.__cause__ = exc
            await self.dispatch(RatesFailed(command.base_currency, command.purpose, error))
            return
        await self.dispatch(RatesLoaded(table, command.purpose))

    async def _debounced_conversion(self) -> None:
        await self.dispatch(ConversionRequested())

    async def _periodic_refresh(self) -> None:
        await self.dispatch(RefreshDue(visible=self.visible))

    async def _clock_tick(self) -> None:
        await self.dispatch(ClockTicked(self._clock()))
