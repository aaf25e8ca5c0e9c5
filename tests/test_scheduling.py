from __future__ import annotations

import asyncio

import pytest

from fx_converter.ui.scheduling import Debouncer, PeriodicTask


def test_debouncer_runs_only_last_trigger() -> None:
    calls: list[int] = []

    async def scenario() -> None:
        async def _callback() -> None:
            calls.append(len(calls) + 1)

        debouncer = Debouncer(_callback, 0.05)
        for _ in range(5):
            debouncer.trigger()
            await asyncio.sleep(0.005)
        assert debouncer.pending
        await debouncer.wait()
        assert not debouncer.pending

    asyncio.run(scenario())

    assert calls == [1]


def test_debouncer_cancel_drops_pending_call() -> None:
    calls: list[str] = []

    async def scenario() -> None:
        async def _callback() -> None:
            calls.append("fired")

        debouncer = Debouncer(_callback, 0.01)
        debouncer.trigger()
        debouncer.cancel()
        await debouncer.wait()
        await asyncio.sleep(0.03)

    asyncio.run(scenario())

    assert calls == []


def test_debouncer_rejects_negative_delay() -> None:
    async def _callback() -> None:
        return None

    with pytest.raises(ValueError):
        Debouncer(_callback, -0.1)


def test_periodic_task_repeats_until_stopped() -> None:
    ticks: list[int] = []

    async def scenario() -> None:
        async def _callback() -> None:
            ticks.append(1)

        task = PeriodicTask(_callback, 0.01, name="test")
        task.start()
        task.start()
        assert task.running
        await asyncio.sleep(0.06)
        await task.stop()
        assert not task.running
        count = len(ticks)
        await asyncio.sleep(0.03)
        assert len(ticks) == count

    asyncio.run(scenario())

    assert len(ticks) >= 2


def test_periodic_task_requires_positive_interval() -> None:
    async def _callback() -> None:
        return None

    with pytest.raises(ValueError):
        PeriodicTask(_callback, 0)
