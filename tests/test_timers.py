from __future__ import annotations

import asyncio

import pytest

import timers
from timers import AsyncioScheduler, QtScheduler


def test_asyncio_scheduler_runs_callbacks_in_due_order() -> None:
    events: list[str] = []

    async def _run() -> None:
        scheduler = AsyncioScheduler()
        scheduler.call_later(0.03, lambda: events.append("late"))
        scheduler.call_later(0.01, lambda: events.append("early"))
        handle = scheduler.call_later(0.02, lambda: events.append("cancelled"))
        handle.cancel()
        await asyncio.sleep(0.08)

    asyncio.run(_run())
    assert events == ["early", "late"]


def test_asyncio_scheduler_contains_callback_errors() -> None:
    events: list[str] = []

    def boom() -> None:
        raise RuntimeError("bell failed")

    async def _run() -> None:
        scheduler = AsyncioScheduler(asyncio.get_running_loop())
        scheduler.call_later(0.0, boom)
        scheduler.call_later(0.01, lambda: events.append("still ticking"))
        await asyncio.sleep(0.05)

    asyncio.run(_run())
    assert events == ["still ticking"]


def test_cancel_after_fire_is_noop() -> None:
    async def _run() -> None:
        scheduler = AsyncioScheduler()
        handle = scheduler.call_later(0.0, lambda: None)
        await asyncio.sleep(0.01)
        handle.cancel()

    asyncio.run(_run())


def test_qt_scheduler_requires_pyside6(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(timers, "QTimer", None)
    with pytest.raises(RuntimeError, match="PySide6 is not installed"):
        QtScheduler()
