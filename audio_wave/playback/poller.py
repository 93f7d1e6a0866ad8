"""Recurring reconciliation timer bound to a player's lifetime."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Protocol


class Scheduler(Protocol):
    """Subset of the Tk ``after`` API used for one-shot timers."""

    def after(self, ms: int, func: Callable[[], None]) -> Any: ...

    def after_cancel(self, handle: Any) -> None: ...


class AsyncioScheduler:
    """Adapts an asyncio event loop to the ``after``/``after_cancel`` API."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop if loop is not None else asyncio.get_running_loop()

    def after(self, ms: int, func: Callable[[], None]) -> asyncio.TimerHandle:
        return self._loop.call_later(max(0, int(ms)) / 1000.0, func)

    def after_cancel(self, handle: asyncio.TimerHandle) -> None:
        handle.cancel()


class PollLoop:
    def __init__(
        self,
        scheduler: Scheduler,
        interval_ms: int,
        callback: Callable[[], None],
        logger,
    ) -> None:
        self._scheduler = scheduler
        self._interval_ms = max(1, int(interval_ms))
        self._callback = callback
        self._logger = logger
        self._job: Any = None
        self._generation = 0
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    def start(self) -> None:
        if self._running:
            return
        self._running = True
        self._generation += 1
        self._logger.debug("Poll loop started (%d ms)", self._interval_ms)
        self._schedule()

    def cancel(self) -> None:
        if not self._running:
            return
        self._running = False
        self._generation += 1
        job, self._job = self._job, None
        if job is not None:
            try:
                self._scheduler.after_cancel(job)
            except Exception:
                self._logger.exception("Failed to cancel poll timer")
        self._logger.debug("Poll loop cancelled")

    def _schedule(self) -> None:
        generation = self._generation
        self._job = self._scheduler.after(
            self._interval_ms, lambda generation=generation: self._on_tick(generation)
        )

    def _on_tick(self, generation: int) -> None:
        # A tick already queued when cancel() ran must not fire the callback.
        if not self._running or generation != self._generation:
            return
        self._job = None
        try:
            self._callback()
        except Exception:
            self._logger.exception("Poll tick failed")
        if self._running and generation == self._generation:
            self._schedule()
