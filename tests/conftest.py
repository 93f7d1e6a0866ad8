"""Shared fakes for the playback and loading tests."""

from __future__ import annotations

import pytest

from audio_wave.config import PlayerSettings


class FakeLogger:
    def __init__(self):
        self.debugs = []
        self.infos = []
        self.warnings = []
        self.exceptions = []

    def debug(self, message, *args):
        self.debugs.append(message % args if args else message)

    def info(self, message, *args):
        self.infos.append(message % args if args else message)

    def warning(self, message, *args):
        self.warnings.append(message % args if args else message)

    def exception(self, message, *args):
        self.exceptions.append(message % args if args else message)


class FakeClock:
    """Media clock whose play/pause requests only take effect when applied."""

    def __init__(self, *, auto_apply=True):
        self.auto_apply = auto_apply
        self.current_time = 0.0
        self.volume = 1.0
        self.playback_rate = 1.0
        self.loop = False
        self.paused = True
        self.duration = 0.0
        self.calls = []
        self.released = False
        self.fail_on = set()

    def _record(self, name):
        self.calls.append(name)
        if name in self.fail_on:
            raise RuntimeError(f"{name} failed")

    def play(self):
        self._record("play")
        if self.auto_apply:
            self.paused = False

    def pause(self):
        self._record("pause")
        if self.auto_apply:
            self.paused = True

    def release(self):
        self.released = True


class FakeScheduler:
    def __init__(self):
        self.jobs = {}
        self.cancelled = []
        self._next_id = 0

    def after(self, ms, func):
        self._next_id += 1
        job_id = f"after#{self._next_id}"
        self.jobs[job_id] = (ms, func)
        return job_id

    def after_cancel(self, job_id):
        self.cancelled.append(job_id)
        self.jobs.pop(job_id, None)

    def fire_all(self):
        pending = list(self.jobs.items())
        self.jobs.clear()
        for _job_id, (_ms, func) in pending:
            func()
        return len(pending)


@pytest.fixture
def logger():
    return FakeLogger()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def settings():
    return PlayerSettings(samples=10, gap=5, skip_seconds=5.0)


@pytest.fixture
def make_clock():
    return FakeClock
