"""Transport controller reconciling user intent with the media clock."""

from __future__ import annotations

from typing import Callable

import numpy as np

from ..config import (
    MAX_PLAYBACK_RATE,
    MAX_VOLUME,
    MIN_PLAYBACK_RATE,
    MIN_VOLUME,
    PlayerSettings,
)
from ..domain.pcm import PcmBuffer
from ..errors import AudioLoadError
from ..loading.loader import AudioLoader, LoadResult, LoadTask
from ..loading.sources import AudioSource
from ..utils import clamp, coerce_float
from .media_clock import MediaClock
from .poller import PollLoop, Scheduler
from .state import PlaybackState

StateListener = Callable[[PlaybackState], None]
ClockFactory = Callable[[LoadResult], "MediaClock | None"]

KEY_TOGGLE = "toggle"
KEY_BACK = "back"
KEY_FORWARD = "forward"
KEY_START = "start"
KEY_END = "end"

# DOM ``KeyboardEvent.key`` names and Tk keysyms.
_KEY_ACTIONS = {
    " ": KEY_TOGGLE,
    "space": KEY_TOGGLE,
    "Spacebar": KEY_TOGGLE,
    "Enter": KEY_TOGGLE,
    "Return": KEY_TOGGLE,
    "KP_Enter": KEY_TOGGLE,
    "ArrowLeft": KEY_BACK,
    "Left": KEY_BACK,
    "KP_Left": KEY_BACK,
    "ArrowRight": KEY_FORWARD,
    "Right": KEY_FORWARD,
    "KP_Right": KEY_FORWARD,
    "Home": KEY_START,
    "KP_Home": KEY_START,
    "End": KEY_END,
    "KP_End": KEY_END,
}


def key_action(key: str) -> str | None:
    return _KEY_ACTIONS.get(str(key))


class PlaybackController:
    """Issues transport commands and republishes the reconciled playback state.

    ``is_paused`` and ``current_time`` are never set optimistically: they
    follow the media clock on each reconciliation (or an explicit paused
    notification) and are only written locally by ``stop()``. Volume, rate
    and loop are applied synchronously by the clock, so they update the
    state as soon as they are forwarded.

    With ``has_media_clock=False`` (headless rendering, tests of the view
    layer) every command is a no-op while state reads keep working.
    """

    def __init__(
        self,
        settings: PlayerSettings,
        logger,
        *,
        has_media_clock: bool = True,
        scheduler: Scheduler | None = None,
        clock_factory: ClockFactory | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.has_media_clock = bool(has_media_clock)
        volume = coerce_float(
            settings.initial_volume, default=1.0, min_value=MIN_VOLUME, max_value=MAX_VOLUME
        )
        rate = coerce_float(
            settings.initial_rate,
            default=1.0,
            min_value=MIN_PLAYBACK_RATE,
            max_value=MAX_PLAYBACK_RATE,
        )
        self.state = PlaybackState(
            volume=volume,
            playback_rate=rate,
            looping=bool(settings.initial_loop),
        )
        self._configured_volume = volume if volume > 0 else 1.0
        self._clock: MediaClock | None = None
        self._owns_clock = False
        self._clock_factory = clock_factory
        self._envelope = np.zeros(0, dtype=np.float32)
        self._pcm: PcmBuffer | None = None
        self._source: AudioSource | None = None
        self._load_task: LoadTask | None = None
        self._listeners: list[StateListener] = []
        self._scheduler = scheduler
        self._torn_down = False
        self._poll = (
            PollLoop(scheduler, settings.poll_interval_ms, self.reconcile, logger)
            if scheduler is not None
            else None
        )

    # -- read-only views -------------------------------------------------

    @property
    def clock(self) -> MediaClock | None:
        return self._clock

    @property
    def envelope(self) -> np.ndarray:
        return self._envelope

    @property
    def pcm(self) -> PcmBuffer | None:
        return self._pcm

    @property
    def source(self) -> AudioSource | None:
        return self._source

    @property
    def width(self) -> int:
        return self.settings.width

    @property
    def polling(self) -> bool:
        return self._poll is not None and self._poll.running

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    # -- observers ---------------------------------------------------------

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception:
                self.logger.exception("Playback state listener failed")

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> None:
        if self._torn_down or not self.has_media_clock:
            return
        if self._poll is None:
            self.logger.debug("No scheduler configured; reconciliation is manual")
            return
        self._poll.start()

    def attach_clock(self, clock: MediaClock, *, owned: bool = False) -> None:
        if not self.has_media_clock or self._torn_down:
            self.logger.debug("Media clock not available; attach ignored")
            return
        if self._clock is not None and self._clock is not clock:
            self._release_clock()
        self._clock = clock
        self._owns_clock = bool(owned)
        watch = getattr(clock, "watch_paused", None)
        if callable(watch):
            self._command("watch paused", lambda _clock: watch(self._clock_event_handler(clock)))
        self._command("apply settings", self._push_settings)
        self._notify()

    def _clock_event_handler(self, clock: MediaClock) -> Callable[[bool], None]:
        # Backend events arrive on the backend's own thread.
        def apply(paused: bool) -> None:
            if self._clock is clock:
                self.on_clock_paused_changed(paused)

        def handler(paused: bool) -> None:
            self._on_ui_thread(lambda: apply(bool(paused)))

        return handler

    def _on_ui_thread(self, fn: Callable[[], None]) -> None:
        if self._scheduler is None:
            fn()
            return
        self._scheduler.after(0, fn)

    def _push_settings(self, clock: MediaClock) -> None:
        clock.volume = self.state.volume
        clock.playback_rate = self.state.playback_rate
        clock.loop = self.state.looping

    def _release_clock(self) -> None:
        clock, self._clock = self._clock, None
        if clock is None or not self._owns_clock:
            return
        try:
            clock.release()
        except Exception:
            self.logger.exception("Failed to release media clock")

    def teardown(self) -> None:
        if self._torn_down:
            return
        if self._poll is not None:
            self._poll.cancel()
        if self._load_task is not None:
            self._load_task.cancel()
            self._load_task = None
        self.stop()
        self._release_clock()
        self._torn_down = True
        self._listeners.clear()
        self.logger.debug("Playback controller torn down")

    # -- loading -------------------------------------------------------------

    def load(self, source, loader: AudioLoader, *, dispatch=None) -> LoadTask | None:
        """Start loading ``source``; the outcome is applied on the scheduler's thread.

        ``dispatch`` overrides how the completion is marshalled. Without it the
        controller needs a scheduler, since the loader finishes on a worker
        thread.
        """
        if self._torn_down or not self.has_media_clock:
            return None
        if dispatch is None:
            if self._scheduler is None:
                raise ValueError("load() needs a dispatch callable or a scheduler")
            dispatch = self._on_ui_thread
        if self._load_task is not None:
            self._load_task.cancel()
        self.state.is_loading = True
        self.state.has_error = False
        self.state.error_message = None
        self._notify()
        self._load_task = loader.load(
            source,
            on_success=self._on_loaded,
            on_error=self._on_load_failed,
            dispatch=dispatch,
        )
        return self._load_task

    def _on_loaded(self, result: LoadResult) -> None:
        if self._torn_down:
            self.logger.debug("Ignoring load completion after teardown")
            return
        self._load_task = None
        self._pcm = result.pcm
        self._source = result.source
        self._envelope = result.envelope
        self.state.duration = float(result.duration)
        self.state.current_time = 0.0
        self.state.is_loading = False
        self.state.has_error = False
        if self._clock_factory is not None:
            clock = self._clock_factory(result)
            if clock is not None:
                self.attach_clock(clock, owned=True)
        self.logger.debug("Playback state after load: %s", self.state.snapshot())
        self._notify()

    def _on_load_failed(self, error: AudioLoadError) -> None:
        if self._torn_down:
            return
        self._load_task = None
        self.state.has_error = True
        self.state.is_loading = False
        self.state.error_message = str(error)
        self.logger.warning("Audio load failed: %s", error)
        self._notify()

    # -- transport -----------------------------------------------------------

    def _clock_ready(self) -> bool:
        return self.has_media_clock and self._clock is not None

    def _command(self, label: str, action: Callable[[MediaClock], None]) -> bool:
        if not self._clock_ready():
            return False
        assert self._clock is not None
        try:
            action(self._clock)
        except Exception as exc:
            self.logger.exception("Media clock %s failed", label)
            self.state.error_message = str(exc) or label
            return False
        return True

    def play(self, time: float | None = None) -> None:
        def action(clock: MediaClock) -> None:
            if time is not None:
                clock.current_time = coerce_float(time, default=0.0, min_value=0.0)
            clock.play()

        self._command("play", action)
        self._notify()

    def pause(self) -> None:
        self._command("pause", lambda clock: clock.pause())
        self._notify()

    def stop(self) -> None:
        def action(clock: MediaClock) -> None:
            clock.current_time = 0.0
            clock.pause()

        if self._command("stop", action):
            self.state.current_time = 0.0
            self.state.is_paused = True
        self._notify()

    def toggle_play(self) -> None:
        if self.state.is_paused:
            self.play()
        else:
            self.pause()

    def set_volume(self, volume: float) -> None:
        if not self.has_media_clock:
            return
        value = coerce_float(
            volume, default=self.state.volume, min_value=MIN_VOLUME, max_value=MAX_VOLUME
        )
        self.state.volume = value
        if value > 0:
            self._configured_volume = value
        self._command("set volume", lambda clock: setattr(clock, "volume", value))
        self._notify()

    def set_playback_rate(self, rate: float) -> None:
        if not self.has_media_clock:
            return
        value = coerce_float(
            rate,
            default=self.state.playback_rate,
            min_value=MIN_PLAYBACK_RATE,
            max_value=MAX_PLAYBACK_RATE,
        )
        self.state.playback_rate = value
        self._command("set playback rate", lambda clock: setattr(clock, "playback_rate", value))
        self._notify()

    def set_loop(self, looping: bool) -> None:
        if not self.has_media_clock:
            return
        value = bool(looping)
        self.state.looping = value
        self._command("set loop", lambda clock: setattr(clock, "loop", value))
        self._notify()

    def mute(self) -> None:
        self.set_volume(0.0)

    def unmute(self) -> None:
        self.set_volume(self._configured_volume)

    def toggle_mute(self) -> None:
        if self.state.volume == 0:
            self.unmute()
        else:
            self.mute()

    def _live_time(self) -> float:
        if self._clock_ready():
            assert self._clock is not None
            try:
                return float(self._clock.current_time)
            except Exception:
                self.logger.exception("Failed to read media clock position")
        return self.state.current_time

    def skip(self, delta_seconds: float) -> None:
        if not self._clock_ready():
            return
        target = clamp(
            self._live_time() + float(delta_seconds),
            min_value=0.0,
            max_value=max(0.0, self.state.duration),
        )
        self.play(target)

    def seek_by_click(self, offset_x: float) -> None:
        width = self.width
        offset = coerce_float(offset_x, default=0.0)
        click_percent = (offset / width) * 100.0 if width else 0.0
        self.play(click_percent * self.state.duration / 100.0)

    def handle_key(self, key: str) -> bool:
        """Apply the keyboard contract; ``True`` means the default action must be suppressed."""
        if not self.has_media_clock:
            return False
        action = key_action(key)
        if action is None:
            return False
        skip = float(self.settings.skip_seconds)
        if action == KEY_TOGGLE:
            self.toggle_play()
        elif action == KEY_BACK:
            self.skip(-skip)
        elif action == KEY_FORWARD:
            self.skip(skip)
        elif action == KEY_START:
            self.play(0.0)
        else:
            self.play(self.state.duration)
        return True

    # -- reconciliation ----------------------------------------------------

    def reconcile(self) -> None:
        if not self._clock_ready():
            return
        assert self._clock is not None
        try:
            current = float(self._clock.current_time)
            paused = bool(self._clock.paused)
        except Exception:
            self.logger.exception("Failed to read media clock")
            return
        if self.state.duration <= 0:
            self._adopt_clock_duration()
        current = max(0.0, current)
        if self.state.duration > 0:
            current = min(current, self.state.duration)
        self.state.current_time = current
        self.state.is_paused = paused
        self._notify()

    def on_clock_paused_changed(self, paused: bool) -> None:
        if not self._clock_ready():
            return
        self.state.is_paused = bool(paused)
        self._notify()

    def _adopt_clock_duration(self) -> None:
        assert self._clock is not None
        try:
            duration = float(getattr(self._clock, "duration", 0.0) or 0.0)
        except Exception:
            self.logger.exception("Failed to read media clock duration")
            return
        if duration > 0:
            self.state.duration = duration
