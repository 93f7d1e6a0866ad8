"""Media clock backends driven by the playback controller."""

from __future__ import annotations

import sys
import time
from typing import Callable, Protocol

import numpy as np

from ..domain.pcm import PcmBuffer
from ..errors import MediaClockError

try:
    import vlc as _vlc
except Exception:  # pragma: no cover - dependency optional at import time
    _vlc = None

try:
    import sounddevice as _sd
except Exception:  # pragma: no cover - PortAudio may be missing at import time
    _sd = None


class MediaClock(Protocol):
    """Playback engine that owns the authoritative position and paused flag."""

    current_time: float
    volume: float
    playback_rate: float
    loop: bool

    @property
    def paused(self) -> bool: ...

    @property
    def duration(self) -> float: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...

    def release(self) -> None: ...


class VlcMediaClock:
    """libVLC media player exposed through the media clock interface."""

    def __init__(self, *, vlc_module=None, platform_name: str | None = None) -> None:
        self._vlc = vlc_module if vlc_module is not None else _vlc
        if self._vlc is None:
            raise MediaClockError("python-vlc is not available")
        platform_value = platform_name if platform_name is not None else sys.platform
        args = ["--no-xlib"] if str(platform_value).startswith("linux") else []
        self.instance = self._vlc.Instance(args)
        if self.instance is None:
            raise MediaClockError("libVLC could not be initialised")
        self.player = self.instance.media_player_new()
        self.media = None
        self._volume = 1.0
        self._rate = 1.0
        self._loop = False
        self._pending_seek_ms: int | None = None
        self._watched_events: list = []

    def load(self, location: str) -> None:
        if self.media is not None:
            self.media.release()
            self.media = None
        media = self.instance.media_new(location)
        self.player.set_media(media)
        self.media = media
        self._pending_seek_ms = None

    def _state_is(self, *names: str) -> bool:
        state = self.player.get_state()
        return any(state == getattr(self._vlc.State, name) for name in names)

    def _restart_if_looping(self) -> None:
        if self._loop and self._state_is("Ended"):
            self.player.stop()
            self.player.play()

    def play(self) -> None:
        if self._state_is("Ended"):
            self.player.stop()
        rc = int(self.player.play())
        if rc == -1:
            raise MediaClockError("VLC failed to start playback.")
        if self._pending_seek_ms is not None:
            # VLC ignores set_time until the input thread is running.
            self.player.set_time(self._pending_seek_ms)
            self._pending_seek_ms = None

    def pause(self) -> None:
        self.player.set_pause(1)

    def watch_paused(self, callback: Callable[[bool], None]) -> None:
        """Forward libVLC play/pause/end events; called on libVLC's event thread."""
        events = self._vlc.EventType
        manager = self.player.event_manager()
        self._detach_events()

        def on_end(_event) -> None:
            if not self._loop:
                callback(True)

        handlers = {
            "MediaPlayerPlaying": lambda _event: callback(False),
            "MediaPlayerPaused": lambda _event: callback(True),
            "MediaPlayerStopped": lambda _event: callback(True),
            "MediaPlayerEndReached": on_end,
        }
        for name, handler in handlers.items():
            event_type = getattr(events, name)
            manager.event_attach(event_type, handler)
            self._watched_events.append((manager, event_type))

    def _detach_events(self) -> None:
        watched, self._watched_events = self._watched_events, []
        for manager, event_type in watched:
            try:
                manager.event_detach(event_type)
            except Exception:
                pass

    @property
    def paused(self) -> bool:
        self._restart_if_looping()
        return not bool(self.player.is_playing())

    @property
    def current_time(self) -> float:
        self._restart_if_looping()
        if self._pending_seek_ms is not None:
            return float(self._pending_seek_ms) / 1000.0
        return float(max(0, int(self.player.get_time() or 0))) / 1000.0

    @current_time.setter
    def current_time(self, seconds: float) -> None:
        target_ms = int(round(max(0.0, float(seconds)) * 1000.0))
        if self._state_is("NothingSpecial", "Stopped", "Ended"):
            self._pending_seek_ms = target_ms
            return
        self._pending_seek_ms = None
        self.player.set_time(target_ms)

    @property
    def duration(self) -> float:
        return float(max(0, int(self.player.get_length() or 0))) / 1000.0

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._volume = float(value)
        self.player.audio_set_volume(max(0, min(100, int(round(self._volume * 100.0)))))

    @property
    def playback_rate(self) -> float:
        return self._rate

    @playback_rate.setter
    def playback_rate(self, value: float) -> None:
        self._rate = float(value)
        self.player.set_rate(self._rate)

    @property
    def loop(self) -> bool:
        return self._loop

    @loop.setter
    def loop(self, value: bool) -> None:
        self._loop = bool(value)

    def release(self) -> None:
        self._detach_events()
        try:
            self.player.stop()
        except Exception:
            pass
        if self.media is not None:
            try:
                self.media.release()
            except Exception:
                pass
            self.media = None
        try:
            self.player.release()
        except Exception:
            pass
        try:
            self.instance.release()
        except Exception:
            pass


class SoundDeviceMediaClock:
    """Plays a decoded buffer through sounddevice, tracking position by wall time.

    Volume scales the samples and rate scales the output sample rate, so a
    change while playing restarts the stream at the current frame.
    """

    def __init__(
        self,
        pcm: PcmBuffer,
        *,
        sd_module=None,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sd = sd_module if sd_module is not None else _sd
        if self._sd is None:
            raise MediaClockError("sounddevice is not available")
        if pcm.is_empty or pcm.sample_rate <= 0:
            raise MediaClockError("Nothing to play.")
        self._frames = pcm.to_frames()
        self._sample_rate = int(pcm.sample_rate)
        self._total_frames = int(pcm.frame_count)
        self._monotonic = monotonic
        self._position_frame = 0
        self._start_frame = 0
        self._started_at: float | None = None
        self._volume = 1.0
        self._rate = 1.0
        self._loop = False

    def _current_frame(self) -> int:
        if self._started_at is None:
            return self._position_frame
        elapsed = max(0.0, self._monotonic() - self._started_at)
        advanced = self._start_frame + int(elapsed * self._sample_rate * self._rate)
        if self._loop:
            return advanced % self._total_frames
        return min(self._total_frames, advanced)

    def _reconfigure(self, name: str, value) -> None:
        # Capture the position under the old settings before applying the new ones.
        playing = self._started_at is not None
        if playing:
            self._halt(self._current_frame())
        setattr(self, name, value)
        if playing:
            self.play()

    def _halt(self, frame: int) -> None:
        self._position_frame = frame
        self._started_at = None
        self._sd.stop()

    def play(self) -> None:
        if self._started_at is not None:
            return
        frame = self._position_frame
        if frame >= self._total_frames:
            frame = 0
        if self._loop and frame > 0:
            chunk = np.concatenate([self._frames[frame:], self._frames[:frame]])
        else:
            chunk = self._frames[frame:]
        prepared = chunk
        if abs(self._volume - 1.0) > 1e-6:
            prepared = np.clip(chunk * float(self._volume), -1.0, 1.0)
        samplerate = max(1, int(round(self._sample_rate * self._rate)))
        self._sd.play(prepared, samplerate=samplerate, loop=self._loop, blocking=False)
        self._start_frame = frame
        self._started_at = self._monotonic()

    def pause(self) -> None:
        if self._started_at is None:
            return
        self._halt(self._current_frame())

    @property
    def paused(self) -> bool:
        if self._started_at is None:
            return True
        if not self._loop and self._current_frame() >= self._total_frames:
            self._halt(self._total_frames)
            return True
        return False

    @property
    def duration(self) -> float:
        return float(self._total_frames) / float(self._sample_rate)

    @property
    def current_time(self) -> float:
        return float(self._current_frame()) / float(self._sample_rate)

    @current_time.setter
    def current_time(self, seconds: float) -> None:
        frame = int(max(0.0, float(seconds)) * self._sample_rate)
        frame = max(0, min(self._total_frames, frame))
        if self._started_at is None:
            self._position_frame = frame
            return
        self._halt(frame)
        self.play()

    @property
    def volume(self) -> float:
        return self._volume

    @volume.setter
    def volume(self, value: float) -> None:
        self._reconfigure("_volume", float(value))

    @property
    def playback_rate(self) -> float:
        return self._rate

    @playback_rate.setter
    def playback_rate(self, value: float) -> None:
        self._reconfigure("_rate", float(value))

    @property
    def loop(self) -> bool:
        return self._loop

    @loop.setter
    def loop(self, value: bool) -> None:
        self._reconfigure("_loop", bool(value))

    def release(self) -> None:
        if self._started_at is not None:
            self._halt(self._current_frame())


def create_media_clock(
    location: str | None,
    pcm: PcmBuffer | None,
    logger,
    *,
    vlc_module=None,
    sd_module=None,
) -> MediaClock | None:
    """Build the best available clock: libVLC first, then sounddevice."""
    if location and (vlc_module is not None or _vlc is not None):
        try:
            clock = VlcMediaClock(vlc_module=vlc_module)
            clock.load(location)
            logger.debug("Using VLC media clock for %s", location)
            return clock
        except Exception:
            logger.exception("Failed to create VLC media clock")
    if pcm is not None and (sd_module is not None or _sd is not None):
        try:
            clock = SoundDeviceMediaClock(pcm, sd_module=sd_module)
            logger.debug("Using sounddevice media clock")
            return clock
        except MediaClockError:
            logger.exception("Failed to create sounddevice media clock")
    logger.warning("No playback backend available; install VLC or sounddevice.")
    return None
