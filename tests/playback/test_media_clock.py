from types import SimpleNamespace

import numpy as np
import pytest

from audio_wave.domain.pcm import PcmBuffer
from audio_wave.errors import MediaClockError
from audio_wave.playback.media_clock import (
    SoundDeviceMediaClock,
    VlcMediaClock,
    create_media_clock,
)


class _VlcState:
    NothingSpecial = "nothing"
    Playing = "playing"
    Paused = "paused"
    Stopped = "stopped"
    Ended = "ended"
    Error = "error"


class _VlcEventType:
    MediaPlayerPlaying = "playing"
    MediaPlayerPaused = "paused"
    MediaPlayerStopped = "stopped"
    MediaPlayerEndReached = "end"


class _VlcEventManager:
    def __init__(self):
        self.handlers = {}

    def event_attach(self, event_type, handler):
        self.handlers[event_type] = handler

    def event_detach(self, event_type):
        self.handlers.pop(event_type, None)

    def fire(self, event_type):
        self.handlers[event_type](object())


class _VlcPlayer:
    def __init__(self):
        self.events = _VlcEventManager()
        self.state = _VlcState.NothingSpecial
        self.time_ms = 0
        self.length_ms = 0
        self.volume = None
        self.rate = None
        self.media = None
        self.play_rc = 0
        self.released = False
        self.calls = []

    def event_manager(self):
        return self.events

    def set_media(self, media):
        self.media = media

    def play(self):
        self.calls.append("play")
        if self.play_rc == 0:
            self.state = _VlcState.Playing
        return self.play_rc

    def set_pause(self, on):
        self.calls.append(("set_pause", on))
        self.state = _VlcState.Paused

    def stop(self):
        self.calls.append("stop")
        self.state = _VlcState.Stopped

    def is_playing(self):
        return 1 if self.state == _VlcState.Playing else 0

    def get_state(self):
        return self.state

    def get_time(self):
        return self.time_ms

    def set_time(self, ms):
        self.calls.append(("set_time", ms))
        self.time_ms = ms

    def get_length(self):
        return self.length_ms

    def audio_set_volume(self, value):
        self.volume = value

    def set_rate(self, rate):
        self.rate = rate

    def release(self):
        self.released = True


class _VlcMedia:
    def __init__(self, location):
        self.location = location
        self.released = False

    def release(self):
        self.released = True


class _VlcInstance:
    def __init__(self, args):
        self.args = args
        self.player = _VlcPlayer()
        self.released = False

    def media_player_new(self):
        return self.player

    def media_new(self, location):
        return _VlcMedia(location)

    def release(self):
        self.released = True


def _vlc_module():
    return SimpleNamespace(Instance=_VlcInstance, State=_VlcState, EventType=_VlcEventType)


class _SoundDevice:
    def __init__(self):
        self.played = []
        self.stops = 0

    def play(self, data, samplerate, loop=False, blocking=False):
        self.played.append((np.array(data, copy=True), samplerate, loop, blocking))

    def stop(self):
        self.stops += 1


class _Monotonic:
    def __init__(self):
        self.now = 100.0

    def __call__(self):
        return self.now


def _pcm(frames=1000, sample_rate=100):
    ramp = np.linspace(-0.5, 0.5, frames, dtype=np.float32)
    return PcmBuffer(np.stack([ramp, ramp]), sample_rate)


def test_vlc_clock_raises_when_libvlc_cannot_initialise():
    broken = SimpleNamespace(Instance=lambda _args: None, State=_VlcState)

    with pytest.raises(MediaClockError):
        VlcMediaClock(vlc_module=broken)


def test_vlc_clock_defers_seek_until_playback_starts():
    clock = VlcMediaClock(vlc_module=_vlc_module(), platform_name="linux")
    clock.load("/tmp/clip.wav")
    player = clock.player

    assert clock.instance.args == ["--no-xlib"]
    assert player.media.location == "/tmp/clip.wav"
    assert clock.paused is True

    clock.current_time = 12.5
    assert clock.current_time == 12.5
    clock.play()

    assert player.calls == ["play", ("set_time", 12500)]
    assert clock.paused is False
    assert clock.current_time == 12.5


def test_vlc_clock_maps_volume_rate_and_pause():
    clock = VlcMediaClock(vlc_module=_vlc_module(), platform_name="win32")
    clock.load("http://example.com/a.mp3")
    clock.player.length_ms = 185_000
    clock.play()

    clock.volume = 0.42
    clock.playback_rate = 2.0
    clock.current_time = 3.0
    clock.pause()

    assert clock.instance.args == []
    assert clock.player.volume == 42
    assert clock.player.rate == 2.0
    assert clock.player.time_ms == 3000
    assert clock.duration == 185.0
    assert clock.paused is True


def test_vlc_clock_raises_when_playback_fails():
    clock = VlcMediaClock(vlc_module=_vlc_module())
    clock.load("/tmp/clip.wav")
    clock.player.play_rc = -1

    with pytest.raises(MediaClockError):
        clock.play()


def test_vlc_clock_restarts_ended_media_when_looping():
    clock = VlcMediaClock(vlc_module=_vlc_module())
    clock.load("/tmp/clip.wav")
    clock.loop = True
    clock.play()
    clock.player.state = _VlcState.Ended

    assert clock.paused is False
    assert clock.player.calls[-2:] == ["stop", "play"]


def test_vlc_clock_forwards_player_events():
    clock = VlcMediaClock(vlc_module=_vlc_module())
    clock.load("/tmp/clip.wav")
    events = clock.player.events
    seen = []

    clock.watch_paused(seen.append)
    events.fire(_VlcEventType.MediaPlayerPlaying)
    events.fire(_VlcEventType.MediaPlayerPaused)
    events.fire(_VlcEventType.MediaPlayerEndReached)
    clock.loop = True
    events.fire(_VlcEventType.MediaPlayerEndReached)
    events.fire(_VlcEventType.MediaPlayerStopped)

    assert seen == [False, True, True, True]

    clock.release()
    assert events.handlers == {}


def test_vlc_clock_release_frees_resources():
    clock = VlcMediaClock(vlc_module=_vlc_module())
    clock.load("/tmp/clip.wav")
    media = clock.media
    player = clock.player
    instance = clock.instance

    clock.release()

    assert media.released is True
    assert player.released is True
    assert instance.released is True


def test_sounddevice_clock_tracks_position_from_wall_time():
    sd = _SoundDevice()
    now = _Monotonic()
    clock = SoundDeviceMediaClock(_pcm(), sd_module=sd, monotonic=now)

    clock.current_time = 2.0
    clock.play()
    now.now += 1.5

    data, samplerate, loop, blocking = sd.played[0]
    assert data.shape == (800, 2)
    assert samplerate == 100
    assert loop is False
    assert blocking is False
    assert clock.current_time == pytest.approx(3.5)
    assert clock.paused is False

    clock.pause()
    now.now += 5.0
    assert clock.current_time == pytest.approx(3.5)
    assert clock.paused is True


def test_sounddevice_clock_reports_paused_at_end():
    sd = _SoundDevice()
    now = _Monotonic()
    clock = SoundDeviceMediaClock(_pcm(), sd_module=sd, monotonic=now)
    assert clock.duration == pytest.approx(10.0)
    clock.play()
    now.now += 30.0

    assert clock.paused is True
    assert clock.current_time == pytest.approx(10.0)


def test_sounddevice_clock_applies_rate_volume_and_loop_by_restarting():
    sd = _SoundDevice()
    now = _Monotonic()
    clock = SoundDeviceMediaClock(_pcm(), sd_module=sd, monotonic=now)
    clock.play()
    now.now += 1.0

    clock.playback_rate = 2.0
    clock.volume = 0.5
    clock.loop = True
    now.now += 1.0

    data, samplerate, loop, _blocking = sd.played[-1]
    assert samplerate == 200
    assert loop is True
    assert data.shape == (1000, 2)
    assert np.max(np.abs(data)) <= 0.25 + 1e-6
    assert clock.current_time == pytest.approx(3.0)

    now.now += 4.0
    assert clock.current_time == pytest.approx(1.0)
    assert clock.paused is False


def test_sounddevice_clock_requires_backend_and_audio():
    with pytest.raises(MediaClockError):
        SoundDeviceMediaClock(
            PcmBuffer(np.zeros((1, 0), dtype=np.float32), 8000), sd_module=_SoundDevice()
        )


def test_create_media_clock_prefers_vlc_then_sounddevice(logger):
    vlc_clock = create_media_clock(
        "/tmp/clip.wav", _pcm(), logger, vlc_module=_vlc_module(), sd_module=_SoundDevice()
    )
    assert isinstance(vlc_clock, VlcMediaClock)

    broken_vlc = SimpleNamespace(Instance=lambda _args: None, State=_VlcState)
    sd_clock = create_media_clock(
        "/tmp/clip.wav", _pcm(), logger, vlc_module=broken_vlc, sd_module=_SoundDevice()
    )
    assert isinstance(sd_clock, SoundDeviceMediaClock)
    assert logger.exceptions == ["Failed to create VLC media clock"]
