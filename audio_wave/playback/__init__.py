"""Transport state, media clocks and reconciliation."""

from .controller import PlaybackController, key_action
from .media_clock import MediaClock, SoundDeviceMediaClock, VlcMediaClock, create_media_clock
from .poller import AsyncioScheduler, PollLoop, Scheduler
from .state import PlaybackState

__all__ = [
    "AsyncioScheduler",
    "MediaClock",
    "PlaybackController",
    "PlaybackState",
    "PollLoop",
    "Scheduler",
    "SoundDeviceMediaClock",
    "VlcMediaClock",
    "create_media_clock",
    "key_action",
]
