"""Waveform extraction and playback synchronisation for audio players."""

from .config import AppConfig, PlayerSettings, load_config
from .domain.pcm import PcmBuffer
from .domain.waveform import extract_envelope, window_bounds
from .errors import (
    AudioLoadError,
    AudioWaveError,
    DecodeError,
    EmptyAudioError,
    FetchError,
    InvalidSourceError,
    InvalidTargetSamplesError,
    MediaClockError,
)
from .playback.controller import PlaybackController
from .playback.state import PlaybackState

__version__ = "0.1.0"

__all__ = [
    "AppConfig",
    "AudioLoadError",
    "AudioWaveError",
    "DecodeError",
    "EmptyAudioError",
    "FetchError",
    "InvalidSourceError",
    "InvalidTargetSamplesError",
    "MediaClockError",
    "PcmBuffer",
    "PlaybackController",
    "PlaybackState",
    "PlayerSettings",
    "extract_envelope",
    "load_config",
    "window_bounds",
]
