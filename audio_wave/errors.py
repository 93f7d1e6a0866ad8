"""Exception types raised by the waveform and playback layers."""

from __future__ import annotations


class AudioWaveError(Exception):
    """Base class for all audio_wave failures."""


class EmptyAudioError(AudioWaveError, ValueError):
    """Raised when envelope extraction receives no channels or no samples."""


class InvalidTargetSamplesError(AudioWaveError, ValueError):
    """Raised when the requested envelope resolution is not a positive integer."""


class AudioLoadError(AudioWaveError):
    """Base class for fetch/decode pipeline failures."""


class InvalidSourceError(AudioLoadError):
    pass


class FetchError(AudioLoadError):
    pass


class DecodeError(AudioLoadError):
    pass


class MediaClockError(AudioWaveError):
    """Raised when a playback backend cannot be created or rejects a command."""
