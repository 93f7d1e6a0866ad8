"""Decoded PCM container shared by the loader, extractor and playback backends."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class PcmBuffer:
    """Channel-major float32 samples in [-1.0, 1.0] plus their sample rate.

    ``channels`` has shape ``(channel_count, frame_count)``. The array is
    flagged read-only on construction so consumers cannot mutate a buffer
    another component still holds.
    """

    channels: np.ndarray
    sample_rate: int

    def __post_init__(self) -> None:
        data = np.array(self.channels, dtype=np.float32, copy=True)
        if data.ndim == 1:
            data = data.reshape(1, -1)
        if data.ndim != 2:
            raise ValueError(f"Unsupported PCM shape: {data.shape}")
        data.setflags(write=False)
        object.__setattr__(self, "channels", data)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))

    @classmethod
    def from_frames(cls, data, sample_rate: int) -> "PcmBuffer":
        """Build from soundfile's layout: mono 1-D or ``(frames, channels)``."""
        frames = np.asarray(data, dtype=np.float32)
        if frames.ndim == 1:
            return cls(frames.reshape(1, -1), sample_rate)
        if frames.ndim != 2:
            raise ValueError(f"Unsupported PCM shape: {frames.shape}")
        return cls(np.ascontiguousarray(frames.T), sample_rate)

    @property
    def channel_count(self) -> int:
        return int(self.channels.shape[0])

    @property
    def frame_count(self) -> int:
        return int(self.channels.shape[1])

    @property
    def is_empty(self) -> bool:
        return self.channel_count == 0 or self.frame_count == 0

    @property
    def duration(self) -> float:
        if self.sample_rate <= 0:
            return 0.0
        return float(self.frame_count) / float(self.sample_rate)

    def to_frames(self) -> np.ndarray:
        """Return a writable ``(frames, channels)`` copy for output devices."""
        return np.array(self.channels.T, dtype=np.float32, copy=True)
