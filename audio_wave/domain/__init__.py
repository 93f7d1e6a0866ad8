"""Pure waveform and progress computations."""

from .pcm import PcmBuffer
from .progress import (
    format_clock,
    format_progress_text,
    format_status_text,
    played_percent,
    round_half_up,
)
from .waveform import collapse_channels, extract_envelope, window_bounds

__all__ = [
    "PcmBuffer",
    "collapse_channels",
    "extract_envelope",
    "format_clock",
    "format_progress_text",
    "format_status_text",
    "played_percent",
    "round_half_up",
    "window_bounds",
]
