"""Tkinter view layer."""

from .waveform_player import Bar, WaveformPlayer, dim_color, layout_bars

__all__ = ["Bar", "WaveformPlayer", "dim_color", "layout_bars"]
