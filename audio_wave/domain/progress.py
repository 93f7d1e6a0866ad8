"""Derived playback metrics and their display text."""

from __future__ import annotations

import math


def round_half_up(value: float) -> int:
    return int(math.floor(float(value) + 0.5))


def played_percent(current_time: float, duration: float) -> float:
    if duration <= 0:
        return 0.0
    percent = float(current_time) / float(duration) * 100.0
    if not math.isfinite(percent):
        return 0.0
    return max(0.0, min(100.0, percent))


def format_clock(seconds: float) -> str:
    total = max(0.0, float(seconds))
    minutes = int(total // 60)
    secs = int(total % 60)
    return f"{minutes}:{secs:02d}"


def format_progress_text(current_time: float, duration: float) -> str:
    if duration <= 0:
        return "Audio not loaded"
    percent = round_half_up(played_percent(current_time, duration))
    return f"{format_clock(current_time)} of {format_clock(duration)} ({percent}% played)"


def format_status_text(*, is_loading: bool, has_error: bool, is_paused: bool) -> str:
    if is_loading:
        return "Loading audio"
    if has_error:
        return "Error loading audio"
    if is_paused:
        return "Audio paused"
    return "Audio playing"

