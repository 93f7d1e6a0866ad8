"""Playback state container."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from ..domain.progress import (
    format_progress_text,
    format_status_text,
    played_percent,
    round_half_up,
)


@dataclass(slots=True)
class PlaybackState:
    """Mutable transport state owned by the playback controller.

    Only ``current_time`` and ``is_paused`` track the media clock; they are
    overwritten on every reconciliation. Percent and text fields are
    computed from the stored values on read.
    """

    is_paused: bool = True
    is_loading: bool = True
    has_error: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    volume: float = 1.0
    playback_rate: float = 1.0
    looping: bool = False
    error_message: str | None = None

    @property
    def played_percent(self) -> float:
        return played_percent(self.current_time, self.duration)

    @property
    def rounded_played_percent(self) -> int:
        return round_half_up(self.played_percent)

    @property
    def rounded_current_time(self) -> int:
        return round_half_up(self.current_time)

    @property
    def rounded_duration(self) -> int:
        return round_half_up(self.duration)

    @property
    def progress_text(self) -> str:
        return format_progress_text(self.current_time, self.duration)

    @property
    def status_text(self) -> str:
        return format_status_text(
            is_loading=self.is_loading,
            has_error=self.has_error,
            is_paused=self.is_paused,
        )

    def snapshot(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["played_percent"] = self.played_percent
        payload["progress_text"] = self.progress_text
        payload["status_text"] = self.status_text
        return payload
