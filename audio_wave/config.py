"""Configuration loading from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from .utils import parse_flag_env, parse_float_env, parse_int_env, resolve_path

DEFAULT_SAMPLES = 70
DEFAULT_GAP_PX = 5
DEFAULT_HEIGHT_PX = 25
DEFAULT_COLOR = "#1e90ff"
DEFAULT_SKIP_SECONDS = 5.0
DEFAULT_POLL_INTERVAL_MS = 100
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0

MIN_VOLUME = 0.0
MAX_VOLUME = 1.0
# Fixed transport contract, not exposed as a setting.
MIN_PLAYBACK_RATE = 0.25
MAX_PLAYBACK_RATE = 4.0


@dataclass(frozen=True)
class PlayerSettings:
    samples: int = DEFAULT_SAMPLES
    gap: int = DEFAULT_GAP_PX
    height: int = DEFAULT_HEIGHT_PX
    color: str = DEFAULT_COLOR
    rounded: bool = True
    skip_seconds: float = DEFAULT_SKIP_SECONDS
    initial_volume: float = 1.0
    initial_rate: float = 1.0
    initial_loop: bool = False
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS

    @property
    def width(self) -> int:
        return int(self.samples) * int(self.gap)


@dataclass(frozen=True)
class AppConfig:
    log_level: str
    file_log_level: str
    log_dir: str
    log_file: str
    player: PlayerSettings = field(default_factory=PlayerSettings)


def load_player_settings() -> PlayerSettings:
    color = os.getenv("AUDIO_WAVE_COLOR", DEFAULT_COLOR).strip() or DEFAULT_COLOR
    return PlayerSettings(
        samples=parse_int_env("AUDIO_WAVE_SAMPLES", DEFAULT_SAMPLES, min_value=1, max_value=2000),
        gap=parse_int_env("AUDIO_WAVE_GAP_PX", DEFAULT_GAP_PX, min_value=1, max_value=100),
        height=parse_int_env(
            "AUDIO_WAVE_HEIGHT_PX", DEFAULT_HEIGHT_PX, min_value=4, max_value=1000
        ),
        color=color,
        rounded=parse_flag_env("AUDIO_WAVE_ROUNDED", True),
        skip_seconds=parse_float_env(
            "AUDIO_WAVE_SKIP_SECONDS",
            DEFAULT_SKIP_SECONDS,
            min_value=0.1,
            max_value=600.0,
        ),
        initial_volume=parse_float_env(
            "AUDIO_WAVE_VOLUME", 1.0, min_value=MIN_VOLUME, max_value=MAX_VOLUME
        ),
        initial_rate=parse_float_env(
            "AUDIO_WAVE_RATE",
            1.0,
            min_value=MIN_PLAYBACK_RATE,
            max_value=MAX_PLAYBACK_RATE,
        ),
        initial_loop=parse_flag_env("AUDIO_WAVE_LOOP", False),
        poll_interval_ms=parse_int_env(
            "AUDIO_WAVE_POLL_MS",
            DEFAULT_POLL_INTERVAL_MS,
            min_value=10,
            max_value=5000,
        ),
        fetch_timeout_seconds=parse_float_env(
            "AUDIO_WAVE_FETCH_TIMEOUT",
            DEFAULT_FETCH_TIMEOUT_SECONDS,
            min_value=0.0,
            max_value=600.0,
        ),
    )


def load_config() -> AppConfig:
    base_dir = str(Path(__file__).resolve().parents[1])
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"
    file_log_level = os.getenv("FILE_LOG_LEVEL", "DEBUG").strip().upper() or "DEBUG"
    log_dir = resolve_path(os.getenv("LOG_DIR", "logs"), base_dir)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(
        log_dir, f"audio_wave_{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.log"
    )
    return AppConfig(
        log_level=log_level,
        file_log_level=file_log_level,
        log_dir=log_dir,
        log_file=log_file,
        player=load_player_settings(),
    )
