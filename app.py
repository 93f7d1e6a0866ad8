"""Desktop entrypoint for the waveform player."""

from __future__ import annotations

import argparse
import logging
import tkinter as tk
from typing import Sequence

from audio_wave.config import AppConfig, load_config
from audio_wave.loading.loader import AudioLoader, LoadResult
from audio_wave.logging_config import setup_logging
from audio_wave.playback.controller import PlaybackController
from audio_wave.playback.media_clock import MediaClock, create_media_clock
from audio_wave.ui.waveform_player import WaveformPlayer

APP_TITLE = "Audio Wave"


def build_controller(
    root: tk.Misc,
    config: AppConfig,
    logger: logging.Logger,
) -> PlaybackController:
    def clock_factory(result: LoadResult) -> MediaClock | None:
        return create_media_clock(result.source.location, result.pcm, logger)

    return PlaybackController(
        config.player,
        logger,
        has_media_clock=True,
        scheduler=root,
        clock_factory=clock_factory,
    )


def launch(source: str, *, config: AppConfig | None = None) -> None:
    config = config if config is not None else load_config()
    logger = setup_logging(config)
    logger.info("Log file: %s", config.log_file)

    root = tk.Tk()
    root.title(APP_TITLE)
    controller = build_controller(root, config, logger)
    player = WaveformPlayer(root, controller)
    player.pack(fill="both", expand=True)
    loader = AudioLoader(
        logger,
        target_samples=config.player.samples,
        timeout_seconds=config.player.fetch_timeout_seconds,
    )

    def on_close() -> None:
        logger.info("Closing player")
        controller.teardown()
        player.destroy()
        root.destroy()

    root.protocol("WM_DELETE_WINDOW", on_close)
    controller.start()
    controller.load(source, loader)
    player.canvas.focus_set()
    logger.info("Launching desktop player")
    root.mainloop()


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Play an audio file with a waveform view.")
    parser.add_argument("source", help="Local path or http(s) URL of the audio file.")
    args = parser.parse_args(argv)
    launch(args.source)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
