"""Background fetch, decode and envelope extraction."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable

import numpy as np

from ..config import DEFAULT_SAMPLES
from ..domain.pcm import PcmBuffer
from ..domain.waveform import extract_envelope
from ..errors import AudioLoadError, DecodeError
from .decoder import decode_audio
from .fetcher import fetch_bytes
from .sources import AudioSource, resolve_source


@dataclass(frozen=True, eq=False)
class LoadResult:
    source: AudioSource
    pcm: PcmBuffer
    envelope: np.ndarray

    @property
    def duration(self) -> float:
        return self.pcm.duration


class LoadTask:
    """Handle for one load attempt; a cancelled task never delivers."""

    def __init__(self, source) -> None:
        self.source = source
        self._cancelled = threading.Event()
        self._finished = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def finished(self) -> bool:
        return self._finished.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def wait(self, timeout: float | None = None) -> bool:
        return self._finished.wait(timeout)


def _start_daemon_thread(target: Callable[[], None]) -> None:
    threading.Thread(target=target, name="audio-wave-loader", daemon=True).start()


def _call_now(callback: Callable[[], None]) -> None:
    callback()


class AudioLoader:
    def __init__(
        self,
        logger,
        *,
        target_samples: int = DEFAULT_SAMPLES,
        timeout_seconds: float | None = None,
        fetcher: Callable[..., bytes] = fetch_bytes,
        decoder: Callable[[bytes], PcmBuffer] = decode_audio,
        spawn: Callable[[Callable[[], None]], None] = _start_daemon_thread,
    ) -> None:
        self.logger = logger
        self.target_samples = int(target_samples)
        self.timeout_seconds = timeout_seconds
        self._fetcher = fetcher
        self._decoder = decoder
        self._spawn = spawn

    def run(self, source) -> LoadResult:
        """Fetch, decode and extract synchronously on the calling thread."""
        resolved = resolve_source(source)
        data = self._fetcher(resolved, timeout_seconds=self.timeout_seconds)
        pcm = self._decoder(data)
        envelope = extract_envelope(pcm, self.target_samples)
        return LoadResult(source=resolved, pcm=pcm, envelope=envelope)

    def load(
        self,
        source,
        *,
        on_success: Callable[[LoadResult], None],
        on_error: Callable[[AudioLoadError], None],
        dispatch: Callable[[Callable[[], None]], None] | None = None,
    ) -> LoadTask:
        """Start a load on a worker thread and deliver the outcome via ``dispatch``.

        ``dispatch`` marshals the completion back onto the caller's thread
        (for example ``lambda fn: root.after(0, fn)``). The cancelled flag is
        checked inside the dispatched callback so a task cancelled on that
        thread can never deliver.
        """

        task = LoadTask(source)
        deliver_via = dispatch if dispatch is not None else _call_now

        def runner() -> None:
            outcome: Callable[[], None]
            try:
                result = self.run(source)
            except AudioLoadError as exc:
                self.logger.exception("Failed to load audio from %s", source)
                outcome = lambda exc=exc: on_error(exc)
            except Exception as exc:
                self.logger.exception("Unexpected failure loading audio from %s", source)
                error = DecodeError(f"Failed to process audio: {exc}")
                error.__cause__ = exc
                outcome = lambda error=error: on_error(error)
            else:
                self.logger.info(
                    "Loaded %s (%.2fs, %d ch, %d Hz)",
                    result.source.name,
                    result.duration,
                    result.pcm.channel_count,
                    result.pcm.sample_rate,
                )
                outcome = lambda result=result: on_success(result)

            def deliver() -> None:
                try:
                    if task.cancelled:
                        self.logger.debug("Dropping completion of cancelled load: %s", source)
                        return
                    outcome()
                finally:
                    task._finished.set()

            deliver_via(deliver)

        self.logger.info("Loading audio from %s", source)
        self._spawn(runner)
        return task
