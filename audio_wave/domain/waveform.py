"""Fixed-resolution amplitude envelope extraction for waveform rendering."""

from __future__ import annotations

import operator

import numpy as np

from ..config import DEFAULT_SAMPLES
from ..errors import EmptyAudioError, InvalidTargetSamplesError
from .pcm import PcmBuffer


def _validate_target(target_samples) -> int:
    if isinstance(target_samples, bool):
        raise InvalidTargetSamplesError(f"Invalid envelope resolution: {target_samples!r}")
    try:
        target = operator.index(target_samples)
    except TypeError as exc:
        raise InvalidTargetSamplesError(
            f"Invalid envelope resolution: {target_samples!r}"
        ) from exc
    if target <= 0:
        raise InvalidTargetSamplesError(f"Envelope resolution must be positive, got {target}")
    return int(target)


def window_bounds(total_samples: int, target_samples: int) -> np.ndarray:
    """Return the ``target_samples + 1`` boundaries partitioning ``[0, total_samples)``.

    Windows are ``total // target`` samples wide and the last one absorbs the
    remainder. With fewer samples than windows each sample gets its own
    window and the trailing windows are empty.
    """

    target = _validate_target(target_samples)
    total = int(total_samples)
    if total < 0:
        raise ValueError(f"Sample count cannot be negative: {total}")
    if total >= target:
        width = total // target
        bounds = np.arange(target + 1, dtype=np.int64) * width
        bounds[-1] = total
        return bounds
    return np.minimum(np.arange(target + 1, dtype=np.int64), total)


def collapse_channels(pcm: PcmBuffer) -> np.ndarray:
    """Mean absolute amplitude across channels for every sample index."""
    if pcm.is_empty:
        raise EmptyAudioError("Cannot extract a waveform from an empty PCM buffer.")
    return np.abs(pcm.channels.astype(np.float64)).mean(axis=0)


def extract_envelope(pcm: PcmBuffer, target_samples: int = DEFAULT_SAMPLES) -> np.ndarray:
    """Reduce ``pcm`` to ``target_samples`` peak magnitudes normalised to [0, 1].

    Each bucket keeps the maximum of its window so short transients stay
    visible. Normalisation uses the global peak; silent input stays at zero.
    """

    target = _validate_target(target_samples)
    collapsed = collapse_channels(pcm)
    bounds = window_bounds(collapsed.size, target)
    starts = bounds[:-1]
    filled = bounds[1:] > starts

    envelope = np.zeros(target, dtype=np.float64)
    envelope[filled] = np.maximum.reduceat(collapsed, starts[filled])
    peak = float(envelope.max())
    if peak > 0.0:
        envelope = envelope / peak
    return envelope.astype(np.float32, copy=False)

