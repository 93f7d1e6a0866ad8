"""Decode raw audio bytes into PCM via soundfile."""
from __future__ import annotations

import io

import numpy as np
import soundfile as sf

from ..domain.pcm import PcmBuffer
from ..errors import DecodeError


def decode_audio(data: bytes) -> PcmBuffer:
    if not data:
        raise DecodeError("No audio data to decode.")
    try:
        audio, sample_rate = sf.read(io.BytesIO(data), dtype="float32", always_2d=True)
    except Exception as exc:
        raise DecodeError(f"Failed to decode audio: {exc}") from exc
    audio_np = np.asarray(audio, dtype=np.float32)
    if audio_np.ndim != 2:
        raise DecodeError(f"Unsupported audio shape: {audio_np.shape}")
    if audio_np.size == 0 or int(sample_rate) <= 0:
        raise DecodeError("Decoded audio is empty.")
    return PcmBuffer.from_frames(audio_np, int(sample_rate))
