"""Fetch and decode pipeline feeding the extractor."""

from .decoder import decode_audio
from .fetcher import fetch_bytes
from .loader import AudioLoader, LoadResult, LoadTask
from .sources import AudioSource, resolve_source

__all__ = [
    "AudioLoader",
    "AudioSource",
    "LoadResult",
    "LoadTask",
    "decode_audio",
    "fetch_bytes",
    "resolve_source",
]
