"""Audio source reference parsing."""

from __future__ import annotations

import os
import urllib.parse
import urllib.request
from dataclasses import dataclass
from pathlib import Path

from ..errors import InvalidSourceError

SOURCE_KIND_HTTP = "http"
SOURCE_KIND_FILE = "file"

_HTTP_SCHEMES = {"http", "https"}


@dataclass(frozen=True)
class AudioSource:
    kind: str
    location: str

    @property
    def name(self) -> str:
        if self.kind == SOURCE_KIND_FILE:
            return Path(self.location).name
        path = urllib.parse.urlsplit(self.location).path
        return Path(urllib.parse.unquote(path)).name or self.location


def resolve_source(source: str | os.PathLike[str] | AudioSource) -> AudioSource:
    """Validate a source reference and classify it as an HTTP URL or a local file."""
    if isinstance(source, AudioSource):
        return source
    if isinstance(source, os.PathLike):
        raw = os.fspath(source)
    elif isinstance(source, str):
        raw = source
    else:
        raise InvalidSourceError(f"Unsupported audio source type: {type(source).__name__}")
    value = raw.strip()
    if not value:
        raise InvalidSourceError("Audio source is empty.")

    parts = urllib.parse.urlsplit(value)
    scheme = parts.scheme.lower()
    # Single-letter schemes are Windows drive letters.
    if not scheme or len(scheme) == 1:
        return AudioSource(SOURCE_KIND_FILE, os.path.abspath(value))
    if scheme in _HTTP_SCHEMES:
        if not parts.netloc:
            raise InvalidSourceError(f"URL has no host: {value}")
        return AudioSource(SOURCE_KIND_HTTP, value)
    if scheme == "file":
        path = urllib.request.url2pathname(parts.path)
        if not path:
            raise InvalidSourceError(f"File URL has no path: {value}")
        return AudioSource(SOURCE_KIND_FILE, os.path.abspath(path))
    raise InvalidSourceError(f"Unsupported audio source scheme: {scheme}")
