"""Raw audio retrieval over HTTP or from the local filesystem."""
from __future__ import annotations

import urllib.error
import urllib.request
from pathlib import Path

from ..errors import FetchError
from .sources import SOURCE_KIND_FILE, AudioSource

_USER_AGENT = "audio-wave/0.1"


def _fetch_http(url: str, timeout_seconds: float | None) -> bytes:
    http_request = urllib.request.Request(
        url,
        headers={"User-Agent": _USER_AGENT, "Accept": "audio/*, */*"},
        method="GET",
    )
    request_timeout: float | None
    try:
        request_timeout = float(timeout_seconds) if timeout_seconds is not None else None
    except (TypeError, ValueError):
        request_timeout = None
    if request_timeout is not None and request_timeout <= 0:
        request_timeout = None
    try:
        if request_timeout is None:
            response_ctx = urllib.request.urlopen(http_request)
        else:
            response_ctx = urllib.request.urlopen(http_request, timeout=request_timeout)
        with response_ctx as response:
            return response.read()
    except urllib.error.HTTPError as exc:
        raise FetchError(f"HTTP {exc.code} while fetching {url}") from exc
    except urllib.error.URLError as exc:
        raise FetchError(f"Failed to reach {url}: {exc.reason}") from exc
    except TimeoutError as exc:
        raise FetchError(f"Timed out fetching {url}") from exc
    except OSError as exc:
        raise FetchError(f"Connection error fetching {url}: {exc}") from exc


def _fetch_file(path: str) -> bytes:
    target = Path(path)
    if not target.is_file():
        raise FetchError(f"Audio file not found: {path}")
    try:
        return target.read_bytes()
    except OSError as exc:
        raise FetchError(f"Failed to read {path}: {exc}") from exc


def fetch_bytes(source: AudioSource, *, timeout_seconds: float | None = None) -> bytes:
    if source.kind == SOURCE_KIND_FILE:
        data = _fetch_file(source.location)
    else:
        data = _fetch_http(source.location, timeout_seconds)
    if not data:
        raise FetchError(f"Empty response for {source.location}")
    return data
