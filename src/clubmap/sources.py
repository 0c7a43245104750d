"""Read data sources from local paths or HTTP(S) URLs."""

from __future__ import annotations

import logging
from pathlib import Path

import requests

from .config import SourcesConfig


_LOGGER = logging.getLogger("clubmap.sources")


class SourceNotFound(FileNotFoundError):
    """The source does not exist (missing file or HTTP 404)."""


def is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def source_exists(source: str) -> bool | None:
    """True/False for local paths; None for URLs (unknown without a request)."""
    if is_url(source):
        return None
    return Path(source).exists()


def read_source(source: str, cfg: SourcesConfig | None = None) -> str:
    """Return the text of a data source.

    Raises `SourceNotFound` for a missing file or a 404, `OSError` or
    `requests.RequestException` for other transport failures.
    """
    if not is_url(source):
        path = Path(source)
        if not path.exists():
            raise SourceNotFound(f"Source not found: {path}")
        return path.read_text(encoding="utf-8")

    timeout = cfg.request_timeout_s if cfg is not None else 20.0
    headers = {"User-Agent": cfg.user_agent} if cfg is not None else {}
    _LOGGER.debug("Fetching %s", source)
    response = requests.get(source, timeout=timeout, headers=headers)
    if response.status_code == 404:
        raise SourceNotFound(f"Source not found: {source}")
    response.raise_for_status()
    response.encoding = response.encoding or "utf-8"
    return response.text
