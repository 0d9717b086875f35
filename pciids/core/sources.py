"""Locating and opening pci.ids sources."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import requests

from pciids.core.exceptions import SourceNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_URL = "https://pci-ids.ucw.cz/v2.2/pci.ids"

# Common locations for pci.ids file
SYSTEM_PATHS = [
    "/usr/share/hwdata/pci.ids",
    "/usr/share/misc/pci.ids",
    "/usr/share/pci.ids",
    "/var/lib/pciutils/pci.ids",
]

REQUEST_TIMEOUT = 30

CHUNK_SIZE = 64 * 1024

SOURCE_ENV_VAR = "PCIIDS_SOURCE"

_URL_SCHEMES = ("http://", "https://")


def is_url(source: str) -> bool:
    """Check if a source string names a remote location."""
    return source.startswith(_URL_SCHEMES)


def find_system_file(candidates: list[str] | None = None) -> Path:
    """Return the first existing pci.ids file among the candidate paths."""
    for candidate in candidates if candidates is not None else SYSTEM_PATHS:
        path = Path(candidate)
        logger.debug(f"Probing {path}")
        if path.is_file():
            return path
    raise SourceNotFoundError("pci.ids database not found in any system location")


def resolve_source(source: str | None = None) -> str:
    """Resolve the source to load from.

    Order: explicit argument, PCIIDS_SOURCE environment variable, first
    existing system file, DEFAULT_URL.
    """
    if source:
        return source
    env_source = os.environ.get(SOURCE_ENV_VAR)
    if env_source:
        return env_source
    try:
        return str(find_system_file())
    except SourceNotFoundError:
        logger.info(f"No local pci.ids found, falling back to {DEFAULT_URL}")
        return DEFAULT_URL


def _iter_response_lines(response: requests.Response) -> Iterator[bytes]:
    """Split a streamed body into lines on LF only, keeping the endings."""
    pending = b""
    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
        pending += chunk
        *lines, pending = pending.split(b"\n")
        for line in lines:
            yield line + b"\n"
    if pending:
        yield pending


@contextmanager
def open_remote(url: str, timeout: float = REQUEST_TIMEOUT) -> Iterator[Iterator[bytes]]:
    """Fetch a remote pci.ids file and yield an iterator over its lines.

    Transport errors (requests.RequestException) propagate unchanged.
    """
    logger.info(f"Fetching {url}")
    response = requests.get(url, stream=True, timeout=timeout)
    try:
        response.raise_for_status()
        yield _iter_response_lines(response)
    finally:
        response.close()
