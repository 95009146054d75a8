"""Image downloading utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional
from urllib.parse import urljoin

import requests
from filetype import guess

from .errors import DownloadFailed, TooManyRedirects

logger = logging.getLogger("tease_scraper")

CHUNK_SIZE = 64 * 1024
SNIFF_BYTES = 261


def detect_image_format(data: bytes) -> Optional[str]:
    """Detect image type using filetype; returns lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


def _remove_partial(destination: Path) -> None:
    try:
        destination.unlink()
    except OSError:
        pass


def _write_body(response: requests.Response, destination: Path) -> None:
    try:
        with destination.open("wb") as handle:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    handle.write(chunk)
    except (requests.RequestException, OSError):
        _remove_partial(destination)
        raise


def download_file(
    url: str,
    destination: Path,
    *,
    timeout: float = 30.0,
    max_redirects: int = 10,
    session: Optional[requests.Session] = None,
    user_agent: Optional[str] = None,
) -> Path:
    """Fetch ``url`` into ``destination``, following redirects by hand.

    Redirects are capped at ``max_redirects``. The file is only created once a
    2xx response arrives, and it is closed before this function returns.
    """
    own_session = session is None
    http = session or requests.Session()
    headers: Dict[str, str] = {"User-Agent": user_agent} if user_agent else {}
    current = url
    try:
        for _ in range(max_redirects + 1):
            try:
                response = http.get(
                    current,
                    headers=headers,
                    timeout=timeout,
                    allow_redirects=False,
                    stream=True,
                )
            except requests.RequestException:
                _remove_partial(destination)
                raise
            with response:
                location = response.headers.get("Location")
                if 300 <= response.status_code < 400 and location:
                    current = urljoin(current, location)
                    logger.info("Redirecting to %s", current)
                    continue
                if not 200 <= response.status_code < 300:
                    raise DownloadFailed(current, response.status_code)
                _write_body(response, destination)
            return destination
        raise TooManyRedirects(url, max_redirects)
    finally:
        if own_session:
            http.close()


def ensure_image_extension(path: Path) -> Path:
    """Give an extension-less download the suffix its bytes indicate."""
    if path.suffix:
        return path
    with path.open("rb") as handle:
        head = handle.read(SNIFF_BYTES)
    extension = detect_image_format(head)
    if not extension:
        logger.warning("Could not determine image type of %s", path)
        return path
    target = path.with_name(f"{path.name}.{extension}")
    path.replace(target)
    return target
