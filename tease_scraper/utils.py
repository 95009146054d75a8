"""Utility helpers for string normalization and path handling."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path, PurePosixPath
from typing import Any, List
from urllib.parse import parse_qs, urlparse

from .config import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_TITLE,
    MAX_STEM_CHARS,
    MAX_STEM_WORDS,
    PAGE_QUERY_PARAM,
    STOP_WORDS,
)

CAPTION_PATTERN = re.compile(r"[^a-z0-9\s]")
STEM_PATTERN = re.compile(r"[^a-z0-9_]")
PAGE_SUFFIX_PATTERN = re.compile(r"[^A-Za-z0-9_-]")
TITLE_FORBIDDEN_PATTERN = re.compile(r'[\\/:*?"<>|]')
WHITESPACE_PATTERN = re.compile(r"\s+")


def _truncate_words(words: List[str], limit: int) -> str:
    """Join whole words while they fit, then fill the rest with a prefix."""
    stem = ""
    for word in words:
        separator = 1 if stem else 0
        if len(stem) + separator + len(word) <= limit:
            stem += "_" * separator + word
            continue
        remaining = limit - len(stem) - separator
        if remaining > 0:
            stem += "_" * separator + word[:remaining]
        break
    return stem


def caption_stem(caption: Any) -> str:
    """Build the short, URL-safe part of a filename from a caption.

    The result never exceeds ``MAX_STEM_CHARS`` characters and contains only
    ``[a-z0-9_]``. Non-string or blank captions give an empty stem.
    """
    if not isinstance(caption, str) or not caption:
        return ""
    cleaned = CAPTION_PATTERN.sub("", caption.lower())
    words = [
        word
        for word in cleaned.split()
        if len(word) > 1 and word not in STOP_WORDS
    ][:MAX_STEM_WORDS]
    stem = "_".join(words)
    if len(stem) > MAX_STEM_CHARS:
        stem = _truncate_words(words, MAX_STEM_CHARS)
    return STEM_PATTERN.sub("", stem)


def derive_filename(caption: Any, page_number: str) -> str:
    """Return the filename stem for a page, e.g. ``quick_brow_3``.

    The page number is always appended so that pages with identical (or
    empty) captions still map to distinct files. The caller adds the
    extension. Characters that could leave the pics folder (path separators,
    dots) are dropped from the page number.
    """
    suffix = PAGE_SUFFIX_PATTERN.sub("", str(page_number))
    return f"{caption_stem(caption)}_{suffix}"


def sanitize_title(value: str) -> str:
    """Turn an image caption into a single filesystem-safe directory token."""
    title = TITLE_FORBIDDEN_PATTERN.sub("", value.strip())
    title = WHITESPACE_PATTERN.sub("_", title)
    if not title.strip("."):
        return DEFAULT_TITLE
    return title


def url_extension(url: str) -> str:
    """Return the extension of the URL path including the dot, or ``""``."""
    return PurePosixPath(urlparse(url).path).suffix


def page_number_from_url(url: str) -> str:
    values = parse_qs(urlparse(url).query).get(PAGE_QUERY_PARAM)
    if values and values[0]:
        return values[0]
    return DEFAULT_PAGE_NUMBER


def write_text_atomic(path: Path, text: str) -> None:
    """Write ``text`` to a sibling temp file and move it over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
