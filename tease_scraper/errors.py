"""Exception types raised by the scraper."""

from __future__ import annotations


class TeaseScraperError(Exception):
    """Base class for scraper errors."""


class DownloadFailed(TeaseScraperError):
    """An image request ended with a non-success HTTP status."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"Failed to get {url!r} ({status_code})")
        self.url = url
        self.status_code = status_code


class TooManyRedirects(TeaseScraperError):
    """An image request kept redirecting past the configured limit."""

    def __init__(self, url: str, limit: int) -> None:
        super().__init__(f"Exceeded {limit} redirects while fetching {url!r}")
        self.url = url
        self.limit = limit
