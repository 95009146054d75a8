"""Data models used throughout the scraping pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import DEFAULT_TITLE, NO_DESCRIPTION, NO_IMAGE_FILENAME, PICS_DIRNAME


@dataclass
class PageRecord:
    """Everything captured for a single page of a tease."""

    page_number: str
    url: str
    description: str = NO_DESCRIPTION
    image_url: Optional[str] = None
    image_filename: str = NO_IMAGE_FILENAME
    image_newly_downloaded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pageNumber": self.page_number,
            "url": self.url,
            "description": self.description,
            "imageUrl": self.image_url,
            "imageFilename": self.image_filename,
            "imageNewlyDownloaded": self.image_newly_downloaded,
        }


@dataclass
class TeaseSession:
    """Accumulated state for one scrape invocation.

    Output paths are set once, while the first page is processed, and never
    change afterwards. ``downloaded_images`` maps each image URL fetched during
    this run to the filename it was stored under.
    """

    title: str = DEFAULT_TITLE
    directory: Optional[Path] = None
    description_file: Optional[Path] = None
    html_file: Optional[Path] = None
    pages: List[PageRecord] = field(default_factory=list)
    downloaded_images: Dict[str, str] = field(default_factory=dict)

    @property
    def is_established(self) -> bool:
        return self.description_file is not None

    @property
    def pics_dir(self) -> Optional[Path]:
        if self.directory is None:
            return None
        return self.directory / PICS_DIRNAME

    def establish(self, directory: Path, description_file: Path, html_file: Path) -> None:
        if self.is_established:
            raise RuntimeError(f"Output directory already set to {self.directory}")
        self.directory = directory
        self.description_file = description_file
        self.html_file = html_file


class CrawlOutcome(enum.Enum):
    """How a scrape ended."""

    DONE = "done"
    HOP_LIMIT = "hop_limit"
    FATAL = "fatal"
    BROWSER_ERROR = "browser_error"


@dataclass
class ScrapeResult:
    """Summary of a finished scrape."""

    session: TeaseSession
    outcome: CrawlOutcome
    hops: int
    total_seconds: float


@dataclass
class TeaseImage:
    """The picture shown on a page together with its alt text."""

    src: Optional[str]
    alt: str
