"""Configuration objects and constants for the tease scraper."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/126.0.0.0 Safari/537.36"
)

# Filename derivation. Changing these changes every generated filename.
MAX_STEM_CHARS = 10
MAX_STEM_WORDS = 3
STOP_WORDS = frozenset(
    {
        "a", "an", "the", "and", "or", "but", "is", "are", "was", "were",
        "in", "on", "at", "for", "with", "of", "to", "from", "by", "as",
        "it", "its", "he", "she", "they", "we", "you", "i", "my", "your",
        "his", "her", "their", "our", "this", "that", "these", "those",
        "what", "where", "when", "why", "how", "which", "who", "whom",
        "be", "been", "being", "have", "has", "had", "do", "does", "did",
        "not", "no", "can", "could", "will", "would", "should", "may", "might",
        "about", "above", "after", "again", "against", "all", "any", "among",
        "around", "before", "below", "between", "both", "each", "few", "more",
        "most", "other", "some", "such", "only", "own", "same", "so", "than",
        "too", "very", "s", "t", "just", "don", "shouldn", "now",
    }
)

# Interstitial anti-bot pages are recognised by their document title only.
CHALLENGE_TITLES = ("Just a moment...", "Please wait...")

IMAGE_SELECTOR = "img.tease_pic"
DESCRIPTION_SELECTOR = "#tease_content > p.text"
CONTINUE_SELECTOR = "a#continue"
PAGE_QUERY_PARAM = "p"

DESCRIPTION_FILENAME = "descriptions.json"
VIEWER_FILENAME = "viewer.html"
PICS_DIRNAME = "pics"

DEFAULT_PAGE_NUMBER = "1"
DEFAULT_TITLE = "untitled"
NO_DESCRIPTION = "No description found."
NO_IMAGE_FILENAME = "no_image.jpg"


@dataclass
class ScrapeConfig:
    """Settings that control navigation, downloads and output placement."""

    output_root: Path = field(default_factory=lambda: Path("downloads").resolve())
    navigation_timeout: float = 90.0
    settle_delay: float = 1.0
    challenge_timeout: float = 90.0
    challenge_grace: float = 5.0
    max_hops: int = 500
    download_timeout: float = 30.0
    max_redirects: int = 10
    user_agent: str = DEFAULT_USER_AGENT
    headless: bool = True
