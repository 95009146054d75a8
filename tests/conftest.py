"""Shared fixtures for the scraper tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

from tease_scraper.config import ScrapeConfig
from tests.fakes import FakePage, FakeTeasePage


@pytest.fixture
def events() -> List[Any]:
    return []


@pytest.fixture
def make_page(events: List[Any]) -> Callable[[Dict[str, FakePage]], FakeTeasePage]:
    def _make(pages: Dict[str, FakePage]) -> FakeTeasePage:
        return FakeTeasePage(pages, events)

    return _make


@pytest.fixture
def config(tmp_path: Path) -> ScrapeConfig:
    return ScrapeConfig(
        output_root=tmp_path / "downloads",
        settle_delay=0,
        challenge_timeout=1,
        challenge_grace=0,
    )


@pytest.fixture
def downloads(monkeypatch: pytest.MonkeyPatch) -> List[str]:
    """Replace the HTTP downloader with one that writes the URL as bytes."""
    fetched: List[str] = []

    def fake_download(url: str, destination: Path, **kwargs: Any) -> Path:
        fetched.append(url)
        destination.write_bytes(f"image:{url}".encode())
        return destination

    monkeypatch.setattr("tease_scraper.crawler.download_file", fake_download)
    return fetched
