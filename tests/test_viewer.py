"""Tests for the generated HTML gallery."""

import json
import re
from pathlib import Path

from tease_scraper.models import PageRecord
from tease_scraper.viewer import embed_json, generate_viewer, render_viewer

DATA_PATTERN = re.compile(
    r'<script id="gallery-data" type="application/json">(.*?)</script>', re.S
)


def embedded_data(document: str):
    match = DATA_PATTERN.search(document)
    assert match is not None
    return json.loads(match.group(1))


class TestRenderViewer:
    def test_empty_gallery_has_placeholder(self) -> None:
        document = render_viewer("Empty", [])
        assert embedded_data(document) == []
        assert "No images to display." in document
        assert "galleryData.length === 0" in document

    def test_pages_are_embedded_in_crawl_order(self) -> None:
        pages = [
            PageRecord("3", "https://t.example/?p=3", "Third", "https://i/3.jpg", "third_3.jpg", True),
            PageRecord("1", "https://t.example/?p=1", "First", "https://i/1.jpg", "first_1.jpg", True),
        ]
        data = embedded_data(render_viewer("Tease", pages))
        assert [item["pageNumber"] for item in data] == ["3", "1"]
        assert data[0]["imageFilename"] == "third_3.jpg"
        assert set(data[0]) == {
            "pageNumber",
            "url",
            "description",
            "imageUrl",
            "imageFilename",
            "imageNewlyDownloaded",
        }

    def test_script_breakout_is_escaped(self) -> None:
        pages = [PageRecord("1", "https://t.example/", "</script><script>alert(1)</script>")]
        document = render_viewer("Tease", pages)
        # Only the two real closing tags of the page remain.
        assert document.count("</script>") == 2
        assert embedded_data(document)[0]["description"].startswith("</script>")

    def test_title_is_html_escaped(self) -> None:
        document = render_viewer('<b>"Tease"</b>', [])
        assert "<title>&lt;b&gt;&quot;Tease&quot;&lt;/b&gt;</title>" in document

    def test_navigation_features_present(self) -> None:
        document = render_viewer("Tease", [PageRecord("1", "https://t.example/")])
        for marker in ("ArrowLeft", "ArrowRight", "requestFullscreen", "hashchange", "location.hash", "'pics/'"):
            assert marker in document

    def test_embed_json_round_trips_special_characters(self) -> None:
        value = {"text": "a < b & c > d", "emoji": "é"}
        encoded = embed_json(value)
        assert "<" not in encoded and "&" not in encoded
        assert json.loads(encoded) == value


class TestGenerateViewer:
    def test_overwrites_output(self, tmp_path: Path) -> None:
        output = tmp_path / "viewer.html"
        output.write_text("stale", encoding="utf-8")

        assert generate_viewer(output, "Tease", []) is True

        assert "No images to display." in output.read_text(encoding="utf-8")

    def test_write_failure_is_reported_not_raised(self, tmp_path: Path) -> None:
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("", encoding="utf-8")

        assert generate_viewer(blocker / "viewer.html", "Tease", []) is False
