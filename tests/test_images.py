"""Tests for the image downloader."""

import io
from pathlib import Path
from typing import Dict, Optional
from unittest.mock import MagicMock

import pytest
import requests

from tease_scraper.errors import DownloadFailed, TooManyRedirects
from tease_scraper.images import detect_image_format, download_file, ensure_image_extension

PNG_HEADER = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


def make_response(
    status: int, body: bytes = b"", headers: Optional[Dict[str, str]] = None
) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.headers.update(headers or {})
    response.raw = io.BytesIO(body)
    return response


def make_session(*responses) -> MagicMock:
    session = MagicMock(spec=requests.Session)
    session.get.side_effect = list(responses)
    return session


class TestDownloadFile:
    def test_writes_body_on_success(self, tmp_path: Path) -> None:
        session = make_session(make_response(200, b"jpeg-bytes"))
        destination = tmp_path / "pic.jpg"

        result = download_file("https://img.example/a.jpg", destination, session=session)

        assert result == destination
        assert destination.read_bytes() == b"jpeg-bytes"
        _, kwargs = session.get.call_args
        assert kwargs["allow_redirects"] is False

    def test_follows_redirect_to_final_resource(self, tmp_path: Path) -> None:
        """A 302 leads to the final 200 body, not an empty or error file."""
        session = make_session(
            make_response(302, headers={"Location": "/cdn/final.jpg"}),
            make_response(200, b"final-bytes"),
        )
        destination = tmp_path / "pic.jpg"

        download_file("https://img.example/start.jpg", destination, session=session)

        assert destination.read_bytes() == b"final-bytes"
        second_url = session.get.call_args_list[1].args[0]
        assert second_url == "https://img.example/cdn/final.jpg"

    def test_non_success_status_raises(self, tmp_path: Path) -> None:
        session = make_session(make_response(404, b"not found"))
        destination = tmp_path / "pic.jpg"

        with pytest.raises(DownloadFailed) as excinfo:
            download_file("https://img.example/missing.jpg", destination, session=session)

        assert excinfo.value.status_code == 404
        assert not destination.exists()

    def test_redirect_without_location_is_a_failure(self, tmp_path: Path) -> None:
        session = make_session(make_response(304))

        with pytest.raises(DownloadFailed) as excinfo:
            download_file("https://img.example/a.jpg", tmp_path / "a.jpg", session=session)

        assert excinfo.value.status_code == 304

    def test_redirect_loop_is_bounded(self, tmp_path: Path) -> None:
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = lambda *args, **kwargs: make_response(
            302, headers={"Location": "/loop.jpg"}
        )

        with pytest.raises(TooManyRedirects):
            download_file(
                "https://img.example/loop.jpg",
                tmp_path / "loop.jpg",
                session=session,
                max_redirects=3,
            )

        assert session.get.call_count == 4

    def test_transport_error_removes_partial_file(self, tmp_path: Path) -> None:
        destination = tmp_path / "pic.jpg"
        destination.write_bytes(b"partial")
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = requests.ConnectionError("connection reset")

        with pytest.raises(requests.ConnectionError):
            download_file("https://img.example/a.jpg", destination, session=session)

        assert not destination.exists()

    def test_error_while_streaming_removes_partial_file(self, tmp_path: Path) -> None:
        response = make_response(200)

        def broken_stream(chunk_size: int = 1):
            yield b"first chunk"
            raise requests.ConnectionError("connection reset mid-body")

        response.iter_content = broken_stream
        session = make_session(response)
        destination = tmp_path / "pic.jpg"

        with pytest.raises(requests.ConnectionError):
            download_file("https://img.example/a.jpg", destination, session=session)

        assert not destination.exists()

    def test_sends_user_agent(self, tmp_path: Path) -> None:
        session = make_session(make_response(200, b"x"))

        download_file(
            "https://img.example/a.jpg",
            tmp_path / "a.jpg",
            session=session,
            user_agent="TestAgent/1.0",
        )

        _, kwargs = session.get.call_args
        assert kwargs["headers"] == {"User-Agent": "TestAgent/1.0"}


class TestImageExtension:
    def test_detects_png(self) -> None:
        assert detect_image_format(PNG_HEADER) == "png"
        assert detect_image_format(b"plain text") is None

    def test_adds_detected_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "sunset_1"
        path.write_bytes(PNG_HEADER)

        result = ensure_image_extension(path)

        assert result == tmp_path / "sunset_1.png"
        assert result.read_bytes() == PNG_HEADER
        assert not path.exists()

    def test_keeps_existing_extension(self, tmp_path: Path) -> None:
        path = tmp_path / "sunset_1.jpg"
        path.write_bytes(PNG_HEADER)
        assert ensure_image_extension(path) == path

    def test_unknown_content_keeps_name(self, tmp_path: Path) -> None:
        path = tmp_path / "sunset_1"
        path.write_bytes(b"not an image")
        assert ensure_image_extension(path) == path
        assert path.exists()
