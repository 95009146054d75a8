"""Incremental persistence of scrape progress."""

from __future__ import annotations

import json
import logging

from .models import TeaseSession
from .utils import write_text_atomic
from .viewer import generate_viewer

logger = logging.getLogger("tease_scraper")


def serialize_pages(session: TeaseSession) -> str:
    data = [page.to_dict() for page in session.pages]
    return json.dumps(data, ensure_ascii=False, indent=2) + "\n"


def save_progress(session: TeaseSession) -> bool:
    """Write the page list and regenerate the viewer.

    Safe to call at any point: before the output directory exists it only
    logs a warning, and write failures are logged instead of raised so a
    crawl is never aborted by persistence. Returns True if the metadata file
    was written.
    """
    if session.description_file is None:
        logger.warning("Cannot save progress: description file path not yet determined.")
        return False
    try:
        write_text_atomic(session.description_file, serialize_pages(session))
    except OSError:
        logger.exception("Error saving progress to %s", session.description_file)
        return False
    logger.info("Progress saved to: %s", session.description_file)
    if session.html_file is not None:
        generate_viewer(session.html_file, session.title, session.pages)
    return True
