"""High-level orchestration for walking a tease page by page."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Tuple
from urllib.parse import urljoin

import requests

from .browser import TeasePage, is_challenge_title, open_browser
from .config import (
    DESCRIPTION_FILENAME,
    DESCRIPTION_SELECTOR,
    IMAGE_SELECTOR,
    NO_DESCRIPTION,
    PICS_DIRNAME,
    VIEWER_FILENAME,
    ScrapeConfig,
)
from .images import download_file, ensure_image_extension
from .models import CrawlOutcome, PageRecord, ScrapeResult, TeaseSession
from .persist import save_progress
from .utils import derive_filename, page_number_from_url, sanitize_title, url_extension

logger = logging.getLogger("tease_scraper")


def prepare_output(session: TeaseSession, config: ScrapeConfig) -> None:
    """Create the tease folder, timestamp-suffixed if the name is taken.

    An existing folder is never reused. Raises ``FileExistsError`` if the
    timestamped name is taken as well.
    """
    root = config.output_root
    root.mkdir(parents=True, exist_ok=True)
    directory = root / session.title
    try:
        directory.mkdir(exist_ok=False)
    except FileExistsError:
        dir_name = f"{session.title}_{int(time.time() * 1000)}"
        logger.info(
            'Directory "%s" already exists. Creating "%s" instead.',
            session.title,
            dir_name,
        )
        directory = root / dir_name
        directory.mkdir(exist_ok=False)
    pics_dir = directory / PICS_DIRNAME
    pics_dir.mkdir(exist_ok=True)
    logger.info("Ensured pics subdirectory exists: %s", pics_dir)
    session.establish(
        directory=directory,
        description_file=directory / DESCRIPTION_FILENAME,
        html_file=directory / VIEWER_FILENAME,
    )


async def navigate(page: TeasePage, url: str, config: ScrapeConfig) -> None:
    await page.goto(url, config.navigation_timeout)
    await page.settle(config.settle_delay)
    if not is_challenge_title(await page.title()):
        return
    logger.warning("Challenge page detected at %s; waiting for it to resolve...", url)
    if not await page.wait_out_challenge(config.challenge_timeout, config.challenge_grace):
        # Proceed anyway; the extraction steps fall back to defaults.
        logger.warning("Challenge still present at %s; continuing with degraded data.", url)


def fetch_page_image(
    record: PageRecord,
    session: TeaseSession,
    config: ScrapeConfig,
    http: Optional[requests.Session] = None,
) -> None:
    """Download the page's image once per run and fill in the record."""
    image_url = record.image_url
    pics_dir = session.pics_dir
    if image_url is None or pics_dir is None:
        raise ValueError("fetch_page_image needs an image URL and an established session")
    existing = session.downloaded_images.get(image_url)
    if existing is not None:
        record.image_filename = existing
        record.image_newly_downloaded = False
        logger.info(
            'Image URL "%s" already downloaded as "%s". Skipping re-download.',
            image_url,
            existing,
        )
        return

    filename = derive_filename(record.description, record.page_number) + url_extension(image_url)
    destination = pics_dir / filename
    pics_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Downloading image %s to %s", image_url, destination)
    stored = download_file(
        image_url,
        destination,
        timeout=config.download_timeout,
        max_redirects=config.max_redirects,
        session=http,
        user_agent=config.user_agent,
    )
    stored = ensure_image_extension(stored)
    session.downloaded_images[image_url] = stored.name
    record.image_filename = stored.name
    record.image_newly_downloaded = True


async def find_next_url(page: TeasePage, current_url: str) -> Optional[str]:
    href = await page.continue_href()
    if not href:
        logger.info('No "Continue" link found. End of tease.')
        return None
    next_url = urljoin(current_url, href)
    logger.info("Found next page link: %s", next_url)
    return next_url


async def process_page(
    page: TeasePage,
    url: str,
    session: TeaseSession,
    config: ScrapeConfig,
    http: Optional[requests.Session] = None,
) -> Optional[str]:
    """Scrape one page into ``session`` and return the next URL, if any."""
    await navigate(page, url, config)
    current_url = page.url

    image_url: Optional[str] = None
    image = await page.read_image()
    if image is None:
        logger.info("Image %r not found on the current page.", IMAGE_SELECTOR)
        save_progress(session)
    else:
        image_url = image.src
        if not session.is_established:
            session.title = sanitize_title(image.alt)

    page_number = page_number_from_url(current_url)

    description = await page.read_description()
    if description is None:
        logger.warning(
            "Could not find description at %s on page %s (%s)",
            DESCRIPTION_SELECTOR,
            page_number,
            current_url,
        )
        description = NO_DESCRIPTION
        save_progress(session)
    else:
        logger.info("Page %s Description: %.100s...", page_number, description)

    if not session.is_established:
        prepare_output(session, config)

    record = PageRecord(
        page_number=page_number,
        url=current_url,
        description=description,
        image_url=image_url,
    )
    if image_url and session.pics_dir is not None:
        fetch_page_image(record, session, config, http)
    else:
        logger.info("No image URL or tease directory found to process image for this page.")
        save_progress(session)

    session.pages.append(record)
    save_progress(session)
    return await find_next_url(page, current_url)


async def crawl_pages(
    page: TeasePage,
    start_url: str,
    session: TeaseSession,
    config: ScrapeConfig,
    http: Optional[requests.Session] = None,
) -> Tuple[CrawlOutcome, int]:
    """Follow continue links from ``start_url`` until they run out."""
    current_url: Optional[str] = start_url
    hops = 0
    while current_url:
        if hops >= config.max_hops:
            logger.warning("Reached maximum of %d pages. Stopping.", config.max_hops)
            return CrawlOutcome.HOP_LIMIT, hops
        hops += 1
        logger.info("--- Navigating to page %d: %s ---", hops, current_url)
        try:
            current_url = await process_page(page, current_url, session, config, http)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Major error processing page %d (%s)", hops, current_url)
            save_progress(session)
            return CrawlOutcome.FATAL, hops
    return CrawlOutcome.DONE, hops


@asynccontextmanager
async def _page_scope(
    page: Optional[TeasePage], config: ScrapeConfig
) -> AsyncIterator[TeasePage]:
    if page is not None:
        yield page
        return
    async with open_browser(config) as opened:
        yield opened


async def scrape_tease(
    start_url: str,
    config: Optional[ScrapeConfig] = None,
    page: Optional[TeasePage] = None,
) -> ScrapeResult:
    """Scrape a whole tease starting at ``start_url``.

    When ``page`` is None a browser is launched for the duration of the
    scrape. Progress is saved one last time before the browser is released,
    whichever way the crawl ends.
    """
    config = config or ScrapeConfig()
    session = TeaseSession()
    outcome = CrawlOutcome.BROWSER_ERROR
    hops = 0
    start_time = time.perf_counter()
    http = requests.Session()
    try:
        async with _page_scope(page, config) as tease_page:
            try:
                outcome, hops = await crawl_pages(tease_page, start_url, session, config, http)
            finally:
                save_progress(session)
    except Exception:  # pylint: disable=broad-except
        logger.exception("An error occurred during browser operation (launch/initial setup)")
        save_progress(session)
    finally:
        http.close()
    return ScrapeResult(
        session=session,
        outcome=outcome,
        hops=hops,
        total_seconds=time.perf_counter() - start_time,
    )
