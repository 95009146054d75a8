"""Playwright adapter exposing the handful of page reads the crawl needs."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, async_playwright

from .config import (
    CHALLENGE_TITLES,
    CONTINUE_SELECTOR,
    DESCRIPTION_SELECTOR,
    IMAGE_SELECTOR,
    ScrapeConfig,
)
from .models import TeaseImage

logger = logging.getLogger("tease_scraper")

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
]


def is_challenge_title(title: Optional[str]) -> bool:
    """Best-effort guess whether the page is an anti-bot interstitial."""
    if not title:
        return False
    return any(marker in title for marker in CHALLENGE_TITLES)


class TeasePage:
    """Thin wrapper around a Playwright page for reading tease pages.

    Element reads never raise: a missing element (or a failed evaluation) is
    logged and reported as ``None``.
    """

    def __init__(self, page: Page) -> None:
        self._page = page

    @property
    def url(self) -> str:
        return self._page.url

    async def goto(self, url: str, timeout: float) -> None:
        await self._page.goto(url, wait_until="domcontentloaded", timeout=timeout * 1000)

    async def title(self) -> str:
        return await self._page.title()

    async def settle(self, seconds: float) -> None:
        if seconds:
            await self._page.wait_for_timeout(seconds * 1000)

    async def wait_out_challenge(self, timeout: float, grace: float) -> bool:
        """Wait for the challenge to navigate away; True if it appears gone."""
        try:
            async with self._page.expect_navigation(
                wait_until="networkidle", timeout=timeout * 1000
            ):
                pass
        except PlaywrightError as exc:
            logger.info("Navigation after challenge didn't occur or timed out: %s", exc)
        await self.settle(grace)
        return not is_challenge_title(await self.title())

    async def read_image(self) -> Optional[TeaseImage]:
        try:
            attributes = await self._page.eval_on_selector(
                IMAGE_SELECTOR, "img => ({src: img.src, alt: img.alt})"
            )
        except PlaywrightError as exc:
            logger.error("Error finding image %r on this page: %s", IMAGE_SELECTOR, exc)
            return None
        return TeaseImage(src=attributes.get("src") or None, alt=attributes.get("alt") or "")

    async def read_description(self) -> Optional[str]:
        try:
            return await self._page.eval_on_selector(
                DESCRIPTION_SELECTOR, "el => el.textContent"
            )
        except PlaywrightError as exc:
            logger.debug("Description lookup failed: %s", exc)
            return None

    async def continue_href(self) -> Optional[str]:
        try:
            link = await self._page.query_selector(CONTINUE_SELECTOR)
            if link is None:
                return None
            return await link.get_attribute("href")
        except PlaywrightError as exc:
            logger.warning("Could not read continue link: %s", exc)
            return None


@asynccontextmanager
async def open_browser(config: ScrapeConfig) -> AsyncIterator[TeasePage]:
    """Launch Chromium and yield a ready page; the browser is always closed."""
    async with async_playwright() as playwright:
        logger.info("Launching browser...")
        browser = await playwright.chromium.launch(
            headless=config.headless, args=LAUNCH_ARGS
        )
        try:
            context = await browser.new_context(user_agent=config.user_agent)
            page = await context.new_page()
            yield TeasePage(page)
        finally:
            await browser.close()
            logger.info("Browser closed.")
