"""Command-line entry point for the tease scraper."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from .config import ScrapeConfig
from .crawler import scrape_tease

logger = logging.getLogger("tease_scraper.cli")

EXAMPLE = 'Example: tease-scraper "https://milovana.com/webteases/showtease.php?id=45485&p=1"'


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tease-scraper",
        description=(
            "Follow a tease's Continue links and save every page's image and "
            "caption, plus an offline viewer, under ./downloads."
        ),
    )
    parser.add_argument("url", nargs="?", metavar="target_url", help="URL of the first page")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.url:
        parser.print_usage(sys.stderr)
        print(EXAMPLE, file=sys.stderr)
        sys.exit(1)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    logger.info("Starting scrape for URL: %s", args.url)
    result = asyncio.run(scrape_tease(args.url, ScrapeConfig()))
    logger.info(
        "Finished in %.2fs after %d page(s) (%s); %d record(s) in %s",
        result.total_seconds,
        result.hops,
        result.outcome.value,
        len(result.session.pages),
        result.session.directory or "no output directory",
    )


if __name__ == "__main__":
    main()
