"""
Recursive sitemap resolution: indexes are followed, leaf sitemaps are read.
"""
from __future__ import annotations

import asyncio
from typing import List

from service_scout.config import DiscoverySettings
from service_scout.crawler.fetcher import Fetcher, bounded
from service_scout.logger import logger
from service_scout.parser.sitemap_parser import parse_sitemap

__all__ = ["SitemapResolver"]


class SitemapResolver:
    """Turn a sitemap URL into the page URLs it lists, following indexes.

    Every failure (timeout, transport error, non-2xx status) yields an empty
    list for that document; resolution of the siblings continues.
    """

    def __init__(self, fetcher: Fetcher, settings: DiscoverySettings) -> None:
        self.fetcher = fetcher
        self.settings = settings

    async def resolve(self, url: str, depth: int = 0) -> List[str]:
        if depth > self.settings.max_depth:
            logger.debug("Sitemap depth %d exceeds %d, skipping %s", depth, self.settings.max_depth, url)
            return []

        outcome = await bounded(self.fetcher.get(url), self.settings.timeout)
        if outcome.timed_out:
            logger.warning("Timed out fetching sitemap %s after %gs", url, self.settings.timeout)
            return []
        if outcome.error is not None:
            logger.warning("Error fetching sitemap %s: %s", url, outcome.error)
            return []
        page = outcome.value
        if not page.ok:
            logger.warning("Failed to fetch sitemap %s: HTTP %s", url, page.status)
            return []

        document = parse_sitemap(page.text)
        if not document.is_index:
            logger.debug("Sitemap %s lists %d URLs", url, len(document.urls))
            return list(document.urls)

        children = document.children[: self.settings.max_children]
        logger.debug(
            "Sitemap index %s: following %d of %d children",
            url,
            len(children),
            len(document.children),
        )
        urls: List[str] = []
        for position, child in enumerate(children):
            if position and self.settings.child_delay > 0:
                await asyncio.sleep(self.settings.child_delay)
            urls.extend(await self.resolve(child, depth + 1))
        return urls
