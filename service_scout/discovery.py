"""service_scout.discovery: Find likely services that the catalog does not list yet.

Pipeline:

1. build the normalized set of every catalog ``url`` and ``departmentUrl``;
2. resolve each sitemap root into page URLs (deduplicated, first-seen order);
3. drop URLs the catalog already has, keep those that look like services;
4. probe the first ``limit`` for title and description; keep titled pages;
5. sort candidates by URL, which groups them by department host.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, List, Optional, Sequence, Set

from service_scout.catalog import ServiceRecord
from service_scout.config import ScoutConfig
from service_scout.crawler.fetcher import Fetcher
from service_scout.crawler.models import Candidate, DiscoveryReport
from service_scout.crawler.prober import PageProber
from service_scout.crawler.scheduler import ProgressCallback, run_batched
from service_scout.crawler.sitemap import SitemapResolver
from service_scout.logger import logger
from service_scout.rules import PatternMatcher
from service_scout.utils import normalize_url, remove_duplicates

__all__ = ["DiscoveryPipeline", "known_urls"]


def known_urls(services: Iterable[ServiceRecord]) -> Set[str]:
    """Normalized service and department URLs already in the catalog."""
    known: Set[str] = set()
    for service in services:
        known.add(normalize_url(service.url))
        if service.department_url:
            known.add(normalize_url(service.department_url))
    return known


class DiscoveryPipeline:
    def __init__(
        self,
        config: ScoutConfig,
        fetcher: Fetcher,
        matcher: Optional[PatternMatcher] = None,
    ) -> None:
        self.config = config
        self.settings = config.discovery
        self.matcher = matcher or PatternMatcher.from_config(config)
        self.resolver = SitemapResolver(fetcher, self.settings)
        self.prober = PageProber(
            fetcher,
            self.matcher,
            info_timeout=self.settings.info_timeout,
            government_suffixes=config.government_suffixes,
        )

    async def crawl_sitemaps(self, roots: Sequence[str]) -> List[str]:
        """Resolve every root, merged without duplicates in first-seen order."""
        found: List[str] = []
        for position, root in enumerate(roots):
            if position and self.settings.root_delay > 0:
                await asyncio.sleep(self.settings.root_delay)
            logger.info("Fetching %s...", root)
            found.extend(await self.resolver.resolve(root))
        return remove_duplicates(found)

    def filter_candidates(self, urls: Iterable[str], known: Set[str]) -> List[str]:
        return [
            url
            for url in urls
            if normalize_url(url) not in known and self.matcher.looks_like_service(url)
        ]

    async def run(
        self,
        services: Sequence[ServiceRecord],
        limit: Optional[int] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> DiscoveryReport:
        limit = self.settings.limit if limit is None else limit
        known = known_urls(services)
        logger.info("Loaded %d existing services", len(services))
        logger.info("Crawling %d sitemaps...", len(self.settings.sitemap_roots))

        discovered = await self.crawl_sitemaps(self.settings.sitemap_roots)
        logger.info("Found %d total URLs in sitemaps", len(discovered))

        potential = self.filter_candidates(discovered, known)
        to_check = potential[:limit]
        logger.info(
            "Found %d potential new services, fetching page info for %d",
            len(potential),
            len(to_check),
        )

        infos = await run_batched(
            to_check,
            self.prober.probe_info,
            concurrency=self.settings.concurrency,
            delay=self.settings.batch_delay,
            progress=progress,
        )
        candidates = sorted(
            (
                Candidate(url=url, title=info.title, description=info.description)
                for url, info in zip(to_check, infos)
                if info is not None and info.title
            ),
            key=lambda c: c.url,
        )
        logger.info("%d candidates with page info", len(candidates))
        return DiscoveryReport(
            existing_count=len(services),
            sitemap_urls_found=len(discovered),
            potential_services_found=len(potential),
            candidates=candidates,
        )
