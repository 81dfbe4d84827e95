# File: service_scout/engine.py
"""service_scout.engine: Entry coroutines that open an HTTP session and run a pipeline."""

from __future__ import annotations

from typing import Optional, Sequence

from service_scout.audit import AuditPipeline
from service_scout.catalog import ServiceRecord
from service_scout.config import ScoutConfig
from service_scout.crawler.fetcher import Fetcher
from service_scout.crawler.models import AuditReport, DiscoveryReport
from service_scout.crawler.scheduler import ProgressCallback
from service_scout.discovery import DiscoveryPipeline

__all__ = ["run_audit", "run_discovery"]


async def run_audit(
    config: ScoutConfig,
    services: Sequence[ServiceRecord],
    progress: Optional[ProgressCallback] = None,
) -> AuditReport:
    """Probe every service in *services* and return the classified report."""
    async with Fetcher(config.audit.user_agent) as fetcher:
        return await AuditPipeline(config, fetcher).run(services, progress=progress)


async def run_discovery(
    config: ScoutConfig,
    services: Sequence[ServiceRecord],
    limit: Optional[int] = None,
    progress: Optional[ProgressCallback] = None,
) -> DiscoveryReport:
    """Crawl the configured sitemaps and report services missing from *services*."""
    async with Fetcher(config.discovery.user_agent) as fetcher:
        return await DiscoveryPipeline(config, fetcher).run(
            services, limit=limit, progress=progress
        )
