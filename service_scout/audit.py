"""service_scout.audit: Link-health audit over every cataloged service."""

from __future__ import annotations

from typing import Optional, Sequence

from service_scout.catalog import ServiceRecord
from service_scout.config import ScoutConfig
from service_scout.crawler.fetcher import Fetcher
from service_scout.crawler.models import AuditReport
from service_scout.crawler.prober import PageProber
from service_scout.crawler.scheduler import ProgressCallback, run_batched
from service_scout.logger import logger
from service_scout.rules import PatternMatcher

__all__ = ["AuditPipeline"]


class AuditPipeline:
    """Probe each service once and collect one classified result per service."""

    def __init__(
        self,
        config: ScoutConfig,
        fetcher: Fetcher,
        matcher: Optional[PatternMatcher] = None,
    ) -> None:
        self.config = config
        self.prober = PageProber(
            fetcher,
            matcher or PatternMatcher.from_config(config),
            timeout=config.audit.timeout,
            government_suffixes=config.government_suffixes,
        )

    async def run(
        self,
        services: Sequence[ServiceRecord],
        progress: Optional[ProgressCallback] = None,
    ) -> AuditReport:
        settings = self.config.audit
        logger.info("Checking %d services...", len(services))
        results = await run_batched(
            services,
            self.prober.probe_health,
            concurrency=settings.concurrency,
            delay=settings.batch_delay,
            progress=progress,
        )
        report = AuditReport(results=results)
        summary = report.summary
        logger.info(
            "Audit finished: %d ok, %d with issues of %d",
            summary.ok,
            summary.total - summary.ok,
            summary.total,
        )
        return report
