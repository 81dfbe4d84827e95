"""
Page prober: the health check behind the audit and the page-info probe behind
discovery.
"""
from __future__ import annotations

import time
from typing import Collection, Optional

from service_scout.catalog import ServiceRecord
from service_scout.crawler.fetcher import Fetcher, Outcome, bounded
from service_scout.crawler.models import AuditResult, AuditStatus, FetchResult, PageInfo
from service_scout.logger import logger
from service_scout.parser.html_parser import extract_page_info, extract_title
from service_scout.rules import PatternMatcher
from service_scout.utils import GOVERNMENT_SUFFIXES, is_suspicious_redirect

__all__ = ["PageProber"]


def _error_text(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class PageProber:
    """Probe single URLs. Never raises for network failures."""

    def __init__(
        self,
        fetcher: Fetcher,
        matcher: PatternMatcher,
        *,
        timeout: float = 15.0,
        info_timeout: float = 10.0,
        government_suffixes: Collection[str] = GOVERNMENT_SUFFIXES,
    ) -> None:
        self.fetcher = fetcher
        self.matcher = matcher
        self.timeout = timeout
        self.info_timeout = info_timeout
        self.government_suffixes = government_suffixes

    async def probe_health(self, service: ServiceRecord) -> AuditResult:
        """Classify *service*'s URL into exactly one :class:`AuditStatus`.

        HEAD (redirects followed) → HTTP status check → redirect-domain check →
        for HTML only, GET the final URL and look for soft-404 content.
        """
        url = service.url
        start = time.monotonic()

        def result(status: AuditStatus, **fields) -> AuditResult:
            elapsed = time.monotonic() - start
            logger.debug("%s %s (%.2fs)", status.value, url, elapsed)
            return AuditResult(service=service, status=status, elapsed=elapsed, **fields)

        def failed(outcome: Outcome) -> AuditResult:
            if outcome.timed_out:
                return result(
                    AuditStatus.TIMEOUT, reason=f"Request timed out after {self.timeout:g}s"
                )
            return result(AuditStatus.ERROR, reason=_error_text(outcome.error))

        head_outcome = await bounded(self.fetcher.head(url), self.timeout)
        if not head_outcome.ok:
            return failed(head_outcome)
        head: FetchResult = head_outcome.value

        if not head.ok:
            return result(
                AuditStatus.BROKEN,
                http_status=head.status,
                reason=f"HTTP {head.status}",
                final_url=head.url,
            )

        if is_suspicious_redirect(url, head.url, self.government_suffixes):
            return result(
                AuditStatus.REDIRECT_SUSPICIOUS,
                http_status=head.status,
                reason="Redirected to different domain",
                original_url=url,
                final_url=head.url,
            )

        if head.is_html:
            page_outcome = await bounded(self.fetcher.get(head.url), self.timeout)
            if not page_outcome.ok:
                return failed(page_outcome)
            html = page_outcome.value.text
            verdict = self.matcher.detect_soft404(html, extract_title(html))
            if verdict.detected:
                return result(
                    AuditStatus.SOFT_404,
                    http_status=head.status,
                    reason=verdict.reason,
                    final_url=head.url,
                )

        return result(
            AuditStatus.OK,
            http_status=head.status,
            final_url=head.url if head.url != url else None,
        )

    async def probe_info(self, url: str) -> Optional[PageInfo]:
        """Title and description of *url*, or None if it could not be fetched."""
        outcome = await bounded(self.fetcher.get(url), self.info_timeout)
        if not outcome.ok:
            logger.debug("No page info for %s: %s", url, "timeout" if outcome.timed_out else outcome.error)
            return None
        page: FetchResult = outcome.value
        if not page.ok:
            logger.debug("No page info for %s: HTTP %s", url, page.status)
            return None
        return extract_page_info(page.text)
