# service_scout/crawler/models.py
"""
Data models shared by the crawler, the prober and the pipelines.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from service_scout.catalog import ServiceRecord


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Response of one HEAD or GET; ``url`` is the final URL after redirects."""

    status: int
    url: str
    content_type: str = ""
    text: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_html(self) -> bool:
        return "text/html" in self.content_type.lower()


@dataclass(frozen=True, slots=True)
class SitemapDocument:
    """A parsed sitemap: nested sitemap locations and page locations."""

    children: List[str] = field(default_factory=list)
    urls: List[str] = field(default_factory=list)

    @property
    def is_index(self) -> bool:
        return bool(self.children)


@dataclass(frozen=True, slots=True)
class PageInfo:
    title: Optional[str] = None
    description: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Candidate:
    """A sitemap URL that looks like a service missing from the catalog."""

    url: str
    title: str
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"url": self.url, "title": self.title, "description": self.description}


class AuditStatus(str, Enum):
    OK = "ok"
    BROKEN = "broken"
    SOFT_404 = "soft_404"
    REDIRECT_SUSPICIOUS = "redirect_suspicious"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class AuditResult:
    """Terminal classification of one service probe."""

    service: ServiceRecord
    status: AuditStatus
    elapsed: float
    http_status: Optional[int] = None
    reason: Optional[str] = None
    final_url: Optional[str] = None
    original_url: Optional[str] = None

    @property
    def is_issue(self) -> bool:
        return self.status is not AuditStatus.OK

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.service.id,
            "name": self.service.display_name,
            "url": self.service.url,
            "status": self.status.value,
            "httpStatus": self.http_status,
            "reason": self.reason,
            "finalUrl": self.final_url,
            "originalUrl": self.original_url,
            "elapsedMs": round(self.elapsed * 1000),
        }


@dataclass(frozen=True, slots=True)
class Summary:
    """Per-status counts over one audit run."""

    total: int = 0
    ok: int = 0
    broken: int = 0
    soft_404: int = 0
    redirect_suspicious: int = 0
    timeout: int = 0
    error: int = 0

    @classmethod
    def from_results(cls, results: List[AuditResult]) -> Summary:
        counts = {status.value: 0 for status in AuditStatus}
        for result in results:
            counts[result.status.value] += 1
        return cls(total=len(results), **counts)

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "healthy": self.ok,
            "broken": self.broken,
            "soft404": self.soft_404,
            "suspiciousRedirects": self.redirect_suspicious,
            "timeouts": self.timeout,
            "errors": self.error,
        }


@dataclass(frozen=True, slots=True)
class AuditReport:
    results: List[AuditResult]
    generated: datetime = field(default_factory=_now)

    @property
    def summary(self) -> Summary:
        return Summary.from_results(self.results)

    @property
    def issues(self) -> List[AuditResult]:
        return [r for r in self.results if r.is_issue]

    @property
    def has_issues(self) -> bool:
        return any(r.is_issue for r in self.results)

    def by_status(self, status: AuditStatus) -> List[AuditResult]:
        return [r for r in self.results if r.status is status]

    def to_dict(self) -> Dict[str, object]:
        return {
            "generated": self.generated.isoformat(),
            "summary": self.summary.to_dict(),
            "issues": [r.to_dict() for r in self.issues],
            "results": [r.to_dict() for r in self.results],
        }


@dataclass(frozen=True, slots=True)
class DiscoveryReport:
    existing_count: int
    sitemap_urls_found: int
    potential_services_found: int
    candidates: List[Candidate]
    generated: datetime = field(default_factory=_now)

    def to_dict(self) -> Dict[str, object]:
        return {
            "generated": self.generated.isoformat(),
            "existingCount": self.existing_count,
            "sitemapUrlsFound": self.sitemap_urls_found,
            "potentialServicesFound": self.potential_services_found,
            "candidatesWithInfo": len(self.candidates),
            "candidates": [c.to_dict() for c in self.candidates],
        }
