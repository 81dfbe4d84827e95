"""service_scout.report.markdown_report: Markdown reports rendered with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import BaseLoader, Environment, FileSystemLoader, PackageLoader, select_autoescape

from service_scout.crawler.models import AuditReport, AuditStatus, DiscoveryReport

AUDIT_TEMPLATE = "audit.md.j2"
DISCOVERY_TEMPLATE = "discovery.md.j2"

# (status, heading) in report order; "ok" results are only counted.
AUDIT_SECTIONS: tuple[tuple[AuditStatus, str], ...] = (
    (AuditStatus.BROKEN, "❌ Broken Links (HTTP Errors)"),
    (AuditStatus.SOFT_404, "👻 Soft 404s (Page exists but content is gone)"),
    (AuditStatus.REDIRECT_SUSPICIOUS, "🔀 Suspicious Redirects (Different domain)"),
    (AuditStatus.TIMEOUT, "⏱️ Timeouts"),
    (AuditStatus.ERROR, "⚠️ Connection Errors"),
)


def _environment(template_dir: Optional[Union[Path, str]]) -> Environment:
    loader: BaseLoader
    if template_dir is None:
        loader = PackageLoader("service_scout", "templates")
    else:
        loader = FileSystemLoader(str(template_dir))
    return Environment(
        loader=loader,
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render_audit_markdown(
    report: AuditReport, template_dir: Optional[Union[Path, str]] = None
) -> str:
    """Render the link-health report.

    Args:
        report: finished audit.
        template_dir: directory holding an ``audit.md.j2`` override; the
            packaged template is used when None.
    """
    context: dict[str, Any] = {
        "generated": report.generated.isoformat(),
        "summary": report.summary,
        "sections": [
            {"status": status.value, "heading": heading, "results": report.by_status(status)}
            for status, heading in AUDIT_SECTIONS
        ],
    }
    return _environment(template_dir).get_template(AUDIT_TEMPLATE).render(**context)


def render_discovery_markdown(
    report: DiscoveryReport, template_dir: Optional[Union[Path, str]] = None
) -> str:
    """Render the candidate list, one section per candidate."""
    context: dict[str, Any] = {
        "generated": report.generated.isoformat(),
        "report": report,
        "candidates": report.candidates,
    }
    return _environment(template_dir).get_template(DISCOVERY_TEMPLATE).render(**context)


def render_markdown(
    report: Union[AuditReport, DiscoveryReport],
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Render *report* and save it at *output_path*."""
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(report, AuditReport):
        text = render_audit_markdown(report, template_dir)
    else:
        text = render_discovery_markdown(report, template_dir)
    output.write_text(text, encoding="utf-8")
    return output
