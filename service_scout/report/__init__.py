"""service_scout.report: JSON and Markdown renderers used by the CLI and tests."""

from __future__ import annotations

from service_scout.report.json_report import dump_json, render_json
from service_scout.report.markdown_report import (
    render_audit_markdown,
    render_discovery_markdown,
    render_markdown,
)

__all__ = [
    "dump_json",
    "render_json",
    "render_audit_markdown",
    "render_discovery_markdown",
    "render_markdown",
]
