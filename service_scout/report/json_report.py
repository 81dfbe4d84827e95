# service_scout/report/json_report.py

"""
JSON output for ServiceScout.

Both report types expose ``to_dict()``; this module only serializes and saves.
"""
import json
from pathlib import Path
from typing import Union

from service_scout.crawler.models import AuditReport, DiscoveryReport

Report = Union[AuditReport, DiscoveryReport]


def dump_json(report: Report, *, pretty: bool = True) -> str:
    """Serialize *report* to a JSON string (2-space indent when *pretty*)."""
    return json.dumps(report.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def render_json(report: Report, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Save *report* as JSON at *output_path* and return the path.

    Example:
    ```python
    from service_scout.report.json_report import render_json
    report_path = render_json(report, 'reports/audit.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(dump_json(report, pretty=pretty) + "\n", encoding="utf-8")
    return output
