# === FILE: service_scout/parser/html_parser.py ===
"""HTML helpers for ServiceScout.

Only two facts about a page matter to the pipelines:

* title: text of the first ``<title>``, used both as the discovery signal
  ("the page rendered something") and as the cheap soft-404 check;
* description: ``content`` of the first ``<meta name="description">``,
  whatever the attribute order.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Optional

from bs4 import BeautifulSoup

from service_scout.crawler.models import PageInfo

__all__: Sequence[str] = ("extract_title", "extract_page_info")

_DESCRIPTION = re.compile(r"^description$", re.IGNORECASE)


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _title(soup: BeautifulSoup) -> Optional[str]:
    tag = soup.find("title")
    if tag is None:
        return None
    return tag.get_text(strip=True) or None


def extract_title(html: str) -> Optional[str]:
    """Return the first ``<title>`` text, or None if absent or blank."""
    return _title(_soup(html))


def extract_page_info(html: str) -> PageInfo:
    soup = _soup(html)
    description = None
    meta = soup.find("meta", attrs={"name": _DESCRIPTION, "content": True})
    if meta is not None:
        description = str(meta.get("content", "")).strip() or None
    return PageInfo(title=_title(soup), description=description)
