# File: service_scout/parser/sitemap_parser.py
"""service_scout.parser.sitemap_parser: Parse sitemap.xml into index and page locations."""

from __future__ import annotations

import re
from typing import List

from lxml import etree

from service_scout.crawler.models import SitemapDocument

# An "&" that does not start an entity or character reference.
_BARE_AMPERSAND = re.compile(r"&(?!(?:[A-Za-z_][\w.-]*|#[0-9]+|#x[0-9A-Fa-f]+);)")


def _locs(root: etree._Element, parent: str) -> List[str]:
    found = root.iterfind(f".//{{*}}{parent}/{{*}}loc")
    return [loc.text.strip() for loc in found if loc.text and loc.text.strip()]


def parse_sitemap(xml_content: str) -> SitemapDocument:
    """Split a sitemap into nested-sitemap and page locations.

    Args:
        xml_content: text of a ``<sitemapindex>`` or ``<urlset>`` document.

    Returns:
        SitemapDocument whose ``children`` holds ``<sitemap><loc>`` values and
        ``urls`` holds ``<url><loc>`` values. Namespaces are ignored; input that
        lxml cannot recover yields an empty document. The text is parsed as
        UTF-8 whatever the XML declaration says, and bare ``&`` in query
        strings is kept verbatim.

    Example:
    ```python
    from service_scout.parser.sitemap_parser import parse_sitemap

    doc = parse_sitemap(xml)
    targets = doc.children if doc.is_index else doc.urls
    ```
    """
    if not xml_content.strip():
        return SitemapDocument()
    parser = etree.XMLParser(
        encoding="utf-8", ns_clean=True, recover=True, resolve_entities=False, no_network=True
    )
    try:
        root = etree.fromstring(
            _BARE_AMPERSAND.sub("&amp;", xml_content).encode("utf-8"), parser=parser
        )
    except etree.XMLSyntaxError:
        return SitemapDocument()
    if root is None:
        return SitemapDocument()
    return SitemapDocument(children=_locs(root, "sitemap"), urls=_locs(root, "url"))
