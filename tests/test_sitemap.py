"""Sitemap parsing and recursive resolution against local aiohttp servers."""
from __future__ import annotations

import asyncio

import pytest
from aiohttp import web

import service_scout.crawler.sitemap as sitemap_module
from conftest import StubFetcher
from service_scout.config import DiscoverySettings
from service_scout.crawler.fetcher import Fetcher
from service_scout.crawler.models import FetchResult
from service_scout.crawler.sitemap import SitemapResolver
from service_scout.parser.sitemap_parser import parse_sitemap

NS = 'xmlns="http://www.sitemaps.org/schemas/sitemap/0.9"'


def index_xml(*locs: str) -> str:
    entries = "".join(f"<sitemap><loc>{loc}</loc></sitemap>" for loc in locs)
    return f'<?xml version="1.0" encoding="UTF-8"?><sitemapindex {NS}>{entries}</sitemapindex>'


def urlset_xml(*locs: str) -> str:
    entries = "".join(f"<url><loc>{loc}</loc><lastmod>2024-01-01</lastmod></url>" for loc in locs)
    return f'<?xml version="1.0" encoding="UTF-8"?><urlset {NS}>{entries}</urlset>'


def xml_response(text: str) -> web.Response:
    return web.Response(text=text, content_type="application/xml")


def settings(**overrides) -> DiscoverySettings:
    values = dict(timeout=2.0, child_delay=0)
    values.update(overrides)
    return DiscoverySettings(**values)


# --------------------------------------------------------------------------- #
#                                   Parser                                    #
# --------------------------------------------------------------------------- #


def test_parse_index():
    doc = parse_sitemap(index_xml("https://a.gov/s1.xml", " https://a.gov/s2.xml "))
    assert doc.is_index
    assert doc.children == ["https://a.gov/s1.xml", "https://a.gov/s2.xml"]
    assert doc.urls == []


def test_parse_keeps_declared_latin1_text_intact():
    doc = parse_sitemap(
        '<?xml version="1.0" encoding="ISO-8859-1"?>'
        "<urlset><url><loc>https://x.gov/caf\u00e9-apply</loc></url></urlset>"
    )
    assert doc.urls == ["https://x.gov/caf\u00e9-apply"]


@pytest.mark.parametrize(
    "loc,expected",
    [
        ("https://x.gov/apply?a=1&b=2", "https://x.gov/apply?a=1&b=2"),
        ("https://x.gov/apply?a=1&amp;b=2", "https://x.gov/apply?a=1&b=2"),
        ("https://x.gov/apply?q=r&#38;d", "https://x.gov/apply?q=r&d"),
    ],
)
def test_parse_keeps_query_ampersands(loc, expected):
    assert parse_sitemap(urlset_xml(loc)).urls == [expected]


def test_parse_urlset_without_namespace():
    doc = parse_sitemap("<urlset><url><loc>https://a.gov/apply</loc></url></urlset>")
    assert not doc.is_index
    assert doc.urls == ["https://a.gov/apply"]


@pytest.mark.parametrize("text", ["", "   ", "not xml at all", "<html><body>oops</body></html>"])
def test_parse_garbage_is_empty(text):
    doc = parse_sitemap(text)
    assert doc.children == [] and doc.urls == []


# --------------------------------------------------------------------------- #
#                                  Resolver                                   #
# --------------------------------------------------------------------------- #


async def resolve(base_settings: DiscoverySettings, url: str) -> list[str]:
    async with Fetcher("TestAgent/1.0") as fetcher:
        return await SitemapResolver(fetcher, base_settings).resolve(url)


@pytest.mark.asyncio()
async def test_index_is_flattened(serve):
    app = web.Application()
    base = ""

    async def root(_):
        return xml_response(index_xml(f"{base}/a.xml", f"{base}/missing.xml", f"{base}/b.xml"))

    async def a(_):
        return xml_response(urlset_xml(f"{base}/apply", f"{base}/renew"))

    async def b(_):
        return xml_response(urlset_xml(f"{base}/permit"))

    app.router.add_get("/sitemap.xml", root)
    app.router.add_get("/a.xml", a)
    app.router.add_get("/b.xml", b)
    base = await serve(app)

    urls = await resolve(settings(), f"{base}/sitemap.xml")
    assert urls == [f"{base}/apply", f"{base}/renew", f"{base}/permit"]


@pytest.mark.asyncio()
async def test_recursion_stops_below_depth_two(serve):
    app = web.Application()
    hits: list[str] = []
    base = ""

    def chain(level: int):
        async def handler(request):
            hits.append(request.path)
            if level == 4:
                return xml_response(urlset_xml(f"{base}/deep-service"))
            return xml_response(index_xml(f"{base}/s{level + 1}.xml"))

        return handler

    for level in range(5):
        app.router.add_get(f"/s{level}.xml", chain(level))
    base = await serve(app)

    assert await resolve(settings(), f"{base}/s0.xml") == []
    assert hits == ["/s0.xml", "/s1.xml", "/s2.xml"]

    # A leaf sitemap two levels below the starting index is still read.
    assert await resolve(settings(), f"{base}/s2.xml") == [f"{base}/deep-service"]


@pytest.mark.asyncio()
async def test_fan_out_is_bounded(serve):
    app = web.Application()
    hits: list[str] = []
    base = ""

    async def root(_):
        return xml_response(index_xml(*(f"{base}/c{i}.xml" for i in range(5))))

    async def child(request):
        hits.append(request.path)
        return xml_response(urlset_xml(f"{base}{request.path}.page"))

    app.router.add_get("/sitemap.xml", root)
    for i in range(5):
        app.router.add_get(f"/c{i}.xml", child)
    base = await serve(app)

    urls = await resolve(settings(max_children=3), f"{base}/sitemap.xml")
    assert hits == ["/c0.xml", "/c1.xml", "/c2.xml"]
    assert len(urls) == 3


@pytest.mark.asyncio()
async def test_page_entries_in_an_index_are_ignored(serve):
    app = web.Application()
    base = ""

    async def root(_):
        return xml_response(
            f"<sitemapindex {NS}>"
            f"<sitemap><loc>{base}/leaf.xml</loc></sitemap>"
            f"<url><loc>{base}/stray-apply</loc></url>"
            "</sitemapindex>"
        )

    async def leaf(_):
        return xml_response(urlset_xml(f"{base}/apply"))

    app.router.add_get("/sitemap.xml", root)
    app.router.add_get("/leaf.xml", leaf)
    base = await serve(app)

    assert await resolve(settings(), f"{base}/sitemap.xml") == [f"{base}/apply"]


@pytest.mark.asyncio()
async def test_http_error_yields_nothing(serve):
    app = web.Application()

    async def gone(_):
        return web.Response(status=503, text="maintenance")

    app.router.add_get("/sitemap.xml", gone)
    base = await serve(app)
    assert await resolve(settings(), f"{base}/sitemap.xml") == []


@pytest.mark.asyncio()
async def test_timeout_yields_nothing(serve):
    app = web.Application()

    async def slow(_):
        await asyncio.sleep(1.0)
        return xml_response(urlset_xml("https://a.gov/apply"))

    app.router.add_get("/sitemap.xml", slow)
    base = await serve(app)
    assert await resolve(settings(timeout=0.2), f"{base}/sitemap.xml") == []


@pytest.mark.asyncio()
async def test_unreachable_host_yields_nothing(unused_tcp_port):
    url = f"http://127.0.0.1:{unused_tcp_port}/sitemap.xml"
    assert await resolve(settings(), url) == []


def _xml_result(url: str, text: str) -> FetchResult:
    return FetchResult(status=200, url=url, content_type="application/xml", text=text)


@pytest.mark.asyncio()
async def test_pause_between_child_sitemaps_only(monkeypatch):
    pauses: list[float] = []

    async def fake_sleep(seconds):
        pauses.append(seconds)

    root = "https://dmv.colorado.gov/sitemap.xml"
    children = [f"https://dmv.colorado.gov/sitemap-{i}.xml" for i in range(4)]
    pages = {root: _xml_result(root, index_xml(*children))}
    for i, child in enumerate(children):
        pages[child] = _xml_result(child, urlset_xml(f"https://dmv.colorado.gov/apply-{i}"))

    monkeypatch.setattr(sitemap_module.asyncio, "sleep", fake_sleep)
    resolver = SitemapResolver(StubFetcher(pages=pages), settings(child_delay=0.2))
    urls = await resolver.resolve(root)

    assert len(urls) == 4
    assert pauses == [0.2, 0.2, 0.2]
