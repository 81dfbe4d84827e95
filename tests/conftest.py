# File: tests/conftest.py
import asyncio
from typing import Awaitable, Callable, Dict, List, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import ClientConnectionError, web

from service_scout.catalog import ServiceRecord
from service_scout.config import AuditSettings, DiscoverySettings, ScoutConfig
from service_scout.crawler.models import FetchResult

HTML = "text/html; charset=utf-8"

# A stubbed answer: a response, an exception to raise, or (delay, answer).
Answer = Union[FetchResult, BaseException, Tuple[float, "Answer"]]


class StubFetcher:
    """Stands in for :class:`service_scout.crawler.fetcher.Fetcher`.

    Unknown URLs raise a connection error, like an unreachable host.
    """

    def __init__(
        self,
        heads: Dict[str, Answer] | None = None,
        pages: Dict[str, Answer] | None = None,
    ) -> None:
        self.heads = heads or {}
        self.pages = pages or {}
        self.calls: List[Tuple[str, str]] = []

    async def _answer(self, table: Dict[str, Answer], url: str) -> FetchResult:
        answer = table.get(url)
        if answer is None:
            raise ClientConnectionError(f"Cannot connect to {url}")
        if isinstance(answer, tuple):
            delay, answer = answer
            await asyncio.sleep(delay)
        if isinstance(answer, BaseException):
            raise answer
        return answer

    async def head(self, url: str) -> FetchResult:
        self.calls.append(("HEAD", url))
        return await self._answer(self.heads, url)

    async def get(self, url: str) -> FetchResult:
        self.calls.append(("GET", url))
        return await self._answer(self.pages, url)


def html_page(url: str, body: str, title: str | None = None, status: int = 200) -> FetchResult:
    head = f"<head><title>{title}</title></head>" if title is not None else ""
    return FetchResult(status=status, url=url, content_type=HTML, text=f"<html>{head}<body>{body}</body></html>")


@pytest.fixture()
def make_service() -> Callable[..., ServiceRecord]:
    def _make(id, url, name="Test service", department_url=None) -> ServiceRecord:
        return ServiceRecord(id=id, name={"en": name}, url=url, departmentUrl=department_url)

    return _make


@pytest.fixture()
def fast_config() -> ScoutConfig:
    """Defaults with every pacing delay removed and short timeouts."""
    return ScoutConfig(
        audit=AuditSettings(timeout=2.0, batch_delay=0),
        discovery=DiscoverySettings(
            sitemap_roots=["https://dmv.colorado.gov/sitemap.xml"],
            timeout=2.0,
            info_timeout=2.0,
            batch_delay=0,
            root_delay=0,
            child_delay=0,
        ),
    )


@pytest_asyncio.fixture
async def serve(unused_tcp_port_factory) -> Callable[[web.Application], Awaitable[str]]:
    """Start aiohttp apps on free local ports; return their base URLs."""
    runners: List[web.AppRunner] = []

    async def _start(app: web.Application) -> str:
        runner = web.AppRunner(app)
        await runner.setup()
        port = unused_tcp_port_factory()
        site = web.TCPSite(runner, "127.0.0.1", port)
        await site.start()
        runners.append(runner)
        return f"http://127.0.0.1:{port}"

    try:
        yield _start
    finally:
        for runner in runners:
            await runner.cleanup()
