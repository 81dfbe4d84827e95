# service_scout/crawler/fetcher.py
"""
Fetcher module: HTTP HEAD/GET over one aiohttp session, plus :func:`bounded`,
the single place where a network call is tied to a timeout.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Generic, Optional, TypeVar

from aiohttp import ClientError, ClientSession

from service_scout.crawler.models import FetchResult

__all__ = ["Outcome", "bounded", "Fetcher", "TRANSPORT_ERRORS"]

T = TypeVar("T")

# Failures a single fetch may raise; anything else is a bug and propagates.
TRANSPORT_ERRORS = (ClientError, OSError, ValueError)


@dataclass(frozen=True, slots=True)
class Outcome(Generic[T]):
    """Result of a bounded operation: a value, a timeout, or a transport error."""

    value: Optional[T] = None
    timed_out: bool = False
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return not self.timed_out and self.error is None


async def bounded(operation: Awaitable[T], timeout: float) -> Outcome[T]:
    """Await *operation* for at most *timeout* seconds.

    Expiry cancels only this operation; callers running several bounded
    operations side by side are unaffected.
    """
    try:
        async with asyncio.timeout(timeout):
            value = await operation
    except TimeoutError:
        return Outcome(timed_out=True)
    except TRANSPORT_ERRORS as exc:
        return Outcome(error=exc)
    return Outcome(value=value)


class Fetcher:
    """Issues HEAD and GET requests with the configured User-Agent.

    Used as an async context manager that owns its session, or wrapped around
    an existing :class:`aiohttp.ClientSession`.
    """

    def __init__(self, user_agent: str, session: Optional[ClientSession] = None) -> None:
        self.user_agent = user_agent
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(
                headers={"User-Agent": self.user_agent},
                raise_for_status=False,
            )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _session(self) -> ClientSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    async def head(self, url: str) -> FetchResult:
        """HEAD *url*, following redirects."""
        async with self._session().head(url, allow_redirects=True) as resp:
            return FetchResult(
                status=resp.status,
                url=str(resp.url),
                content_type=resp.headers.get("Content-Type", ""),
            )

    async def get(self, url: str) -> FetchResult:
        """GET *url*, following redirects, and decode the body leniently."""
        async with self._session().get(url, allow_redirects=True) as resp:
            text = await resp.text(errors="replace")
            return FetchResult(
                status=resp.status,
                url=str(resp.url),
                content_type=resp.headers.get("Content-Type", ""),
                text=text,
            )
