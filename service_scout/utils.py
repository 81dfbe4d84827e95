# File: service_scout/utils.py
"""service_scout.utils: URL normalization and redirect-domain classification."""

from __future__ import annotations

from typing import Collection, List, Sequence
from urllib.parse import urlsplit

from service_scout.logger import logger

__all__: Sequence[str] = (
    "GOVERNMENT_SUFFIXES",
    "normalize_url",
    "base_domain",
    "is_suspicious_redirect",
    "remove_duplicates",
)

#: Two-label public suffixes under which registrable names span four labels
#: (``dmv.state.co.us`` belongs to ``dmv.state.co.us``, not ``co.us``).
GOVERNMENT_SUFFIXES: tuple[str, ...] = ("co.us",)


def normalize_url(url: str) -> str:
    """Return ``scheme://host/path`` with lowercase host and no trailing slash.

    Query, fragment, port and credentials are dropped. Strings that are not
    absolute URLs fall back to their lowercased form, trailing slashes removed.
    Only for equality checks; never store the result as a canonical URL.
    """
    try:
        parsed = urlsplit(url)
        host = parsed.hostname
    except ValueError:
        host = None
        parsed = None
    if parsed is None or not parsed.scheme or not host:
        return url.lower().rstrip("/")
    return f"{parsed.scheme}://{host}{parsed.path.rstrip('/')}"


def base_domain(host: str, government_suffixes: Collection[str] = GOVERNMENT_SUFFIXES) -> str:
    """Approximate the registrable domain of *host* without a public-suffix list.

    ``dmv.colorado.gov`` → ``colorado.gov``;
    ``www.dmv.state.co.us`` → ``dmv.state.co.us``.
    """
    labels = host.lower().rstrip(".").split(".")
    if len(labels) >= 3 and ".".join(labels[-2:]) in government_suffixes:
        return ".".join(labels[-4:])
    return ".".join(labels[-2:])


def _host(url: str) -> str | None:
    try:
        return urlsplit(url).hostname
    except ValueError:
        return None


def is_suspicious_redirect(
    original_url: str,
    final_url: str,
    government_suffixes: Collection[str] = GOVERNMENT_SUFFIXES,
) -> bool:
    """True when *final_url* left the registrable domain of *original_url*.

    Fails open: if either URL has no parsable host the redirect counts as
    suspicious.
    """
    original_host = _host(original_url)
    final_host = _host(final_url)
    if not original_host or not final_host:
        logger.debug("Unparsable redirect pair: %s -> %s", original_url, final_url)
        return True
    if original_host == final_host:
        return False
    return base_domain(original_host, government_suffixes) != base_domain(
        final_host, government_suffixes
    )


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Drop duplicate URLs, keeping first-seen order."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
