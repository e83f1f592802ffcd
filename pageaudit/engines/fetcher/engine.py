"""
Page Fetcher - Retrieves one page over HTTP for analysis.

Single page only: redirects are followed, nothing else is requested.
Every failure surfaces as FetchFailure; the caller performs no extraction
or scoring when a fetch fails.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from urllib.parse import urlparse

import httpx
import structlog

from pageaudit.core.config import Settings, get_settings
from pageaudit.core.errors import FetchFailure

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FetchedPage:
    """Markup plus the post-redirect address used for URL resolution."""
    markup: str
    final_url: str
    status_code: int
    content_type: str = ""
    elapsed_ms: float = 0.0


def build_http_client(settings: Settings | None = None) -> httpx.AsyncClient:
    """Shared client for the application lifespan."""
    settings = settings or get_settings()
    return httpx.AsyncClient(
        headers={
            "User-Agent": settings.FETCH_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        },
        follow_redirects=True,
        max_redirects=settings.FETCH_MAX_REDIRECTS,
        timeout=settings.FETCH_TIMEOUT,
    )


class PageFetcher:
    """Fetches a page via plain HTTP using httpx."""

    def __init__(self, http_client: httpx.AsyncClient, timeout: float | None = None):
        self.http_client = http_client
        self.timeout = timeout if timeout is not None else get_settings().FETCH_TIMEOUT

    async def fetch(self, url: str) -> FetchedPage:
        scheme = urlparse(url).scheme.lower()
        if scheme not in ("http", "https"):
            raise FetchFailure(url, f"unsupported URL scheme {scheme or '(none)'!r}")

        start = time.perf_counter()
        try:
            response = await self.http_client.get(url, follow_redirects=True, timeout=self.timeout)
        except httpx.TimeoutException as exc:
            logger.warning("Fetch timed out", url=url, timeout=self.timeout)
            raise FetchFailure(url, f"timed out after {self.timeout}s") from exc
        except httpx.TooManyRedirects as exc:
            logger.warning("Too many redirects", url=url)
            raise FetchFailure(url, "too many redirects") from exc
        except httpx.HTTPError as exc:
            logger.warning("HTTP fetch failed", url=url, error=str(exc))
            raise FetchFailure(url, str(exc) or type(exc).__name__) from exc

        elapsed = (time.perf_counter() - start) * 1000
        if response.status_code >= 400:
            logger.warning("Fetch returned error status", url=url, status_code=response.status_code)
            raise FetchFailure(url, f"HTTP {response.status_code}", status_code=response.status_code)

        page = FetchedPage(
            markup=response.text,
            final_url=str(response.url),
            status_code=response.status_code,
            content_type=response.headers.get("content-type", ""),
            elapsed_ms=elapsed,
        )
        logger.info(
            "Page fetched",
            url=url,
            final_url=page.final_url,
            status_code=page.status_code,
            elapsed_ms=round(elapsed, 2),
        )
        return page
