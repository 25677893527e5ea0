import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import NamedTuple
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)

_MAX_BODY = 2 * 1024 * 1024  # 2 MB
_DEFAULT_TIMEOUT = 30.0

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


class FetchResult(NamedTuple):
    body: str
    ok: bool


FAILED = FetchResult("", False)


class RateLimiter:
    """Minimum interval between requests to the same host.

    One instance is shared by every fetch of a crawl session. Waits for
    different hosts never block each other.
    """

    def __init__(
        self,
        min_interval: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._min_interval = min_interval
        self._clock = clock
        self._sleep = sleep
        self._last_request: dict[str, float] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def wait(self, host: str) -> float:
        """Block until `host` may be hit again. Returns the seconds waited."""
        lock = self._locks.setdefault(host, asyncio.Lock())
        async with lock:
            waited = 0.0
            last = self._last_request.get(host)
            if last is not None:
                remaining = self._min_interval - (self._clock() - last)
                if remaining > 0:
                    await self._sleep(remaining)
                    waited = remaining
            self._last_request[host] = self._clock()
            return waited


class Fetcher:
    def __init__(self, client: httpx.AsyncClient, rate_limiter: RateLimiter | None = None):
        self._client = client
        self._rate_limiter = rate_limiter or RateLimiter()

    async def fetch(self, url: str, timeout: float | None = None) -> FetchResult:
        """GET a page. Never raises; failures come back as ok=False."""
        try:
            host = urlparse(url).hostname
        except ValueError:
            logger.debug("Unparseable URL %s", url)
            return FAILED
        if not host:
            logger.debug("URL without host %s", url)
            return FAILED

        await self._rate_limiter.wait(host)

        candidates = [url]
        if url.startswith("http://"):
            candidates.insert(0, "https://" + url[len("http://"):])

        for candidate in candidates:
            body = await self._get(candidate, timeout or _DEFAULT_TIMEOUT)
            if body is not None:
                return FetchResult(body, True)

        logger.debug("Giving up on %s", url)
        return FAILED

    async def _get(self, url: str, timeout: float) -> str | None:
        try:
            resp = await self._client.get(
                url,
                follow_redirects=True,
                timeout=timeout,
                headers=BROWSER_HEADERS,
            )
            resp.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.debug("Failed to fetch %s: %s", url, exc)
            return None

        content_type = resp.headers.get("content-type", "")
        if content_type and "html" not in content_type and "xml" not in content_type:
            logger.debug("Skipping non-HTML %s (content-type: %s)", url, content_type)
            return None

        if len(resp.content) > _MAX_BODY:
            logger.debug("Skipping oversized page %s (%d bytes)", url, len(resp.content))
            return None

        return resp.text
