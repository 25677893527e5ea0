import logging
from typing import NamedTuple
from urllib.parse import urldefrag

from bs4 import BeautifulSoup

from sponsor_scout.mappers.domain import is_same_site, resolve_url
from sponsor_scout.services.fetcher import Fetcher

logger = logging.getLogger(__name__)

SPONSOR_KEYWORDS = ("sponsor", "partner", "supporter", "backer", "donor", "corporate")
MAX_PAGES = 5


class DiscoveredPages(NamedTuple):
    pages: list[str]
    homepage_html: str | None  # None when the homepage could not be fetched


def find_sponsor_links(html: str, base_url: str) -> list[str]:
    """Same-site links whose href or text mentions sponsorship, in page order."""
    soup = BeautifulSoup(html, "html.parser")
    links: list[str] = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href or href.startswith(("#", "mailto:", "tel:", "javascript:")):
            continue

        text = a.get_text(" ", strip=True).lower()
        href_lower = href.lower()
        if not any(k in href_lower or k in text for k in SPONSOR_KEYWORDS):
            continue

        url, _ = urldefrag(resolve_url(href, base_url))
        if not is_same_site(url, base_url):
            continue
        if url not in links:
            links.append(url)
    return links


class PageDiscoveryService:
    def __init__(self, fetcher: Fetcher, max_pages: int = MAX_PAGES, timeout: float | None = None):
        self._fetcher = fetcher
        self._max_pages = max_pages
        self._timeout = timeout

    async def discover_pages(self, base_url: str) -> list[str]:
        """Candidate sponsor pages of a club site; the homepage is always included."""
        return (await self.discover(base_url)).pages

    async def discover(self, base_url: str) -> DiscoveredPages:
        """Candidate pages plus the homepage body, so callers need not fetch it again."""
        body, ok = await self._fetcher.fetch(base_url, timeout=self._timeout)
        if not ok:
            logger.info("Homepage %s unreachable, only the homepage will be tried", base_url)
            return DiscoveredPages([base_url], None)

        pages = find_sponsor_links(body, base_url)
        if not any(same_page(p, base_url) for p in pages[: self._max_pages]):
            pages = [base_url] + [p for p in pages if not same_page(p, base_url)]

        pages = pages[: self._max_pages]
        logger.info("Found %d candidate sponsor pages on %s", len(pages), base_url)
        return DiscoveredPages(pages, body)


def same_page(a: str, b: str) -> bool:
    return a.rstrip("/") == b.rstrip("/")
