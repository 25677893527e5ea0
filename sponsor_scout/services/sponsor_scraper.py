import logging

from sponsor_scout.mappers.dedup import dedupe_sponsors
from sponsor_scout.mappers.name_cleaner import clean
from sponsor_scout.mappers.name_rules import is_valid_sponsor_name
from sponsor_scout.mappers.sponsor_extractors import (
    DEFAULT_EXTRACTORS,
    Extractor,
    Page,
    extract_candidates,
)
from sponsor_scout.schemas.sponsor import ScrapedSponsor, ScrapeResult, SponsorCandidate
from sponsor_scout.services.batching import DEFAULT_BATCH_SIZE, gather_in_batches
from sponsor_scout.services.fetcher import Fetcher
from sponsor_scout.services.page_discovery import PageDiscoveryService, same_page

logger = logging.getLogger(__name__)

PAGE_TIMEOUT = 30.0


def finalize_sponsors(candidates: list[SponsorCandidate]) -> list[ScrapedSponsor]:
    """Last gate before results leave the scraper: every name re-cleaned and re-checked."""
    sponsors: list[ScrapedSponsor] = []
    for candidate in candidates:
        name = clean(candidate.name)
        if not is_valid_sponsor_name(name):
            logger.debug("Dropping %r at final validation", candidate.name)
            continue
        sponsors.append(ScrapedSponsor(
            name=name,
            logo_url=candidate.logo_url,
            website_url=candidate.website_url,
            tier=candidate.tier,
            source_url=candidate.source_url,
        ))
    return sponsors


def _normalize_site_url(website_url: str) -> str:
    url = website_url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url.rstrip("/")


class SponsorScraperService:
    def __init__(
        self,
        fetcher: Fetcher,
        discovery: PageDiscoveryService | None = None,
        extractors: tuple[Extractor, ...] = DEFAULT_EXTRACTORS,
        page_timeout: float = PAGE_TIMEOUT,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self._fetcher = fetcher
        self._discovery = discovery or PageDiscoveryService(fetcher, timeout=page_timeout)
        self._extractors = extractors
        self._page_timeout = page_timeout
        self._batch_size = batch_size

    async def scrape(self, website_url: str) -> ScrapeResult:
        """Sponsors listed on a club website. Best-effort, never raises."""
        result = ScrapeResult()
        if not website_url or not website_url.strip():
            result.errors.append("No website URL provided")
            return result

        try:
            base_url = _normalize_site_url(website_url)
            discovered = await self._discovery.discover(base_url)
            result.scraped_urls = discovered.pages

            candidates: list[SponsorCandidate] = []
            for page_url in result.scraped_urls:
                if same_page(page_url, base_url):
                    page_candidates = self._html_candidates(
                        discovered.homepage_html, page_url, result.errors,
                    )
                else:
                    page_candidates = await self._page_candidates(page_url, result.errors)
                candidates.extend(page_candidates)

            result.sponsors = finalize_sponsors(dedupe_sponsors(candidates))
        except Exception as exc:
            logger.exception("Sponsor scrape failed for %s", website_url)
            result.errors.append(str(exc) or type(exc).__name__)

        logger.info(
            "Scraped %s: %d sponsors from %d pages (%d errors)",
            website_url, len(result.sponsors), len(result.scraped_urls), len(result.errors),
        )
        return result

    async def extract_page(self, page_url: str) -> list[ScrapedSponsor]:
        """Sponsors found on one page; empty when the page can't be fetched."""
        candidates = await self._page_candidates(page_url, [])
        return finalize_sponsors(dedupe_sponsors(candidates))

    def extract_html(self, html: str, page_url: str) -> list[SponsorCandidate]:
        return extract_candidates(Page.parse(page_url, html), self._extractors)

    async def scrape_many(self, website_urls: list[str]) -> list[ScrapeResult]:
        """Scrape several club sites, a fixed number at a time."""
        results = await gather_in_batches(website_urls, self.scrape, self._batch_size)
        scraped: list[ScrapeResult] = []
        for url, res in zip(website_urls, results):
            if isinstance(res, BaseException):
                logger.warning("Scrape of %s failed: %s", url, res)
                scraped.append(ScrapeResult(errors=[str(res) or type(res).__name__]))
            else:
                scraped.append(res)
        return scraped

    async def _page_candidates(self, page_url: str, errors: list[str]) -> list[SponsorCandidate]:
        body, ok = await self._fetcher.fetch(page_url, timeout=self._page_timeout)
        return self._html_candidates(body if ok else None, page_url, errors)

    def _html_candidates(
        self, body: str | None, page_url: str, errors: list[str],
    ) -> list[SponsorCandidate]:
        if body is None:
            logger.info("Skipping %s: fetch failed", page_url)
            errors.append(f"Failed to fetch {page_url}")
            return []

        try:
            candidates = self.extract_html(body, page_url)
        except Exception as exc:
            logger.exception("Sponsor extraction failed on %s", page_url)
            errors.append(f"Extraction failed on {page_url}: {exc}")
            return []

        logger.debug("%d sponsor candidates on %s", len(candidates), page_url)
        return candidates
