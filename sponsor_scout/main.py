import logging
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

import httpx

from sponsor_scout.config import Settings
from sponsor_scout.schemas.contact import DiscoveryResult
from sponsor_scout.schemas.sponsor import ScrapeResult
from sponsor_scout.services.contact_discovery import ContactDiscoveryService
from sponsor_scout.services.fetcher import Fetcher, RateLimiter
from sponsor_scout.services.hunter import HunterService
from sponsor_scout.services.page_discovery import PageDiscoveryService
from sponsor_scout.services.sponsor_scraper import SponsorScraperService

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


@dataclass
class ScoutSession:
    scraper: SponsorScraperService
    contacts: ContactDiscoveryService


@asynccontextmanager
async def scraping_session(settings: Settings | None = None) -> AsyncIterator[ScoutSession]:
    """Wire the services around one shared HTTP client and rate limiter."""
    settings = settings or Settings()
    configure_logging(settings)

    async with httpx.AsyncClient(timeout=settings.page_timeout) as client:
        fetcher = Fetcher(client, RateLimiter(settings.scrape_delay_ms / 1000))

        hunter: HunterService | None = None
        if settings.hunter_api_key:
            hunter = HunterService(client, settings.hunter_api_key)
        else:
            logger.info("HUNTER_API_KEY not set, contact discovery will skip the API")

        discovery = PageDiscoveryService(
            fetcher, max_pages=settings.max_sponsor_pages, timeout=settings.page_timeout,
        )
        scraper = SponsorScraperService(
            fetcher,
            discovery=discovery,
            page_timeout=settings.page_timeout,
            batch_size=settings.batch_size,
        )
        contacts = ContactDiscoveryService(
            fetcher,
            hunter=hunter,
            timeout=settings.contact_timeout,
            batch_size=settings.batch_size,
        )
        yield ScoutSession(scraper=scraper, contacts=contacts)


async def scrape_club_sponsors(website_url: str, settings: Settings | None = None) -> ScrapeResult:
    async with scraping_session(settings) as session:
        return await session.scraper.scrape(website_url)


async def discover_contacts(
    company_name: str, website: str | None = None, settings: Settings | None = None,
) -> DiscoveryResult:
    async with scraping_session(settings) as session:
        return await session.contacts.discover(company_name, website)
