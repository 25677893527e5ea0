import respx
from httpx import Response

from sponsor_scout.config import Settings
from sponsor_scout.main import discover_contacts, scrape_club_sponsors, scraping_session
from sponsor_scout.services.contact_discovery import ContactDiscoveryService
from sponsor_scout.services.sponsor_scraper import SponsorScraperService


def _settings(**kwargs) -> Settings:
    return Settings(_env_file=None, scrape_delay_ms=0, **kwargs)


async def test_session_wires_services(monkeypatch):
    monkeypatch.delenv("HUNTER_API_KEY", raising=False)

    async with scraping_session(_settings()) as session:
        assert isinstance(session.scraper, SponsorScraperService)
        assert isinstance(session.contacts, ContactDiscoveryService)
        assert session.contacts._hunter is None


async def test_session_enables_hunter_with_key():
    async with scraping_session(_settings(hunter_api_key="test-key")) as session:
        assert session.contacts._hunter is not None


@respx.mock
async def test_scrape_club_sponsors():
    respx.get("https://club.com/").mock(
        return_value=Response(
            200,
            html='<html><body><div class="sponsors"><img alt="Acme Pty Ltd" src="a.png"></div></body></html>',
            headers={"content-type": "text/html"},
        )
    )
    result = await scrape_club_sponsors("https://club.com", settings=_settings())
    assert [s.name for s in result.sponsors] == ["Acme Pty Ltd"]


async def test_discover_contacts_without_website(monkeypatch):
    monkeypatch.delenv("HUNTER_API_KEY", raising=False)
    result = await discover_contacts("Mission Foods", settings=_settings())
    assert [c.email for c in result.contacts] == ["info@missionfoods.com.au"]
