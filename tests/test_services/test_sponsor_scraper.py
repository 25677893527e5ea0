"""Tests for SponsorScraperService."""

from unittest.mock import AsyncMock

import respx
from httpx import Response

from sponsor_scout.schemas.sponsor import SponsorCandidate
from sponsor_scout.services.page_discovery import PageDiscoveryService
from sponsor_scout.services.sponsor_scraper import SponsorScraperService, finalize_sponsors

CLUB = "https://club.com"


def _html(body: str) -> str:
    return f"<html><body>{body}</body></html>"


def _page(body: str) -> Response:
    return Response(200, html=_html(body), headers={"content-type": "text/html"})


# --- End to end ---


@respx.mock
async def test_scrape_single_sponsor_from_homepage(fetcher):
    respx.get(f"{CLUB}/").mock(return_value=_page(
        '<div class="sponsors"><img alt="Gold Sponsor Logo of ACME Pty Ltd" src="logo-150x150.jpg"></div>'
    ))
    result = await SponsorScraperService(fetcher).scrape(CLUB)

    assert result.errors == []
    assert result.scraped_urls == [CLUB]
    assert len(result.sponsors) == 1

    sponsor = result.sponsors[0]
    assert sponsor.name == "ACME Pty Ltd"
    assert sponsor.tier is None
    assert sponsor.logo_url == "https://club.com/logo-150x150.jpg"
    assert sponsor.source_url == CLUB


@respx.mock
async def test_scrape_merges_sponsors_across_pages(fetcher):
    respx.get(f"{CLUB}/").mock(return_value=_page(
        '<a href="/sponsors">Our Sponsors</a>'
        '<div class="partners"><img alt="Mission Foods" src="/img/mission.png"></div>'
    ))
    respx.get(f"{CLUB}/sponsors").mock(return_value=_page(
        "<h2>Gold Partners</h2>"
        '<div><a href="https://missionfoods.com.au"><img alt="Mission Foods" src="/img/m2.png"></a></div>'
        '<div><img alt="Alan Mance Electrical" src="/img/ame.png"></div>'
    ))
    result = await SponsorScraperService(fetcher).scrape(CLUB)

    assert result.scraped_urls == [CLUB, f"{CLUB}/sponsors"]
    by_name = {s.name: s for s in result.sponsors}
    assert set(by_name) == {"Mission Foods", "Alan Mance Electrical"}

    mission = by_name["Mission Foods"]
    assert mission.logo_url == "https://club.com/img/mission.png"
    assert mission.website_url == "https://missionfoods.com.au"
    assert mission.tier == "Gold"
    assert by_name["Alan Mance Electrical"].tier == "Gold"


@respx.mock
async def test_scrape_records_failed_pages(fetcher):
    respx.get(f"{CLUB}/").mock(return_value=_page('<a href="/partners">Partners</a>'))
    respx.get(f"{CLUB}/partners").mock(return_value=Response(500))
    result = await SponsorScraperService(fetcher).scrape(CLUB)

    assert result.sponsors == []
    assert result.errors == [f"Failed to fetch {CLUB}/partners"]


@respx.mock
async def test_scrape_fetches_homepage_once(fetcher):
    home = respx.get(f"{CLUB}/").mock(return_value=_page(
        '<a href="/sponsors">Sponsors</a>'
        '<div class="sponsors"><img alt="Acme Pty Ltd" src="/a.png"></div>'
    ))
    sponsors_page = respx.get(f"{CLUB}/sponsors").mock(return_value=_page(
        '<div class="sponsors"><img alt="Mission Foods" src="/m.png"></div>'
    ))
    result = await SponsorScraperService(fetcher).scrape(CLUB)

    assert home.call_count == 1
    assert sponsors_page.call_count == 1
    assert {s.name for s in result.sponsors} == {"Acme Pty Ltd", "Mission Foods"}


@respx.mock
async def test_scrape_unreachable_site(fetcher):
    respx.get(f"{CLUB}/").mock(return_value=Response(503))
    result = await SponsorScraperService(fetcher).scrape("club.com/")

    assert result.sponsors == []
    assert result.scraped_urls == [CLUB]
    assert result.errors == [f"Failed to fetch {CLUB}"]


async def test_scrape_without_url(fetcher):
    result = await SponsorScraperService(fetcher).scrape("  ")
    assert result.errors == ["No website URL provided"]


@respx.mock
async def test_scrape_many_keeps_input_order(fetcher):
    respx.get("https://one.com/").mock(return_value=_page(
        '<div class="sponsors"><img alt="Acme Pty Ltd" src="a.png"></div>'
    ))
    respx.get("https://two.com/").mock(return_value=Response(404))
    results = await SponsorScraperService(fetcher, batch_size=1).scrape_many(
        ["https://one.com", "https://two.com"]
    )

    assert [len(r.sponsors) for r in results] == [1, 0]
    assert results[1].errors == ["Failed to fetch https://two.com"]


# --- Single page ---


@respx.mock
async def test_extract_page(fetcher):
    respx.get(f"{CLUB}/partners").mock(return_value=_page(
        '<ul class="partner-list"><li>Acme Pty Ltd</li><li>Read More</li></ul>'
    ))
    sponsors = await SponsorScraperService(fetcher).extract_page(f"{CLUB}/partners")
    assert [s.name for s in sponsors] == ["Acme Pty Ltd"]


def test_finalize_drops_names_failing_validation():
    sponsors = finalize_sponsors([
        SponsorCandidate(name="acme pty ltd logo", source_url=CLUB),
        SponsorCandidate(name="Subscribe", source_url=CLUB),
    ])
    assert [s.name for s in sponsors] == ["Acme Pty Ltd"]


async def test_scrape_reports_unexpected_errors(fetcher):
    discovery = AsyncMock(spec=PageDiscoveryService)
    discovery.discover.side_effect = RuntimeError("parser exploded")

    result = await SponsorScraperService(fetcher, discovery=discovery).scrape(CLUB)

    discovery.discover.assert_awaited_once_with(CLUB)
    assert result.sponsors == []
    assert result.errors == ["parser exploded"]
