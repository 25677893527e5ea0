import respx
from httpx import Response

from sponsor_scout.services.page_discovery import PageDiscoveryService, find_sponsor_links, same_page

BASE = "https://club.com"


def _html(body: str) -> str:
    return f"<html><body>{body}</body></html>"


def test_find_sponsor_links_by_href_and_text():
    html = _html(
        '<a href="/our-sponsors">Sponsors</a>'
        '<a href="/news">News</a>'
        '<a href="/corporate">Hospitality</a>'
        '<a href="/support">Become a Supporter</a>'
    )
    assert find_sponsor_links(html, BASE) == [
        "https://club.com/our-sponsors",
        "https://club.com/corporate",
        "https://club.com/support",
    ]


def test_find_sponsor_links_same_site_only():
    html = _html(
        '<a href="https://partnerco.com.au">Partner</a>'
        '<a href="https://www.club.com/partners">Partners</a>'
    )
    assert find_sponsor_links(html, BASE) == ["https://www.club.com/partners"]


def test_find_sponsor_links_dedups_and_drops_fragments():
    html = _html(
        '<a href="/sponsors#gold">Gold</a>'
        '<a href="/sponsors">Sponsors</a>'
        '<a href="#sponsors">Jump</a>'
        '<a href="mailto:sponsorship@club.com">Email</a>'
    )
    assert find_sponsor_links(html, BASE) == ["https://club.com/sponsors"]


@respx.mock
async def test_discover_pages_homepage_first(fetcher):
    respx.get(f"{BASE}/").mock(
        return_value=Response(
            200,
            html=_html('<a href="/sponsors">Sponsors</a><a href="/partners">Partners</a>'),
            headers={"content-type": "text/html"},
        )
    )
    service = PageDiscoveryService(fetcher)
    pages = await service.discover_pages(BASE)

    assert pages == [BASE, "https://club.com/sponsors", "https://club.com/partners"]


@respx.mock
async def test_discover_pages_caps_page_count(fetcher):
    links = "".join(f'<a href="/sponsors-{i}">Sponsors {i}</a>' for i in range(10))
    respx.get(f"{BASE}/").mock(
        return_value=Response(200, html=_html(links), headers={"content-type": "text/html"})
    )
    pages = await PageDiscoveryService(fetcher).discover_pages(BASE)

    assert len(pages) == 5
    assert pages[0] == BASE


@respx.mock
async def test_discover_pages_homepage_already_linked(fetcher):
    respx.get(f"{BASE}/").mock(
        return_value=Response(
            200,
            html=_html('<a href="https://club.com/">Our partners</a>'),
            headers={"content-type": "text/html"},
        )
    )
    pages = await PageDiscoveryService(fetcher).discover_pages(BASE)
    assert pages == ["https://club.com/"]


@respx.mock
async def test_discover_pages_unreachable_homepage(fetcher):
    respx.get(f"{BASE}/").mock(return_value=Response(503))
    assert await PageDiscoveryService(fetcher).discover_pages(BASE) == [BASE]


@respx.mock
async def test_discover_pages_keeps_homepage_linked_past_cap(fetcher):
    links = "".join(f'<a href="/sponsors-{i}">Sponsors {i}</a>' for i in range(6))
    links += '<a href="/">Partners home</a>'
    respx.get(f"{BASE}/").mock(
        return_value=Response(200, html=_html(links), headers={"content-type": "text/html"})
    )
    pages = await PageDiscoveryService(fetcher).discover_pages(BASE)

    assert pages[0] == BASE
    assert len(pages) == 5


@respx.mock
async def test_discover_returns_homepage_body(fetcher):
    home = respx.get(f"{BASE}/").mock(
        return_value=Response(
            200, html=_html('<a href="/sponsors">Sponsors</a>'), headers={"content-type": "text/html"},
        )
    )
    discovered = await PageDiscoveryService(fetcher).discover(BASE)

    assert discovered.pages == [BASE, "https://club.com/sponsors"]
    assert 'href="/sponsors"' in discovered.homepage_html
    assert home.call_count == 1


@respx.mock
async def test_discover_unreachable_homepage_has_no_body(fetcher):
    respx.get(f"{BASE}/").mock(return_value=Response(503))
    discovered = await PageDiscoveryService(fetcher).discover(BASE)

    assert discovered.pages == [BASE]
    assert discovered.homepage_html is None


def test_same_page_ignores_trailing_slash():
    assert same_page("https://club.com/", "https://club.com")
    assert not same_page("https://club.com/sponsors", "https://club.com")
