"""Tests for Fetcher and RateLimiter."""

import time

import httpx
import pytest
import respx
from httpx import Response

from sponsor_scout.services.fetcher import BROWSER_HEADERS, FAILED, Fetcher, RateLimiter


class FakeClock:
    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


def _html(body: str) -> str:
    return f"<html><body>{body}</body></html>"


# --- Rate limiting ---


async def test_first_request_does_not_wait():
    clock = FakeClock()
    limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

    assert await limiter.wait("club.com") == 0.0
    assert clock.sleeps == []


async def test_second_request_waits_remaining_interval():
    clock = FakeClock()
    limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

    await limiter.wait("club.com")
    clock.now += 0.3
    waited = await limiter.wait("club.com")

    assert waited == pytest.approx(0.7)
    assert clock.sleeps == [pytest.approx(0.7)]


async def test_no_wait_once_interval_has_passed():
    clock = FakeClock()
    limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

    await limiter.wait("club.com")
    clock.now += 1.5
    assert await limiter.wait("club.com") == 0.0


async def test_hosts_are_limited_independently():
    clock = FakeClock()
    limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

    await limiter.wait("club.com")
    assert await limiter.wait("acme.com.au") == 0.0


@respx.mock
async def test_sequential_fetches_to_same_host_are_spaced():
    respx.get("https://club.com/a").mock(return_value=Response(200, html=_html("a")))
    respx.get("https://club.com/b").mock(return_value=Response(200, html=_html("b")))

    async with httpx.AsyncClient() as client:
        fetcher = Fetcher(client, RateLimiter(min_interval=0.2))
        start = time.monotonic()
        await fetcher.fetch("https://club.com/a")
        await fetcher.fetch("https://club.com/b")
        elapsed = time.monotonic() - start

    assert elapsed >= 0.19


# --- Fetching ---


@respx.mock
async def test_fetch_success(fetcher):
    route = respx.get("https://club.com/").mock(
        return_value=Response(200, html=_html("<h1>Club</h1>"), headers={"content-type": "text/html"})
    )
    body, ok = await fetcher.fetch("https://club.com/")

    assert ok is True
    assert "<h1>Club</h1>" in body
    assert route.calls[0].request.headers["user-agent"] == BROWSER_HEADERS["User-Agent"]


@respx.mock
async def test_fetch_non_2xx_is_not_ok(fetcher):
    respx.get("https://club.com/missing").mock(return_value=Response(404, text="not found"))
    assert await fetcher.fetch("https://club.com/missing") == FAILED


@respx.mock
async def test_fetch_connection_error_is_not_ok(fetcher):
    respx.get("https://club.com/").mock(side_effect=httpx.ConnectError("refused"))
    result = await fetcher.fetch("https://club.com/")
    assert result.ok is False
    assert result.body == ""


@respx.mock
async def test_fetch_timeout_is_not_ok(fetcher):
    respx.get("https://club.com/").mock(side_effect=httpx.ReadTimeout("slow"))
    assert (await fetcher.fetch("https://club.com/")).ok is False


@respx.mock
async def test_http_url_tries_https_first(fetcher):
    https_route = respx.get("https://club.com/").mock(
        return_value=Response(200, html=_html("secure"), headers={"content-type": "text/html"})
    )
    http_route = respx.get("http://club.com/").mock(
        return_value=Response(200, html=_html("plain"), headers={"content-type": "text/html"})
    )
    body, ok = await fetcher.fetch("http://club.com/")

    assert ok
    assert "secure" in body
    assert https_route.called
    assert not http_route.called


@respx.mock
async def test_http_fallback_when_https_fails(fetcher):
    respx.get("https://club.com/").mock(side_effect=httpx.ConnectError("no tls"))
    respx.get("http://club.com/").mock(
        return_value=Response(200, html=_html("plain"), headers={"content-type": "text/html"})
    )
    body, ok = await fetcher.fetch("http://club.com/")

    assert ok
    assert "plain" in body


@respx.mock
async def test_non_html_content_rejected(fetcher):
    respx.get("https://club.com/logo.png").mock(
        return_value=Response(200, content=b"\x89PNG", headers={"content-type": "image/png"})
    )
    assert (await fetcher.fetch("https://club.com/logo.png")).ok is False


async def test_url_without_host_is_not_ok(fetcher):
    assert (await fetcher.fetch("not a url")).ok is False
