import httpx
import pytest

from sponsor_scout.services.fetcher import Fetcher, RateLimiter


@pytest.fixture
def mock_env(monkeypatch):
    monkeypatch.setenv("HUNTER_API_KEY", "test-hunter-key")
    monkeypatch.setenv("SCRAPE_DELAY_MS", "0")


@pytest.fixture
async def client():
    async with httpx.AsyncClient() as c:
        yield c


@pytest.fixture
def fetcher(client):
    # No politeness delay in tests
    return Fetcher(client, RateLimiter(min_interval=0))
