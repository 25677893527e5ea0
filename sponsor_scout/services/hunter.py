import logging
from typing import TypeVar

import httpx
from pydantic import ValidationError

from sponsor_scout.exceptions.custom import EnrichmentAPIError, RateLimitError
from sponsor_scout.schemas.hunter import (
    DomainSearchResponse,
    EmailVerifierResponse,
    HunterEmail,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", DomainSearchResponse, EmailVerifierResponse)

BASE_URL = "https://api.hunter.io/v2"
DOMAIN_SEARCH_URL = f"{BASE_URL}/domain-search"
EMAIL_VERIFIER_URL = f"{BASE_URL}/email-verifier"

_TIMEOUT = 15.0
_DOMAIN_SEARCH_LIMIT = 10


class HunterService:
    """Hunter.io client: domain search and single-address verification."""

    def __init__(self, client: httpx.AsyncClient, api_key: str):
        self._client = client
        self._api_key = api_key

    async def domain_search(self, domain: str) -> list[HunterEmail]:
        params = {
            "domain": domain,
            "api_key": self._api_key,
            "limit": _DOMAIN_SEARCH_LIMIT,
        }
        resp = await self._client.get(DOMAIN_SEARCH_URL, params=params, timeout=_TIMEOUT)
        self._raise_for_status(resp)

        data = self._parse(resp, DomainSearchResponse)
        if not data.data.emails:
            logger.info("Hunter has no emails for %s", domain)
        return data.data.emails

    async def verify_email(self, email: str) -> bool:
        """True when Hunter reports the address as deliverable."""
        params = {"email": email, "api_key": self._api_key}
        resp = await self._client.get(EMAIL_VERIFIER_URL, params=params, timeout=_TIMEOUT)
        self._raise_for_status(resp)

        data = self._parse(resp, EmailVerifierResponse).data
        return data.status == "valid" or data.result == "deliverable"

    @staticmethod
    def _parse(resp: httpx.Response, model: type[T]) -> T:
        try:
            return model(**resp.json())
        except (ValueError, TypeError, ValidationError) as exc:
            raise EnrichmentAPIError(
                f"Unexpected Hunter response: {exc}", status_code=resp.status_code
            ) from exc

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.status_code == 429:
            raise RateLimitError("Hunter")
        if resp.status_code >= 400:
            raise EnrichmentAPIError(resp.text, status_code=resp.status_code)
