import json
import logging
import re
from urllib.parse import unquote, urlparse

import httpx
from bs4 import BeautifulSoup

from sponsor_scout.exceptions.custom import EnrichmentAPIError, RateLimitError
from sponsor_scout.mappers.contact_ranking import (
    bucket_confidence,
    department_rank,
    email_rank,
    is_business_email,
)
from sponsor_scout.mappers.dedup import dedupe_contacts
from sponsor_scout.mappers.domain import domain_from_website, extract_au_phone, guess_domain
from sponsor_scout.mappers.name_cleaner import decode_text
from sponsor_scout.schemas.contact import (
    Confidence,
    ContactInfo,
    ContactSource,
    DiscoveryResult,
    WebsiteData,
)
from sponsor_scout.services.batching import DEFAULT_BATCH_SIZE, gather_in_batches
from sponsor_scout.services.fetcher import Fetcher
from sponsor_scout.services.hunter import HunterService

logger = logging.getLogger(__name__)

CONTACT_TIMEOUT = 5.0

# Tried in order; the homepage comes last
CONTACT_PATHS = (
    "/contact", "/contact-us", "/about/contact", "/get-in-touch", "/reach-us",
    "/about", "/about-us", "/team", "/our-team",
)

GUESS_PREFIXES = ("info", "contact", "hello", "enquiries", "admin")

MAX_WEBSITE_EMAILS = 3
MAX_API_CONTACTS = 5

_EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")
_LINKEDIN_RE = re.compile(r"linkedin\.com/(?:company|in)/", re.IGNORECASE)


def _normalize_email(raw: str) -> str:
    return raw.strip().strip(".").lower()


def extract_mailto_emails(soup: BeautifulSoup) -> list[str]:
    emails: list[str] = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href.lower().startswith("mailto:"):
            continue
        addresses = unquote(href[len("mailto:"):].split("?", 1)[0])
        for address in addresses.split(","):
            email = _normalize_email(address)
            if "@" in email:
                emails.append(email)
    return emails


def extract_text_emails(soup: BeautifulSoup) -> list[str]:
    return [_normalize_email(m) for m in _EMAIL_RE.findall(soup.get_text(" "))]


def _walk_email_fields(node: object, found: list[str]) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            if key.lower() == "email" and isinstance(value, str):
                found.append(_normalize_email(value.removeprefix("mailto:")))
            elif key.lower() == "email" and isinstance(value, list):
                found.extend(
                    _normalize_email(v.removeprefix("mailto:")) for v in value if isinstance(v, str)
                )
            else:
                _walk_email_fields(value, found)
    elif isinstance(node, list):
        for item in node:
            _walk_email_fields(item, found)


def extract_jsonld_emails(soup: BeautifulSoup) -> list[str]:
    """`email` fields anywhere inside JSON-LD blocks (Organization, LocalBusiness...)."""
    found: list[str] = []
    for script in soup.find_all("script", type="application/ld+json"):
        try:
            data = json.loads(script.string or "")
        except (json.JSONDecodeError, TypeError):
            logger.debug("Skipping malformed JSON-LD block")
            continue
        _walk_email_fields(data, found)
    return [e for e in found if "@" in e]


def extract_business_emails(soup: BeautifulSoup) -> list[tuple[str, Confidence]]:
    """Business emails on a page, best outreach target first.

    mailto: links and JSON-LD are explicit markup and rank as high
    confidence; addresses spotted in the page text as medium.
    """
    seen: set[str] = set()
    found: list[tuple[str, Confidence]] = []
    sources = (
        (extract_mailto_emails(soup), Confidence.high),
        (extract_jsonld_emails(soup), Confidence.high),
        (extract_text_emails(soup), Confidence.medium),
    )
    for emails, confidence in sources:
        for email in emails:
            if email in seen or not is_business_email(email):
                continue
            seen.add(email)
            found.append((email, confidence))

    found.sort(key=lambda item: email_rank(item[0]))
    return found[:MAX_WEBSITE_EMAILS]


def extract_linkedin_links(soup: BeautifulSoup) -> list[str]:
    links: list[str] = []
    for a in soup.find_all("a", href=True):
        href = a["href"].strip()
        if _LINKEDIN_RE.search(href) and href not in links:
            links.append(href)
    return links


def _has_email(contacts: list[ContactInfo], confidence: Confidence | None = None) -> bool:
    return any(
        c.email and (confidence is None or c.confidence == confidence) for c in contacts
    )


class ContactDiscoveryService:
    """Finds outreach contacts for a company.

    Strategies run as a waterfall: the company website, then the Hunter API
    (when no high-confidence email was scraped), then a guessed address
    (when nothing produced an email at all).
    """

    def __init__(
        self,
        fetcher: Fetcher,
        hunter: HunterService | None = None,
        timeout: float = CONTACT_TIMEOUT,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ):
        self._fetcher = fetcher
        self._hunter = hunter
        self._timeout = timeout
        self._batch_size = batch_size

    async def discover(self, company_name: str, website: str | None = None) -> DiscoveryResult:
        """Ranked contacts for a company. Best-effort, never raises."""
        try:
            return await self._do_discover(company_name, website)
        except Exception:
            logger.exception("Contact discovery failed for %s", company_name)
            return DiscoveryResult()

    async def discover_many(
        self, companies: list[tuple[str, str | None]],
    ) -> list[DiscoveryResult]:
        """Discover contacts for (company name, website) pairs in fixed-size batches."""

        async def _one(company: tuple[str, str | None]) -> DiscoveryResult:
            return await self.discover(*company)

        results = await gather_in_batches(companies, _one, self._batch_size)
        discovered: list[DiscoveryResult] = []
        for (name, _), res in zip(companies, results):
            if isinstance(res, BaseException):
                logger.warning("Contact discovery for %s failed: %s", name, res)
                discovered.append(DiscoveryResult())
            else:
                discovered.append(res)
        return discovered

    async def _do_discover(self, company_name: str, website: str | None) -> DiscoveryResult:
        name = decode_text(company_name)
        website_data = WebsiteData()
        contacts: list[ContactInfo] = []

        site_url = _site_origin(website) if website else None
        if site_url:
            contacts.extend(await self._scrape_website(site_url, website_data))

        domain = (domain_from_website(website) if website else None) or guess_domain(name)

        if self._hunter and domain and not _has_email(contacts, Confidence.high):
            contacts.extend(await self._search_api(domain))

        if domain and not _has_email(contacts):
            contacts.append(await self._guess_email(domain))

        contacts = dedupe_contacts(contacts)
        logger.info(
            "Found %d contacts for %s (%s)",
            len(contacts), name, ", ".join(f"{c.source}:{c.confidence}" for c in contacts) or "none",
        )
        return DiscoveryResult(contacts=contacts, website_data=website_data)

    # --- Strategy 1: company website ---

    async def _get_page(self, url: str) -> BeautifulSoup | None:
        body, ok = await self._fetcher.fetch(url, timeout=self._timeout)
        if not ok:
            return None
        return BeautifulSoup(body, "html.parser")

    async def _scrape_website(self, site_url: str, website_data: WebsiteData) -> list[ContactInfo]:
        pages: dict[str, BeautifulSoup | None] = {}
        contact_page: BeautifulSoup | None = None
        emails: list[tuple[str, Confidence]] = []

        for path in CONTACT_PATHS + ("/",):
            soup = pages[path] = await self._get_page(f"{site_url}{path}")
            if soup is None:
                continue
            if path != "/":
                website_data.has_contact_page = True

            emails = extract_business_emails(soup)
            if emails:
                contact_page = soup
                logger.debug("Emails found on %s%s", site_url, path)
                break

        # Phone and social links come from the homepage
        if "/" not in pages:
            pages["/"] = await self._get_page(f"{site_url}/")
        homepage = pages["/"]

        phone: str | None = None
        linkedin: list[str] = []
        if homepage is not None:
            phone = extract_au_phone(homepage.get_text(" "))
            linkedin = extract_linkedin_links(homepage)
        if phone is None and contact_page is not None:
            phone = extract_au_phone(contact_page.get_text(" "))
        website_data.has_social_links = bool(linkedin)

        contacts = [
            ContactInfo(
                email=email,
                source=ContactSource.website,
                confidence=confidence,
                verified=True,
            )
            for email, confidence in emails
        ]
        if phone:
            if contacts:
                contacts[0].phone = phone
            else:
                contacts.append(ContactInfo(
                    phone=phone, source=ContactSource.website, confidence=Confidence.medium,
                ))
        contacts.extend(
            ContactInfo(linkedin=link, source=ContactSource.website, confidence=Confidence.medium)
            for link in linkedin
        )
        return contacts

    # --- Strategy 2: enrichment API ---

    async def _search_api(self, domain: str) -> list[ContactInfo]:
        try:
            results = await self._hunter.domain_search(domain)
        except (EnrichmentAPIError, RateLimitError, httpx.HTTPError) as exc:
            logger.warning("Hunter domain search failed for %s: %s", domain, exc)
            return []

        ranked = sorted(
            (r for r in results if is_business_email(r.value)),
            key=lambda r: (department_rank(r.department), -(r.confidence or 0)),
        )
        contacts: list[ContactInfo] = []
        for r in ranked[:MAX_API_CONTACTS]:
            full_name = " ".join(p for p in (r.first_name, r.last_name) if p) or None
            contacts.append(ContactInfo(
                email=r.value.lower(),
                phone=r.phone_number,
                contact_name=full_name,
                contact_role=r.position,
                linkedin=r.linkedin,
                source=ContactSource.api,
                confidence=bucket_confidence(r.confidence),
                verified=bool(r.verification and r.verification.status == "valid"),
            ))
        return contacts

    # --- Strategy 3: guessed address ---

    async def _guess_email(self, domain: str) -> ContactInfo:
        if self._hunter:
            for prefix in GUESS_PREFIXES:
                email = f"{prefix}@{domain}"
                try:
                    verified = await self._hunter.verify_email(email)
                except (EnrichmentAPIError, RateLimitError, httpx.HTTPError) as exc:
                    logger.warning("Email verification failed for %s: %s", email, exc)
                    break
                if verified:
                    return ContactInfo(
                        email=email,
                        source=ContactSource.pattern,
                        confidence=Confidence.medium,
                        verified=True,
                    )

        return ContactInfo(
            email=f"info@{domain}",
            source=ContactSource.pattern,
            confidence=Confidence.low,
            verified=False,
        )


def _site_origin(website: str) -> str | None:
    url = website.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    try:
        parsed = urlparse(url)
    except ValueError:
        return None
    if not parsed.netloc:
        return None
    return f"{parsed.scheme}://{parsed.netloc}"
