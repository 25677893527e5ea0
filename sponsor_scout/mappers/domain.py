import re
from urllib.parse import urljoin, urlparse

import tldextract

from sponsor_scout.mappers.name_cleaner import decode_text

# Bundled public-suffix snapshot only: no network fetch, no disk cache.
_TLD_EXTRACT = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None)

# Hosts whose links never point at a sponsor's own site
_SKIP_DOMAINS = (
    "facebook", "twitter", "instagram", "linkedin", "youtube", "tiktok",
    "google", "apple", "amazon", "microsoft",
    "cloudfront", "amazonaws", "cloudinary", "imgix",
    "squarespace", "wixstatic", "wixsite", "wordpress", "shopify",
)

_LEGAL_SUFFIX_RE = re.compile(r"\s+(?:pty|ltd|limited|inc|corp|co|australia|aus)$")

# +61 / 0 prefixed landlines and mobiles, 1300 / 1800 / 13 numbers
_AU_PHONE_RE = re.compile(
    r"(?:\+61\s?|0)[2-478](?:[ -]?\d){8}|(?:1300|1800|13)(?:[ -]?\d){6}"
)


def resolve_url(href: str, base_url: str) -> str:
    try:
        return urljoin(base_url, href)
    except ValueError:
        return href


def base_domain(hostname: str) -> str:
    """Registrable domain of a hostname: "shop.acme.com.au" -> "acme.com.au"."""
    hostname = hostname.lower().removeprefix("www.")
    ext = _TLD_EXTRACT(hostname)
    if ext.domain and ext.suffix:
        return f"{ext.domain}.{ext.suffix}"
    return hostname


def is_same_site(url: str, base_url: str) -> bool:
    try:
        host = urlparse(url).hostname
        base_host = urlparse(base_url).hostname
    except ValueError:
        return False
    if not host or not base_host:
        return False
    return base_domain(host) == base_domain(base_host)


def get_external_url(href: str | None, source_url: str) -> str | None:
    """Absolute form of `href` if it leaves the source site, else None."""
    if not href:
        return None
    href = href.strip()
    if not href or href.startswith(("#", "javascript:", "mailto:", "tel:")):
        return None

    resolved = resolve_url(href, source_url)
    try:
        parsed = urlparse(resolved)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return None

    if is_same_site(resolved, source_url):
        return None
    return resolved


def company_name_from_url(url: str) -> str | None:
    """Guess a company name from a link's domain.

    "https://www.alan-mance.com.au" -> "Alan Mance"
    """
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return None
    if not hostname:
        return None

    label = _TLD_EXTRACT(hostname.lower().removeprefix("www.")).domain
    if not label:
        return None
    if any(skip in label for skip in _SKIP_DOMAINS):
        return None

    words = [w for w in re.split(r"[-_]+", label) if w]
    name = " ".join(w[:1].upper() + w[1:].lower() for w in words)

    if len(name) < 2 or len(name) > 40:
        return None
    if not re.search(r"[a-zA-Z]", name):
        return None
    return name


def domain_from_website(website: str) -> str | None:
    """Bare host of a website URL, without "www."."""
    if not website or not website.strip():
        return None
    website = website.strip()
    if not website.startswith(("http://", "https://")):
        website = f"https://{website}"
    try:
        hostname = urlparse(website).hostname
    except ValueError:
        return None
    if not hostname:
        return None
    return hostname.lower().removeprefix("www.")


def guess_domain(company_name: str) -> str | None:
    """Slug a company name into a likely Australian domain.

    "Genis%20Steel Pty Ltd" -> "genissteel.com.au"
    """
    slug = decode_text(company_name).lower()
    slug = re.sub(r"[^a-z0-9\s]", "", slug)
    slug = re.sub(r"\s+", " ", slug).strip()

    # "acme pty ltd" carries more than one legal suffix
    while True:
        stripped = _LEGAL_SUFFIX_RE.sub("", slug)
        if stripped == slug:
            break
        slug = stripped

    slug = re.sub(r"\s+", "", slug)
    if len(slug) < 3:
        return None
    return f"{slug}.com.au"


def extract_au_phones(text: str) -> list[str]:
    seen: set[str] = set()
    phones: list[str] = []
    for match in _AU_PHONE_RE.findall(text):
        digits = "".join(c for c in match if c.isdigit())
        if digits not in seen:
            seen.add(digits)
            phones.append(match.strip())
    return phones


def extract_au_phone(text: str) -> str | None:
    phones = extract_au_phones(text)
    return phones[0] if phones else None
