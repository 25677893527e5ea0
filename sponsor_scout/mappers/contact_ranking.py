import re

from sponsor_scout.schemas.contact import Confidence, ContactInfo

# Free mail providers: an address there is a person, not the business
_PERSONAL_DOMAINS = frozenset({
    "gmail.com", "googlemail.com", "hotmail.com", "hotmail.com.au", "outlook.com",
    "outlook.com.au", "live.com", "live.com.au", "msn.com", "yahoo.com",
    "yahoo.com.au", "ymail.com", "icloud.com", "me.com", "mac.com", "aol.com",
    "bigpond.com", "bigpond.net.au", "optusnet.com.au", "iinet.net.au",
    "tpg.com.au", "protonmail.com", "proton.me",
})

# Addresses that appear in page markup but never reach a person
_JUNK_DOMAINS = frozenset({
    "example.com", "example.org", "domain.com", "yourdomain.com", "email.com",
    "sentry.io", "wixpress.com", "w3.org", "schema.org",
})

_ADMIN_PREFIXES = frozenset({
    "noreply", "no-reply", "donotreply", "do-not-reply", "postmaster",
    "mailer-daemon", "webmaster", "hostmaster", "abuse", "root", "email", "name",
})

# Lower index = better outreach target
EMAIL_PREFIX_PRIORITY = (
    ("marketing",),
    ("sponsorship", "sponsorships"),
    ("partnerships",),
    ("partner", "partners"),
    ("contact",),
    ("hello",),
    ("enquiries", "inquiries", "enquiry", "inquiry"),
    ("info",),
    ("sales",),
    ("business",),
    ("admin",),
    ("office",),
    ("reception",),
)

DEPARTMENT_PRIORITY = ("marketing", "executive", "sales", "management")

_IMAGE_SUFFIX_RE = re.compile(r"\.(?:png|jpe?g|gif|svg|webp)$", re.IGNORECASE)


def email_rank(email: str) -> int:
    """Position of the email's local part in the outreach priority list."""
    local = email.split("@", 1)[0].lower()
    for rank, prefixes in enumerate(EMAIL_PREFIX_PRIORITY):
        if local in prefixes:
            return rank
    for rank, prefixes in enumerate(EMAIL_PREFIX_PRIORITY):
        if any(local.startswith(p) for p in prefixes):
            return rank
    return len(EMAIL_PREFIX_PRIORITY)


def is_business_email(email: str) -> bool:
    """A plausible address for the company itself (not personal, not system)."""
    local, _, domain = email.lower().partition("@")
    if not local or "." not in domain:
        return False
    if _IMAGE_SUFFIX_RE.search(domain):
        return False  # retina asset names like logo@2x.png
    if domain in _PERSONAL_DOMAINS or domain in _JUNK_DOMAINS:
        return False
    if "yourdomain" in domain or domain.startswith("sentry"):
        return False
    return not any(local == p or local.startswith(p + ".") for p in _ADMIN_PREFIXES)


def department_rank(department: str | None) -> int:
    if department and department.lower() in DEPARTMENT_PRIORITY:
        return DEPARTMENT_PRIORITY.index(department.lower())
    return len(DEPARTMENT_PRIORITY)


def bucket_confidence(score: int | None) -> Confidence:
    """Provider score (0-100) to a confidence level."""
    if score is not None and score > 80:
        return Confidence.high
    if score is not None and score > 50:
        return Confidence.medium
    return Confidence.low


def select_best_contact(contacts: list[ContactInfo]) -> ContactInfo | None:
    """Contact to store as a sponsor's primary email.

    First high-confidence email, else first medium-confidence email, else
    the first contact with any email.
    """
    with_email = [c for c in contacts if c.email]
    if not with_email:
        return None
    # max() keeps the first of equally ranked contacts
    return max(with_email, key=lambda c: c.confidence.rank)
