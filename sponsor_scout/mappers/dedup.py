from sponsor_scout.schemas.contact import ContactInfo
from sponsor_scout.schemas.sponsor import SponsorCandidate

_FILLABLE_FIELDS = ("logo_url", "website_url", "tier")


def _is_empty(value: str | None) -> bool:
    return value is None or value.strip() == ""


def dedupe_sponsors(candidates: list[SponsorCandidate]) -> list[SponsorCandidate]:
    """Merge candidates sharing a case-insensitive name.

    The first occurrence wins and keeps its position; later duplicates only
    fill in fields the kept entry is missing.
    """
    kept: dict[str, SponsorCandidate] = {}
    for candidate in candidates:
        key = candidate.name.strip().lower()
        if not key:
            continue

        existing = kept.get(key)
        if existing is None:
            kept[key] = candidate.model_copy()
            continue

        for field in _FILLABLE_FIELDS:
            incoming = getattr(candidate, field)
            if _is_empty(getattr(existing, field)) and not _is_empty(incoming):
                setattr(existing, field, incoming)

    return list(kept.values())


def contact_key(contact: ContactInfo) -> str | None:
    if contact.email:
        return f"email:{contact.email.strip().lower()}"
    if contact.linkedin:
        return f"linkedin:{contact.linkedin.strip().rstrip('/').lower()}"
    if contact.phone:
        digits = "".join(c for c in contact.phone if c.isdigit())
        if digits:
            return f"phone:{digits}"
    return None


def dedupe_contacts(contacts: list[ContactInfo]) -> list[ContactInfo]:
    """Keep the first contact per email (else LinkedIn, else phone)."""
    seen: set[str] = set()
    unique: list[ContactInfo] = []
    for contact in contacts:
        key = contact_key(contact)
        if key is None or key in seen:
            continue
        seen.add(key)
        unique.append(contact)
    return unique
