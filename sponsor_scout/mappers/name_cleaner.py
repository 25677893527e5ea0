import logging
import re
from collections.abc import Iterable
from urllib.parse import unquote

from sponsor_scout.mappers.name_rules import (
    CleanRule,
    clean_rule,
    is_valid_sponsor_name,
)
from sponsor_scout.schemas.sponsor import NameChange, NameReview

logger = logging.getLogger(__name__)

_MAX_DECODE_PASSES = 5

# Used when strict percent-decoding fails (e.g. "%FF" is not valid UTF-8)
_MANUAL_DECODES = (
    ("%20", " "), ("%26", "&"), ("%27", "'"), ("%28", "("), ("%29", ")"),
    ("%2C", ","), ("%2F", "/"), ("%3A", ":"), ("%3B", ";"), ("%40", "@"),
    ("%2B", "+"), ("%25", "%"),
)

HASH_RULES: tuple[CleanRule, ...] = (
    clean_rule("trailing_hash", r"\s+[a-z0-9]{12,}$"),
    clean_rule("embedded_hash", r"\s+[a-z]\d[a-z0-9]{8,}"),
)

NOISE_RULES: tuple[CleanRule, ...] = (
    clean_rule("dimensions", r"\s*\d+x\d+\s*", " "),
    clean_rule("timestamp", r"\s*\d{1,2}\.\d{2}\.\d{2}\s*(?:am|pm)?\s*", " "),
)

JARGON_RULES: tuple[CleanRule, ...] = tuple(
    clean_rule(term, rf"\s+{pattern}\b")
    for term, pattern in (
        ("cmyk", "cmyk"),
        ("rgb", "rgb"),
        ("lockup", "lockup"),
        ("tagline", r"(?:with\s+)?tagline"),
        ("positive", "positive"),
        ("negative", "negative"),
        ("stacked", "stacked"),
        ("horizontal", "horizontal"),
        ("vertical", "vertical"),
        ("artwork", "artwork"),
        ("artfile", "artfile"),
        ("print_ready", r"print\s*ready"),
        ("thumbnail", "thumbnail"),
        ("preview", "preview"),
        ("draft", "draft"),
        ("version", r"v\d+"),
        ("final", "final"),
    )
) + (clean_rule("version_suffix", r"[_-]v\d+\b"),)

_TIER_WORDS = "major|principal|gold|silver|bronze|platinum|community|official"

# Longer prefixes first
PREFIX_RULES: tuple[CleanRule, ...] = (
    clean_rule("logo_of_partner", r"^logo\s+of\s+(?:our\s+)?(?:partner|sponsor)\s+"),
    clean_rule("tier_logo_of", rf"^(?:{_TIER_WORDS})\s+(?:partner|sponsor)\s+logo\s*(?:of\s+)?"),
    clean_rule("tier_label", rf"^(?:{_TIER_WORDS})\s+(?:partner|sponsor)\s+"),
    clean_rule("logo_of", r"^logo(?:\s+(?:of|for))?(?:\s+(?:partner|sponsor))?(?:\s+|$)"),
    clean_rule("partner_logo", r"^(?:partner|sponsor)\s*logo(?:\s+(?:of|for))?(?:\s+|$)"),
    clean_rule("image_of", r"^(?:image|icon)(?:\s+(?:of|for))?\s+"),
    clean_rule("numeric_bullet", r"^\d+(?:\s+[-–]\s*|[-–]\s+)"),
)

SUFFIX_RULES: tuple[CleanRule, ...] = (
    clean_rule("new_tab", r"\s*[-(]?\s*opens?\s+in\s+(?:a\s+)?new\s+(?:tab|window)\)?$"),
    clean_rule("logo", r"(?:^|\s+)logo$"),
    clean_rule("icon", r"(?:^|\s+)icon$"),
    clean_rule("image", r"(?:^|\s+)image$"),
    clean_rule("sponsor", r"(?:^|\s+)sponsor$"),
    clean_rule("partner", r"(?:^|\s+)partner$"),
)

# Lower-case form -> canonical upper-case form
KNOWN_ACRONYMS = {
    "afl": "AFL", "vfl": "VFL", "nrl": "NRL", "nbl": "NBL", "ffa": "FFA",
    "rsl": "RSL", "iga": "IGA", "cfmeu": "CFMEU", "etu": "ETU", "ppteu": "PPTEU",
    "asics": "ASICS", "cba": "CBA", "nab": "NAB", "anz": "ANZ", "qbe": "QBE",
    "hbf": "HBF", "hbp": "HBP", "oxa": "OXA", "ami": "AMI", "eit": "EIT",
    "mcwa": "MCWA", "cbd": "CBD", "usa": "USA", "nsw": "NSW", "vic": "VIC",
    "qld": "QLD", "wa": "WA", "sa": "SA", "nt": "NT", "tas": "TAS",
    "sb": "SB", "hq": "HQ",
}

_ACRONYM_RE = re.compile(r"^[A-Z]{2,6}$")
_INTERIOR_CAPS_RE = re.compile(r"^[A-Z][a-z]+[A-Z]")


def decode_text(raw: str | None) -> str:
    """Percent-decode until stable; "Genis%2520Steel" -> "Genis Steel"."""
    if not raw:
        return ""
    decoded = raw
    try:
        for _ in range(_MAX_DECODE_PASSES):
            previous = decoded
            decoded = unquote(decoded, errors="strict")
            if decoded == previous:
                break
    except UnicodeDecodeError:
        decoded, previous = raw, None
        # "%2520" only becomes " " on a second sweep
        while decoded != previous:
            previous = decoded
            for encoded, char in _MANUAL_DECODES:
                decoded = decoded.replace(encoded, char).replace(encoded.lower(), char)
    return decoded.strip()


def _apply(text: str, rules: Iterable[CleanRule]) -> str:
    for rule in rules:
        text = rule.apply(text)
    return text


def _collapse(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


def _strip_noise(text: str) -> str:
    text = _apply(text, HASH_RULES)
    text = _apply(text, NOISE_RULES)
    text = _apply(text, JARGON_RULES)
    text = _collapse(text)
    text = _apply(text, PREFIX_RULES)
    return _apply(text, SUFFIX_RULES)


def _capitalize_word(word: str) -> str:
    if _ACRONYM_RE.match(word):
        return word
    if _INTERIOR_CAPS_RE.match(word):
        return word
    return word[:1].upper() + word[1:].lower()


def capitalize_name(text: str) -> str:
    """Title-case each word, keeping acronyms ("ACME") and "McDonald"-style caps."""
    return " ".join(_capitalize_word(w) for w in text.split(" ") if w)


def fix_acronyms(name: str) -> str:
    """Upper-case known acronyms, including hyphenated parts ("Etu-1" -> "ETU-1")."""
    words = re.split(r"(\s+)", name)
    fixed: list[str] = []
    for word in words:
        lower = word.lower()
        if lower in KNOWN_ACRONYMS:
            fixed.append(KNOWN_ACRONYMS[lower])
        elif "-" in word:
            fixed.append("-".join(KNOWN_ACRONYMS.get(p.lower(), p) for p in word.split("-")))
        else:
            fixed.append(word)
    return "".join(fixed)


def clean(raw: str | None) -> str:
    """Turn raw alt text, titles or filenames into a display company name.

    "Logo of partner Mission Foods" -> "Mission Foods"
    "GODFATHERS LOGO QMCLDZA1S5C5DE3JRJJ5VUWE3GP0CMQTUU7DYZAQKG" -> "Godfathers"

    Idempotent: clean(clean(x)) == clean(x).
    """
    text = decode_text(raw)
    if not text:
        return ""

    # One rule can expose another ("Logo of Logo of X"). Every rewrite
    # shortens the text, so this terminates.
    while True:
        stripped = _strip_noise(text)
        if stripped == text:
            break
        text = stripped

    text = _collapse(text)
    if not text:
        return ""
    return fix_acronyms(capitalize_name(text))


def salvage_name(text: str | None) -> str | None:
    """Cleaned name, or None when nothing usable survives cleaning."""
    cleaned = clean(text)
    if not is_valid_sponsor_name(cleaned):
        return None
    return cleaned


def review_names(names: Iterable[str]) -> NameReview:
    """Sort stored sponsor names into removable, renameable and fine."""
    review = NameReview(total=0)
    for name in names:
        review.total += 1
        salvaged = salvage_name(name)
        if salvaged is None:
            review.removed.append(name)
        elif salvaged != name:
            review.renamed.append(NameChange(old=name, new=salvaged))
        else:
            review.unchanged += 1

    logger.info(
        "Reviewed %d names: %d removed, %d renamed, %d unchanged",
        review.total, len(review.removed), len(review.renamed), review.unchanged,
    )
    return review
