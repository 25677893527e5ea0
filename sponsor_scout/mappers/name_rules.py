"""Rule tables for telling company names apart from filenames, hashes and UI text.

Every heuristic is a named rule so it can be tested and tuned on its own.
`NameRule`s flag text as unusable; `CleanRule`s rewrite it. The tables
were tuned against real club websites: when one misfires on a real sponsor,
adjust or add a rule here rather than special-casing a caller.
"""

import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass


@dataclass(frozen=True)
class NameRule:
    name: str
    matches: Callable[[str], bool]


@dataclass(frozen=True)
class CleanRule:
    name: str
    pattern: re.Pattern[str]
    replacement: str = ""

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


def pattern_rule(name: str, *patterns: str, flags: int = re.IGNORECASE) -> NameRule:
    compiled = [re.compile(p, flags) for p in patterns]
    return NameRule(name, lambda text: any(p.search(text) for p in compiled))


def clean_rule(name: str, pattern: str, replacement: str = "") -> CleanRule:
    return CleanRule(name, re.compile(pattern, re.IGNORECASE), replacement)


def first_match(text: str, rules: Sequence[NameRule]) -> NameRule | None:
    for rule in rules:
        if rule.matches(text):
            return rule
    return None


# --- Garbage classifier ---

_HASH_WORD_RE = re.compile(r"[a-z0-9]{12,}", re.IGNORECASE)

DESIGN_KEYWORDS = (
    "cmyk", "rgb", "lockup", "tagline", "positive", "negative",
    "stacked", "horizontal", "vertical", "artwork", "artfile",
    "thumbnail", "preview", "draft", "final", "print ready",
    "copy of", "scaled", "cropped", "resized",
)


def _hash_words(text: str) -> list[str]:
    return [w for w in text.split() if _HASH_WORD_RE.search(w)]


def _hash_ratio_too_high(text: str) -> bool:
    total = len(re.sub(r"\s", "", text))
    if total == 0:
        return False
    return len("".join(_hash_words(text))) / total > 0.3


def _has_design_keyword(text: str) -> bool:
    lower = text.lower()
    return any(keyword in lower for keyword in DESIGN_KEYWORDS)


GARBAGE_RULES: tuple[NameRule, ...] = (
    NameRule("hash_token", lambda text: bool(_hash_words(text))),
    pattern_rule(
        "image_filename",
        r"^IMG[\s_-]?\d+",
        r"^DSC[\s_-]?\d+",
        r"^Photo[\s_-]?\d+",
        r"^Image[\s_-]?\d+",
        r"^\d{4}[\s_-]\d{2}[\s_-]\d{2}",
    ),
    pattern_rule("timestamp", r"\d{1,2}\.\d{2}\.\d{2}\s*(?:am|pm)"),
    pattern_rule("dimensions", r"\d+x\d+", flags=0),
    pattern_rule("file_extension", r"\.(?:jpe?g|png|gif|svg|webp|pdf|bmp|tiff?)$"),
    NameRule("design_keyword", _has_design_keyword),
    pattern_rule("version_tag", r"\bv\d+\b", r"[_-]v\d"),
    pattern_rule("embedded_hash", r"[a-z]\d[a-z0-9]{6,}"),
    NameRule("hash_ratio", _hash_ratio_too_high),
)


def garbage_rule(text: str) -> NameRule | None:
    """The first garbage rule `text` trips, if any."""
    return first_match(text, GARBAGE_RULES)


def is_garbage(text: str | None) -> bool:
    if not text or not text.strip():
        return True
    return garbage_rule(text) is not None


# --- Blocklist: text that is never a sponsor name ---

_FIRST_NAMES = (
    "john|jane|mike|michael|david|sarah|emma|sophie|james|robert|mary|lisa|"
    "anna|tom|chris|dan|matt|ben|sam|alex|kate|amy|luke|mark|paul|peter|steve|"
    "brian|kevin|andrew|ryan|josh|nick|adam|jack|max|joe|tim|ian|alan|gary|"
    "simon|tony|carl|lee|martin|neil|sean|craig|scott|dean|ross|grant|wayne|"
    "troy|brad|chad|greg|darren|barry|keith|glen|stuart|derek|trevor|phillip|"
    "graham|russell|roger|colin"
)

BLOCKLIST_RULES: tuple[NameRule, ...] = (
    pattern_rule(
        "placeholder",
        r"^(?:placeholder|default|blank|untitled.*|no\s*name)$",
        r"^(?:img|image|photo|pic)\d*$",
        r"^(?:img|photo)_\d",
        r"^dsc\d",
        r"^screen\s*shot",
        r"whatsapp",
        r"^wa\d",
        r"^(?:undefined|null|n/a|tba|tbc|coming\s*soon)$",
    ),
    pattern_rule(
        "slogan",
        r"whatever\s*it\s*takes",
        r"^(?:be|go|get|let|just|we|our|the|your|my)\s",
        r"^(?:never|always|play|win|team)\s",
        r"together",
        r"^(?:believe|dream)",
    ),
    pattern_rule(
        "ui_chrome",
        r"^(?:contact|about|home|menu|nav|header|footer|banner|button|icon|arrow)$",
        r"^(?:close|open|search|next|previous|prev|back|forward|submit|send)$",
        r"^(?:download|upload|share|print|subscribe|register)$",
        r"^(?:contact|about)\s*us$",
        r"^(?:log|sign)\s*in$",
        r"^sign\s*up$",
        r"^signup$",
        r"^click\s*here$",
        r"^(?:read|learn|view|see)\s*more$",
        r"^(?:view|see)\s*all$",
        r"^more\s*info$",
        r"^email\s*us$",
    ),
    pattern_rule("first_name_only", rf"^(?:{_FIRST_NAMES})$"),
    pattern_rule(
        "generic_term",
        r"^logos?$",
        r"^(?:our\s*)?(?:sponsors?|partners?|supporters?)$",
        r"^(?:member|team|staff|player|coach|club|news|event|gallery|hero)$",
        r"^(?:advertisement|ad|promo|promotion)$",
        r"^slide\d*$",
        r"^(?:carousel|background|feature)",
    ),
    pattern_rule(
        "tier_label",
        r"^(?:major|principal|gold|silver|bronze|platinum|community|official)\s*(?:sponsors?|partners?)?$",
        r"^naming\s*rights$",
        r"^title\s*sponsor$",
    ),
    pattern_rule(
        "file_term",
        r"^(?:cropped|scaled|resized|version)",
        r"^(?:copy|final|edit)$",
        r"^\d+$",
        r"^[a-z]$",
        r"^[a-f0-9]{8,}$",
        r"\d{4}\s*\d{2}\s*\d{2}",
        r"at\d{2}\.\d{2}",
        r"\bpress\b.*\bready\b",
        r"\br\d[a-z0-9]{5,}",
        r"\bq[a-z0-9]{10,}",
    ),
    pattern_rule(
        "social",
        r"^(?:facebook|instagram|twitter|linkedin|youtube|tiktok|snapchat|pinterest)$",
        r"^x\.com$",
        r"^follow\s*us",
        r"^(?:like|comment)$",
    ),
    pattern_rule(
        "legal_footer",
        r"^copyright",
        r"^all\s*rights\s*reserved",
        r"^(?:privacy|cookie)\s*policy",
        r"^terms(?:\s*of\s*service|\s*and\s*conditions)?$",
        r"^(?:powered|built|designed|developed)\s*by",
    ),
    pattern_rule(
        "club_jargon",
        r"^(?:fixture|result|training|registration|membership)",
        r"^(?:ladder|schedule)$",
        r"^(?:juniors?|seniors?|womens?|mens?)$",
        r"^under\s*\d",
        r"^u\d{1,2}s?$",
    ),
)


def blocklist_rule(text: str) -> NameRule | None:
    return first_match(text.strip(), BLOCKLIST_RULES)


def is_blocklisted(text: str) -> bool:
    return blocklist_rule(text) is not None


# --- Acceptance ---

BUSINESS_SUFFIX_RES: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"\b(?:pty|ltd|inc|corp|co|group|services|solutions|industries|australia|au)\.?$",
        r"\b(?:construction|builders?|building|homes?|properties|property|real\s*estate)$",
        r"\b(?:electrical|plumbing|mechanical|engineering|consulting)$",
        r"\b(?:logistics|transport|auto|motors?|automotive|cars?)$",
        r"\b(?:finance|financial|accounting|legal|lawyers?|law)$",
        r"\b(?:cafe|restaurant|bar|hotel|catering|food)$",
        r"\b(?:gym|fitness|health|medical|dental|pharmacy|chemist)$",
        r"\b(?:print|printing|graphics|design|media|studio)$",
        r"\b(?:steel|metal|concrete|glass|timber|supplies)$",
        r"\b(?:wholesale|retail|store|shop|mart|warehouse)$",
    )
)

STOPWORDS = frozenset({
    "the", "and", "or", "but", "for", "with", "from", "this", "that",
    "are", "was", "were", "been", "being", "have", "has", "had",
    "new", "view", "more", "all", "click", "here", "now", "get",
})

_FILE_LIKE_RE = re.compile(
    r"\.(?:jpe?g|png|gif|webp|svg|pdf|doc|html|php|aspx)$", re.IGNORECASE
)
_URL_RE = re.compile(r"^(?:https?://|www\.)", re.IGNORECASE)


def has_business_suffix(text: str) -> bool:
    return any(p.search(text) for p in BUSINESS_SUFFIX_RES)


def is_valid_sponsor_name(name: str | None) -> bool:
    """Whether a cleaned string can be reported as a sponsor name."""
    if not name:
        return False
    trimmed = name.strip()
    if len(trimmed) < 2 or len(trimmed) > 100:
        return False

    if is_garbage(trimmed) or is_blocklisted(trimmed):
        return False

    if not re.search(r"[a-zA-Z]", trimmed):
        return False
    if _FILE_LIKE_RE.search(trimmed) or _URL_RE.search(trimmed):
        return False
    if "/" in trimmed and " " not in trimmed:
        return False

    letters = len(re.findall(r"[a-zA-Z]", trimmed))
    if letters < len(trimmed) * 0.3:
        return False

    if trimmed.lower() in STOPWORDS:
        return False

    if len(trimmed.split()) == 1:
        if len(trimmed) >= 8:
            return True
        return len(trimmed) >= 4 and has_business_suffix(trimmed)

    return True
