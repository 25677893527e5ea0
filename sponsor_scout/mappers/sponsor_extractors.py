"""DOM strategies that turn one sponsor/partner page into sponsor candidates.

Each strategy looks at a different markup convention. They overlap on
purpose: all of them run on every page and the results are merged by the
deduplicator.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from sponsor_scout.mappers.domain import company_name_from_url, get_external_url, resolve_url
from sponsor_scout.mappers.name_cleaner import clean, salvage_name
from sponsor_scout.mappers.name_rules import has_business_suffix, is_valid_sponsor_name
from sponsor_scout.schemas.sponsor import SponsorCandidate

logger = logging.getLogger(__name__)

_SPONSOR_WORD_RE = re.compile(r"sponsor|partner", re.IGNORECASE)
_SPONSOR_CONTEXT_RE = re.compile(r"sponsor|partner|supporter|backer", re.IGNORECASE)
_HEADING_RE = re.compile(r"sponsor|partner|supporter", re.IGNORECASE)
_LOGO_CONTAINER_RE = re.compile(r"sponsor|partner|logo", re.IGNORECASE)

_HEADINGS = ("h1", "h2", "h3", "h4")
_MAX_SECTION_SIBLINGS = 10

# First match wins, so the more specific wording comes first
TIER_RULES: tuple[tuple[re.Pattern[str], str], ...] = tuple(
    (re.compile(pattern, re.IGNORECASE), tier)
    for pattern, tier in (
        (r"naming\s*rights|title\s*sponsor", "Principal"),
        (r"major|principal|headline", "Principal"),
        (r"platinum", "Platinum"),
        (r"gold", "Gold"),
        (r"silver", "Silver"),
        (r"bronze", "Bronze"),
        (r"community", "Community"),
    )
)


def infer_tier(context: str | None) -> str | None:
    """Sponsorship tier named in heading text, e.g. "Gold Partners" -> "Gold"."""
    if not context:
        return None
    for pattern, tier in TIER_RULES:
        if pattern.search(context):
            return tier
    return None


@dataclass
class Page:
    url: str
    soup: BeautifulSoup

    @classmethod
    def parse(cls, url: str, html: str) -> "Page":
        return cls(url=url, soup=BeautifulSoup(html, "html.parser"))


def _attr(tag: Tag | None, name: str) -> str | None:
    if tag is None:
        return None
    value = tag.get(name)
    if isinstance(value, list):
        value = " ".join(value)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _class_text(tag: Tag) -> str:
    return _attr(tag, "class") or ""


def _enclosing_link(tag: Tag) -> Tag | None:
    if tag.name == "a":
        return tag
    return tag.find_parent("a")


def name_from_filename(src: str) -> str | None:
    """Company name hidden in an image filename, held to a stricter bar.

    "/uploads/alan-mance-electrical-150x150.png" -> "Alan Mance Electrical"
    """
    try:
        filename = urlparse(src).path.rsplit("/", 1)[-1]
    except ValueError:
        return None
    if not filename:
        return None

    stem = re.sub(r"\.[^.]+$", "", filename)
    stem = re.sub(r"-\d+x\d+$", "", stem)
    stem = re.sub(r"[-_]+", " ", stem)

    name = clean(stem)
    if not is_valid_sponsor_name(name):
        return None

    words = [w for w in name.split(" ") if len(w) > 1]
    if len(words) >= 2 or has_business_suffix(name):
        return name
    return None


def resolve_image_name(img: Tag, page_url: str) -> str | None:
    """Best company name for a logo: alt, title, link domain, then filename."""
    for attr in ("alt", "title"):
        name = salvage_name(_attr(img, attr))
        if name:
            return name

    link = _enclosing_link(img)
    external = get_external_url(_attr(link, "href"), page_url)
    if external:
        from_domain = company_name_from_url(external)
        if from_domain and is_valid_sponsor_name(from_domain):
            return from_domain

    src = _attr(img, "src")
    if src:
        return name_from_filename(src)
    return None


def image_candidate(img: Tag, page: Page, tier: str | None = None) -> SponsorCandidate | None:
    name = resolve_image_name(img, page.url)
    if not name:
        return None
    src = _attr(img, "src")
    link = _enclosing_link(img)
    return SponsorCandidate(
        name=name,
        logo_url=resolve_url(src, page.url) if src else None,
        website_url=get_external_url(_attr(link, "href"), page.url),
        tier=tier,
        source_url=page.url,
    )


def _unique(tags: list[Tag]) -> list[Tag]:
    seen: set[int] = set()
    unique: list[Tag] = []
    for tag in tags:
        if id(tag) not in seen:
            seen.add(id(tag))
            unique.append(tag)
    return unique


class Extractor(ABC):
    name: str

    @abstractmethod
    def extract(self, page: Page) -> list[SponsorCandidate]:
        ...

    def _images(self, page: Page, images: list[Tag], tier: str | None = None) -> list[SponsorCandidate]:
        candidates = []
        for img in _unique(images):
            candidate = image_candidate(img, page, tier)
            if candidate:
                candidates.append(candidate)
        return candidates


class SectionScanExtractor(Extractor):
    """Every image inside an element whose class or id mentions sponsors/partners."""

    name = "section_scan"
    selector = (
        '[class*="sponsor" i] img, [class*="partner" i] img, '
        '[id*="sponsor" i] img, [id*="partner" i] img'
    )

    def extract(self, page: Page) -> list[SponsorCandidate]:
        return self._images(page, page.soup.select(self.selector))


class LabeledCardExtractor(Extractor):
    """Cards with a visible company name next to the logo."""

    name = "labeled_card"
    card_selector = (
        '.sponsor, .partner, '
        '[class*="sponsor-card" i], [class*="partner-card" i], '
        '[class*="sponsor-item" i], [class*="partner-item" i], '
        '[class*="sponsor-logo" i], [class*="partner-logo" i]'
    )
    label_selector = "h5, h4, h3, h6, p.name, span.name, .sponsor-name, .partner-name"

    def extract(self, page: Page) -> list[SponsorCandidate]:
        candidates = []
        for card in page.soup.select(self.card_selector):
            heading = self._nearby_heading(card)
            if not self._in_sponsor_context(card, heading):
                continue

            label = card.select_one(self.label_selector)
            if label is None:
                continue
            name = salvage_name(label.get_text(" ", strip=True))
            if not name:
                continue

            img = card.find("img")
            link = card.find("a", href=True)
            src = _attr(img, "src")
            candidates.append(SponsorCandidate(
                name=name,
                logo_url=resolve_url(src, page.url) if src else None,
                website_url=get_external_url(_attr(link, "href"), page.url),
                tier=infer_tier(heading),
                source_url=page.url,
            ))
        return candidates

    @staticmethod
    def _nearby_heading(card: Tag) -> str | None:
        parent = card.parent
        if parent is None:
            return None
        heading = parent.find_previous_sibling(_HEADINGS)
        if heading is None:
            return None
        text = heading.get_text(" ", strip=True)
        return text if _HEADING_RE.search(text) else None

    @staticmethod
    def _in_sponsor_context(card: Tag, heading: str | None) -> bool:
        ancestor_classes = " ".join(_class_text(p) for p in card.parents if isinstance(p, Tag))
        if _SPONSOR_CONTEXT_RE.search(ancestor_classes) or heading:
            return True
        return bool(_SPONSOR_WORD_RE.search(_class_text(card)))


class ListExtractor(Extractor):
    """List items of sponsor/partner lists."""

    name = "list"
    selector = (
        'ul[class*="sponsor" i] li, ol[class*="sponsor" i] li, '
        'ul[class*="partner" i] li, ol[class*="partner" i] li, '
        '.sponsors ul li, .partners ul li, #sponsors ul li, #partners ul li'
    )

    def extract(self, page: Page) -> list[SponsorCandidate]:
        candidates = []
        for li in _unique(page.soup.select(self.selector)):
            link = li.find("a", href=True)
            img = li.find("img")
            text = li.get_text(" ", strip=True)

            name = salvage_name(text) if 2 < len(text) < 100 else None
            if not name and img is not None:
                name = resolve_image_name(img, page.url)
            if not name:
                continue

            src = _attr(img, "src")
            candidates.append(SponsorCandidate(
                name=name,
                logo_url=resolve_url(src, page.url) if src else None,
                website_url=get_external_url(_attr(link, "href"), page.url),
                source_url=page.url,
            ))
        return candidates


class HeadingSectionExtractor(Extractor):
    """Logos following a "Gold Sponsors"-style heading, tagged with its tier."""

    name = "heading_section"

    def extract(self, page: Page) -> list[SponsorCandidate]:
        candidates = []
        for heading in page.soup.find_all(_HEADINGS):
            text = heading.get_text(" ", strip=True)
            if not _HEADING_RE.search(text):
                continue
            tier = infer_tier(text)

            images: list[Tag] = []
            scanned = 0
            for sibling in heading.next_siblings:
                if not isinstance(sibling, Tag):
                    continue
                if sibling.name in _HEADINGS or scanned >= _MAX_SECTION_SIBLINGS:
                    break
                scanned += 1
                if sibling.name == "img":
                    images.append(sibling)
                images.extend(sibling.find_all("img"))
            candidates.extend(self._images(page, images, tier))
        return candidates


class GridExtractor(Extractor):
    """Logo grids and galleries: bare images and linked logos."""

    name = "grid"
    selector = (
        '.sponsor-grid, .partner-grid, .sponsors-grid, .partners-grid, '
        '[class*="sponsor-logo" i], [class*="partner-logo" i]'
    )

    def extract(self, page: Page) -> list[SponsorCandidate]:
        candidates = []
        elements = _unique([
            el for grid in page.soup.select(self.selector) for el in grid.find_all(["img", "a"])
        ])
        for el in elements:
            if el.name == "img":
                candidate = image_candidate(el, page)
                if candidate:
                    candidates.append(candidate)
                continue

            img = el.find("img")
            text = el.get_text(" ", strip=True)
            name = salvage_name(text) if 2 < len(text) < 100 else None
            if not name and img is not None:
                name = resolve_image_name(img, page.url)
            if not name:
                continue

            src = _attr(img, "src")
            candidates.append(SponsorCandidate(
                name=name,
                logo_url=resolve_url(src, page.url) if src else None,
                website_url=get_external_url(_attr(el, "href"), page.url),
                source_url=page.url,
            ))
        return candidates


class PageBuilderExtractor(Extractor):
    """Single-image blocks from WordPress page builders inside sponsor rows."""

    name = "page_builder"
    selector = (
        '.sponsor-logos .wpb_single_image img, .partner-logos .wpb_single_image img, '
        '[class*="sponsor" i] .wpb_single_image img, [class*="partner" i] .wpb_single_image img, '
        '.logo-sponsors img, .logo-partners img'
    )

    def extract(self, page: Page) -> list[SponsorCandidate]:
        return self._images(page, page.soup.select(self.selector))


class FigureExtractor(Extractor):
    """WordPress figure blocks grouped under a sponsor/partner/logo container."""

    name = "figure"

    def extract(self, page: Page) -> list[SponsorCandidate]:
        containers: list[Tag] = []
        for figure in page.soup.select("figure.wpb_wrapper, figure.wp-block-image"):
            container = figure.find_parent(
                lambda tag: bool(_LOGO_CONTAINER_RE.search(_class_text(tag)))
            )
            if container is not None:
                containers.append(container)

        images = [img for c in _unique(containers) for img in c.find_all("img")]
        return self._images(page, images)


DEFAULT_EXTRACTORS: tuple[Extractor, ...] = (
    SectionScanExtractor(),
    LabeledCardExtractor(),
    ListExtractor(),
    HeadingSectionExtractor(),
    GridExtractor(),
    PageBuilderExtractor(),
    FigureExtractor(),
)


def extract_candidates(
    page: Page,
    extractors: tuple[Extractor, ...] = DEFAULT_EXTRACTORS,
) -> list[SponsorCandidate]:
    """Run every strategy over one page and concatenate their output."""
    candidates: list[SponsorCandidate] = []
    for extractor in extractors:
        found = extractor.extract(page)
        logger.debug("%s: %d candidates on %s", extractor.name, len(found), page.url)
        candidates.extend(found)
    return candidates
