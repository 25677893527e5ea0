from pydantic import BaseModel, Field


class ScrapedSponsor(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    logo_url: str | None = None
    website_url: str | None = None  # always off-site, never a link back to the club
    tier: str | None = None  # inferred from heading context only
    source_url: str


class ScrapeResult(BaseModel):
    sponsors: list[ScrapedSponsor] = []
    scraped_urls: list[str] = []
    errors: list[str] = []


class NameChange(BaseModel):
    old: str
    new: str


class NameReview(BaseModel):
    total: int
    removed: list[str] = []
    renamed: list[NameChange] = []
    unchanged: int = 0


class SponsorCandidate(BaseModel):
    """Unvalidated extraction output, before dedup and the final name check."""

    name: str
    logo_url: str | None = None
    website_url: str | None = None
    tier: str | None = None
    source_url: str
