from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, model_validator


class ContactSource(StrEnum):
    website = "website"
    api = "api"
    pattern = "pattern"


class Confidence(StrEnum):
    high = "high"
    medium = "medium"
    low = "low"

    @property
    def rank(self) -> int:
        """Higher is more trusted."""
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class ContactInfo(BaseModel):
    email: str | None = None
    phone: str | None = None
    contact_name: str | None = None
    contact_role: str | None = None
    linkedin: str | None = None
    source: ContactSource
    confidence: Confidence
    verified: bool = False

    @model_validator(mode="after")
    def _has_channel(self) -> ContactInfo:
        if not (self.email or self.phone or self.linkedin):
            raise ValueError("contact needs an email, phone or linkedin")
        return self


class WebsiteData(BaseModel):
    has_contact_page: bool = False
    has_social_links: bool = False


class DiscoveryResult(BaseModel):
    contacts: list[ContactInfo] = []
    website_data: WebsiteData = WebsiteData()
