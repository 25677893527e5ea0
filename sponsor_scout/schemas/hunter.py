from pydantic import BaseModel


class HunterVerification(BaseModel):
    date: str | None = None
    status: str | None = None  # "valid" | "accept_all" | "unknown" | "invalid"


class HunterEmail(BaseModel):
    value: str
    type: str | None = None  # "generic" | "personal"
    confidence: int | None = 0
    first_name: str | None = None
    last_name: str | None = None
    position: str | None = None
    department: str | None = None
    linkedin: str | None = None
    phone_number: str | None = None
    verification: HunterVerification | None = None


class DomainSearchData(BaseModel):
    domain: str | None = None
    organization: str | None = None
    emails: list[HunterEmail] = []


class DomainSearchResponse(BaseModel):
    data: DomainSearchData = DomainSearchData()


class EmailVerifierData(BaseModel):
    email: str | None = None
    status: str | None = None  # "valid" | "invalid" | "accept_all" | "webmail" | "disposable" | "unknown"
    result: str | None = None  # "deliverable" | "undeliverable" | "risky"
    score: int | None = None


class EmailVerifierResponse(BaseModel):
    data: EmailVerifierData = EmailVerifierData()
