"""Pydantic models for contact extraction."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CandidateSource = Literal["mailto", "regex", "ai"]
AIConfidence = Literal["high", "medium", "low", "none"]
Confidence = Literal["high", "medium", "low", "none", "regex", "error"]
Method = Literal["ai", "regex", "error"]

_AI_CONFIDENCE_VALUES = ("high", "medium", "low", "none")


def _strip_mailto(value: str) -> str:
    value = value.strip()
    if value.lower().startswith("mailto:"):
        value = value[len("mailto:"):].strip()
    return value


def _ordered_unique_lower(emails: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for email in emails:
        lower = email.strip().lower()
        if lower and lower not in seen:
            seen.add(lower)
            out.append(lower)
    return out


class ContactCandidate(BaseModel):
    """Contact signal gathered from one source during a single extraction run."""

    emails: list[str] = Field(default_factory=list)
    owner_name: Optional[str] = None
    source: CandidateSource

    @field_validator("emails")
    @classmethod
    def _normalize_emails(cls, value: list[str]) -> list[str]:
        return _ordered_unique_lower(value)

    def merge(self, other: ContactCandidate) -> ContactCandidate:
        """Union the emails (keeping order) and keep the first owner name seen."""
        return ContactCandidate(
            emails=self.emails + other.emails,
            owner_name=self.owner_name or other.owner_name,
            source=self.source,
        )


class PageContent(BaseModel):
    """Normalized text of one crawled page."""

    section_label: str = Field(description='Section marker, e.g. "HOMEPAGE" or "/CONTACT"')
    url: str
    text: str = ""

    def render(self) -> str:
        return f"=== {self.section_label} ===\n{self.text}"


class CrawlResult(BaseModel):
    """Everything the page crawl gathered for one business website."""

    origin: Optional[str] = None
    pages: list[PageContent] = Field(default_factory=list)
    mailto_emails: list[str] = Field(default_factory=list)
    pages_crawled: int = 0
    pages_failed: int = 0
    errors: list[str] = Field(default_factory=list)

    def combined_text(self) -> str:
        """Concatenate every page in crawl order (homepage first)."""
        return "".join(f"\n{page.render()}" for page in self.pages)


class AIExtraction(BaseModel):
    """The language model's reply, coerced into a fixed shape.

    Every field has a default because the model is free to omit keys,
    return the wrong types, or invent new confidence levels.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    emails: list[str] = Field(default_factory=list)
    best_email: Optional[str] = Field(default=None, alias="bestEmail")
    owner_name: Optional[str] = Field(default=None, alias="ownerName")
    owner_title: Optional[str] = Field(default=None, alias="ownerTitle")
    phone: Optional[str] = None
    confidence: AIConfidence = "none"
    notes: str = ""

    @field_validator("emails", mode="before")
    @classmethod
    def _coerce_emails(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        emails = (_strip_mailto(v) for v in value if isinstance(v, str))
        return [e for e in emails if e]

    @field_validator("best_email", "owner_name", "owner_title", "phone", mode="before")
    @classmethod
    def _coerce_optional_text(cls, value: Any) -> Optional[str]:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            # Phone numbers sometimes come back as bare integers.
            value = str(value)
        if not isinstance(value, str):
            return None
        value = value.strip()
        if not value or value.lower() in ("null", "none", "n/a"):
            return None
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _coerce_confidence(cls, value: Any) -> str:
        if value is None:
            return "none"
        if not isinstance(value, str):
            return "low"
        value = value.strip().lower()
        return value if value in _AI_CONFIDENCE_VALUES else "low"

    @field_validator("best_email")
    @classmethod
    def _drop_mailto_scheme(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _strip_mailto(value) or None

    @field_validator("notes", mode="before")
    @classmethod
    def _coerce_notes(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    def to_candidate(self) -> ContactCandidate:
        emails = ([self.best_email] if self.best_email else []) + self.emails
        return ContactCandidate(emails=emails, owner_name=self.owner_name, source="ai")


class ExtractionResult(BaseModel):
    """Final result returned to the caller for one business."""

    url: str = Field(description="The website URL that was requested")
    email: Optional[str] = None
    owner_name: Optional[str] = None
    owner_title: Optional[str] = None
    phone: Optional[str] = None
    confidence: Optional[Confidence] = None
    method: Method = "regex"
    emails: list[str] = Field(default_factory=list)
    notes: Optional[str] = None
    pages_crawled: int = 0
    errors: list[str] = Field(default_factory=list)

    @classmethod
    def failed(cls, url: str, error: str) -> ExtractionResult:
        return cls(url=url, confidence="error", method="error", errors=[error])


class EmailValidationVerdict(BaseModel):
    """Quality verdict for a single email address."""

    valid: bool
    score: int = Field(default=0, ge=0, le=100)
    reason: Optional[str] = None
    email: Optional[str] = None
