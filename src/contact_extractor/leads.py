"""Second quality gate and dedup-aware persistence of extraction results."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Literal, Optional, Protocol

from pydantic import BaseModel, Field

from .models import ExtractionResult
from .validators import validate_email, validate_name, validate_phone

logger = logging.getLogger(__name__)

MIN_EMAIL_SCORE = 50

SaveOutcome = Literal["inserted", "updated", "unchanged", "skipped"]


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Lead(BaseModel):
    """Stored lead record (the subset this pipeline reads and writes)."""

    business_name: str
    state: Optional[str] = None
    website: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    owner_name: Optional[str] = None
    notes: Optional[str] = None
    source: Optional[str] = None
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class LeadStore(Protocol):
    """Key lookup / insert / update, keyed by business name and state."""

    def find_one(self, business_name: str, state: Optional[str]) -> Optional[Lead]:
        ...

    def insert(self, lead: Lead) -> None:
        ...

    def update(self, lead: Lead) -> None:
        ...


class InMemoryLeadStore:
    """LeadStore kept in a dict; used for dry runs and tests."""

    def __init__(self) -> None:
        self._leads: dict[tuple[str, str], Lead] = {}

    @staticmethod
    def _key(business_name: str, state: Optional[str]) -> tuple[str, str]:
        return business_name.strip().lower(), (state or "").strip().upper()

    def find_one(self, business_name: str, state: Optional[str]) -> Optional[Lead]:
        lead = self._leads.get(self._key(business_name, state))
        return lead.model_copy() if lead else None

    def insert(self, lead: Lead) -> None:
        self._leads[self._key(lead.business_name, lead.state)] = lead.model_copy()

    def update(self, lead: Lead) -> None:
        self.insert(lead)

    def all(self) -> list[Lead]:
        return list(self._leads.values())

    def __len__(self) -> int:
        return len(self._leads)


def accepted_email(email: Optional[str]) -> Optional[str]:
    """Return the email only if the quality validator accepts it."""
    if not email:
        return None
    verdict = validate_email(email)
    if verdict.valid and verdict.score >= MIN_EMAIL_SCORE:
        return email
    logger.debug(f"Rejected email {email}: {verdict.reason or f'score {verdict.score}'}")
    return None


def save_extraction(
    store: LeadStore,
    business_name: str,
    result: ExtractionResult,
    state: Optional[str] = None,
    website: Optional[str] = None,
    phone: Optional[str] = None,
    source: Optional[str] = None,
    require_contact: bool = False,
) -> SaveOutcome:
    """Validate contact fields and insert or update the matching lead.

    ``phone`` is the listing's own phone number; the extraction result's
    phone is used when none is given. New leads get every validated field;
    existing leads only gain a missing email and an owner note.
    """
    valid_phone = validate_phone(phone or result.phone)
    valid_email = accepted_email(result.email)
    valid_name = validate_name(result.owner_name)

    existing = store.find_one(business_name, state)
    if existing is None:
        if require_contact and not (valid_phone or valid_email):
            logger.info(f"Skipped {business_name}: no valid phone or email")
            return "skipped"
        store.insert(Lead(
            business_name=business_name,
            state=state,
            website=website or result.url or None,
            email=valid_email,
            phone=valid_phone,
            owner_name=valid_name,
            notes=f"Possible Owner/Contact: {valid_name}" if valid_name else None,
            source=source,
        ))
        logger.info(f"Saved: {business_name}{' | Email: ' + valid_email if valid_email else ''}")
        return "inserted"

    updated = False
    if valid_email and not existing.email:
        existing.email = valid_email
        updated = True
    if valid_phone and not existing.phone:
        existing.phone = valid_phone
        updated = True
    if valid_name and "owner" not in (existing.notes or "").lower():
        existing.notes = (
            f"{existing.notes}. Possible Owner: {valid_name}"
            if existing.notes
            else f"Possible Owner: {valid_name}"
        )
        if not existing.owner_name:
            existing.owner_name = valid_name
        updated = True

    if not updated:
        return "unchanged"
    existing.updated_at = _now()
    store.update(existing)
    logger.info(f"Updated: {business_name}")
    return "updated"
