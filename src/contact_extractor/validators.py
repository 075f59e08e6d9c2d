"""Pure validators applied to contact fields before a lead is persisted."""

import re
from typing import Any, Optional

from .models import EmailValidationVerdict

_BASIC_EMAIL = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_FIRST_DOT_LAST = re.compile(r"^[a-z]+\.[a-z]+@")
_FIRST_NAME_ONLY = re.compile(r"^[a-z]{3,}@")
_NON_DIGIT = re.compile(r"\D")

GENERIC_EMAIL_PREFIXES = (
    "info@", "sales@", "support@", "contact@",
    "admin@", "webmaster@", "noreply@", "no-reply@",
    "marketing@", "hello@", "help@", "service@",
    "customerservice@", "office@", "team@",
)

PERSONAL_EMAIL_DOMAINS = (
    "gmail.com", "yahoo.com", "hotmail.com", "outlook.com",
    "icloud.com", "aol.com", "protonmail.com", "me.com",
    "mail.com", "ymail.com", "live.com",
)

PLACEHOLDER_NAMES = frozenset({
    "private seller",
    "seller",
    "owner",
    "dealer",
    "n/a",
    "unknown",
    "contact seller",
})


def is_plausible_email(email: Any) -> bool:
    """Basic syntactic check: something@something.something, no whitespace."""
    return isinstance(email, str) and bool(_BASIC_EMAIL.match(email))


def validate_email(email: Optional[str]) -> EmailValidationVerdict:
    """Score an email address 0-100 for how likely it reaches a person.

    Generic role mailboxes (info@, sales@, ...) are always invalid with a
    score of 0. Everything else starts at 50 and is adjusted for
    personal-name local parts and personal mailbox providers.
    """
    if not email or not isinstance(email, str):
        return EmailValidationVerdict(valid=False, score=0, reason="missing")

    if not is_plausible_email(email):
        return EmailValidationVerdict(valid=False, score=0, reason="invalid_format", email=email)

    lower = email.lower()
    if lower.startswith(GENERIC_EMAIL_PREFIXES):
        return EmailValidationVerdict(valid=False, score=0, reason="generic_email", email=email)

    score = 50
    if _FIRST_DOT_LAST.match(lower):
        score += 30
    elif _FIRST_NAME_ONLY.match(lower):
        score += 20

    if any(f"@{domain}" in lower for domain in PERSONAL_EMAIL_DOMAINS):
        score += 20

    if "business" in lower or "company" in lower:
        score -= 20

    return EmailValidationVerdict(valid=True, score=max(0, min(100, score)), email=email)


def validate_name(name: Any) -> Optional[str]:
    """Reject placeholder names and title-case the rest."""
    if not name or not isinstance(name, str):
        return None

    trimmed = name.strip()
    if trimmed.lower() in PLACEHOLDER_NAMES:
        return None
    if len(trimmed) < 2:
        return None

    return " ".join(word[:1].upper() + word[1:].lower() for word in trimmed.split(" "))


def validate_phone(raw: Any) -> Optional[str]:
    """Format a US phone number as ``(XXX) XXX-XXXX`` or return None."""
    if not raw or not isinstance(raw, str):
        return None

    digits = _NON_DIGIT.sub("", raw)
    if len(digits) == 11 and digits[0] == "1":
        digits = digits[1:]
    elif len(digits) != 10:
        return None
    return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
