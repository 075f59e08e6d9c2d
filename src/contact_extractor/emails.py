"""Regex email extraction, junk filtering, and best-email selection."""

import logging
import re
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from .validators import is_plausible_email

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"\b([a-zA-Z0-9._-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b")

# Substrings that mark an address as belonging to a platform, an asset
# pipeline, or a placeholder rather than to the business.
DEFAULT_JUNK_TERMS = (
    "sentry", "example", "wix.com", "wixsite", "wixpress", "domain.com",
    "yourdomain",
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp",
    "godaddy", "wordpress", "squarespace", "cloudflare", "bootstrap",
    "splide", "segmenter", "polyfill", "webpack", "babel",
    "google", "facebook", "twitter", "instagram", "uhaul.com",
)

# Local-part prefixes of system or department mailboxes nobody answers.
DEFAULT_GENERIC_PREFIXES = (
    "privacy", "legal", "abuse", "press", "media", "jobs", "careers",
    "noreply", "no-reply", "donotreply", "do-not-reply",
    "webmaster", "hostmaster", "postmaster", "admin",
)

ROLE_MAILBOXES = ("info", "contact", "hello", "admin", "owner")

_THREE_DIGITS = re.compile(r"\d{3,}")
_NUMERIC_DOMAIN = re.compile(r"@\d+\.")


class EmailDenylist(BaseModel):
    """Configurable junk-address rules."""

    junk_terms: tuple[str, ...] = Field(default=DEFAULT_JUNK_TERMS)
    generic_prefixes: tuple[str, ...] = Field(default=DEFAULT_GENERIC_PREFIXES)


DEFAULT_DENYLIST = EmailDenylist()


def is_junk_email(email: str, denylist: EmailDenylist = DEFAULT_DENYLIST) -> bool:
    """Return True if the address is platform noise or structurally implausible."""
    lower = email.strip().lower()
    if not is_plausible_email(lower) or lower.count("@") != 1:
        return True
    local, domain = lower.split("@")
    if not local or not domain:
        return True

    if any(term in lower for term in denylist.junk_terms):
        return True
    if any(local.startswith(prefix) for prefix in denylist.generic_prefixes):
        return True

    if local.isdigit():
        return True
    if _NUMERIC_DOMAIN.search(lower):
        return True
    labels = domain.split(".")
    if len(labels) < 2:
        return True
    tld = labels[-1]
    if len(tld) < 2 or not tld.isalpha():
        return True
    if not any(c.isalpha() for c in ".".join(labels[:-1])):
        return True
    return False


def filter_emails(
    emails: Iterable[str],
    denylist: EmailDenylist = DEFAULT_DENYLIST,
) -> list[str]:
    """Dedupe case-insensitively (first casing wins) and drop junk addresses."""
    seen: set[str] = set()
    kept: list[str] = []
    for email in emails:
        email = email.strip()
        key = email.lower()
        if not email or key in seen:
            continue
        seen.add(key)
        if is_junk_email(email, denylist):
            logger.debug(f"Filtered junk email: {email}")
            continue
        kept.append(email)
    return kept


def extract_emails(text: Optional[str], denylist: EmailDenylist = DEFAULT_DENYLIST) -> list[str]:
    """Find email-like tokens in plain text, in order of first appearance."""
    if not text:
        return []
    return filter_emails(EMAIL_PATTERN.findall(text), denylist)


def business_slug(business_name: Optional[str]) -> str:
    return re.sub(r"[^a-z0-9]", "", (business_name or "").lower())


def _local_part(email: str) -> str:
    return email.split("@", 1)[0].lower()


def _looks_personal(email: str) -> bool:
    local = _local_part(email)
    if local in ROLE_MAILBOXES:
        return False
    if "." in local:
        return True
    return 3 < len(local) < 20 and not _THREE_DIGITS.search(local)


def select_best_email(emails: list[str], business_name: Optional[str]) -> Optional[str]:
    """Pick one address from candidates in discovery order.

    Priority: contains the business-name slug, then a personal-looking
    mailbox, then a role mailbox (info@, contact@, ...), then the first one.
    Role mailboxes never count as personal-looking even when their length
    would qualify.
    """
    if not emails:
        return None

    slug = business_slug(business_name)
    if slug:
        for email in emails:
            if slug in email.lower():
                return email

    for email in emails:
        if _looks_personal(email):
            return email

    for email in emails:
        if _local_part(email) in ROLE_MAILBOXES:
            return email

    return emails[0]
