"""Rule-based owner/decision-maker name extraction."""

import re
from typing import Optional

_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")

# Order matters: the first pattern that yields an acceptable name wins.
OWNER_PATTERNS = [
    re.compile(rf"{keyword}[:\s]+([A-Z][a-z]+\s+[A-Z][a-z]+)", re.IGNORECASE)
    for keyword in (
        r"Owner",
        r"President",
        r"CEO",
        r"Founder",
        r"Founded by",
        r"General Manager",
    )
]

MAX_NAME_LENGTH = 30


def _is_acceptable(name: str) -> bool:
    if len(name) >= MAX_NAME_LENGTH:
        return False
    if any(c.isdigit() for c in name):
        return False
    return "contact" not in name.lower()


def extract_owner_name(text: Optional[str]) -> Optional[str]:
    """Return the first two-word name that follows an owner-style title.

    Examples: "Owner: Jane Smith", "Founded by John Doe".
    """
    if not text:
        return None

    flat = _WHITESPACE.sub(" ", _TAG.sub(" ", text))
    for pattern in OWNER_PATTERNS:
        match = pattern.search(flat)
        if match:
            name = match.group(1).strip()
            if _is_acceptable(name):
                return name
    return None
