"""Root URL normalization and contact-page candidate discovery."""

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

# Path guesses tried on the origin when link discovery is not used.
CONTACT_PATHS = [
    "/contact",
    "/contact-us",
    "/contactus",
    "/about",
    "/about-us",
    "/aboutus",
]

# Anchor text or href containing any of these marks a page worth visiting.
CONTACT_KEYWORDS = ["contact", "about", "team", "staff", "leadership"]

SOCIAL_DOMAINS = [
    "facebook.com", "fb.com", "twitter.com", "x.com", "instagram.com",
    "linkedin.com", "youtube.com", "tiktok.com", "pinterest.com", "yelp.com",
]

SKIP_SCHEMES = ("mailto:", "tel:", "javascript:", "sms:", "#")

_HOST = re.compile(r"^[a-z0-9.-]+(:\d+)?$", re.IGNORECASE)


def normalize_root_url(url: Optional[str]) -> Optional[str]:
    """Reduce a website URL to its origin (scheme://host[:port]).

    A missing scheme defaults to https. Returns None when no plausible host
    can be parsed.
    """
    if not url or not isinstance(url, str):
        return None

    url = url.strip()
    if not url.lower().startswith(("http://", "https://")):
        url = "https://" + url

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError:
        return None

    if not hostname or not _HOST.match(parsed.netloc.split("@")[-1]):
        return None
    if "." not in hostname and hostname != "localhost":
        return None
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


def section_label(url: str) -> str:
    """Label a secondary page by its upper-cased path, e.g. "/CONTACT-US"."""
    path = urlparse(url).path.rstrip("/") or "/"
    return path.upper()


def is_social_link(url: str) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == domain or host.endswith("." + domain) for domain in SOCIAL_DOMAINS)


def is_contact_link(link: dict) -> bool:
    """Return True if the anchor text or href suggests a contact/about/team page."""
    text = (link.get("text") or "").lower()
    href = (link.get("href") or "").lower()
    return any(kw in text or kw in href for kw in CONTACT_KEYWORDS)


def filter_contact_links(
    links: list[dict],
    base_url: str,
    limit: Optional[int] = None,
) -> list[str]:
    """Select contact/about/team candidates from a page's anchors.

    Args:
        links: anchor dicts with "href" and "text" keys, in document order.
        base_url: URL of the page the anchors came from, for resolving
            relative hrefs.
        limit: maximum number of URLs to return (None = no cap).

    Returns:
        Absolute http(s) URLs in document order. Social networks and
        non-navigational schemes are dropped. Duplicates are the caller's
        concern.
    """
    candidates: list[str] = []
    for link in links:
        if limit is not None and len(candidates) >= limit:
            break

        href = (link.get("href") or "").strip()
        if not href or href.lower().startswith(SKIP_SCHEMES):
            continue
        if not is_contact_link(link):
            continue

        absolute = urljoin(base_url, href)
        if urlparse(absolute).scheme not in ("http", "https"):
            continue
        if is_social_link(absolute):
            continue

        candidates.append(absolute)
    return candidates
