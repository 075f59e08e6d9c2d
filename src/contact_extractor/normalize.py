"""HTML-to-text normalization that keeps mailto targets visible."""

import re
from typing import Optional
from urllib.parse import unquote

from .emails import EMAIL_PATTERN

_SCRIPT_BLOCK = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_BLOCK = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_MAILTO_HREF = re.compile(r"""href\s*=\s*["']mailto:([^"']+)["']""", re.IGNORECASE)
# The whole opening tag is replaced so the marker is not inside a tag when
# tags are stripped.
_MAILTO_TAG = re.compile(
    r"""<[a-z][^>]*?\bhref\s*=\s*["']mailto:([^"']+)["'][^>]*>""", re.IGNORECASE
)
_BLOCK_TAG = re.compile(r"</?(?:p|div|br|h[1-6]|li|tr)\b[^>]*>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")
_NUMERIC_ENTITY = re.compile(r"&#(\d+);")
_WHITESPACE = re.compile(r"\s+")
_BLANK_LINES = re.compile(r"\n\s*\n")

_NAMED_ENTITIES = (
    ("&nbsp;", " "),
    ("&amp;", "&"),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
)


def _decode_numeric_entity(match: re.Match) -> str:
    try:
        return chr(int(match.group(1)))
    except (ValueError, OverflowError):
        return ""


def html_to_text(html: Optional[str]) -> str:
    """Strip markup from a page body, rendering mailto hrefs as ``EMAIL: addr``.

    Script and style contents never reach the output. Block-level tags become
    line breaks before the final whitespace collapse.
    """
    if not html:
        return ""

    text = _SCRIPT_BLOCK.sub("", html)
    text = _STYLE_BLOCK.sub("", text)
    text = _MAILTO_TAG.sub(r" EMAIL: \1 ", text)
    text = _BLOCK_TAG.sub("\n", text)
    text = _ANY_TAG.sub(" ", text)

    for entity, replacement in _NAMED_ENTITIES:
        text = text.replace(entity, replacement)
    text = _NUMERIC_ENTITY.sub(_decode_numeric_entity, text)

    text = _WHITESPACE.sub(" ", text)
    text = _BLANK_LINES.sub("\n", text)
    return text.strip()


def extract_mailto_addresses(html: Optional[str]) -> list[str]:
    """Return mailto targets from rendered HTML in document order.

    Query strings (``?subject=...``) are dropped and percent-escapes decoded.
    Targets that are not a single well-formed address are ignored.
    """
    if not html:
        return []

    addresses: list[str] = []
    for raw in _MAILTO_HREF.findall(html):
        address = unquote(raw.split("?", 1)[0]).strip()
        if EMAIL_PATTERN.fullmatch(address):
            addresses.append(address)
    return addresses
