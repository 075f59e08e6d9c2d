"""In-process stand-ins for the browser and the language model."""

import re
from typing import Optional

from contact_extractor.crawler import PageFetch

_ANCHOR = re.compile(r"""<a\b[^>]*href=["']([^"']*)["'][^>]*>(.*?)</a>""", re.IGNORECASE | re.DOTALL)
_TAG = re.compile(r"<[^>]+>")


def anchors(html: str) -> list[dict]:
    return [
        {"href": href, "text": _TAG.sub("", text).strip()}
        for href, text in _ANCHOR.findall(html)
    ]


class FakeBrowser:
    """Serves canned HTML per URL and records every fetch in order.

    URLs missing from ``pages`` fail like a 404; URLs in ``raises`` raise.
    """

    def __init__(self, pages: Optional[dict] = None, raises: Optional[set] = None) -> None:
        self.pages = pages or {}
        self.raises = raises or set()
        self.fetched: list[str] = []
        self.timeouts: list[int] = []

    async def fetch(self, url: str, timeout_ms: int) -> PageFetch:
        self.fetched.append(url)
        self.timeouts.append(timeout_ms)
        if url in self.raises:
            raise RuntimeError(f"browser crashed on {url}")
        html = self.pages.get(url)
        if html is None:
            return PageFetch(url=url, success=False, status_code=404, error="HTTP 404")
        return PageFetch(url=url, success=True, html=html, links=anchors(html), status_code=200)


class FakeLLM:
    """Returns a canned reply (or raises) and records every prompt."""

    def __init__(self, reply: str = "", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []
        self.max_tokens: list[int] = []

    async def complete(self, prompt: str, max_tokens: int) -> str:
        self.prompts.append(prompt)
        self.max_tokens.append(max_tokens)
        if self.error is not None:
            raise self.error
        return self.reply
