"""Crawl4ai-backed browsing capability: fetch the rendered DOM of one page."""

import asyncio
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Optional, Protocol

# Fix Windows charmap encoding issues before importing crawl4ai
if sys.platform == "win32":
    os.environ.setdefault("PYTHONUTF8", "1")

from crawl4ai import AsyncWebCrawler, BrowserConfig, CacheMode, CrawlerRunConfig

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
)

# Extra wall-clock allowance on top of the navigation timeout, for
# browser startup and DOM serialization.
_FETCH_GRACE_S = 5.0


@dataclass
class PageFetch:
    """Rendered page as seen by the browser.

    ``links`` holds the anchors of the live DOM as ``{"href", "text"}``
    dicts, so anchors built by client-side script are included. crawl4ai
    groups anchors by site, so same-site anchors come first and document
    order holds only within each group.
    """

    url: str
    success: bool
    html: str = ""
    links: list[dict] = field(default_factory=list)
    status_code: Optional[int] = None
    error: Optional[str] = None


class Browser(Protocol):
    """What the page crawl needs from a browser."""

    async def fetch(self, url: str, timeout_ms: int) -> PageFetch:
        """Navigate to ``url`` and return its rendered DOM. Must not raise."""
        ...


class CrawlManager:
    """Headless browser wrapper around crawl4ai.

    One instance owns one browser. It is meant to be used by one extraction
    run at a time; crawl4ai opens and closes a page for every ``arun``.
    """

    def __init__(self, headless: bool = True, user_agent: str = USER_AGENT) -> None:
        self.headless = headless
        self.user_agent = user_agent
        self._crawler: Optional[AsyncWebCrawler] = None

    async def _ensure_crawler(self) -> AsyncWebCrawler:
        """Lazy-init the crawl4ai crawler."""
        if self._crawler is None:
            browser_config = BrowserConfig(
                headless=self.headless,
                user_agent=self.user_agent,
                verbose=False,
            )
            self._crawler = AsyncWebCrawler(config=browser_config)
            await self._crawler.start()
        return self._crawler

    async def fetch(self, url: str, timeout_ms: int) -> PageFetch:
        """Fetch one page. Failures and timeouts come back as unsuccessful fetches."""
        config = CrawlerRunConfig(
            cache_mode=CacheMode.BYPASS,
            wait_until="domcontentloaded",
            page_timeout=timeout_ms,
            verbose=False,
        )
        try:
            crawler = await self._ensure_crawler()
            result = await asyncio.wait_for(
                crawler.arun(url=url, config=config),
                timeout=timeout_ms / 1000 + _FETCH_GRACE_S,
            )
        except asyncio.TimeoutError:
            logger.warning(f"Fetch timed out for {url} after {timeout_ms}ms")
            return PageFetch(url=url, success=False, error="timeout")
        except Exception as e:
            logger.warning(f"Fetch failed for {url}: {e}")
            return PageFetch(url=url, success=False, error=str(e))

        status = getattr(result, "status_code", None)
        if not result.success or (status is not None and status >= 400):
            error = result.error_message or f"HTTP {status}"
            logger.warning(f"Fetch unsuccessful for {url}: {error}")
            return PageFetch(url=url, success=False, status_code=status, error=error)

        links = result.links or {}
        anchors = list(links.get("internal", [])) + list(links.get("external", []))
        return PageFetch(
            url=url,
            success=True,
            html=result.html or "",
            links=[{"href": a.get("href", ""), "text": a.get("text", "")} for a in anchors],
            status_code=status,
        )

    async def restart(self) -> None:
        """Close the browser; the next fetch starts a fresh one."""
        await self.close()

    async def close(self) -> None:
        """Clean up crawler/browser resources."""
        if self._crawler:
            try:
                await self._crawler.close()
            except Exception as e:
                logger.debug(f"Error closing crawler: {e}")
            self._crawler = None
