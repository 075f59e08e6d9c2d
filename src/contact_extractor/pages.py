"""Page crawl: homepage plus a bounded set of contact/about/team pages."""

import asyncio
import logging
from typing import Optional

from .config import DiscoveryMode, ExtractorSettings
from .crawler import Browser, PageFetch
from .dedup import VisitTracker
from .emails import extract_emails, filter_emails
from .link_discovery import (
    CONTACT_PATHS,
    filter_contact_links,
    normalize_root_url,
    section_label,
)
from .models import CrawlResult, PageContent
from .normalize import extract_mailto_addresses, html_to_text
from .owners import extract_owner_name

logger = logging.getLogger(__name__)


class PageCrawler:
    """Gathers normalized page text and mailto addresses for one business.

    Pages are fetched one at a time. The homepage always comes first;
    secondary pages follow in discovery order, and that order is kept in
    the returned CrawlResult because email selection depends on it.
    """

    def __init__(self, browser: Browser, settings: Optional[ExtractorSettings] = None) -> None:
        self.browser = browser
        self.settings = settings or ExtractorSettings()

    async def crawl(self, business_name: str, url: str) -> CrawlResult:
        """Crawl a business website. Never raises.

        Returns a CrawlResult with ``origin=None`` when the URL cannot be
        normalized. When the per-business deadline expires, whatever was
        gathered so far is returned.
        """
        origin = normalize_root_url(url)
        result = CrawlResult(origin=origin)
        if origin is None:
            logger.warning(f"Invalid website URL for {business_name!r}: {url!r}")
            result.errors.append(f"invalid url: {url!r}")
            return result

        deadline = self.settings.business_deadline_s
        try:
            if deadline:
                await asyncio.wait_for(self._crawl_site(origin, result), timeout=deadline)
            else:
                await self._crawl_site(origin, result)
        except asyncio.TimeoutError:
            logger.warning(f"Crawl deadline of {deadline}s reached for {origin}")
            result.errors.append("deadline exceeded")

        logger.debug(
            f"Crawled {origin}: {result.pages_crawled} pages, "
            f"{result.pages_failed} failed, {len(result.mailto_emails)} mailto links"
        )
        return result

    async def _crawl_site(self, origin: str, result: CrawlResult) -> None:
        tracker = VisitTracker()
        tracker.claim(origin)

        homepage = await self._visit(
            origin, "HOMEPAGE", self.settings.homepage_timeout_ms, result
        )
        if self._satisfied(result):
            return

        if self.settings.discovery_mode == DiscoveryMode.LINKS:
            targets = self._link_targets(homepage, tracker)
            if targets:
                await self._visit_all(targets, result)
                return
            logger.debug(f"No contact links found on {origin}, trying path guesses")

        await self._try_paths(origin, tracker, result)

    def _link_targets(self, homepage: Optional[PageFetch], tracker: VisitTracker) -> list[str]:
        if homepage is None:
            return []
        targets: list[str] = []
        for link_url in filter_contact_links(homepage.links, homepage.url):
            if len(targets) >= self.settings.max_link_pages:
                break
            if tracker.claim(link_url):
                targets.append(link_url)
        return targets

    async def _visit_all(self, targets: list[str], result: CrawlResult) -> None:
        logger.debug(f"Checking {len(targets)} pages for contact/owner info")
        for link_url in targets:
            await self._visit(
                link_url, section_label(link_url), self.settings.page_timeout_ms, result
            )
            if self._satisfied(result):
                break

    async def _try_paths(self, origin: str, tracker: VisitTracker, result: CrawlResult) -> None:
        for path in CONTACT_PATHS:
            page_url = origin + path
            if not tracker.claim(page_url):
                continue
            page = await self._visit(
                page_url, section_label(page_url), self.settings.page_timeout_ms, result
            )
            # One contact page is usually enough.
            if page is not None and result.pages and result.pages[-1].text:
                break

    async def _visit(
        self,
        url: str,
        label: str,
        timeout_ms: int,
        result: CrawlResult,
    ) -> Optional[PageFetch]:
        """Fetch one page and fold it into the result. None on failure."""
        if self.settings.page_delay_s and (result.pages_crawled or result.pages_failed):
            await asyncio.sleep(self.settings.page_delay_s)

        try:
            page = await self.browser.fetch(url, timeout_ms)
        except Exception as e:
            page = PageFetch(url=url, success=False, error=str(e))

        if not page.success:
            result.pages_failed += 1
            result.errors.append(f"{url}: {page.error or 'fetch failed'}")
            return None

        result.pages.append(PageContent(section_label=label, url=url, text=html_to_text(page.html)))
        mailtos = extract_mailto_addresses(page.html)
        if mailtos:
            logger.debug(f"Found {len(mailtos)} mailto links on {url}")
        result.mailto_emails.extend(mailtos)
        result.pages_crawled += 1
        return page

    def _satisfied(self, result: CrawlResult) -> bool:
        """Early-stop check: an email and an owner name have both been seen."""
        if not self.settings.early_stop:
            return False
        text = result.combined_text()
        has_email = bool(filter_emails(result.mailto_emails, self.settings.denylist)) or bool(
            extract_emails(text, self.settings.denylist)
        )
        return has_email and extract_owner_name(text) is not None
