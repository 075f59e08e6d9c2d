"""Main orchestrator: crawl, optional AI pass, mailto and regex fallbacks."""

import asyncio
import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .config import ExtractorSettings
from .crawler import Browser, CrawlManager
from .emails import filter_emails, extract_emails, select_best_email
from .extraction import AIExtractionAdapter, LLMClient
from .models import AIExtraction, ContactCandidate, ExtractionResult
from .owners import extract_owner_name
from .pages import PageCrawler
from .resources import ResourceMonitor
from .validators import is_plausible_email

logger = logging.getLogger(__name__)

DEFAULT_DELAY_S = 1.0


class Business(BaseModel):
    """A business whose website should be searched for contact info."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    business_name: str = Field(alias="businessName")
    website: Optional[str] = None
    state: Optional[str] = None


class ContactExtractor:
    """Best-effort contact extraction for one business at a time.

    Flow: crawl the site, ask the language model (when one is injected and
    the pages carry enough text), then fill whatever the model left empty
    from mailto links, then from regex matches over the page text.
    ``extract`` always returns an ExtractionResult and never raises.
    """

    def __init__(
        self,
        browser: Browser,
        llm: Optional[LLMClient] = None,
        settings: Optional[ExtractorSettings] = None,
    ) -> None:
        self.settings = settings or ExtractorSettings()
        self.page_crawler = PageCrawler(browser, self.settings)
        self.ai_adapter = AIExtractionAdapter(llm, self.settings) if llm is not None else None

    @property
    def ai_enabled(self) -> bool:
        return self.ai_adapter is not None and self.settings.use_ai

    async def extract(self, url: str, business_name: str) -> ExtractionResult:
        """Find the best contact email and owner name for a business website."""
        logger.info(f"Visiting {url} to find contact info for {business_name!r}")
        try:
            return await self._extract(url, business_name)
        except Exception as e:
            logger.error(f"Contact extraction failed for {url}: {e}")
            return ExtractionResult.failed(url, str(e))

    async def _extract(self, url: str, business_name: str) -> ExtractionResult:
        logger.debug(f"[{url}] CRAWLING")
        crawl = await self.page_crawler.crawl(business_name, url)
        if crawl.origin is None:
            return ExtractionResult.failed(url, crawl.errors[0] if crawl.errors else "invalid url")

        content = crawl.combined_text()

        ai_result: Optional[AIExtraction] = None
        if self.ai_enabled and len(content) > self.settings.min_ai_chars:
            logger.debug(f"[{url}] AI_ATTEMPT")
            ai_result = await self.ai_adapter.extract(content, business_name, url)

        email: Optional[str] = None
        owner_name: Optional[str] = None
        if ai_result is not None:
            if is_plausible_email(ai_result.best_email):
                email = ai_result.best_email
                logger.info(f"  AI found email: {email} ({ai_result.confidence})")
            elif ai_result.best_email:
                logger.debug(f"Discarded implausible AI email: {ai_result.best_email!r}")
            owner_name = ai_result.owner_name
            if owner_name:
                title = f" ({ai_result.owner_title})" if ai_result.owner_title else ""
                logger.info(f"  AI found owner: {owner_name}{title}")
        email_from_ai = email is not None

        logger.debug(f"[{url}] MAILTO_FALLBACK")
        mailto = ContactCandidate(
            emails=filter_emails(crawl.mailto_emails, self.settings.denylist),
            source="mailto",
        )
        candidate = ai_result.to_candidate().merge(mailto) if ai_result is not None else mailto
        if email is None and mailto.emails:
            email = select_best_email(mailto.emails, business_name)
            logger.info(f"  Found mailto email: {email}")

        regex = self._regex_candidate(url, content, need_emails=not mailto.emails)
        candidate = candidate.merge(regex)
        if email is None and regex.emails:
            email = select_best_email(regex.emails, business_name)
            logger.info(f"  Found regex email: {email}")
        if owner_name is None and regex.owner_name:
            owner_name = regex.owner_name
            logger.info(f"  Found owner (regex): {owner_name}")

        logger.debug(f"[{url}] DONE")
        return ExtractionResult(
            url=url,
            email=email,
            owner_name=owner_name,
            owner_title=ai_result.owner_title if ai_result else None,
            phone=ai_result.phone if ai_result else None,
            confidence=_confidence(ai_result, email, email_from_ai),
            method="ai" if email_from_ai else "regex",
            emails=candidate.emails,
            notes=(ai_result.notes or None) if ai_result else None,
            pages_crawled=crawl.pages_crawled,
            errors=crawl.errors,
        )

    def _regex_candidate(self, url: str, content: str, need_emails: bool) -> ContactCandidate:
        if need_emails:
            logger.debug(f"[{url}] REGEX_FALLBACK")
        return ContactCandidate(
            emails=extract_emails(content, self.settings.denylist) if need_emails else [],
            owner_name=extract_owner_name(content),
            source="regex",
        )


def _confidence(ai_result: Optional[AIExtraction], email: Optional[str], email_from_ai: bool) -> str:
    if email_from_ai:
        return ai_result.confidence
    if email:
        return "regex"
    if ai_result is not None:
        return ai_result.confidence
    return "none"


async def extract_multiple(
    businesses: list[Business],
    llm: Optional[LLMClient] = None,
    settings: Optional[ExtractorSettings] = None,
    delay_s: float = DEFAULT_DELAY_S,
    browser: Optional[Browser] = None,
    resource_monitor: Optional[ResourceMonitor] = None,
) -> list[ExtractionResult]:
    """Extract contact info for many businesses, one after another.

    Unless a browser is passed in, a CrawlManager is created for the batch
    and closed at the end. Between businesses the batch sleeps ``delay_s``
    and restarts the browser when system memory runs low.
    """
    owns_browser = browser is None
    crawl_manager = CrawlManager() if owns_browser else None
    active_browser: Browser = crawl_manager if crawl_manager is not None else browser
    monitor = resource_monitor or ResourceMonitor()
    extractor = ContactExtractor(active_browser, llm=llm, settings=settings)

    logger.info(f"Starting contact extraction for {len(businesses)} businesses")
    logger.info(f"Resource snapshot: {monitor.get_snapshot()}")

    results: list[ExtractionResult] = []
    try:
        for i, business in enumerate(businesses, start=1):
            logger.info(f"[{i}/{len(businesses)}] {business.business_name}")
            if not business.website:
                logger.info("  No website, skipping")
                results.append(ExtractionResult.failed("", "no website"))
                continue

            results.append(await extractor.extract(business.website, business.business_name))

            if i < len(businesses):
                if crawl_manager is not None and monitor.under_pressure():
                    logger.info(f"Memory pressure ({monitor.get_snapshot()}), restarting browser")
                    await crawl_manager.restart()
                if delay_s:
                    await asyncio.sleep(delay_s)
    finally:
        if crawl_manager is not None:
            await crawl_manager.close()

    found = sum(1 for r in results if r.email)
    logger.info(f"Done: {found}/{len(results)} businesses with an email")
    return results
