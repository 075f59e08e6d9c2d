import asyncio

from fakes import FakeBrowser

from contact_extractor.config import DiscoveryMode, ExtractorSettings
from contact_extractor.pages import PageCrawler

HOME = """<html><body>
<nav>
  <a href="/">Home</a>
  <a href="/about-us">About</a>
  <a href="/contact">Contact</a>
  <a href="https://facebook.com/acme">Our team on Facebook</a>
</nav>
<p>Acme Repair fixes RVs. <a href="mailto:office@acmerepair.com">Email</a></p>
</body></html>"""

ABOUT = "<html><body><h2>Owner: Jane Smith</h2></body></html>"
CONTACT = '<html><body><a href="mailto:jane@acmerepair.com?subject=Hi">Write</a></body></html>'


def crawl(browser, url="acmerepair.com", **settings):
    crawler = PageCrawler(browser, ExtractorSettings(**settings))
    return asyncio.run(crawler.crawl("Acme Repair", url))


def test_invalid_url_aborts_without_fetching():
    browser = FakeBrowser()
    result = crawl(browser, url="not a url")
    assert result.origin is None
    assert result.pages == []
    assert browser.fetched == []
    assert result.errors


def test_link_discovery_visits_homepage_then_links_in_order():
    browser = FakeBrowser({
        "https://acmerepair.com": HOME,
        "https://acmerepair.com/about-us": ABOUT,
        "https://acmerepair.com/contact": CONTACT,
    })
    result = crawl(browser)

    assert browser.fetched == [
        "https://acmerepair.com",
        "https://acmerepair.com/about-us",
        "https://acmerepair.com/contact",
    ]
    assert [p.section_label for p in result.pages] == ["HOMEPAGE", "/ABOUT-US", "/CONTACT"]
    assert result.mailto_emails == ["office@acmerepair.com", "jane@acmerepair.com"]
    assert result.pages_crawled == 3

    text = result.combined_text()
    assert text.index("=== HOMEPAGE ===") < text.index("=== /ABOUT-US ===") < text.index("=== /CONTACT ===")
    assert "Owner: Jane Smith" in text


def test_homepage_uses_longer_timeout():
    browser = FakeBrowser({"https://acmerepair.com": HOME})
    crawl(browser, homepage_timeout_ms=15000, page_timeout_ms=8000)
    assert browser.timeouts[0] == 15000
    assert set(browser.timeouts[1:]) == {8000}


def test_failed_page_does_not_abort_the_crawl():
    browser = FakeBrowser(
        {
            "https://acmerepair.com": HOME,
            "https://acmerepair.com/contact": CONTACT,
        },
        raises={"https://acmerepair.com/about-us"},
    )
    result = crawl(browser)
    assert result.pages_crawled == 2
    assert result.pages_failed == 1
    assert "jane@acmerepair.com" in result.mailto_emails
    assert any("about-us" in e for e in result.errors)


def test_link_discovery_is_capped():
    links = "".join(f'<a href="/contact-{i}">Contact {i}</a>' for i in range(10))
    browser = FakeBrowser({"https://acmerepair.com": f"<body>{links}</body>"})
    crawl(browser, max_link_pages=3)
    assert len(browser.fetched) == 4


def test_failed_homepage_falls_back_to_path_guesses():
    browser = FakeBrowser({"https://acmerepair.com/about": ABOUT})
    result = crawl(browser)
    assert browser.fetched == [
        "https://acmerepair.com",
        "https://acmerepair.com/contact",
        "https://acmerepair.com/contact-us",
        "https://acmerepair.com/contactus",
        "https://acmerepair.com/about",
    ]
    assert [p.section_label for p in result.pages] == ["/ABOUT"]
    assert result.pages_failed == 4


def test_path_mode_stops_at_first_page_with_content():
    browser = FakeBrowser({
        "https://acmerepair.com": HOME,
        "https://acmerepair.com/contact": CONTACT,
        "https://acmerepair.com/about": ABOUT,
    })
    result = crawl(browser, discovery_mode=DiscoveryMode.PATHS)
    assert browser.fetched == ["https://acmerepair.com", "https://acmerepair.com/contact"]
    assert [p.section_label for p in result.pages] == ["HOMEPAGE", "/CONTACT"]


def test_duplicate_links_fetched_once():
    home = '<a href="/contact">Contact</a><a href="/contact/">Contact us</a><a href="/#team">Team</a>'
    browser = FakeBrowser({"https://acmerepair.com": home})
    crawl(browser)
    assert browser.fetched == ["https://acmerepair.com", "https://acmerepair.com/contact"]


def test_early_stop_once_email_and_owner_known():
    home = '<p>Owner: Jane Smith</p><a href="mailto:jane@acmerepair.com">x</a><a href="/contact">Contact</a>'
    browser = FakeBrowser({"https://acmerepair.com": home})
    crawl(browser, early_stop=True)
    assert browser.fetched == ["https://acmerepair.com"]


def test_deadline_returns_partial_result():
    class SlowSecondPage(FakeBrowser):
        async def fetch(self, url, timeout_ms):
            if url.endswith("/about-us"):
                await asyncio.sleep(5)
            return await super().fetch(url, timeout_ms)

    browser = SlowSecondPage({"https://acmerepair.com": HOME})
    result = crawl(browser, business_deadline_s=0.05)
    assert [p.section_label for p in result.pages] == ["HOMEPAGE"]
    assert "deadline exceeded" in result.errors


def test_early_stop_ignores_junk_mailto():
    home = '<p>Owner: Jane Smith</p><a href="mailto:noreply@acmerepair.com">x</a><a href="/contact">Contact</a>'
    browser = FakeBrowser({
        "https://acmerepair.com": home,
        "https://acmerepair.com/contact": CONTACT,
    })
    result = crawl(browser, early_stop=True)
    assert browser.fetched == ["https://acmerepair.com", "https://acmerepair.com/contact"]
    assert "jane@acmerepair.com" in result.mailto_emails
