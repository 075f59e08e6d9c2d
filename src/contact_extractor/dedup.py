"""Page identity for one site crawl, so no page is fetched twice."""

from urllib.parse import urlparse


def page_key(url: str) -> str:
    """Reduce a URL to the part that identifies a page on a small business site.

    Scheme, a leading "www.", the query string, the fragment and trailing
    slashes are ignored: ``http://www.acme.com/contact/?ref=nav`` and
    ``https://acme.com/contact`` are the same page.
    """
    parsed = urlparse(url)
    host = parsed.netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    path = parsed.path.rstrip("/") or "/"
    return f"{host}{path.lower()}"


class VisitTracker:
    """Remembers which pages a crawl has already claimed, in claim order."""

    def __init__(self) -> None:
        self._keys: set[str] = set()
        self.visited: list[str] = []

    def claim(self, url: str) -> bool:
        """Return True and record the URL if no equivalent page was claimed yet."""
        key = page_key(url)
        if key in self._keys:
            return False
        self._keys.add(key)
        self.visited.append(url)
        return True

    def __len__(self) -> int:
        return len(self.visited)
