"""Structured signal extraction from page markup."""

import logging
from urllib.parse import urljoin, urlsplit

from bs4 import BeautifulSoup

from analyzers.models import (
    HeadingCounts,
    ImageStats,
    LinkStats,
    OpenGraphTags,
    PageSignals,
    PageTechnical,
    TwitterCardTags,
)
from config import settings

logger = logging.getLogger(__name__)

# Number of sample URLs kept for missing-alt images and broken links
SAMPLE_LIMIT = 5

HEADING_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")


class SignalExtractor:
    """
    Parses HTML into PageSignals.

    Extracts:
    - Title and meta description
    - Heading counts (h1-h6)
    - Image alt-text coverage (first `image_cap` images)
    - Internal / external / malformed links (first `link_cap` anchors)
    - OpenGraph, Twitter Card, viewport and charset presence

    Output depends only on the HTML and base URL.
    """

    def __init__(
        self,
        image_cap: int = settings.image_sample_cap,
        link_cap: int = settings.link_sample_cap,
    ):
        self.image_cap = image_cap
        self.link_cap = link_cap

    def extract(self, html: str, base_url: str) -> PageSignals:
        """
        Extract signals from a page.

        Args:
            html: Raw page HTML
            base_url: URL the HTML was fetched from, used to resolve links

        Returns:
            PageSignals for the page
        """
        soup = BeautifulSoup(html, "lxml")

        signals = PageSignals(
            title=self._title(soup),
            description=self._description(soup),
            headings=self._headings(soup),
            images=self._images(soup),
            links=self._links(soup, base_url),
            open_graph=OpenGraphTags(
                has_title=_has(soup, 'meta[property="og:title"]'),
                has_description=_has(soup, 'meta[property="og:description"]'),
                has_image=_has(soup, 'meta[property="og:image"]'),
                has_url=_has(soup, 'meta[property="og:url"]'),
            ),
            twitter_card=TwitterCardTags(
                has_card_type=_has(soup, 'meta[name="twitter:card"]'),
                has_title=_has(soup, 'meta[name="twitter:title"]'),
                has_description=_has(soup, 'meta[name="twitter:description"]'),
                has_image=_has(soup, 'meta[name="twitter:image"]'),
            ),
            technical=PageTechnical(
                viewport=_has(soup, 'meta[name="viewport"]'),
                charset=_has(soup, "meta[charset]")
                or _has(soup, 'meta[http-equiv="Content-Type" i]'),
            ),
        )

        logger.debug(
            f"Signals for {base_url}: title={len(signals.title)} chars, "
            f"h1={signals.headings.h1}, images={signals.images.total}, "
            f"links={signals.links.internal}+{signals.links.external}"
        )
        return signals

    def _title(self, soup: BeautifulSoup) -> str:
        title_tag = soup.find("title")
        return title_tag.get_text().strip() if title_tag else ""

    def _description(self, soup: BeautifulSoup) -> str:
        meta = soup.select_one('meta[name="description"]')
        if meta is None:
            return ""
        return meta.get("content") or ""

    def _headings(self, soup: BeautifulSoup) -> HeadingCounts:
        return HeadingCounts(
            **{level: len(soup.find_all(level)) for level in HEADING_LEVELS}
        )

    def _images(self, soup: BeautifulSoup) -> ImageStats:
        images = soup.find_all("img", limit=self.image_cap)
        with_alt = 0
        missing = []

        for img in images:
            alt = img.get("alt")
            if alt is not None and alt.strip():
                with_alt += 1
            else:
                missing.append(img.get("src") or "Unknown source")

        return ImageStats(
            total=len(images),
            with_alt=with_alt,
            without_alt=len(missing),
            missing_alt_samples=missing[:SAMPLE_LIMIT],
        )

    def _links(self, soup: BeautifulSoup, base_url: str) -> LinkStats:
        anchors = soup.select("a[href]", limit=self.link_cap)
        base_host = urlsplit(base_url).hostname
        internal = 0
        external = 0
        broken = []

        for anchor in anchors:
            href = anchor.get("href")
            host = _resolve_host(href, base_url)
            if host is _UNRESOLVABLE:
                broken.append(href)
            elif host == base_host:
                internal += 1
            else:
                external += 1

        return LinkStats(
            internal=internal,
            external=external,
            broken_samples=broken[:SAMPLE_LIMIT],
        )


_UNRESOLVABLE = object()


def _resolve_host(href: str, base_url: str):
    """Hostname of href resolved against base_url, or _UNRESOLVABLE."""
    try:
        parts = urlsplit(urljoin(base_url, href.strip()))
        # Accessing port validates it
        parts.port
    except ValueError:
        return _UNRESOLVABLE
    if parts.scheme in ("http", "https") and not parts.hostname:
        return _UNRESOLVABLE
    return parts.hostname


def _has(soup: BeautifulSoup, selector: str) -> bool:
    return soup.select_one(selector) is not None
