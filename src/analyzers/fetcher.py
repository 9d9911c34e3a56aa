"""Page and well-known resource fetching."""

import logging
from urllib.parse import urlsplit

import httpx

from config import settings

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """The audited page itself could not be retrieved."""

    def __init__(self, url: str, cause: str):
        self.url = url
        self.cause = cause
        super().__init__(f"Could not fetch {url}: {cause}")


class PageFetcher:
    """
    Retrieves the page under audit and probes its origin.

    The page fetch is a single attempt: any transport error or non-2xx
    status raises FetchError. The robots.txt and sitemap.xml probes never
    raise; every failure reads as "not present".
    """

    def __init__(
        self,
        timeout: float = settings.page_fetch_timeout,
        probe_timeout: float = settings.probe_timeout,
        user_agent: str = settings.user_agent,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.probe_timeout = probe_timeout
        self.user_agent = user_agent
        self.transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": self.user_agent},
            transport=self.transport,
        )

    async def fetch(self, url: str) -> str:
        """
        Fetch the page HTML.

        Args:
            url: Absolute http(s) URL of the page

        Returns:
            The response body as text

        Raises:
            FetchError: on timeout, network failure or non-2xx status
        """
        try:
            async with self._client(self.timeout) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response.text
        except httpx.TimeoutException:
            logger.error(f"Timeout fetching {url}")
            raise FetchError(url, f"timed out after {self.timeout}s")
        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP {e.response.status_code} fetching {url}")
            raise FetchError(url, f"HTTP {e.response.status_code}")
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.error(f"Failed fetching {url}: {e}")
            raise FetchError(url, str(e) or e.__class__.__name__)

    async def check_robots(self, url: str) -> bool:
        """Return True if the origin serves /robots.txt with HTTP 200."""
        return await self._probe(url, "/robots.txt")

    async def check_sitemap(self, url: str) -> bool:
        """Return True if the origin serves /sitemap.xml with HTTP 200."""
        return await self._probe(url, "/sitemap.xml")

    async def _probe(self, url: str, path: str) -> bool:
        try:
            parts = urlsplit(url)
            probe_url = f"{parts.scheme}://{parts.netloc}{path}"
            async with self._client(self.probe_timeout) as client:
                response = await client.get(probe_url)
            return response.status_code == 200
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            logger.warning(f"Probe {path} failed for {url}: {e}")
            return False
