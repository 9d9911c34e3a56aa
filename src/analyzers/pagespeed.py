"""Performance scores from Google PageSpeed Insights."""

import asyncio
import logging
import random

import httpx

from analyzers.cache import MemoryTTLCache, TTLCache
from analyzers.models import PerformanceScores
from config import settings

logger = logging.getLogger(__name__)

PAGESPEED_ENDPOINT = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"


class PageSpeedUnavailable(Exception):
    """The PageSpeed API did not produce a usable score."""


class PerformanceProvider:
    """
    Returns mobile/desktop performance scores for a URL.

    Policy:
    - A cached entry younger than the cache TTL is returned as-is.
    - Without an API key, scores are a random placeholder
      (mobile in [60, 100), desktop in [70, 100)). They are not measurements.
    - With a key, only the mobile strategy is measured; desktop is
      estimated as mobile + [5, 15), capped at 100. Setting
      `measure_desktop` requests both strategies instead.
    - Any API failure falls back to the placeholder.

    Every outcome is cached, and get_scores never raises.
    """

    def __init__(
        self,
        cache: TTLCache[PerformanceScores] | None = None,
        api_key: str | None = settings.pagespeed_api_key,
        timeout: float = settings.pagespeed_timeout,
        measure_desktop: bool = settings.pagespeed_measure_desktop,
        rng: random.Random | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.cache = cache if cache is not None else MemoryTTLCache()
        self.api_key = api_key
        self.timeout = timeout
        self.measure_desktop = measure_desktop
        self.rng = rng or random.Random()
        self.transport = transport

    async def get_scores(self, url: str) -> PerformanceScores:
        """
        Get performance scores for a URL.

        Args:
            url: Page URL to score

        Returns:
            PerformanceScores (never raises)
        """
        cached = await self.cache.get(url)
        if cached is not None:
            logger.info(f"Using cached PageSpeed results for {url}")
            return cached

        if not self.api_key:
            logger.warning("PageSpeed API key not configured, using mock data")
            scores = self._mock_scores()
        else:
            try:
                scores = await self._measure(url)
            except (PageSpeedUnavailable, httpx.HTTPError, ValueError) as e:
                logger.warning(f"PageSpeed failed for {url}, using mock data: {e}")
                scores = self._mock_scores()

        await self.cache.set(url, scores)
        return scores

    async def _measure(self, url: str) -> PerformanceScores:
        async with httpx.AsyncClient(
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            if not self.measure_desktop:
                mobile = await self._run_strategy(client, url, "mobile")
                desktop = min(100, mobile + self.rng.randrange(5, 15))
                logger.info(f"PageSpeed {url}: mobile={mobile}, desktop~{desktop}")
                return PerformanceScores(mobile=mobile, desktop=desktop)

            mobile, desktop = await asyncio.gather(
                self._run_strategy(client, url, "mobile"),
                self._run_strategy(client, url, "desktop"),
                return_exceptions=True,
            )

        scores = PerformanceScores(
            mobile=None if isinstance(mobile, Exception) else mobile,
            desktop=None if isinstance(desktop, Exception) else desktop,
        )
        if scores.mobile is None and scores.desktop is None:
            raise PageSpeedUnavailable(f"both strategies failed: {mobile}; {desktop}")
        logger.info(f"PageSpeed {url}: mobile={scores.mobile}, desktop={scores.desktop}")
        return scores

    async def _run_strategy(
        self,
        client: httpx.AsyncClient,
        url: str,
        strategy: str,
    ) -> int:
        """Run one PageSpeed strategy and return its 0-100 score."""
        response = await client.get(
            PAGESPEED_ENDPOINT,
            params={
                "url": url,
                "key": self.api_key,
                "strategy": strategy,
                "category": "performance",
            },
        )
        if response.status_code != 200:
            raise PageSpeedUnavailable(f"{strategy}: HTTP {response.status_code}")
        return _extract_score(response.json(), strategy)

    def _mock_scores(self) -> PerformanceScores:
        return PerformanceScores(
            mobile=self.rng.randrange(60, 100),
            desktop=self.rng.randrange(70, 100),
        )


def _extract_score(payload: dict, strategy: str) -> int:
    """Read lighthouseResult.categories.performance.score as 0-100."""
    try:
        ratio = payload["lighthouseResult"]["categories"]["performance"]["score"]
    except (KeyError, TypeError):
        raise PageSpeedUnavailable(f"{strategy}: no performance score in response")
    if ratio is None:
        raise PageSpeedUnavailable(f"{strategy}: performance score is null")
    try:
        percent = round(float(ratio) * 100)
    except (TypeError, ValueError, OverflowError):
        raise PageSpeedUnavailable(f"{strategy}: unreadable performance score {ratio!r}")
    return max(0, min(100, percent))
