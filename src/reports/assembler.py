"""Audit orchestration: fetch, extract, measure, score, enrich."""

import asyncio
import logging

from analyzers.cache import TTLCache, build_cache
from analyzers.fetcher import FetchError, PageFetcher
from analyzers.models import PerformanceScores, SEOReport, TechnicalFlags
from analyzers.pagespeed import PerformanceProvider
from analyzers.signals import SignalExtractor
from config import settings
from recommendations.ai import (
    AI_FALLBACK_MESSAGE,
    AIRecommender,
    build_recommender,
    parse_recommendations,
)
from recommendations.engine import ScoringEngine
from reports.progress import AuditStage, NullProgressSink, ProgressSink

logger = logging.getLogger(__name__)


class AuditTimeoutError(Exception):
    """The audit as a whole exceeded its deadline."""

    def __init__(self, url: str, seconds: float):
        self.url = url
        self.seconds = seconds
        super().__init__(f"Audit of {url} exceeded {seconds}s")


class ReportAssembler:
    """
    Builds an SEOReport for one URL.

    Order of work:
    1. Fetch the page (the only fatal step)
    2. Extract signals and fetch performance scores concurrently
    3. Probe robots.txt and sitemap.xml concurrently
    4. Score
    5. Optionally ask the AI recommender for extra suggestions

    Progress is reported to an optional sink. The whole audit is bounded
    by `deadline` seconds.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: SignalExtractor,
        performance: PerformanceProvider,
        scorer: ScoringEngine,
        recommender: AIRecommender | None = None,
        deadline: float = settings.audit_deadline,
    ):
        self.fetcher = fetcher
        self.extractor = extractor
        self.performance = performance
        self.scorer = scorer
        self.recommender = recommender
        self.deadline = deadline

    async def build_report(
        self,
        url: str,
        progress: ProgressSink | None = None,
    ) -> SEOReport:
        """
        Run a full audit.

        Args:
            url: Absolute http(s) URL to audit
            progress: Optional sink for stage updates

        Returns:
            The finished SEOReport

        Raises:
            FetchError: if the page itself cannot be fetched
            AuditTimeoutError: if the audit exceeds the deadline
        """
        sink = progress or NullProgressSink()
        logger.info(f"Starting analysis for {url}")
        try:
            return await asyncio.wait_for(self._build(url, sink), timeout=self.deadline)
        except asyncio.TimeoutError:
            logger.error(f"Audit of {url} exceeded {self.deadline}s")
            error = AuditTimeoutError(url, self.deadline)
            sink.emit(AuditStage.ERROR, str(error))
            raise error

    async def _build(self, url: str, sink: ProgressSink) -> SEOReport:
        sink.emit(AuditStage.FETCHING, "Fetching website content...")
        try:
            html = await self.fetcher.fetch(url)
        except FetchError as e:
            sink.emit(AuditStage.ERROR, str(e))
            raise

        sink.emit(AuditStage.ANALYZING, "Page fetched, analyzing content...")
        sink.emit(AuditStage.PAGESPEED, "Running PageSpeed analysis...")
        signals, performance = await asyncio.gather(
            asyncio.to_thread(self.extractor.extract, html, url),
            self.performance.get_scores(url),
        )

        sink.emit(
            AuditStage.ANALYZING,
            "Basic SEO analysis complete, checking technical elements...",
        )
        has_robots_txt, has_sitemap = await asyncio.gather(
            self.fetcher.check_robots(url),
            self.fetcher.check_sitemap(url),
        )
        flags = TechnicalFlags(has_robots_txt=has_robots_txt, has_sitemap=has_sitemap)

        sink.emit(AuditStage.ANALYZING, "Technical analysis complete, calculating scores...")
        breakdown = self.scorer.score(signals, performance, flags)
        report = SEOReport.assemble(url, signals, flags, performance, breakdown)

        if self.recommender is not None:
            sink.emit(AuditStage.AI, "Generating AI recommendations...")
            report = report.with_ai_recommendations(await self._ai_recommendations(report))

        sink.emit(AuditStage.COMPLETE, "Analysis complete!")
        logger.info(
            f"Analysis complete for {url}: score={report.seo_score}, "
            f"recommendations={len(report.recommendations)}"
        )
        return report

    async def _ai_recommendations(self, report: SEOReport) -> list[str]:
        try:
            text = await self.recommender.recommend(
                report.url,
                report.model_dump_json(by_alias=True, exclude={"ai_recommendations"}),
            )
            return parse_recommendations(text)
        except Exception as e:
            # Any recommender failure degrades to the fallback message
            logger.warning(f"AI recommendations failed for {report.url}: {e}")
            return [AI_FALLBACK_MESSAGE]


def build_assembler(
    cache: TTLCache[PerformanceScores] | None = None,
) -> ReportAssembler:
    """Wire a ReportAssembler from settings."""
    if cache is None:
        cache = build_cache(PerformanceScores, prefix="sitelens:pagespeed:")
    return ReportAssembler(
        fetcher=PageFetcher(),
        extractor=SignalExtractor(),
        performance=PerformanceProvider(cache=cache),
        scorer=ScoringEngine(),
        recommender=build_recommender(),
    )
