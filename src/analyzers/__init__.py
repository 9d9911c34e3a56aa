"""SiteLens analyzers package."""

from analyzers.cache import MemoryTTLCache, RedisTTLCache, TTLCache
from analyzers.fetcher import FetchError, PageFetcher
from analyzers.headings import analyze_headings
from analyzers.meta_check import check_meta
from analyzers.models import PageSignals, PerformanceScores, SEOReport, TechnicalFlags
from analyzers.pagespeed import PerformanceProvider
from analyzers.signals import SignalExtractor
from analyzers.social_tags import check_social_tags

__all__ = [
    "TTLCache",
    "MemoryTTLCache",
    "RedisTTLCache",
    "FetchError",
    "PageFetcher",
    "analyze_headings",
    "check_meta",
    "PageSignals",
    "PerformanceScores",
    "SEOReport",
    "TechnicalFlags",
    "PerformanceProvider",
    "SignalExtractor",
    "check_social_tags",
]
