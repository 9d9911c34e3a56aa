"""Weighted SEO scoring and recommendation ordering."""

import logging
import math

from analyzers.models import (
    PageSignals,
    PerformanceScores,
    ScoreBreakdown,
    TechnicalFlags,
)
from recommendations import rules

logger = logging.getLogger(__name__)


class ScoringEngine:
    """
    Reduces page signals and auxiliary checks to a 0-100 score.

    Each rubric category in `rules.WEIGHTS` is evaluated in order and
    contributes points plus zero or more recommendations. The score is the
    clamped sum; recommendations keep category order and are truncated to
    `rules.MAX_RECOMMENDATIONS`. A page with no recommendations gets a
    single positive message instead.
    """

    def score(
        self,
        signals: PageSignals,
        performance: PerformanceScores,
        technical: TechnicalFlags,
    ) -> ScoreBreakdown:
        """
        Score a page.

        Args:
            signals: Markup signals from SignalExtractor
            performance: Scores from PerformanceProvider
            technical: robots.txt / sitemap probe results

        Returns:
            ScoreBreakdown with score, recommendations and per-category points
        """
        evaluations = {
            "title": self._score_title(signals.title),
            "description": self._score_description(signals.description),
            "headings": self._score_headings(signals.headings.h1),
            "images": self._score_images(signals),
            "links": self._score_links(signals),
            "open_graph": self._score_open_graph(signals),
            "technical": self._score_technical(signals, technical),
            "performance": self._score_performance(performance),
        }

        categories = {}
        recommendations = []
        for name, (points, messages) in evaluations.items():
            categories[name] = points
            recommendations.extend(messages)

        total = min(sum(categories.values()), rules.MAX_SCORE)

        if not recommendations:
            recommendations.append(rules.ALL_GOOD)

        return ScoreBreakdown(
            seo_score=total,
            recommendations=recommendations[: rules.MAX_RECOMMENDATIONS],
            categories=categories,
        )

    # Lengths count code points, so an emoji is one character
    def _score_title(self, title: str) -> tuple[int, list[str]]:
        if not title:
            return 0, [rules.TITLE_MISSING]
        low, high = rules.TITLE_LENGTH
        if len(title) < low:
            return rules.TITLE_OUT_OF_RANGE_POINTS, [rules.TITLE_TOO_SHORT]
        if len(title) > high:
            return rules.TITLE_OUT_OF_RANGE_POINTS, [rules.TITLE_TOO_LONG]
        return rules.WEIGHTS["title"], []

    def _score_description(self, description: str) -> tuple[int, list[str]]:
        if not description:
            return 0, [rules.DESCRIPTION_MISSING]
        low, high = rules.DESCRIPTION_LENGTH
        if len(description) < low:
            return rules.DESCRIPTION_OUT_OF_RANGE_POINTS, [rules.DESCRIPTION_TOO_SHORT]
        if len(description) > high:
            return rules.DESCRIPTION_OUT_OF_RANGE_POINTS, [rules.DESCRIPTION_TOO_LONG]
        return rules.WEIGHTS["description"], []

    def _score_headings(self, h1_count: int) -> tuple[int, list[str]]:
        if h1_count == 1:
            return rules.WEIGHTS["headings"], []
        if h1_count == 0:
            return 0, [rules.H1_MISSING]
        return rules.MULTIPLE_H1_POINTS, [rules.H1_MULTIPLE]

    def _score_images(self, signals: PageSignals) -> tuple[int, list[str]]:
        images = signals.images
        if images.total == 0:
            return 0, []
        alt_percent = images.with_alt / images.total * 100
        if alt_percent == 100:
            return rules.WEIGHTS["images"], []
        if alt_percent >= rules.IMAGES_MOSTLY_ALT_PERCENT:
            return rules.IMAGES_MOSTLY_ALT_POINTS, [rules.IMAGES_SOME_MISSING_ALT]
        return rules.IMAGES_POOR_ALT_POINTS, [rules.IMAGES_MANY_MISSING_ALT]

    def _score_links(self, signals: PageSignals) -> tuple[int, list[str]]:
        if signals.links.internal > 0 or signals.links.external > 0:
            return rules.WEIGHTS["links"], []
        return 0, [rules.LINKS_NONE]

    def _score_open_graph(self, signals: PageSignals) -> tuple[int, list[str]]:
        present = signals.open_graph.present_count
        points = math.floor(rules.WEIGHTS["open_graph"] * present / rules.OPEN_GRAPH_TAG_COUNT)
        if present < rules.OPEN_GRAPH_TAG_COUNT:
            return points, [rules.OPEN_GRAPH_INCOMPLETE]
        return points, []

    def _score_technical(
        self,
        signals: PageSignals,
        technical: TechnicalFlags,
    ) -> tuple[int, list[str]]:
        flags = {
            "viewport": signals.technical.viewport,
            "charset": signals.technical.charset,
            "robots_txt": technical.has_robots_txt,
            "sitemap": technical.has_sitemap,
        }
        points = 0
        messages = []
        for name, present in flags.items():
            if present:
                points += rules.TECHNICAL_WEIGHTS[name]
            else:
                messages.append(rules.TECHNICAL_MISSING[name])
        return points, messages

    def _score_performance(self, performance: PerformanceScores) -> tuple[int, list[str]]:
        if performance.mobile is None or performance.desktop is None:
            logger.debug("Performance scores unavailable, category skipped")
            return 0, []
        average = (performance.mobile + performance.desktop) / 2
        if average >= rules.PERFORMANCE_EXCELLENT:
            return rules.WEIGHTS["performance"], []
        if average >= rules.PERFORMANCE_GOOD:
            return rules.PERFORMANCE_GOOD_POINTS, [rules.PERFORMANCE_ROOM_TO_IMPROVE]
        return rules.PERFORMANCE_POOR_POINTS, [rules.PERFORMANCE_POOR]
