"""Data models shared by the audit pipeline.

All models are frozen: each stage builds its slice once and hands it on.
Field names are snake_case in Python and camelCase on the wire.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FrozenModel(BaseModel):
    """Immutable model serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


# =============================================================================
# Page signals (extracted from markup)
# =============================================================================


class HeadingCounts(FrozenModel):
    h1: int = Field(default=0, ge=0)
    h2: int = Field(default=0, ge=0)
    h3: int = Field(default=0, ge=0)
    h4: int = Field(default=0, ge=0)
    h5: int = Field(default=0, ge=0)
    h6: int = Field(default=0, ge=0)


class ImageStats(FrozenModel):
    """Alt-text statistics over the sampled images."""

    total: int = 0
    with_alt: int = 0
    without_alt: int = 0
    missing_alt_samples: list[str] = []


class LinkStats(FrozenModel):
    """Link classification over the sampled anchors."""

    internal: int = 0
    external: int = 0
    broken_samples: list[str] = []


class OpenGraphTags(FrozenModel):
    has_title: bool = False
    has_description: bool = False
    has_image: bool = False
    has_url: bool = False

    @property
    def present_count(self) -> int:
        return sum(
            [self.has_title, self.has_description, self.has_image, self.has_url]
        )


class TwitterCardTags(FrozenModel):
    has_card_type: bool = False
    has_title: bool = False
    has_description: bool = False
    has_image: bool = False


class PageTechnical(FrozenModel):
    viewport: bool = False
    charset: bool = False


class PageSignals(FrozenModel):
    """Everything the markup tells us about a page."""

    title: str = ""
    description: str = ""
    headings: HeadingCounts = HeadingCounts()
    images: ImageStats = ImageStats()
    links: LinkStats = LinkStats()
    open_graph: OpenGraphTags = OpenGraphTags()
    twitter_card: TwitterCardTags = TwitterCardTags()
    technical: PageTechnical = PageTechnical()


# =============================================================================
# Auxiliary checks
# =============================================================================


class TechnicalFlags(FrozenModel):
    """Results of the robots.txt / sitemap.xml probes."""

    has_robots_txt: bool = False
    has_sitemap: bool = False


class PerformanceScores(FrozenModel):
    """Mobile/desktop performance (0-100). None means unavailable."""

    mobile: int | None = Field(default=None, ge=0, le=100)
    desktop: int | None = Field(default=None, ge=0, le=100)


# =============================================================================
# Scoring and the final report
# =============================================================================


class ScoreBreakdown(FrozenModel):
    seo_score: int = Field(ge=0, le=100)
    recommendations: list[str]
    # Points earned per rubric category, in rubric order
    categories: dict[str, int] = {}


class TechnicalSummary(FrozenModel):
    has_robots_txt: bool = False
    has_sitemap: bool = False
    viewport: bool = False
    charset: bool = False


class SEOReport(FrozenModel):
    """The complete audit of a single URL."""

    url: str
    title: str
    description: str
    headings: HeadingCounts
    images: ImageStats
    links: LinkStats
    open_graph: OpenGraphTags
    twitter_card: TwitterCardTags
    technical: TechnicalSummary
    performance: PerformanceScores
    seo_score: int = Field(ge=0, le=100)
    score_breakdown: dict[str, int] = {}
    recommendations: list[str]
    ai_recommendations: list[str] | None = None

    @classmethod
    def assemble(
        cls,
        url: str,
        signals: PageSignals,
        flags: TechnicalFlags,
        performance: PerformanceScores,
        breakdown: ScoreBreakdown,
        ai_recommendations: list[str] | None = None,
    ) -> "SEOReport":
        """Merge the per-stage slices into one report."""
        return cls(
            url=url,
            title=signals.title,
            description=signals.description,
            headings=signals.headings,
            images=signals.images,
            links=signals.links,
            open_graph=signals.open_graph,
            twitter_card=signals.twitter_card,
            technical=TechnicalSummary(
                has_robots_txt=flags.has_robots_txt,
                has_sitemap=flags.has_sitemap,
                viewport=signals.technical.viewport,
                charset=signals.technical.charset,
            ),
            performance=performance,
            seo_score=breakdown.seo_score,
            score_breakdown=breakdown.categories,
            recommendations=breakdown.recommendations,
            ai_recommendations=ai_recommendations,
        )

    def with_ai_recommendations(self, ai_recommendations: list[str]) -> "SEOReport":
        """Return a copy carrying the AI suggestions."""
        return self.model_copy(update={"ai_recommendations": ai_recommendations})
