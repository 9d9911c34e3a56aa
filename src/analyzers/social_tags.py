"""OpenGraph and Twitter Card tag inspection."""

from bs4 import BeautifulSoup

from analyzers.models import FrozenModel

# (attribute value, display name); the first four of each family are core
OPEN_GRAPH_TAGS = [
    ("og:title", "Title"),
    ("og:description", "Description"),
    ("og:image", "Image"),
    ("og:url", "URL"),
    ("og:type", "Type"),
    ("og:site_name", "Site Name"),
]

TWITTER_TAGS = [
    ("twitter:card", "Card Type"),
    ("twitter:title", "Title"),
    ("twitter:description", "Description"),
    ("twitter:image", "Image"),
    ("twitter:site", "Site Handle"),
]

CORE_TAG_COUNT = 4


class SocialTag(FrozenModel):
    name: str
    content: str
    missing: bool


class SocialTagsSummary(FrozenModel):
    open_graph_complete: bool
    twitter_card_complete: bool
    total_tags: int
    missing_tags: int


class SocialTagsResult(FrozenModel):
    url: str
    open_graph: list[SocialTag]
    twitter_card: list[SocialTag]
    summary: SocialTagsSummary


def _collect(soup: BeautifulSoup, attribute: str, tags: list[tuple[str, str]]) -> list[SocialTag]:
    collected = []
    for value, display_name in tags:
        meta = soup.select_one(f'meta[{attribute}="{value}"]')
        content = (meta.get("content") or "") if meta else ""
        collected.append(SocialTag(name=display_name, content=content, missing=not content))
    return collected


def check_social_tags(html: str, url: str) -> SocialTagsResult:
    """Report which social sharing tags a page declares."""
    soup = BeautifulSoup(html, "lxml")

    open_graph = _collect(soup, "property", OPEN_GRAPH_TAGS)
    twitter_card = _collect(soup, "name", TWITTER_TAGS)
    all_tags = open_graph + twitter_card

    return SocialTagsResult(
        url=url,
        open_graph=open_graph,
        twitter_card=twitter_card,
        summary=SocialTagsSummary(
            open_graph_complete=not any(t.missing for t in open_graph[:CORE_TAG_COUNT]),
            twitter_card_complete=not any(t.missing for t in twitter_card[:CORE_TAG_COUNT]),
            total_tags=len(all_tags),
            missing_tags=sum(t.missing for t in all_tags),
        ),
    )
