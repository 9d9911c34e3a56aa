"""Heading outline analysis."""

from bs4 import BeautifulSoup

from analyzers.models import FrozenModel


class HeadingItem(FrozenModel):
    tag: str
    text: str
    level: int


class HeadingSummary(FrozenModel):
    h1: int = 0
    h2: int = 0
    h3: int = 0
    h4: int = 0
    h5: int = 0
    h6: int = 0
    total: int = 0


class HeadingsResult(FrozenModel):
    url: str
    headings: list[HeadingItem]
    summary: HeadingSummary
    warnings: list[str]


def analyze_headings(html: str, url: str) -> HeadingsResult:
    """
    List every heading in document order and flag structural problems.

    Warnings cover a missing or repeated H1, a page with no headings at
    all, and the first skipped level (e.g. an H2 followed by an H4).
    """
    soup = BeautifulSoup(html, "lxml")

    items = [
        HeadingItem(
            tag=element.name.upper(),
            text=element.get_text().strip(),
            level=int(element.name[1]),
        )
        for element in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])
    ]

    counts = {f"h{level}": 0 for level in range(1, 7)}
    for item in items:
        counts[item.tag.lower()] += 1
    summary = HeadingSummary(**counts, total=len(items))

    warnings = []
    if summary.h1 == 0:
        warnings.append("No H1 tag found. Every page should have exactly one H1 tag.")
    elif summary.h1 > 1:
        warnings.append(
            f"Multiple H1 tags found ({summary.h1}). Use only one H1 per page."
        )

    if summary.total == 0:
        warnings.append("No heading tags found. Use headings to structure your content.")

    previous = 0
    for item in items:
        if previous > 0 and item.level > previous + 1:
            warnings.append(
                "Heading hierarchy issue detected. Avoid skipping heading levels."
            )
            break
        previous = item.level

    return HeadingsResult(url=url, headings=items, summary=summary, warnings=warnings)
