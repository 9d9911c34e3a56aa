"""Title and meta description length check."""

from typing import Literal

from bs4 import BeautifulSoup

from analyzers.models import FrozenModel

TagStatus = Literal["good", "warning", "error"]

# (good range, acceptable range), inclusive character counts
TITLE_RANGES = ((50, 60), (30, 70))
DESCRIPTION_RANGES = ((150, 160), (120, 180))


class TagCheck(FrozenModel):
    text: str
    length: int
    status: TagStatus


class MetaCheckResult(FrozenModel):
    url: str
    title: TagCheck
    description: TagCheck


def _status(length: int, ranges: tuple[tuple[int, int], tuple[int, int]]) -> TagStatus:
    (good_min, good_max), (ok_min, ok_max) = ranges
    if good_min <= length <= good_max:
        return "good"
    if ok_min <= length <= ok_max:
        return "warning"
    return "error"


def check_meta(html: str, url: str) -> MetaCheckResult:
    """Grade the title and meta description lengths of a page."""
    soup = BeautifulSoup(html, "lxml")

    title_tag = soup.find("title")
    title = title_tag.get_text().strip() if title_tag else ""
    meta = soup.select_one('meta[name="description"]')
    description = (meta.get("content") or "") if meta else ""

    return MetaCheckResult(
        url=url,
        title=TagCheck(
            text=title,
            length=len(title),
            status=_status(len(title), TITLE_RANGES),
        ),
        description=TagCheck(
            text=description,
            length=len(description),
            status=_status(len(description), DESCRIPTION_RANGES),
        ),
    )
