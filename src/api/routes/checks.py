"""Single-purpose page check endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from analyzers.fetcher import FetchError, PageFetcher
from analyzers.headings import HeadingsResult, analyze_headings
from analyzers.meta_check import MetaCheckResult, check_meta
from analyzers.social_tags import SocialTagsResult, check_social_tags
from api.dependencies import get_page_fetcher
from api.schemas import PageCheckRequest

router = APIRouter(tags=["Checks"])


async def _fetch(fetcher: PageFetcher, url: str, what: str) -> str:
    try:
        return await fetcher.fetch(url)
    except FetchError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Failed to {what}: {e.cause}",
        )


@router.post(
    "/meta-check",
    response_model=MetaCheckResult,
    summary="Check title and meta description lengths",
)
async def meta_check(
    request: PageCheckRequest,
    fetcher: PageFetcher = Depends(get_page_fetcher),
) -> MetaCheckResult:
    url = str(request.url)
    html = await _fetch(fetcher, url, "check meta tags")
    return check_meta(html, url)


@router.post(
    "/headings",
    response_model=HeadingsResult,
    summary="Outline the page headings",
)
async def headings(
    request: PageCheckRequest,
    fetcher: PageFetcher = Depends(get_page_fetcher),
) -> HeadingsResult:
    url = str(request.url)
    html = await _fetch(fetcher, url, "analyze headings")
    return analyze_headings(html, url)


@router.post(
    "/social-tags",
    response_model=SocialTagsResult,
    summary="Check OpenGraph and Twitter Card tags",
)
async def social_tags(
    request: PageCheckRequest,
    fetcher: PageFetcher = Depends(get_page_fetcher),
) -> SocialTagsResult:
    url = str(request.url)
    html = await _fetch(fetcher, url, "analyze social tags")
    return check_social_tags(html, url)
