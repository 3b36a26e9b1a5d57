"""Read-back routes over stored posts and comments, plus dashboard stats."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query

from reddit_dashboard.models.records import DashboardStats, NormalizedComment, NormalizedPost
from reddit_dashboard.models.responses import DataResponse, PageMetadata
from reddit_dashboard.routes.dependencies import get_service
from reddit_dashboard.services.reddit_service import RedditService

router = APIRouter(tags=["stored"])


@router.get("/stored/posts", response_model=DataResponse[List[NormalizedPost], PageMetadata])
async def stored_posts(
    subreddit: Optional[str] = Query(None, pattern="^[A-Za-z0-9_]+$", max_length=64),
    page: int = Query(0, ge=0),
    page_size: int = Query(25, alias="pageSize", ge=1, le=100),
    service: RedditService = Depends(get_service),
) -> DataResponse[List[NormalizedPost], PageMetadata]:
    offset = page * page_size
    posts = await service.get_stored_posts(subreddit=subreddit, limit=page_size, offset=offset)
    return DataResponse[List[NormalizedPost], PageMetadata](
        data=posts,
        metadata=PageMetadata(page=page, page_size=page_size, offset=offset, count=len(posts)),
    )


@router.get(
    "/stored/posts/{post_id}/comments",
    response_model=DataResponse[List[NormalizedComment], PageMetadata],
)
async def stored_comments(
    post_id: str = Path(..., pattern="^[a-z0-9]{1,16}$"),
    page: int = Query(0, ge=0),
    page_size: int = Query(100, alias="pageSize", ge=1, le=100),
    service: RedditService = Depends(get_service),
) -> DataResponse[List[NormalizedComment], PageMetadata]:
    offset = page * page_size
    comments = await service.get_stored_comments(post_id, limit=page_size, offset=offset)
    return DataResponse[List[NormalizedComment], PageMetadata](
        data=comments,
        metadata=PageMetadata(page=page, page_size=page_size, offset=offset, count=len(comments)),
    )


@router.get("/stats", response_model=DashboardStats)
async def stats(service: RedditService = Depends(get_service)) -> DashboardStats:
    """Totals for the analytics page."""
    return await service.get_stats()
