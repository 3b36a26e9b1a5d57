"""Subreddit routes: search-and-store and listing sync. Both require a session."""

from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, Field

from reddit_dashboard.auth import Session, require_session
from reddit_dashboard.models.records import NormalizedPost, NormalizedSubreddit
from reddit_dashboard.models.responses import DataResponse
from reddit_dashboard.routes.dependencies import get_service
from reddit_dashboard.services.reddit_service import RedditService
from reddit_dashboard.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/subreddits", tags=["subreddits"])


class SearchSubredditsRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)


class SyncSubredditRequest(BaseModel):
    sort: Literal["hot", "new", "top", "rising"] = "hot"
    limit: int = Field(25, ge=1, le=100)


@router.post("/search", response_model=DataResponse[List[NormalizedSubreddit], Dict[str, Any]])
async def search_subreddits(
    body: SearchSubredditsRequest,
    session: Session = Depends(require_session),
    service: RedditService = Depends(get_service),
) -> DataResponse[List[NormalizedSubreddit], Dict[str, Any]]:
    logger.info("search_subreddits_requested", user=session.email or session.user_id, query=body.query)

    results = await service.search_and_store_subreddits(body.query)
    return DataResponse[List[NormalizedSubreddit], Dict[str, Any]](
        data=results,
        metadata={"query": body.query, "count": len(results)},
    )


@router.post("/{name}/sync", response_model=DataResponse[List[NormalizedPost], Dict[str, Any]])
async def sync_subreddit(
    name: str = Path(..., pattern="^[A-Za-z0-9_]+$", max_length=64),
    body: Optional[SyncSubredditRequest] = None,
    session: Session = Depends(require_session),
    service: RedditService = Depends(get_service),
) -> DataResponse[List[NormalizedPost], Dict[str, Any]]:
    """Fetch a subreddit listing and store every post."""
    body = body or SyncSubredditRequest()
    logger.info(
        "sync_subreddit_requested",
        user=session.email or session.user_id,
        subreddit=name,
        sort=body.sort,
        limit=body.limit,
    )

    posts = await service.fetch_and_store_subreddit_posts(name, sort=body.sort, limit=body.limit)
    return DataResponse[List[NormalizedPost], Dict[str, Any]](
        data=posts,
        metadata={"subreddit": name, "sort": body.sort, "count": len(posts)},
    )
