"""
Post routes.

``GET /api/reddit/posts`` lists posts straight from Reddit (r/all when no
subreddit is given). ``POST /api/reddit/posts`` fetches a post with its
comments and stores both; it requires an authenticated caller.
"""

import re
import time
from typing import Any, Dict, List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field, field_validator

from reddit_dashboard.auth import Session, require_session
from reddit_dashboard.models.records import NormalizedPost, PostWithComments
from reddit_dashboard.models.responses import DataResponse, ListingMetadata
from reddit_dashboard.reddit.client import MAX_LISTING_LIMIT, RedditClient
from reddit_dashboard.reddit.exceptions import ValidationError
from reddit_dashboard.routes.dependencies import get_reddit_client, get_service
from reddit_dashboard.services.reddit_service import RedditService
from reddit_dashboard.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["posts"])

PostSort = Literal["hot", "new", "top", "rising"]
CommentSort = Literal["confidence", "top", "new", "controversial"]


def extract_post_id(post_id_or_url: str) -> str:
    """
    Extract Reddit post ID from various input formats.

    Handles:
    - Plain ID: "abc123"
    - With t3_ prefix: "t3_abc123"
    - Full URL: "https://reddit.com/r/python/comments/abc123/title/"
    - Short URL: "https://redd.it/abc123"

    Raises:
        ValueError: If input format is invalid

    Example:
        >>> extract_post_id("t3_abc123")
        'abc123'
    """
    value = post_id_or_url.strip()

    if value.startswith("t3_"):
        value = value[3:]

    if "reddit.com" in value or "redd.it" in value:
        patterns = [
            r"/comments/([a-z0-9]+)",  # Standard URL
            r"redd\.it/([a-z0-9]+)",   # Short URL
        ]

        for pattern in patterns:
            match = re.search(pattern, value)
            if match:
                return match.group(1)

        raise ValueError(f"Could not extract post ID from URL: {post_id_or_url}")

    if not re.match(r"^[a-z0-9]{5,10}$", value):
        raise ValueError(
            f"Invalid post ID format: {post_id_or_url}. "
            "Expected format: 'abc123', 't3_abc123', or full Reddit URL"
        )

    return value


class FetchPostRequest(BaseModel):
    """Body of ``POST /api/reddit/posts``."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {"postId": "1a2b3c4", "commentSort": "top", "commentLimit": 50}
        },
    )

    post_id: str = Field(
        ...,
        alias="postId",
        min_length=1,
        max_length=500,
        description="Reddit post ID (with or without t3_ prefix) or full URL",
    )
    comment_sort: CommentSort = Field("confidence", alias="commentSort")
    comment_limit: int = Field(100, alias="commentLimit", ge=1, le=100)

    @field_validator("post_id")
    @classmethod
    def clean_post_id(cls, v: str) -> str:
        return extract_post_id(v)


@router.get("/posts", response_model=DataResponse[List[NormalizedPost], ListingMetadata])
async def list_posts(
    sort: PostSort = Query("hot"),
    limit: int = Query(10, ge=1, le=100),
    skip: int = Query(0, ge=0, le=MAX_LISTING_LIMIT - 1),
    subreddit: Optional[str] = Query(None, pattern="^[A-Za-z0-9_]+$", max_length=64),
    reddit: RedditClient = Depends(get_reddit_client),
) -> DataResponse[List[NormalizedPost], ListingMetadata]:
    """List posts of a subreddit, or of r/all when none is given."""
    start_time = time.time()
    if skip + limit > MAX_LISTING_LIMIT:
        raise ValidationError(f"skip + limit must be <= {MAX_LISTING_LIMIT}", field="skip")

    posts = await reddit.get_subreddit_posts(subreddit or "all", sort=sort, limit=limit, skip=skip)

    logger.info(
        "list_posts_completed",
        subreddit=subreddit,
        sort=sort,
        limit=limit,
        skip=skip,
        count=len(posts),
        execution_time_ms=round((time.time() - start_time) * 1000, 2),
    )

    return DataResponse[List[NormalizedPost], ListingMetadata](
        data=posts,
        metadata=ListingMetadata(
            limit=limit,
            skip=skip,
            sort=sort,
            subreddit=subreddit,
            rate_limit_remaining=reddit.get_remaining(),
        ),
    )


@router.post("/posts", response_model=DataResponse[PostWithComments, Dict[str, Any]])
async def fetch_post(
    body: FetchPostRequest,
    session: Session = Depends(require_session),
    service: RedditService = Depends(get_service),
) -> DataResponse[PostWithComments, Dict[str, Any]]:
    """Fetch a post with its comments and store both."""
    logger.info(
        "fetch_post_requested",
        user=session.email or session.user_id,
        post_id=body.post_id,
        comment_sort=body.comment_sort,
        comment_limit=body.comment_limit,
    )

    result = await service.fetch_and_store_post_with_comments(
        body.post_id,
        comment_sort=body.comment_sort,
        comment_limit=body.comment_limit,
    )
    return DataResponse[PostWithComments, Dict[str, Any]](data=result)
