"""
Normalized record shapes stored and served by the dashboard.

Records are immutable; a re-fetch replaces the whole record. Every ``id`` is
the identifier Reddit assigned, so upserts keyed on it are idempotent.
Timestamps are epoch milliseconds.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class PostFlags(BaseModel):
    """Boolean post attributes."""

    model_config = ConfigDict(frozen=True)

    is_self: bool = False
    is_video: bool = False
    is_stickied: bool = False


class NormalizedPost(BaseModel):
    """A Reddit submission."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    body: str = ""
    author: Optional[str] = None
    subreddit: str
    score: int = 0
    upvote_ratio: float = Field(0.0, ge=0.0, le=1.0)
    created_at: int = Field(..., description="Epoch milliseconds")
    comment_count: int = 0
    url: Optional[str] = None
    flags: PostFlags = Field(default_factory=PostFlags)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class NormalizedComment(BaseModel):
    """A Reddit comment; ``parent_comment_id`` is None for top-level comments."""

    model_config = ConfigDict(frozen=True)

    id: str
    body: str = ""
    author: Optional[str] = None
    score: int = 0
    created_at: int = Field(..., description="Epoch milliseconds")
    post_id: str
    parent_comment_id: Optional[str] = None
    depth: int = Field(0, ge=0)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class NormalizedSubreddit(BaseModel):
    """A subreddit as returned by subreddit search."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    title: str = ""
    description: str = ""
    subscriber_count: int = 0
    created_at: int = Field(..., description="Epoch milliseconds")
    is_nsfw: bool = False
    public_description: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)


class PostWithComments(BaseModel):
    """Result of fetching a post together with its comment listing."""

    model_config = ConfigDict(frozen=True)

    post: NormalizedPost
    comments: List[NormalizedComment] = Field(default_factory=list)


class DashboardStats(BaseModel):
    """Totals computed from the store for the analytics page."""

    total_posts: int
    total_comments: int
    active_subreddits: int
    engagement_rate: float
