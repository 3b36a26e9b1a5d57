"""
Reddit API integration layer.

This module provides the complete Reddit API integration including:
- RateLimitedHTTPClient: httpx client behind a fixed-window limiter
- RedditClient: typed fetch operations over the public JSON API
- Error taxonomy shared by the whole pipeline
- Response normalization functions

Example:
    >>> from reddit_dashboard.reddit import RateLimitedHTTPClient, RedditClient
    >>> reddit = RedditClient(RateLimitedHTTPClient())
    >>> posts = await reddit.get_subreddit_posts("python", limit=10)
"""

from reddit_dashboard.reddit.client import (
    COMMENT_SORTS,
    POST_SORTS,
    RedditClient,
)
from reddit_dashboard.reddit.exceptions import (
    APIError,
    AuthenticationError,
    InternalError,
    NotFoundError,
    RateLimitError,
    StorageError,
    UpstreamError,
    ValidationError,
)
from reddit_dashboard.reddit.http import (
    ClientConfig,
    RateLimitConfig,
    RateLimitedHTTPClient,
)
from reddit_dashboard.reddit.normalizer import (
    ResponseNormalizer,
    normalize_comment,
    normalize_post,
    normalize_subreddit,
)
from reddit_dashboard.reddit.rate_limiter import (
    FixedWindowCounter,
    RateLimitDecision,
    RateWindow,
)

__all__ = [
    # Clients
    "RedditClient",
    "RateLimitedHTTPClient",
    "ClientConfig",
    "RateLimitConfig",
    "POST_SORTS",
    "COMMENT_SORTS",
    # Exceptions
    "APIError",
    "AuthenticationError",
    "InternalError",
    "NotFoundError",
    "RateLimitError",
    "StorageError",
    "UpstreamError",
    "ValidationError",
    # Normalizers
    "ResponseNormalizer",
    "normalize_post",
    "normalize_comment",
    "normalize_subreddit",
    # Rate limiting
    "FixedWindowCounter",
    "RateLimitDecision",
    "RateWindow",
]
