"""
Reddit API client over the public JSON endpoints.

Combines the rate-limited HTTP client with the response normalizer to
expose typed fetch operations. Listing endpoints answer with
``{"data": {"children": [{"kind", "data"}, ...]}}``; the single-post
endpoint answers with a 2-element array ``[post_listing, comment_listing]``.
"""

from typing import Any, List, Mapping, Optional
from urllib.parse import quote

import structlog

from reddit_dashboard.models.records import (
    NormalizedComment,
    NormalizedPost,
    NormalizedSubreddit,
)
from reddit_dashboard.reddit.exceptions import NotFoundError, UpstreamError, ValidationError
from reddit_dashboard.reddit.http import RateLimitedHTTPClient
from reddit_dashboard.reddit.normalizer import ResponseNormalizer
from reddit_dashboard.utils.logger import component_logger

DEFAULT_BASE_URL = "https://www.reddit.com"
MAX_LISTING_LIMIT = 100

POST_SORTS = ("hot", "new", "top", "rising")
COMMENT_SORTS = ("confidence", "top", "new", "controversial")


def listing_children(payload: Any) -> Optional[List[Mapping[str, Any]]]:
    """Return ``payload["data"]["children"]`` if the listing envelope is intact, else None."""
    if not isinstance(payload, Mapping):
        return None
    data = payload.get("data")
    if not isinstance(data, Mapping):
        return None
    children = data.get("children")
    if not isinstance(children, list):
        return None
    return children


def _thread_part(payload: Any, index: int) -> Any:
    if isinstance(payload, list) and len(payload) > index:
        return payload[index]
    return None


def _check_choice(value: str, choices: tuple, field: str) -> None:
    if value not in choices:
        raise ValidationError(f"must be one of {', '.join(choices)}", field=field)


def _check_limit(limit: int, field: str = "limit") -> None:
    if not 1 <= limit <= MAX_LISTING_LIMIT:
        raise ValidationError(f"must be between 1 and {MAX_LISTING_LIMIT}", field=field)


class RedditClient:
    """
    Typed access to Reddit's public JSON API.

    Failures are logged with the subreddit, post id or query involved and
    re-raised unchanged. Nothing is retried.

    Example:
        >>> client = RedditClient(RateLimitedHTTPClient())
        >>> posts = await client.get_subreddit_posts("python", sort="new", limit=10)
        >>> comments = await client.get_post_comments(posts[0].id, sort="top")
    """

    def __init__(
        self,
        http: RateLimitedHTTPClient,
        base_url: str = DEFAULT_BASE_URL,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        self.http = http
        self.base_url = base_url.rstrip("/")
        self.logger = component_logger(logger, __name__)

    async def get_subreddit_posts(
        self,
        subreddit: str,
        sort: str = "hot",
        limit: int = 25,
        skip: int = 0,
    ) -> List[NormalizedPost]:
        """
        Fetch a subreddit listing.

        ``skip`` is applied on our side: Reddit pages with ``after`` cursors,
        so the request asks for ``limit + skip`` items and the first ``skip``
        are dropped. A single listing holds at most 100 items, so
        ``skip + limit`` above 100 is rejected rather than returning a
        short page.

        Args:
            subreddit: Subreddit name without the r/ prefix ("all" for r/all)
            sort: One of hot, new, top, rising
            limit: Number of posts wanted (1-100)
            skip: Number of leading posts to drop

        Returns:
            At most ``limit`` normalized posts

        Raises:
            ValidationError: Invalid sort, limit or skip, or skip + limit > 100
            UpstreamError: Listing envelope missing (404) or non-2xx response
            RateLimitError: Local window exhausted
        """
        try:
            _check_choice(sort, POST_SORTS, "sort")
            _check_limit(limit)
            if skip < 0:
                raise ValidationError("must be >= 0", field="skip")
            fetch_limit = limit + skip
            if fetch_limit > MAX_LISTING_LIMIT:
                raise ValidationError(f"skip + limit must be <= {MAX_LISTING_LIMIT}", field="skip")

            url = f"{self.base_url}/r/{quote(subreddit, safe='')}/{sort}.json?limit={fetch_limit}"
            response = await self.http.get(url)

            children = listing_children(response.data)
            if children is None:
                raise UpstreamError(
                    "Invalid response from Reddit API",
                    status_code=404,
                    code="INVALID_RESPONSE",
                )

            posts = ResponseNormalizer.normalize_post_batch(children[skip:skip + limit])
            self.logger.debug(
                "subreddit_posts_fetched",
                subreddit=subreddit,
                sort=sort,
                count=len(posts),
            )
            return posts

        except Exception as e:
            self.logger.error(
                "fetch_subreddit_posts_failed",
                subreddit=subreddit,
                sort=sort,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    async def get_post(self, post_id: str) -> NormalizedPost:
        """
        Fetch a single post.

        Raises:
            NotFoundError: The response has no post entry
        """
        try:
            response = await self.http.get(f"{self.base_url}/comments/{quote(post_id, safe='')}.json")

            children = listing_children(_thread_part(response.data, 0))
            if not children:
                raise NotFoundError("post", post_id)

            return ResponseNormalizer.normalize_post(children[0])

        except Exception as e:
            self.logger.error(
                "fetch_post_failed",
                post_id=post_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    async def get_post_comments(
        self,
        post_id: str,
        sort: str = "confidence",
        limit: int = 100,
    ) -> List[NormalizedComment]:
        """
        Fetch the comment listing of a post.

        Only ``t1`` entries are returned; "more comments" stubs are dropped.

        Args:
            post_id: Bare post id (no t3_ prefix)
            sort: One of confidence, top, new, controversial
            limit: Maximum number of comments requested (1-100)

        Raises:
            ValidationError: Invalid sort or limit
            NotFoundError: The response has no comment listing
        """
        try:
            _check_choice(sort, COMMENT_SORTS, "sort")
            _check_limit(limit)

            url = (
                f"{self.base_url}/comments/{quote(post_id, safe='')}.json"
                f"?sort={sort}&limit={limit}"
            )
            response = await self.http.get(url)

            children = listing_children(_thread_part(response.data, 1))
            if children is None:
                raise NotFoundError("comments", post_id)

            comments = ResponseNormalizer.normalize_comment_batch(children, post_id=post_id)
            self.logger.debug(
                "post_comments_fetched",
                post_id=post_id,
                sort=sort,
                listed=len(children),
                count=len(comments),
            )
            return comments

        except Exception as e:
            self.logger.error(
                "fetch_post_comments_failed",
                post_id=post_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    async def search_subreddits(self, query: str, limit: int = 25) -> List[NormalizedSubreddit]:
        """
        Search subreddits by name and description.

        The query is percent-encoded before it is sent.

        Raises:
            UpstreamError: Listing envelope missing (404) or non-2xx response
        """
        try:
            _check_limit(limit)
            url = (
                f"{self.base_url}/subreddits/search.json"
                f"?q={quote(query, safe='')}&limit={limit}"
            )
            response = await self.http.get(url)

            children = listing_children(response.data)
            if children is None:
                raise UpstreamError(
                    "Invalid response from Reddit API",
                    status_code=404,
                    code="INVALID_RESPONSE",
                )

            return ResponseNormalizer.normalize_subreddit_batch(children)

        except Exception as e:
            self.logger.error(
                "search_subreddits_failed",
                query=query,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def get_remaining(self) -> int:
        """Upstream calls still admissible in the HTTP client's window."""
        return self.http.get_remaining()
