"""
Fetch-normalize-persist orchestration.

Each write operation fetches through the Reddit client and then upserts into
the store; it only reports success when the store accepted every row. Read
operations page through stored rows and rebuild the normalized records,
parsing the metadata bag back from its JSON text.
"""

import asyncio
import json
from typing import Any, Awaitable, Dict, List, Mapping, Optional

import structlog

from reddit_dashboard.models.records import (
    DashboardStats,
    NormalizedComment,
    NormalizedPost,
    NormalizedSubreddit,
    PostFlags,
    PostWithComments,
)
from reddit_dashboard.reddit.client import RedditClient
from reddit_dashboard.reddit.exceptions import StorageError, ValidationError
from reddit_dashboard.storage.store import RedditStore, Row
from reddit_dashboard.utils.logger import component_logger

_FLAG_COLUMNS = ("is_self", "is_video", "is_stickied")


def serialize_metadata(metadata: Mapping[str, Any]) -> str:
    """Encode a metadata bag as JSON text for storage."""
    return json.dumps(dict(metadata), sort_keys=True)


def deserialize_metadata(raw: Any) -> Dict[str, Any]:
    """
    Decode a stored metadata bag.

    Raises:
        StorageError: The stored value is not a JSON object
    """
    try:
        value = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise StorageError(f"Stored metadata is not valid JSON: {e}", code="METADATA_CORRUPT") from e

    if not isinstance(value, dict):
        raise StorageError("Stored metadata is not a JSON object", code="METADATA_CORRUPT")
    return value


def post_to_row(post: NormalizedPost) -> Row:
    row = post.model_dump(exclude={"flags", "metadata"})
    row.update(post.flags.model_dump())
    row["metadata"] = serialize_metadata(post.metadata)
    return row


def comment_to_row(comment: NormalizedComment) -> Row:
    row = comment.model_dump(exclude={"metadata"})
    row["metadata"] = serialize_metadata(comment.metadata)
    return row


def subreddit_to_row(subreddit: NormalizedSubreddit) -> Row:
    row = subreddit.model_dump(exclude={"metadata"})
    row["metadata"] = serialize_metadata(subreddit.metadata)
    return row


def row_to_post(row: Mapping[str, Any]) -> NormalizedPost:
    fields = {
        name: row[name]
        for name in NormalizedPost.model_fields
        if name not in ("flags", "metadata")
    }
    return NormalizedPost(
        **fields,
        flags=PostFlags(**{name: bool(row[name]) for name in _FLAG_COLUMNS}),
        metadata=deserialize_metadata(row["metadata"]),
    )


def row_to_comment(row: Mapping[str, Any]) -> NormalizedComment:
    fields = {name: row[name] for name in NormalizedComment.model_fields if name != "metadata"}
    return NormalizedComment(**fields, metadata=deserialize_metadata(row["metadata"]))


async def gather_all(*awaitables: Awaitable[Any]) -> List[Any]:
    """
    Run awaitables concurrently and wait for all of them.

    The first failure (in argument order) is raised once every awaitable
    has finished; successful siblings are not undone.
    """
    results = await asyncio.gather(*awaitables, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return list(results)


class RedditService:
    """
    Orchestrates Reddit fetches and store upserts.

    Example:
        >>> service = RedditService(reddit_client, store)
        >>> result = await service.fetch_and_store_post_with_comments("abc123", "top", 50)
        >>> len(result.comments)
        50
    """

    def __init__(
        self,
        client: RedditClient,
        store: RedditStore,
        logger: Optional[structlog.BoundLogger] = None,
    ) -> None:
        self.client = client
        self.store = store
        self.logger = component_logger(logger, __name__)

    async def fetch_and_store_subreddit_posts(
        self,
        subreddit: str,
        sort: str = "hot",
        limit: int = 25,
    ) -> List[NormalizedPost]:
        """
        Fetch a subreddit listing and upsert every post.

        Returns:
            The fetched posts, only once the store accepted them

        Raises:
            APIError: Fetch failures propagate unchanged
            StorageError: The upsert failed; nothing is returned
        """
        try:
            posts = await self.client.get_subreddit_posts(subreddit, sort=sort, limit=limit)
            await self.store.upsert_posts([post_to_row(post) for post in posts])
        except Exception as e:
            self.logger.error(
                "fetch_and_store_subreddit_posts_failed",
                subreddit=subreddit,
                sort=sort,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        self.logger.info("subreddit_posts_stored", subreddit=subreddit, sort=sort, count=len(posts))
        return posts

    async def fetch_and_store_post_with_comments(
        self,
        post_id: str,
        comment_sort: str = "confidence",
        comment_limit: int = 100,
    ) -> PostWithComments:
        """
        Fetch a post and its comments concurrently, then upsert both concurrently.

        If either fetch fails nothing is written. If either upsert fails the
        operation fails, even when the other upsert already committed.

        Raises:
            APIError: Fetch failure, or StorageError from either upsert
        """
        try:
            post, comments = await gather_all(
                self.client.get_post(post_id),
                self.client.get_post_comments(post_id, sort=comment_sort, limit=comment_limit),
            )
            await gather_all(
                self.store.upsert_posts([post_to_row(post)]),
                self.store.upsert_comments([comment_to_row(comment) for comment in comments]),
            )
        except Exception as e:
            self.logger.error(
                "fetch_and_store_post_with_comments_failed",
                post_id=post_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        self.logger.info("post_with_comments_stored", post_id=post_id, comment_count=len(comments))
        return PostWithComments(post=post, comments=comments)

    async def search_and_store_subreddits(self, query: str) -> List[NormalizedSubreddit]:
        """Search subreddits and upsert the results; all-or-nothing."""
        try:
            results = await self.client.search_subreddits(query)
            await self.store.upsert_subreddits([subreddit_to_row(item) for item in results])
        except Exception as e:
            self.logger.error(
                "search_and_store_subreddits_failed",
                query=query,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        self.logger.info("subreddits_stored", query=query, count=len(results))
        return results

    async def get_stored_posts(
        self,
        subreddit: Optional[str] = None,
        limit: int = 25,
        offset: int = 0,
    ) -> List[NormalizedPost]:
        """
        Read stored posts, newest first.

        Raises:
            ValidationError: limit < 1 or offset < 0
            StorageError: Read failure or corrupt stored metadata
        """
        _check_page(limit, offset)
        try:
            rows = await self.store.select_posts(subreddit=subreddit, limit=limit, offset=offset)
            return [self._rebuild(row_to_post, row) for row in rows]
        except Exception as e:
            self.logger.error(
                "get_stored_posts_failed",
                subreddit=subreddit,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    async def get_stored_comments(
        self,
        post_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> List[NormalizedComment]:
        """Read stored comments of a post, highest score first."""
        _check_page(limit, offset)
        try:
            rows = await self.store.select_comments(post_id, limit=limit, offset=offset)
            return [self._rebuild(row_to_comment, row) for row in rows]
        except Exception as e:
            self.logger.error(
                "get_stored_comments_failed",
                post_id=post_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    async def get_stats(self) -> DashboardStats:
        """
        Dashboard totals.

        ``engagement_rate`` is the percentage of stored posts that have at
        least one stored comment.
        """
        counts = await self.store.counts()
        total_posts = counts["posts"]
        engagement_rate = (
            round(counts["commented_posts"] / total_posts * 100, 1) if total_posts else 0.0
        )
        return DashboardStats(
            total_posts=total_posts,
            total_comments=counts["comments"],
            active_subreddits=counts["active_subreddits"],
            engagement_rate=engagement_rate,
        )

    def _rebuild(self, builder: Any, row: Mapping[str, Any]) -> Any:
        try:
            return builder(row)
        except StorageError:
            self.logger.error("stored_metadata_corrupt", record_id=row.get("id"))
            raise


def _check_page(limit: int, offset: int) -> None:
    if limit < 1:
        raise ValidationError("must be >= 1", field="limit")
    if offset < 0:
        raise ValidationError("must be >= 0", field="offset")
