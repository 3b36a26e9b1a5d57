"""
Response normalization for Reddit API data.

Maps Reddit's listing JSON (posts, comments, subreddits) onto the fixed
record shapes in ``reddit_dashboard.models.records``. Every function accepts
either the raw record or the ``{kind, data}`` envelope Reddit wraps it in.

These functions perform no I/O and do not fail on well-formed input.
"""

from typing import Any, Iterable, List, Mapping, Optional

from reddit_dashboard.models.records import (
    NormalizedComment,
    NormalizedPost,
    NormalizedSubreddit,
    PostFlags,
)

COMMENT_KIND = "t1"
POST_KIND = "t3"
SUBREDDIT_KIND = "t5"


def unwrap_envelope(record: Mapping[str, Any]) -> Mapping[str, Any]:
    """
    Return the payload of an envelope, or the record itself if it is raw.

    An envelope is a mapping with a mapping under ``data`` and no ``id`` of
    its own; raw records always carry ``id``.

    Example:
        >>> unwrap_envelope({"kind": "t3", "data": {"id": "abc123"}})
        {'id': 'abc123'}
        >>> unwrap_envelope({"id": "abc123"})
        {'id': 'abc123'}
    """
    inner = record.get("data")
    if isinstance(inner, Mapping) and "id" not in record:
        return inner
    return record


def epoch_seconds_to_millis(value: Any) -> int:
    """Convert Reddit's ``created_utc`` (epoch seconds, maybe float) to epoch ms."""
    if value is None:
        return 0
    return int(float(value) * 1000)


def strip_type_prefix(fullname: Optional[str]) -> Optional[str]:
    """
    Remove the 3-character type prefix from a Reddit fullname.

    Example:
        >>> strip_type_prefix("t3_abc123")
        'abc123'
    """
    if not fullname:
        return None
    if len(fullname) > 3 and fullname[2] == "_":
        return fullname[3:]
    return fullname


def parent_comment_id(parent_fullname: Optional[str]) -> Optional[str]:
    """Bare parent comment id, or None when the parent is the post itself."""
    if not parent_fullname or not parent_fullname.startswith(f"{COMMENT_KIND}_"):
        return None
    return strip_type_prefix(parent_fullname)


class ResponseNormalizer:
    """
    Normalizer for Reddit API responses.

    All normalization methods are static and can be called without
    instantiation.

    Example:
        >>> post = ResponseNormalizer.normalize_post(listing["data"]["children"][0])
        >>> post.created_at
        1699123456000
    """

    @staticmethod
    def normalize_post(record: Mapping[str, Any]) -> NormalizedPost:
        """
        Normalize a Reddit submission (``t3``).

        Args:
            record: Raw submission data or its ``{kind, data}`` envelope

        Returns:
            NormalizedPost

        Example:
            >>> ResponseNormalizer.normalize_post({"data": raw}) == ResponseNormalizer.normalize_post(raw)
            True
        """
        data = unwrap_envelope(record)
        return NormalizedPost(
            id=data["id"],
            title=data.get("title") or "",
            body=data.get("selftext") or "",
            author=data.get("author"),
            subreddit=data.get("subreddit") or "",
            score=data.get("score") or 0,
            upvote_ratio=data.get("upvote_ratio") or 0.0,
            created_at=epoch_seconds_to_millis(data.get("created_utc")),
            comment_count=data.get("num_comments") or 0,
            url=data.get("url"),
            flags=PostFlags(
                is_self=bool(data.get("is_self", False)),
                is_video=bool(data.get("is_video", False)),
                is_stickied=bool(data.get("stickied", False)),
            ),
            metadata={
                "permalink": data.get("permalink"),
                "link_flair_text": data.get("link_flair_text"),
                "over_18": bool(data.get("over_18", False)),
                "locked": bool(data.get("locked", False)),
                "domain": data.get("domain"),
            },
        )

    @staticmethod
    def normalize_comment(
        record: Mapping[str, Any], post_id: Optional[str] = None
    ) -> NormalizedComment:
        """
        Normalize a Reddit comment (``t1``).

        ``link_id`` (``t3_xxx``) becomes ``post_id``; ``parent_id`` becomes
        ``parent_comment_id`` only when the parent is another comment.

        Args:
            record: Raw comment data or its envelope
            post_id: Fallback post id when ``link_id`` is missing

        Returns:
            NormalizedComment
        """
        data = unwrap_envelope(record)
        return NormalizedComment(
            id=data["id"],
            body=data.get("body") or "",
            author=data.get("author"),
            score=data.get("score") or 0,
            created_at=epoch_seconds_to_millis(data.get("created_utc")),
            post_id=strip_type_prefix(data.get("link_id")) or post_id or "",
            parent_comment_id=parent_comment_id(data.get("parent_id")),
            depth=data.get("depth") or 0,
            metadata={
                "permalink": data.get("permalink"),
                "is_submitter": bool(data.get("is_submitter", False)),
                "distinguished": data.get("distinguished"),
                "controversiality": data.get("controversiality") or 0,
            },
        )

    @staticmethod
    def normalize_subreddit(record: Mapping[str, Any]) -> NormalizedSubreddit:
        """
        Normalize a subreddit (``t5``).

        Args:
            record: Raw subreddit data or its envelope

        Returns:
            NormalizedSubreddit
        """
        data = unwrap_envelope(record)
        return NormalizedSubreddit(
            id=data["id"],
            name=data.get("display_name") or "",
            title=data.get("title") or "",
            description=data.get("description") or "",
            subscriber_count=data.get("subscribers") or 0,
            created_at=epoch_seconds_to_millis(data.get("created_utc")),
            is_nsfw=bool(data.get("over18", False)),
            public_description=data.get("public_description") or "",
            metadata={
                "url": data.get("url"),
                "icon_img": data.get("icon_img") or None,
            },
        )

    @staticmethod
    def normalize_post_batch(records: Iterable[Mapping[str, Any]]) -> List[NormalizedPost]:
        """Normalize a batch of posts."""
        return [ResponseNormalizer.normalize_post(record) for record in records]

    @staticmethod
    def normalize_comment_batch(
        records: Iterable[Mapping[str, Any]], post_id: Optional[str] = None
    ) -> List[NormalizedComment]:
        """
        Normalize the comment entries of a listing.

        Only ``t1`` children are kept; ``more`` stubs and any other kinds are
        dropped. Raw records without a ``kind`` are treated as comments.
        """
        return [
            ResponseNormalizer.normalize_comment(record, post_id=post_id)
            for record in records
            if record.get("kind", COMMENT_KIND) == COMMENT_KIND
        ]

    @staticmethod
    def normalize_subreddit_batch(records: Iterable[Mapping[str, Any]]) -> List[NormalizedSubreddit]:
        """Normalize a batch of subreddits."""
        return [ResponseNormalizer.normalize_subreddit(record) for record in records]


def normalize_post(record: Mapping[str, Any]) -> NormalizedPost:
    """Convenience function that calls ResponseNormalizer.normalize_post()."""
    return ResponseNormalizer.normalize_post(record)


def normalize_comment(record: Mapping[str, Any], post_id: Optional[str] = None) -> NormalizedComment:
    """Convenience function that calls ResponseNormalizer.normalize_comment()."""
    return ResponseNormalizer.normalize_comment(record, post_id=post_id)


def normalize_subreddit(record: Mapping[str, Any]) -> NormalizedSubreddit:
    """Convenience function that calls ResponseNormalizer.normalize_subreddit()."""
    return ResponseNormalizer.normalize_subreddit(record)
