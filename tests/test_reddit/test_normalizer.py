"""
Unit tests for Reddit response normalizer.

Tests the ResponseNormalizer class and normalization functions.
"""

import pytest

from reddit_dashboard.reddit.normalizer import (
    ResponseNormalizer,
    epoch_seconds_to_millis,
    normalize_comment,
    normalize_post,
    normalize_subreddit,
    parent_comment_id,
    strip_type_prefix,
    unwrap_envelope,
)
from tests.payloads import MORE_STUB, make_comment, make_post, make_subreddit


class TestHelpers:
    """Test the small conversion helpers."""

    def test_unwrap_envelope(self):
        raw = {"id": "abc123", "title": "x"}
        assert unwrap_envelope({"kind": "t3", "data": raw}) is raw
        assert unwrap_envelope(raw) is raw

    def test_record_with_own_id_is_not_unwrapped(self):
        """A raw record that happens to carry a ``data`` mapping stays as is."""
        raw = {"id": "abc123", "data": {"id": "other"}}
        assert unwrap_envelope(raw) is raw

    @pytest.mark.parametrize(
        "value,expected",
        [(1699200000, 1699200000000), (1699200000.5, 1699200000500), (None, 0)],
    )
    def test_epoch_seconds_to_millis(self, value, expected):
        assert epoch_seconds_to_millis(value) == expected

    def test_strip_type_prefix(self):
        assert strip_type_prefix("t3_abc123") == "abc123"
        assert strip_type_prefix("t1_xyz") == "xyz"
        assert strip_type_prefix("abc123") == "abc123"
        assert strip_type_prefix(None) is None

    def test_parent_comment_id(self):
        assert parent_comment_id("t1_c1") == "c1"
        assert parent_comment_id("t3_abc123") is None
        assert parent_comment_id(None) is None


class TestNormalizePost:
    """Test post normalization."""

    def test_normalize_basic_post(self):
        post = normalize_post(make_post())

        assert post.id == "abc123"
        assert post.title == "Test Post"
        assert post.body == "This is a test post"
        assert post.author == "testuser"
        assert post.subreddit == "test"
        assert post.score == 100
        assert post.upvote_ratio == 0.95
        assert post.comment_count == 3
        assert post.flags.is_self is True
        assert post.flags.is_video is False

    def test_timestamp_is_milliseconds(self):
        post = normalize_post(make_post(created_utc=1699200000))
        assert post.created_at == 1699200000 * 1000

    def test_envelope_and_raw_are_equivalent(self):
        raw = make_post()
        assert normalize_post({"kind": "t3", "data": raw}) == normalize_post(raw)

    def test_metadata_bag(self):
        post = normalize_post(make_post(over_18=True))

        assert post.metadata["permalink"] == "/r/test/comments/abc123/test_post/"
        assert post.metadata["link_flair_text"] == "Discussion"
        assert post.metadata["over_18"] is True
        assert post.metadata["domain"] == "self.test"

    def test_deleted_author(self):
        post = normalize_post(make_post(author=None, selftext=None))

        assert post.author is None
        assert post.body == ""

    def test_stickied_maps_to_flag(self):
        post = normalize_post(make_post(stickied=True))
        assert post.flags.is_stickied is True


class TestNormalizeComment:
    """Test comment normalization."""

    def test_top_level_comment(self):
        comment = normalize_comment(make_comment("c1"))

        assert comment.id == "c1"
        assert comment.post_id == "abc123"
        assert comment.parent_comment_id is None
        assert comment.depth == 0
        assert comment.created_at == 1699200100000

    def test_reply_keeps_parent(self):
        comment = normalize_comment(make_comment("c3", parent_id="t1_c1"))

        assert comment.parent_comment_id == "c1"
        assert comment.depth == 1

    def test_post_id_fallback(self):
        raw = make_comment("c1")
        del raw["link_id"]

        assert normalize_comment(raw, post_id="fallback").post_id == "fallback"

    def test_envelope_and_raw_are_equivalent(self):
        raw = make_comment("c1")
        assert normalize_comment({"kind": "t1", "data": raw}) == normalize_comment(raw)

    def test_comment_batch_drops_more_stubs(self):
        children = [{"kind": "t1", "data": make_comment(f"c{i}")} for i in range(3)]
        children.append(MORE_STUB)

        comments = ResponseNormalizer.normalize_comment_batch(children, post_id="abc123")

        assert [c.id for c in comments] == ["c0", "c1", "c2"]


class TestNormalizeSubreddit:
    """Test subreddit normalization."""

    def test_normalize_subreddit(self):
        subreddit = normalize_subreddit({"kind": "t5", "data": make_subreddit()})

        assert subreddit.id == "2qh0y"
        assert subreddit.name == "python"
        assert subreddit.subscriber_count == 1200000
        assert subreddit.created_at == 1201230879000
        assert subreddit.is_nsfw is False
        assert subreddit.metadata == {"url": "/r/python/", "icon_img": None}

    def test_nsfw_flag(self):
        assert normalize_subreddit(make_subreddit(over18=True)).is_nsfw is True
