"""
Tests for RedditClient.

Tests cover:
- URL construction (sort, limit, percent-encoding)
- Listing parsing and skip/limit slicing
- Two-element thread responses for posts and comments
- Shape-contract violations (404) and upstream failures
"""

from urllib.parse import unquote

import httpx
import pytest

from reddit_dashboard.reddit.client import RedditClient
from reddit_dashboard.reddit.exceptions import NotFoundError, UpstreamError, ValidationError
from reddit_dashboard.reddit.http import RateLimitedHTTPClient
from tests.payloads import MORE_STUB, listing, make_comment, make_post, thread


def make_client(handler, clock):
    """RedditClient over a MockTransport; returns the client and the list of seen requests."""
    seen = []

    def _handler(request):
        seen.append(request)
        return handler(request)

    http = RateLimitedHTTPClient(transport=httpx.MockTransport(_handler), clock=clock)
    return RedditClient(http), seen


class TestGetSubredditPosts:
    """Test suite for get_subreddit_posts."""

    @pytest.mark.asyncio
    async def test_fetch_hot_posts(self, clock, subreddit_listing):
        client, seen = make_client(lambda request: httpx.Response(200, json=subreddit_listing), clock)

        posts = await client.get_subreddit_posts("test", sort="hot", limit=10)

        assert len(posts) <= 10
        assert len(posts) == 10
        for post in posts:
            assert 0 <= post.upvote_ratio <= 1
            assert post.subreddit == "test"
        raw = subreddit_listing["data"]["children"][0]["data"]
        assert posts[0].created_at == int(raw["created_utc"]) * 1000
        assert str(seen[0].url) == "https://www.reddit.com/r/test/hot.json?limit=10"

    @pytest.mark.asyncio
    async def test_skip_is_applied_locally(self, clock, subreddit_listing):
        client, seen = make_client(lambda request: httpx.Response(200, json=subreddit_listing), clock)

        posts = await client.get_subreddit_posts("test", sort="new", limit=5, skip=3)

        assert seen[0].url.params["limit"] == "8"
        assert [post.id for post in posts] == ["p00003", "p00004", "p00005", "p00006", "p00007"]

    @pytest.mark.asyncio
    async def test_full_page_at_listing_cap(self, clock):
        def handler(request):
            count = int(request.url.params["limit"])
            return httpx.Response(200, json=listing("t3", [make_post(f"p{i:03d}") for i in range(count)]))

        client, seen = make_client(handler, clock)

        posts = await client.get_subreddit_posts("test", limit=10, skip=90)

        assert seen[0].url.params["limit"] == "100"
        assert [post.id for post in posts] == [f"p{i:03d}" for i in range(90, 100)]

    @pytest.mark.asyncio
    async def test_missing_envelope_is_404(self, clock):
        client, _ = make_client(lambda request: httpx.Response(200, json={"kind": "Listing"}), clock)

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_subreddit_posts("test")

        assert exc_info.value.status_code == 404
        assert exc_info.value.code == "INVALID_RESPONSE"

    @pytest.mark.asyncio
    async def test_upstream_status_propagates(self, clock):
        client, _ = make_client(lambda request: httpx.Response(403), clock)

        with pytest.raises(UpstreamError) as exc_info:
            await client.get_subreddit_posts("private_sub")

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kwargs",
        [{"limit": 0}, {"limit": 101}, {"sort": "best"}, {"skip": -1}, {"skip": 95, "limit": 10}, {"skip": 100}],
    )
    async def test_invalid_arguments_never_reach_network(self, clock, kwargs):
        client, seen = make_client(lambda request: httpx.Response(200, json=listing("t3", [])), clock)

        with pytest.raises(ValidationError):
            await client.get_subreddit_posts("test", **kwargs)

        assert seen == []


class TestGetPost:
    """Test suite for get_post."""

    @pytest.mark.asyncio
    async def test_fetch_post(self, clock, raw_post, raw_comments):
        client, seen = make_client(lambda request: httpx.Response(200, json=thread(raw_post, raw_comments)), clock)

        post = await client.get_post("abc123")

        assert post.id == "abc123"
        assert post.created_at == 1699200000000
        assert seen[0].url.path == "/comments/abc123.json"

    @pytest.mark.asyncio
    async def test_empty_post_listing_is_not_found(self, clock):
        payload = [listing("t3", []), listing("t1", [])]
        client, _ = make_client(lambda request: httpx.Response(200, json=payload), clock)

        with pytest.raises(NotFoundError) as exc_info:
            await client.get_post("abc123")

        assert exc_info.value.code == "POST_NOT_FOUND"
        assert exc_info.value.status_code == 404


class TestGetPostComments:
    """Test suite for get_post_comments."""

    @pytest.mark.asyncio
    async def test_only_comment_entries_are_returned(self, clock, raw_post, raw_comments):
        payload = thread(raw_post, raw_comments, extra_children=[MORE_STUB])
        client, seen = make_client(lambda request: httpx.Response(200, json=payload), clock)

        comments = await client.get_post_comments("abc123", sort="top", limit=50)

        assert len(comments) == 3
        assert seen[0].url.params["sort"] == "top"
        assert seen[0].url.params["limit"] == "50"
        assert all(comment.post_id == "abc123" for comment in comments)
        assert comments[0].parent_comment_id is None
        assert comments[2].parent_comment_id == "c1"

    @pytest.mark.asyncio
    async def test_missing_comment_listing_is_not_found(self, clock, raw_post):
        payload = [listing("t3", [raw_post])]
        client, _ = make_client(lambda request: httpx.Response(200, json=payload), clock)

        with pytest.raises(NotFoundError) as exc_info:
            await client.get_post_comments("abc123")

        assert exc_info.value.code == "COMMENTS_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_comment_without_link_id_uses_requested_post(self, clock, raw_post):
        orphan = make_comment("c9")
        del orphan["link_id"]
        client, _ = make_client(lambda request: httpx.Response(200, json=thread(raw_post, [orphan])), clock)

        comments = await client.get_post_comments("abc123")

        assert comments[0].post_id == "abc123"


class TestSearchSubreddits:
    """Test suite for search_subreddits."""

    @pytest.mark.asyncio
    async def test_search(self, clock, search_listing):
        client, seen = make_client(lambda request: httpx.Response(200, json=search_listing), clock)

        results = await client.search_subreddits("python")

        assert [item.name for item in results] == ["python", "learnpython"]
        assert seen[0].url.path == "/subreddits/search.json"

    @pytest.mark.asyncio
    async def test_query_is_percent_encoded(self, clock, search_listing):
        client, seen = make_client(lambda request: httpx.Response(200, json=search_listing), clock)

        await client.search_subreddits("machine learning & AI/ML")

        raw_query = seen[0].url.query.decode()
        assert "q=machine%20learning%20%26%20AI%2FML" in raw_query
        assert unquote(seen[0].url.params["q"]) == "machine learning & AI/ML"

    @pytest.mark.asyncio
    async def test_get_remaining_tracks_http_window(self, clock, search_listing):
        client, _ = make_client(lambda request: httpx.Response(200, json=search_listing), clock)

        await client.search_subreddits("python")

        assert client.get_remaining() == 99


@pytest.mark.asyncio
async def test_posts_are_normalized_from_listing_order(clock):
    payload = listing("t3", [make_post("first"), make_post("second")])
    client, _ = make_client(lambda request: httpx.Response(200, json=payload), clock)

    posts = await client.get_subreddit_posts("all", limit=2)

    assert [post.id for post in posts] == ["first", "second"]
