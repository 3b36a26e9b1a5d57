"""
Shared fixtures: raw Reddit JSON payloads and a pinned clock.
"""

import pytest

from tests.payloads import listing, make_comment, make_post, make_subreddit


class FakeClock:
    """Epoch-millisecond clock advanced by hand."""

    def __init__(self, now=1_700_000_000_000):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def raw_post():
    return make_post()


@pytest.fixture
def raw_comments():
    return [
        make_comment("c1", score=30),
        make_comment("c2", score=20),
        make_comment("c3", parent_id="t1_c1", score=5),
    ]


@pytest.fixture
def subreddit_listing():
    return listing(
        "t3",
        [make_post(f"p{i:05d}", subreddit="test", created_utc=1699200000 + i) for i in range(12)],
    )


@pytest.fixture
def search_listing():
    return listing(
        "t5",
        [make_subreddit(), make_subreddit("2r5rp", "learnpython", title="Learn Python", over18=False)],
    )
