"""Relational persistence for normalized Reddit records."""

from reddit_dashboard.storage.store import RedditStore
from reddit_dashboard.storage.tables import metadata, reddit_comments, reddit_posts, subreddits

__all__ = [
    "RedditStore",
    "metadata",
    "reddit_comments",
    "reddit_posts",
    "subreddits",
]
