"""
Table definitions for the dashboard store.

Three collections keyed by the Reddit id. ``metadata`` holds the JSON
serialized metadata bag as text.
"""

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Float,
    Index,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    func,
)

metadata = MetaData()

reddit_posts = Table(
    "reddit_posts",
    metadata,
    Column("id", String(32), primary_key=True, comment="Reddit post id (no t3_ prefix)"),
    Column("title", Text, nullable=False),
    Column("body", Text, nullable=False, default=""),
    Column("author", String(64), nullable=True),
    Column("subreddit", String(64), nullable=False),
    Column("score", Integer, nullable=False, default=0),
    Column("upvote_ratio", Float, nullable=False, default=0.0),
    Column("created_at", BigInteger, nullable=False, comment="Epoch milliseconds"),
    Column("comment_count", Integer, nullable=False, default=0),
    Column("url", Text, nullable=True),
    Column("is_self", Boolean, nullable=False, default=False),
    Column("is_video", Boolean, nullable=False, default=False),
    Column("is_stickied", Boolean, nullable=False, default=False),
    Column("metadata", Text, nullable=False, default="{}"),
    Column("updated_at", DateTime(timezone=True), server_default=func.current_timestamp()),
    Index("idx_reddit_posts_subreddit_created", "subreddit", "created_at"),
)

reddit_comments = Table(
    "reddit_comments",
    metadata,
    Column("id", String(32), primary_key=True, comment="Reddit comment id (no t1_ prefix)"),
    Column("body", Text, nullable=False, default=""),
    Column("author", String(64), nullable=True),
    Column("score", Integer, nullable=False, default=0),
    Column("created_at", BigInteger, nullable=False, comment="Epoch milliseconds"),
    Column("post_id", String(32), nullable=False, comment="Logically references reddit_posts.id"),
    Column("parent_comment_id", String(32), nullable=True),
    Column("depth", Integer, nullable=False, default=0),
    Column("metadata", Text, nullable=False, default="{}"),
    Column("updated_at", DateTime(timezone=True), server_default=func.current_timestamp()),
    Index("idx_reddit_comments_post_score", "post_id", "score"),
)

subreddits = Table(
    "subreddits",
    metadata,
    Column("id", String(32), primary_key=True, comment="Reddit subreddit id (no t5_ prefix)"),
    Column("name", String(64), nullable=False),
    Column("title", Text, nullable=False, default=""),
    Column("description", Text, nullable=False, default=""),
    Column("subscriber_count", BigInteger, nullable=False, default=0),
    Column("created_at", BigInteger, nullable=False, comment="Epoch milliseconds"),
    Column("is_nsfw", Boolean, nullable=False, default=False),
    Column("public_description", Text, nullable=False, default=""),
    Column("metadata", Text, nullable=False, default="{}"),
    Column("updated_at", DateTime(timezone=True), server_default=func.current_timestamp()),
    Index("idx_subreddits_name", "name"),
)
