"""Service layer."""

from reddit_dashboard.services.reddit_service import RedditService

__all__ = ["RedditService"]
