"""FastAPI dependencies resolving the components built by ``create_app``."""

from fastapi import Request

from reddit_dashboard.reddit.client import RedditClient
from reddit_dashboard.services.reddit_service import RedditService


def get_reddit_client(request: Request) -> RedditClient:
    return request.app.state.reddit_client


def get_service(request: Request) -> RedditService:
    return request.app.state.service
