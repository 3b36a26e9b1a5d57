"""HTTP routes mounted under ``/api/reddit``."""

from fastapi import APIRouter

from reddit_dashboard.routes import posts, stored, subreddits

api_router = APIRouter(prefix="/api/reddit")
api_router.include_router(posts.router)
api_router.include_router(subreddits.router)
api_router.include_router(stored.router)

__all__ = ["api_router"]
