"""Record and response models."""

from reddit_dashboard.models.records import (
    DashboardStats,
    NormalizedComment,
    NormalizedPost,
    NormalizedSubreddit,
    PostFlags,
    PostWithComments,
)
from reddit_dashboard.models.responses import (
    APIResponse,
    DataResponse,
    ErrorResponse,
    HealthCheckResponse,
    ListingMetadata,
    PageMetadata,
)

__all__ = [
    "APIResponse",
    "DashboardStats",
    "DataResponse",
    "ErrorResponse",
    "HealthCheckResponse",
    "ListingMetadata",
    "NormalizedComment",
    "NormalizedPost",
    "NormalizedSubreddit",
    "PageMetadata",
    "PostFlags",
    "PostWithComments",
]
