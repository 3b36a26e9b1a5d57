"""
Pydantic response models for the HTTP client and the inbound API.

Defines the raw upstream response wrapper, the listing envelope returned by
the API, error bodies and the health check payload.
"""
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class APIResponse(BaseModel):
    """
    Successful upstream response as returned by the rate-limited HTTP client.

    ``data`` holds the decoded JSON body.
    """

    status_code: int = Field(..., ge=200, lt=300)
    data: Any = None
    headers: Dict[str, str] = Field(default_factory=dict)


class ListingMetadata(BaseModel):
    """Echo of the query parameters used for a listing."""

    limit: int = Field(..., ge=1, le=100)
    skip: int = Field(0, ge=0)
    sort: str
    subreddit: Optional[str] = None
    rate_limit_remaining: Optional[int] = Field(
        None,
        ge=0,
        description="Remaining upstream calls in the client's current window",
    )


class PageMetadata(BaseModel):
    """Pagination echo for stored read-back endpoints."""

    page: int = Field(0, ge=0)
    page_size: int = Field(..., ge=1, le=100)
    offset: int = Field(0, ge=0)
    count: int = Field(0, ge=0)


T = TypeVar("T")
M = TypeVar("M")


class DataResponse(BaseModel, Generic[T, M]):
    """
    Generic ``{data, metadata}`` envelope for API responses.

    Example:
        >>> DataResponse[list, ListingMetadata](
        ...     data=[...],
        ...     metadata=ListingMetadata(limit=10, sort="hot"),
        ... )
    """

    data: T = Field(..., description="Endpoint-specific result data")
    metadata: Optional[M] = None


class ErrorResponse(BaseModel):
    """
    Error body returned by every inbound endpoint.

    Attributes:
        error: Human-readable error message
        code: Stable error code (e.g. RATE_LIMIT_EXCEEDED)
        details: Optional validation details
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Rate limit exceeded",
                "code": "RATE_LIMIT_EXCEEDED",
            }
        }
    )

    error: str = Field(..., min_length=1)
    code: str = Field(..., min_length=1)
    details: Optional[Any] = None


class HealthCheckResponse(BaseModel):
    """Health check response used by the load balancer probe."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "components": {
                    "database": "healthy",
                    "ingress_rate_limiter": "memory",
                },
            }
        }
    )

    status: str = Field(
        ...,
        description="Overall health status (healthy, degraded, unhealthy)",
    )
    version: str
    components: Dict[str, str]
