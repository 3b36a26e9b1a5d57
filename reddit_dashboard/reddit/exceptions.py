"""
Error taxonomy for the Reddit ingestion pipeline.

Every error carries an HTTP-style status code and a stable machine-readable
code so the inbound API can translate it to a ``{error, code}`` body without
inspecting the message.
"""

from typing import Any, Dict, Optional


class APIError(Exception):
    """
    Base exception for all pipeline errors.

    Use this for catching any error raised by the HTTP client, the upstream
    client, the store or the service layer.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        code: str = "API_ERROR",
    ) -> None:
        """
        Initialize APIError.

        Args:
            message: Error description
            status_code: HTTP status code the error maps to
            code: Stable error code exposed to API callers
        """
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Return the ``{error, code}`` body used by the inbound API."""
        return {"error": self.message, "code": self.code}


class RateLimitError(APIError):
    """
    Raised when a local fixed-window admission check denies a request.

    No network call is issued when this is raised.

    Attributes:
        limit: Window capacity
        reset_at: Epoch milliseconds at which the current window ends
    """

    def __init__(
        self,
        limit: int = 100,
        reset_at: Optional[int] = None,
        message: str = "Rate limit exceeded",
    ) -> None:
        self.limit = limit
        self.reset_at = reset_at
        super().__init__(message, status_code=429, code="RATE_LIMIT_EXCEEDED")


class UpstreamError(APIError):
    """
    Raised when Reddit answers with a non-2xx status or a malformed payload.

    The status code mirrors the upstream response; shape-contract violations
    use 404.

    Example:
        >>> raise UpstreamError("Service Unavailable", status_code=503)
    """

    def __init__(
        self,
        message: str,
        status_code: int = 502,
        code: str = "API_ERROR",
    ) -> None:
        super().__init__(message, status_code=status_code, code=code)


class NotFoundError(APIError):
    """
    Raised when an expected record is absent from a well-formed response.

    Example:
        >>> raise NotFoundError("post", "abc123")
    """

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        message: Optional[str] = None,
    ) -> None:
        """
        Initialize NotFoundError.

        Args:
            resource_type: Type of resource (e.g., "post", "comments")
            resource_id: Identifier of the resource
            message: Optional custom error message
        """
        self.resource_type = resource_type
        self.resource_id = resource_id

        if message is None:
            message = f"{resource_type.capitalize()} '{resource_id}' not found"

        super().__init__(
            message,
            status_code=404,
            code=f"{resource_type.upper()}_NOT_FOUND",
        )


class InternalError(APIError):
    """Raised for transport failures (timeout, DNS, refused connection) and unexpected errors."""

    def __init__(self, message: str = "Unknown error occurred") -> None:
        super().__init__(message, status_code=500, code="INTERNAL_ERROR")


class ValidationError(APIError):
    """
    Raised when request parameters are invalid.

    This is a client-side error and is never retried.

    Example:
        >>> raise ValidationError("must be between 1 and 100", field="limit")
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field

        if field:
            message = f"{field}: {message}"

        super().__init__(message, status_code=400, code="VALIDATION_ERROR")


class StorageError(APIError):
    """
    Raised when the relational store fails to read or write.

    Also raised when stored metadata cannot be parsed back, which is treated
    as data corruption rather than an empty bag.
    """

    def __init__(self, message: str, code: str = "STORAGE_ERROR") -> None:
        super().__init__(message, status_code=500, code=code)


class AuthenticationError(APIError):
    """Raised when a mutating request arrives without a valid session."""

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message, status_code=401, code="UNAUTHORIZED")
