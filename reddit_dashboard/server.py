"""
FastAPI application initialization and configuration.

Wires the Reddit client, the store, the ingress rate limiter and the session
reader into one app, installs error handling, and exposes a health check.
Every component can be injected, which is how the tests run the app without
network or database access.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional, Tuple

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from reddit_dashboard import __version__
from reddit_dashboard.auth import SessionReader, StaticTokenSessionReader
from reddit_dashboard.config import Settings
from reddit_dashboard.ingress.connection import RedisConnection
from reddit_dashboard.ingress.limiter import IngressRateLimiter, RedisIngressRateLimiter
from reddit_dashboard.ingress.middleware import RateLimitMiddleware
from reddit_dashboard.models.responses import ErrorResponse, HealthCheckResponse
from reddit_dashboard.reddit.client import RedditClient
from reddit_dashboard.reddit.exceptions import APIError
from reddit_dashboard.reddit.http import RateLimitedHTTPClient
from reddit_dashboard.routes import api_router
from reddit_dashboard.services.reddit_service import RedditService
from reddit_dashboard.storage.store import RedditStore
from reddit_dashboard.utils.logger import component_logger

# Server metadata
SERVER_NAME = "reddit-dashboard"
SERVER_VERSION = __version__
SERVER_DESCRIPTION = "Reddit dashboard backend: fetch, normalize and store Reddit content"


def build_limiter(
    settings: Settings,
    logger: Optional[structlog.BoundLogger] = None,
) -> Tuple[Any, Optional[RedisConnection]]:
    """
    Ingress limiter for ``settings`` and the Redis connection it uses.

    Returns a Redis-backed limiter when ``REDIS_URL`` is set, otherwise an
    in-process one and no connection.
    """
    if settings.redis_url:
        connection = RedisConnection(settings.redis_url, logger=logger)
        limiter = RedisIngressRateLimiter(
            connection.client,
            max_requests=settings.ingress_rate_limit_max,
            window_ms=settings.ingress_rate_limit_window_ms,
            logger=logger,
        )
        return limiter, connection

    return IngressRateLimiter(
        max_requests=settings.ingress_rate_limit_max,
        window_ms=settings.ingress_rate_limit_window_ms,
        logger=logger,
    ), None


def create_app(
    settings: Optional[Settings] = None,
    reddit_client: Optional[RedditClient] = None,
    service: Optional[RedditService] = None,
    session_reader: Optional[SessionReader] = None,
    limiter: Optional[Any] = None,
    logger: Optional[structlog.BoundLogger] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Runtime settings (defaults to ``Settings()``)
        reddit_client: Reddit client; built from settings when omitted
        service: Fetch-and-store service; when omitted a store is opened
            at ``settings.database_url``
        session_reader: Resolves the caller of mutating routes
        limiter: Ingress rate limiter
        logger: Logger shared by every component built here

    Returns:
        Configured FastAPI app

    Example:
        >>> app = create_app(Settings(database_url="sqlite+aiosqlite:///:memory:"))
        >>> uvicorn.run(app)
    """
    settings = settings or Settings()
    log = component_logger(logger, __name__)

    http_client: Optional[RateLimitedHTTPClient] = None
    if reddit_client is None:
        http_client = RateLimitedHTTPClient(settings.client_config(), logger=logger)
        reddit_client = RedditClient(http_client, base_url=settings.reddit_base_url, logger=logger)

    store: Optional[RedditStore] = None
    if service is None:
        store = RedditStore.from_url(settings.database_url, logger=logger)
        service = RedditService(reddit_client, store, logger=logger)

    if session_reader is None:
        session_reader = StaticTokenSessionReader(settings.auth_tokens)

    redis_connection: Optional[RedisConnection] = None
    if limiter is None:
        limiter, redis_connection = build_limiter(settings, logger=logger)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if store is not None:
            await store.create_all()

        log.info(
            "server_started",
            name=SERVER_NAME,
            version=SERVER_VERSION,
            environment=settings.environment,
            ingress_backend=getattr(limiter, "backend", "custom"),
        )
        try:
            yield
        finally:
            if http_client is not None:
                await http_client.aclose()
            if store is not None:
                await store.dispose()
            if redis_connection is not None:
                await redis_connection.close()
            log.info("server_shutdown_complete")

    app = FastAPI(
        title=SERVER_NAME,
        version=SERVER_VERSION,
        description=SERVER_DESCRIPTION,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.reddit_client = reddit_client
    app.state.service = service
    app.state.store = store
    app.state.session_reader = session_reader
    app.state.limiter = limiter
    app.state.redis = redis_connection

    app.add_middleware(RateLimitMiddleware, limiter=limiter, path_prefix="/api", logger=logger)

    setup_error_handling(app, log)
    register_health_check(app)

    app.include_router(api_router)

    log.info("app_initialized", name=SERVER_NAME, version=SERVER_VERSION)
    return app


def setup_error_handling(app: FastAPI, logger: structlog.BoundLogger) -> None:
    """
    Map exceptions raised by routes to ``{"error", "code"}`` JSON bodies.

    Unexpected exceptions are left to RateLimitMiddleware, which turns them
    into a 500 and still attaches the rate-limit headers.
    """

    @app.exception_handler(APIError)
    async def handle_api_error(request: Request, error: APIError) -> JSONResponse:
        event = "api_error" if error.status_code >= 500 else "client_error"
        log = logger.error if error.status_code >= 500 else logger.warning
        log(
            event,
            path=request.url.path,
            status_code=error.status_code,
            code=error.code,
            message=error.message,
        )
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, error: RequestValidationError) -> JSONResponse:
        details = jsonable_encoder(error.errors())
        logger.warning("validation_error", path=request.url.path, errors=len(details))
        body = ErrorResponse(error="Invalid request parameters", code="VALIDATION_ERROR", details=details)
        return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


def register_health_check(app: FastAPI) -> None:
    """Register ``GET /health``."""

    @app.get("/health", response_model=HealthCheckResponse)
    async def health_check(request: Request) -> HealthCheckResponse:
        components = {
            "server": "healthy",
            "ingress_rate_limiter": getattr(request.app.state.limiter, "backend", "custom"),
        }

        store = request.app.state.store
        if store is not None:
            components["database"] = "healthy" if await store.ping() else "unhealthy"

        connection = request.app.state.redis
        if connection is not None:
            components["redis"] = "healthy" if await connection.health_check() else "degraded"

        # Determine overall status
        if "unhealthy" in components.values():
            overall_status = "unhealthy"
        elif "degraded" in components.values():
            overall_status = "degraded"
        else:
            overall_status = "healthy"

        return HealthCheckResponse(status=overall_status, version=SERVER_VERSION, components=components)
