"""
Reddit Dashboard - Main Entry Point

Loads settings from the environment, configures structured logging and
serves the FastAPI app with uvicorn.
"""

import uvicorn

from reddit_dashboard.config import Settings
from reddit_dashboard.server import SERVER_VERSION, create_app
from reddit_dashboard.utils.logger import get_logger, setup_logging

# Initialize logger (reconfigured in main())
logger = get_logger(__name__)


def main() -> None:
    """Run the API server until interrupted."""
    settings = Settings()
    setup_logging(level=settings.log_level, environment=settings.environment)

    logger.info(
        "server_starting",
        version=SERVER_VERSION,
        environment=settings.environment,
        log_level=settings.log_level,
        host=settings.host,
        port=settings.port,
        ingress_backend="redis" if settings.redis_url else "memory",
    )

    app = create_app(settings, logger=logger)

    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    except Exception as e:
        logger.error("server_error", error=str(e), exc_info=True)
        raise
    finally:
        logger.info("server_exited")


if __name__ == "__main__":
    main()
