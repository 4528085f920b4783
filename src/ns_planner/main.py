"""Main entry point for the NS planner server."""

import asyncio
import logging
import sys

import uvicorn
from pydantic import ValidationError
from starlette.applications import Starlette

from ns_planner.adapters.config import AppConfig
from ns_planner.adapters.web import create_app
from ns_planner.wiring import build_services

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)


def load_config() -> AppConfig:
    """Load configuration from the environment, exiting on invalid values."""
    try:
        config = AppConfig()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(config.log_level)
    return config


def app_factory() -> Starlette:
    """Application factory used by uvicorn's reloader."""
    return create_app(load_config(), services_factory=build_services)


async def main() -> None:
    """Main application entry point."""
    config = load_config()
    server = uvicorn.Server(
        uvicorn.Config(
            create_app(config, services_factory=build_services),
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
        )
    )
    logger.info(f"Listening on http://{config.host}:{config.port}")
    await server.serve()


def run() -> None:
    """Synchronous entry point for the server command."""
    config = load_config()
    if config.reload:
        # The reloader needs an import string, not an app instance
        uvicorn.run(
            "ns_planner.main:app_factory",
            factory=True,
            host=config.host,
            port=config.port,
            reload=True,
        )
        return
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    run()
