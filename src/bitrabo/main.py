"""Main entry point - runs the swap API server."""

import asyncio
import logging

import uvicorn
from dotenv import load_dotenv

from bitrabo.api.app import create_app
from bitrabo.config import get_settings

logger = logging.getLogger(__name__)


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def serve() -> None:
    """Run the FastAPI server until it is stopped."""
    settings = get_settings()
    configure_logging(settings.debug)

    logger.info("Starting Bitrabo aggregator...")
    logger.info(f"Environment: {settings.environment}")

    app = create_app(settings)
    config = uvicorn.Config(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )
    server = uvicorn.Server(config)
    logger.info(f"Starting API server on {settings.api_host}:{settings.api_port}")
    await server.serve()


def main():
    """Main entry point."""
    load_dotenv()
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")


if __name__ == "__main__":
    main()
