"""FastAPI application factory."""

import logging
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bitrabo.config import Settings, get_settings
from bitrabo.routing.base import QuoteAggregator
from bitrabo.routing.factory import create_aggregator
from bitrabo.web.services.quote_service import QuoteService
from bitrabo.web.services.token_service import TokenService

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    aggregator: Optional[QuoteAggregator] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Application settings (cached settings if None)
        aggregator: Quote aggregator (built from settings if None)
        transport: Optional httpx transport for every outbound call
    """
    settings = settings or get_settings()
    aggregator = aggregator or create_aggregator(settings, transport=transport)

    app = FastAPI(
        title="Bitrabo Swap API",
        description="Multi-provider swap quote aggregator",
        version="0.1.0",
        debug=settings.debug,
    )

    app.state.settings = settings
    app.state.quote_service = QuoteService(aggregator, settings)
    app.state.token_service = TokenService(settings, transport=transport)
    app.state.upstream_transport = transport

    # Wallet clients call from arbitrary origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routes; the proxy catch-all must come last
    from bitrabo.api import proxy
    from bitrabo.api.routes import health, swap

    app.include_router(health.router, tags=["Health"])
    app.include_router(swap.router, tags=["Swap"])
    app.include_router(proxy.router, tags=["Proxy"])

    logger.info(f"API ready with providers: {[p.name for p in aggregator.providers]}")
    return app
