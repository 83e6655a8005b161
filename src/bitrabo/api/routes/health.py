"""Health check endpoints."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "bitrabo"}


@router.get("/health/detailed")
async def detailed_health(request: Request):
    """Detailed health check with configuration and provider info."""
    settings = request.app.state.settings
    aggregator = request.app.state.quote_service.aggregator
    return {
        "status": "healthy",
        "service": "bitrabo",
        "version": "0.1.0",
        "providers": [provider.name for provider in aggregator.providers],
        "config": settings.get_safe_dict(),
    }
