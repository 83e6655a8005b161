"""Fallback proxy for swap endpoints not served locally.

Any ``/swap/v1/*`` request that no local route matches is forwarded to the
upstream aggregator with its method, query string and body intact.
"""

import logging

import httpx
from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

router = APIRouter()

# Headers that describe a single connection or are recomputed by the client
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
    "host",
    "content-length",
    "content-encoding",
}


def _filter_headers(headers) -> dict:
    return {k: v for k, v in headers.items() if k.lower() not in HOP_BY_HOP_HEADERS}


@router.api_route(
    "/swap/v1/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def proxy_upstream(path: str, request: Request):
    """Forward the request to the upstream aggregator."""
    settings = request.app.state.settings
    url = f"{settings.upstream_url.rstrip('/')}/swap/v1/{path}"
    body = await request.body()

    logger.info(f"Proxying {request.method} /swap/v1/{path} upstream")
    try:
        async with httpx.AsyncClient(
            timeout=settings.upstream_timeout_seconds,
            transport=request.app.state.upstream_transport,
        ) as client:
            upstream = await client.request(
                request.method,
                url,
                params=request.query_params,
                content=body or None,
                headers=_filter_headers(request.headers),
            )
    except httpx.HTTPError as e:
        logger.error(f"Upstream proxy failed for /swap/v1/{path}: {type(e).__name__}: {e}")
        return JSONResponse(
            status_code=502,
            content={"code": 502, "data": None, "message": "Upstream unavailable"},
        )

    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        headers=_filter_headers(upstream.headers),
    )
