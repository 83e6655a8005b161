"""Wallet swap API endpoints (``/swap/v1``).

Every body uses the wallet envelope ``{"code": 0, "data": ...}``. A request
that yields no route answers ``data: []`` rather than an HTTP error.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from bitrabo.routing.base import QuoteContextError
from bitrabo.web.contracts.quotes import ApiResponse, BuildTxRequest, QuoteParams
from bitrabo.web.services.quote_service import QuoteService
from bitrabo.web.services.token_service import TokenService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/swap/v1")

# Error code for a quote context that cannot be routed back to its provider
BUILD_TX_CONTEXT_ERROR = 4001


def ok(data: Any) -> dict:
    return ApiResponse(code=0, data=data).model_dump()


def error_response(status_code: int, code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ApiResponse(code=code, data=None, message=message).model_dump(),
    )


def _quote_service(request: Request) -> QuoteService:
    return request.app.state.quote_service


def _token_service(request: Request) -> TokenService:
    return request.app.state.token_service


async def quote_payload(request: Request) -> dict:
    """Quote envelope for the request's query string."""
    try:
        params = QuoteParams.model_validate(dict(request.query_params))
    except ValidationError as e:
        logger.info(f"Rejected quote params: {e.error_count()} error(s)")
        return ok([])

    quotes = await _quote_service(request).get_quotes(params)
    return ok([quote.model_dump(by_alias=True, mode="json") for quote in quotes])


@router.get("/quote")
async def get_quote(request: Request):
    """Aggregated quotes, best first."""
    try:
        return await quote_payload(request)
    except Exception as e:
        logger.exception(f"Quote failed: {e}")
        return ok([])


@router.post("/build-tx")
async def build_tx(body: BuildTxRequest, request: Request):
    """Build the unsigned transaction for a quote result."""
    if not body.quote_result_ctx:
        return error_response(400, 400, "Missing quoteResultCtx")

    try:
        result = await _quote_service(request).build_tx(body.quote_result_ctx)
    except QuoteContextError as e:
        logger.warning(f"Build-tx rejected: {e}")
        return error_response(400, BUILD_TX_CONTEXT_ERROR, str(e))

    if result is None:
        return ok(None)
    return ok(result.model_dump(by_alias=True, mode="json"))


@router.get("/quote/events")
async def quote_events(request: Request):
    """Quotes as a server-sent event stream."""

    async def events():
        try:
            payload = await quote_payload(request)
            yield f"data: {json.dumps(payload)}\n\n"
            yield 'data: {"type":"done"}\n\n'
        except Exception as e:
            logger.exception(f"Quote event stream failed: {e}")
            yield 'data: {"type":"error"}\n\n'

    return StreamingResponse(
        events(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@router.get("/networks")
async def get_networks(request: Request):
    """Networks available for swapping."""
    networks = await _token_service(request).get_networks()
    return ok([n.model_dump(by_alias=True) for n in networks])


@router.get("/tokens")
async def get_tokens(
    request: Request,
    network_id: Optional[str] = Query(None, alias="networkId"),
    keywords: Optional[str] = None,
):
    """Tokens for a network, optionally filtered by keyword."""
    tokens = await _token_service(request).get_tokens(network_id=network_id, keywords=keywords)
    return ok([t.model_dump(by_alias=True) for t in tokens])
