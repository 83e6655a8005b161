"""Request and response contracts for the web layer.

These Pydantic models define the swap API interface for wallet clients.
"""

from bitrabo.web.contracts.assets import NetworkInfo, TokenInfo
from bitrabo.web.contracts.quotes import (
    ApiResponse,
    BuildTxRequest,
    BuildTxResult,
    QuoteParams,
    QuoteResult,
)

__all__ = [
    # Quote contracts
    "QuoteParams",
    "QuoteResult",
    "BuildTxRequest",
    "BuildTxResult",
    "ApiResponse",
    # Asset contracts
    "NetworkInfo",
    "TokenInfo",
]
