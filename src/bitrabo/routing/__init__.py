"""Routing module for swap quote aggregation.

Providers:
- 0x: same-chain EVM aggregator (transaction built in a second call)
- 1inch: same-chain EVM aggregator (transaction returned with the quote)
- OKX: same-chain EVM aggregator with signed requests
- Jupiter: Solana DEX aggregator (transaction built in a second call)
- LI.FI: cross-chain EVM bridge/DEX aggregator
- ChangeHero: symbol-based cross-chain exchange
"""

from bitrabo.routing.base import (
    NormalizedQuote,
    ProviderResult,
    QuoteAggregator,
    QuoteContextError,
    QuoteProvider,
    SwapRequest,
    TransactionPayload,
    Unavailable,
    UnavailableReason,
)
from bitrabo.routing.factory import create_aggregator, create_providers
from bitrabo.routing.fees import FeeRule, build_fee_policy
from bitrabo.routing.selector import select_best

__all__ = [
    # Data model
    "SwapRequest",
    "NormalizedQuote",
    "TransactionPayload",
    "Unavailable",
    "UnavailableReason",
    "ProviderResult",
    "QuoteContextError",
    # Engine
    "QuoteProvider",
    "QuoteAggregator",
    "select_best",
    # Fees
    "FeeRule",
    "build_fee_policy",
    # Factory functions
    "create_aggregator",
    "create_providers",
]
