"""Quote service bridging the wallet swap API and the aggregator.

This service produces quotes and unsigned transactions only. Signing and
broadcasting happen client-side.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from bitrabo.config import Settings, get_settings
from bitrabo.routing.base import (
    NormalizedQuote,
    QuoteAggregator,
    SwapRequest,
    TransactionPayload,
)
from bitrabo.units import (
    DEFAULT_DECIMALS,
    NATIVE_TOKEN_ADDRESS,
    from_smallest_units,
    normalize_native,
    parse_network_id,
    to_smallest_units,
)
from bitrabo.web.contracts.quotes import (
    BuildTxResult,
    BuildTxResultInfo,
    FeeInfo,
    ProviderInfo,
    QuoteParams,
    QuoteResult,
    TokenRef,
    TxPayload,
)

logger = logging.getLogger(__name__)

PROVIDER_NAMES = {
    "0x": "0x",
    "1inch": "1inch",
    "okx": "OKX DEX",
    "jupiter": "Jupiter",
    "lifi": "LI.FI (Bitrabo)",
    "changehero": "ChangeHero",
}


def provider_info(provider: str) -> ProviderInfo:
    return ProviderInfo(provider=provider, provider_name=PROVIDER_NAMES.get(provider, provider))


def tx_payload(tx: TransactionPayload) -> TxPayload:
    return TxPayload(to=tx.to, value=tx.value, data=tx.data, gas_limit=tx.gas_limit)


class QuoteService:
    """Service for fetching aggregated swap quotes and building transactions."""

    def __init__(self, aggregator: QuoteAggregator, settings: Optional[Settings] = None):
        self.aggregator = aggregator
        self.settings = settings or get_settings()

    def to_swap_request(self, params: QuoteParams) -> Optional[SwapRequest]:
        """Convert wire query params to a SwapRequest.

        Returns None when the request cannot produce a quote: a missing
        network, destination token or amount, or an amount that rounds to zero.
        """
        from_chain = parse_network_id(params.from_network_id)
        to_chain = parse_network_id(params.to_network_id)
        if from_chain is None or to_chain is None:
            return None
        if not params.to_token_address or not params.from_token_amount:
            return None

        decimals = params.from_token_decimals
        if decimals is None:
            decimals = DEFAULT_DECIMALS
        amount = to_smallest_units(params.from_token_amount, decimals)
        if amount == "0":
            return None

        slippage_bps = None
        if params.slippage_percentage:
            slippage_bps = int(round(params.slippage_percentage * 100))

        return SwapRequest(
            from_network_id=str(from_chain),
            to_network_id=str(to_chain),
            from_token_address=normalize_native(params.from_token_address) or NATIVE_TOKEN_ADDRESS,
            to_token_address=normalize_native(params.to_token_address),
            from_token_amount=amount,
            user_address=params.user_address or "",
            slippage_bps=slippage_bps,
            from_token_symbol=params.from_token_symbol,
            to_token_symbol=params.to_token_symbol,
            from_token_decimals=params.from_token_decimals,
            to_token_decimals=params.to_token_decimals,
        )

    async def get_quotes(self, params: QuoteParams) -> list[QuoteResult]:
        """Get all quotes for the request, best first."""
        request = self.to_swap_request(params)
        if request is None:
            logger.info("Quote request incomplete or zero amount, returning no quotes")
            return []

        quotes = await self.aggregator.aggregate(request)
        return [self.to_quote_result(quote, request) for quote in quotes]

    async def build_tx(self, quote_context: Optional[dict]) -> Optional[BuildTxResult]:
        """Build the transaction for a previously returned quote.

        Returns None when the provider could not build it.

        Raises:
            QuoteContextError: context missing or not routable
        """
        tx = await self.aggregator.build_transaction(quote_context)
        if not isinstance(tx, TransactionPayload):
            logger.warning(f"Build-tx unavailable: {tx}")
            return None

        return BuildTxResult(
            result=BuildTxResultInfo(info=provider_info(quote_context["provider"])),
            tx=tx_payload(tx),
        )

    def to_quote_result(self, quote: NormalizedQuote, request: SwapRequest) -> QuoteResult:
        from_amount = quote.from_amount or request.from_token_amount
        return QuoteResult(
            info=provider_info(quote.provider),
            from_token_info=TokenRef(
                contract_address=request.from_token_address,
                network_id=request.from_network_id,
                decimals=request.from_token_decimals,
                symbol=request.from_token_symbol,
            ),
            to_token_info=TokenRef(
                contract_address=request.to_token_address,
                network_id=request.to_network_id,
                decimals=request.to_token_decimals,
                symbol=request.to_token_symbol,
            ),
            from_amount=from_amount,
            to_amount=quote.to_amount,
            to_amount_min=quote.to_amount_min,
            instant_rate=self._instant_rate(from_amount, quote.to_amount, request),
            estimated_gas=quote.estimated_gas,
            estimated_time=quote.estimated_time,
            fee=FeeInfo(
                percentage_fee=quote.fee_percent,
                fee_receiver=self._fee_receiver(quote),
            ),
            is_best=quote.is_best,
            received_best=quote.is_best,
            tx=tx_payload(quote.transaction) if quote.transaction else None,
            quote_result_ctx=quote.quote_context,
        )

    def _fee_receiver(self, quote: NormalizedQuote) -> Optional[str]:
        if not quote.fee_percent:
            return None
        if quote.provider == "jupiter":
            return self.settings.jupiter_fee_account
        if quote.provider == "changehero":
            return None
        return self.settings.fee_receiver_evm

    @staticmethod
    def _instant_rate(from_amount: str, to_amount: str, request: SwapRequest) -> Optional[str]:
        """Output per unit of input, in whole tokens when both decimals are known."""
        try:
            if request.from_token_decimals is not None and request.to_token_decimals is not None:
                sold = from_smallest_units(from_amount, request.from_token_decimals)
                bought = from_smallest_units(to_amount, request.to_token_decimals)
            else:
                sold, bought = Decimal(from_amount), Decimal(to_amount)
            if sold == 0:
                return None
            return format((bought / sold).normalize(), "f")
        except (InvalidOperation, ValueError):
            return None
