"""LI.FI cross-chain integration.

LI.FI bridges and swaps across EVM chains and returns the transaction
request together with the quote.
API docs: https://docs.li.fi/li.fi-api/li.fi-api
"""

import logging
from typing import Optional

import httpx

from bitrabo.routing.base import (
    MalformedResponseError,
    NormalizedQuote,
    QuoteProvider,
    SwapRequest,
    TransactionPayload,
    optional_str,
)
from bitrabo.routing.fees import FeeRule

logger = logging.getLogger(__name__)

LIFI_API_URL = "https://li.quest/v1"

QUOTE_PARAMS = ("fromChain", "toChain", "fromToken", "toToken", "fromAmount", "fromAddress", "slippage")


class LiFiProvider(QuoteProvider):
    """LI.FI provider for same-chain and cross-chain EVM swaps."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        fee: Optional[FeeRule] = None,
        base_url: str = LIFI_API_URL,
        default_slippage_bps: int = 50,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.fee = fee or FeeRule(provider="lifi")
        self.base_url = base_url.rstrip("/")
        self.default_slippage_bps = default_slippage_bps

    @property
    def name(self) -> str:
        return "lifi"

    def supports(self, request: SwapRequest) -> bool:
        from_chain, to_chain = request.from_chain, request.to_chain
        if not from_chain or not to_chain or not request.user_address:
            return False
        return from_chain.evm_chain_id is not None and to_chain.evm_chain_id is not None

    def _get_headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["x-lifi-api-key"] = self.api_key
        return headers

    async def _quote(self, params: dict) -> dict:
        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}/quote",
                headers=self._get_headers(),
                params={**params, **self.fee.quote_params},
            )
            response.raise_for_status()
            return response.json()

    @staticmethod
    def _parse_tx(data: dict) -> TransactionPayload:
        tx = data.get("transactionRequest")
        if not tx:
            raise MalformedResponseError("LI.FI quote missing transactionRequest")
        return TransactionPayload(
            to=tx["to"],
            value=str(tx.get("value", "0")),
            data=tx["data"],
            gas_limit=optional_str(tx.get("gasLimit")),
        )

    async def _fetch_quote(self, request: SwapRequest) -> NormalizedQuote:
        params = {
            "fromChain": request.from_chain.evm_chain_id,
            "toChain": request.to_chain.evm_chain_id,
            "fromToken": request.from_token_address,
            "toToken": request.to_token_address,
            "fromAmount": request.from_token_amount,
            "fromAddress": request.user_address,
            "slippage": request.slippage_or(self.default_slippage_bps) / 10_000,
        }

        data = await self._quote(params)
        estimate = data["estimate"]
        transaction = self._parse_tx(data)
        gas_costs = estimate.get("gasCosts") or []

        return NormalizedQuote(
            provider=self.name,
            from_amount=str(estimate.get("fromAmount", request.from_token_amount)),
            to_amount=str(estimate["toAmount"]),
            to_amount_min=optional_str(estimate.get("toAmountMin")),
            estimated_gas=optional_str(gas_costs[0].get("limit")) if gas_costs else transaction.gas_limit,
            estimated_time=int(estimate.get("executionDuration") or 180),
            fee_percent=self.fee.fee_percent,
            transaction=transaction,
            quote_context={"provider": self.name, "tool": data.get("tool"), **params},
        )

    async def _fetch_transaction(self, context: dict) -> TransactionPayload:
        params = {key: context[key] for key in QUOTE_PARAMS}
        return self._parse_tx(await self._quote(params))
