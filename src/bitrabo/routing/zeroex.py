"""0x Swap API integration.

Quotes come from the indicative ``/price`` endpoint, which carries no
transaction; the firm ``/quote`` endpoint is called at build-tx time.
API docs: https://0x.org/docs/0x-swap-api/api-references
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

# 0x v1 uses one host per chain
ZEROEX_HOSTS = {
    1: "https://api.0x.org",
    10: "https://optimism.api.0x.org",
    56: "https://bsc.api.0x.org",
    137: "https://polygon.api.0x.org",
    250: "https://fantom.api.0x.org",
    8453: "https://base.api.0x.org",
    42161: "https://arbitrum.api.0x.org",
    43114: "https://avalanche.api.0x.org",
}


class ZeroExProvider(QuoteProvider):
    """0x aggregator for same-chain EVM swaps."""

    def __init__(
        self,
        api_key: str,
        fee: Optional[FeeRule] = None,
        hosts: Optional[dict[int, str]] = None,
        default_slippage_bps: int = 50,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.fee = fee or FeeRule(provider="0x")
        self.hosts = hosts or ZEROEX_HOSTS
        self.default_slippage_bps = default_slippage_bps

    @property
    def name(self) -> str:
        return "0x"

    def supports(self, request: SwapRequest) -> bool:
        chain = request.from_chain
        if request.is_cross_chain or chain is None:
            return False
        return chain.evm_chain_id in self.hosts

    def _get_headers(self) -> dict:
        return {"Accept": "application/json", "0x-api-key": self.api_key}

    async def _fetch_quote(self, request: SwapRequest) -> NormalizedQuote:
        chain_id = request.from_chain.evm_chain_id
        slippage = request.slippage_or(self.default_slippage_bps) / 10_000
        params = {
            "sellToken": request.from_token_address,
            "buyToken": request.to_token_address,
            "sellAmount": request.from_token_amount,
            "slippagePercentage": slippage,
        }
        if request.user_address:
            params["takerAddress"] = request.user_address

        async with self._client() as client:
            response = await client.get(
                f"{self.hosts[chain_id]}/swap/v1/price",
                headers=self._get_headers(),
                params={**params, **self.fee.quote_params},
            )
            response.raise_for_status()
            data = response.json()

        buy_amount = data.get("buyAmount")
        if not buy_amount:
            raise MalformedResponseError("0x price response missing buyAmount")

        return NormalizedQuote(
            provider=self.name,
            from_amount=str(data.get("sellAmount", request.from_token_amount)),
            to_amount=str(buy_amount),
            estimated_gas=optional_str(data.get("estimatedGas")),
            fee_percent=self.fee.fee_percent,
            quote_context={"provider": self.name, "chainId": chain_id, **params},
        )

    async def _fetch_transaction(self, context: dict) -> TransactionPayload:
        chain_id = int(context["chainId"])
        host = self.hosts.get(chain_id)
        if host is None:
            raise MalformedResponseError(f"0x does not serve chain {chain_id}")

        params = {
            key: context[key]
            for key in ("sellToken", "buyToken", "sellAmount", "slippagePercentage", "takerAddress")
            if key in context
        }

        async with self._client() as client:
            response = await client.get(
                f"{host}/swap/v1/quote",
                headers=self._get_headers(),
                params={**params, **self.fee.build_params},
            )
            response.raise_for_status()
            data = response.json()

        return TransactionPayload(
            to=data["to"],
            value=str(data.get("value", "0")),
            data=data["data"],
            gas_limit=optional_str(data.get("gas") or data.get("estimatedGas")),
        )
