"""1inch DEX aggregator integration.

Uses the 1inch Swap API, which returns the executable transaction together
with the quote.
API docs: https://portal.1inch.dev/documentation/apis/swap/introduction
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

# 1inch API endpoints
ONEINCH_API_V6 = "https://api.1inch.dev/swap/v6.0"

# Chain IDs served by the swap API
CHAIN_IDS = {
    "ethereum": 1,
    "bsc": 56,
    "polygon": 137,
    "arbitrum": 42161,
    "optimism": 10,
    "avalanche": 43114,
    "gnosis": 100,
    "fantom": 250,
    "base": 8453,
    "zksync": 324,
    "linea": 59144,
}

SWAP_PARAMS = ("src", "dst", "amount", "from", "slippage")


class OneInchProvider(QuoteProvider):
    """1inch DEX aggregator provider.

    Same-chain EVM swaps only. The ``/swap`` endpoint needs the sender
    address, so requests without one are out of scope.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        fee: Optional[FeeRule] = None,
        base_url: str = ONEINCH_API_V6,
        default_slippage_bps: int = 50,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize 1inch provider.

        Args:
            api_key: 1inch API key (required for production)
            fee: Fee injection rule for this provider
            base_url: Swap API base URL
            default_slippage_bps: Slippage when the request has none
        """
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.fee = fee or FeeRule(provider="1inch")
        self.base_url = base_url.rstrip("/")
        self.default_slippage_bps = default_slippage_bps
        self._chain_ids = set(CHAIN_IDS.values())

    @property
    def name(self) -> str:
        return "1inch"

    def supports(self, request: SwapRequest) -> bool:
        chain = request.from_chain
        if request.is_cross_chain or chain is None or not request.user_address:
            return False
        return chain.evm_chain_id in self._chain_ids

    def _get_headers(self) -> dict:
        """Get API headers with authorization."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _swap(self, chain_id: int, params: dict) -> dict:
        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}/{chain_id}/swap",
                headers=self._get_headers(),
                params={**params, "disableEstimate": "true", **self.fee.quote_params},
            )
            response.raise_for_status()
            return response.json()

    @staticmethod
    def _parse_tx(data: dict) -> TransactionPayload:
        tx = data.get("tx")
        if not tx:
            raise MalformedResponseError("1inch swap response missing tx")
        return TransactionPayload(
            to=tx["to"],
            value=str(tx.get("value", "0")),
            data=tx["data"],
            gas_limit=optional_str(tx.get("gas")),
        )

    async def _fetch_quote(self, request: SwapRequest) -> NormalizedQuote:
        chain_id = request.from_chain.evm_chain_id
        params = {
            "src": request.from_token_address,
            "dst": request.to_token_address,
            "amount": request.from_token_amount,
            "from": request.user_address,
            # 1inch takes slippage in percent
            "slippage": request.slippage_or(self.default_slippage_bps) / 100,
        }

        data = await self._swap(chain_id, params)
        transaction = self._parse_tx(data)

        return NormalizedQuote(
            provider=self.name,
            from_amount=request.from_token_amount,
            to_amount=str(data["dstAmount"]),
            estimated_gas=transaction.gas_limit,
            fee_percent=self.fee.fee_percent,
            transaction=transaction,
            quote_context={"provider": self.name, "chainId": chain_id, **params},
        )

    async def _fetch_transaction(self, context: dict) -> TransactionPayload:
        params = {key: context[key] for key in SWAP_PARAMS}
        data = await self._swap(int(context["chainId"]), params)
        return self._parse_tx(data)
