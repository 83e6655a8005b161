"""Jupiter DEX aggregator integration for Solana.

Jupiter quotes are price estimates only. The serialized transaction comes
from a second ``/swap`` call that takes the original quote object, so the
whole quote response is kept in the quote context.
API docs: https://station.jup.ag/docs/apis/swap-api
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
from bitrabo.units import SOL_NATIVE_MINT, is_native

logger = logging.getLogger(__name__)

# Jupiter API endpoints
JUPITER_API_V6 = "https://quote-api.jup.ag/v6"

# Jupiter aggregator program, the call target of every swap transaction
JUPITER_PROGRAM_ID = "JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4"


def _mint(address: str) -> str:
    """Map the native placeholder (or empty address) to wrapped SOL."""
    return SOL_NATIVE_MINT if is_native(address) else address


class JupiterProvider(QuoteProvider):
    """Jupiter DEX aggregator provider for Solana.

    Jupiter aggregates liquidity from Raydium, Orca, Meteora and other
    Solana DEXes. Only Solana -> Solana swaps are in scope.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        fee: Optional[FeeRule] = None,
        base_url: str = JUPITER_API_V6,
        default_slippage_bps: int = 50,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Jupiter provider.

        Args:
            api_key: Optional API key for higher rate limits
            fee: Fee rule; platformFeeBps on the quote, feeAccount on the swap
        """
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.fee = fee or FeeRule(provider="jupiter")
        self.base_url = base_url.rstrip("/")
        self.default_slippage_bps = default_slippage_bps

    @property
    def name(self) -> str:
        return "jupiter"

    def supports(self, request: SwapRequest) -> bool:
        from_chain, to_chain = request.from_chain, request.to_chain
        return bool(
            request.user_address
            and from_chain
            and to_chain
            and from_chain.is_solana
            and to_chain.is_solana
        )

    def _get_headers(self) -> dict:
        """Get API headers."""
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def _fetch_quote(self, request: SwapRequest) -> NormalizedQuote:
        input_mint = _mint(request.from_token_address)
        output_mint = _mint(request.to_token_address)
        slippage_bps = request.slippage_or(self.default_slippage_bps)

        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}/quote",
                headers=self._get_headers(),
                params={
                    "inputMint": input_mint,
                    "outputMint": output_mint,
                    "amount": request.from_token_amount,
                    "slippageBps": str(slippage_bps),
                    **self.fee.quote_params,
                },
            )
            response.raise_for_status()
            data = response.json()

        out_amount = data.get("outAmount")
        if not out_amount:
            raise MalformedResponseError("Jupiter quote missing outAmount")

        return NormalizedQuote(
            provider=self.name,
            from_amount=str(data.get("inAmount", request.from_token_amount)),
            to_amount=str(out_amount),
            to_amount_min=optional_str(data.get("otherAmountThreshold")),
            fee_percent=self.fee.fee_percent,
            estimated_time=1,
            quote_context={
                "provider": self.name,
                "inputMint": input_mint,
                "outputMint": output_mint,
                "amount": request.from_token_amount,
                "slippageBps": slippage_bps,
                "userPublicKey": request.user_address,
                "quoteResponse": data,
            },
        )

    async def _fetch_transaction(self, context: dict) -> TransactionPayload:
        quote_response = context.get("quoteResponse")
        if not quote_response:
            raise MalformedResponseError("Missing quote response")
        user = context.get("userPublicKey")
        if not user:
            raise MalformedResponseError("Missing user public key")

        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/swap",
                headers=self._get_headers(),
                json={
                    "quoteResponse": quote_response,
                    "userPublicKey": user,
                    "wrapAndUnwrapSol": True,
                    "dynamicComputeUnitLimit": True,
                    "prioritizationFeeLamports": "auto",
                    **self.fee.build_params,
                },
            )
            response.raise_for_status()
            data = response.json()

        swap_transaction = data.get("swapTransaction")
        if not swap_transaction:
            raise MalformedResponseError("Jupiter swap response missing swapTransaction")

        return TransactionPayload(
            to=JUPITER_PROGRAM_ID,
            value="0",
            data=swap_transaction,
            gas_limit=optional_str(data.get("computeUnitLimit")),
        )
