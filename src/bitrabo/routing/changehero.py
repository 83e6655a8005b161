"""ChangeHero instant exchange integration.

ChangeHero is symbol based and works in human-readable amounts, so this
adapter converts to and from smallest units using the token decimals the
caller supplies. Quoting returns a rate only; build-tx creates an exchange
and returns a transfer of the input amount to its deposit address.
API docs: https://changehero.io/api
"""

import itertools
import logging
from typing import Any, Optional

import httpx

from bitrabo.routing.base import (
    MalformedResponseError,
    NormalizedQuote,
    ProviderError,
    QuoteProvider,
    SwapRequest,
    TransactionPayload,
)
from bitrabo.routing.fees import FeeRule
from bitrabo.units import format_amount, from_smallest_units, is_native, parse_network_id, to_smallest_units

logger = logging.getLogger(__name__)

CHANGEHERO_API_URL = "https://api.changehero.io/v2"

# ERC-20 transfer(address,uint256)
ERC20_TRANSFER_SELECTOR = "0xa9059cbb"

_request_ids = itertools.count(1)


def encode_erc20_transfer(to_address: str, amount: int) -> str:
    """Encode transfer(address to, uint256 amount) calldata."""
    to_padded = to_address.lower().replace("0x", "").zfill(64)
    amount_hex = hex(amount)[2:].zfill(64)
    return f"{ERC20_TRANSFER_SELECTOR}{to_padded}{amount_hex}"


class ChangeHeroProvider(QuoteProvider):
    """ChangeHero exchange; handles cross-chain pairs by ticker symbol."""

    def __init__(
        self,
        api_key: str,
        fee: Optional[FeeRule] = None,
        base_url: str = CHANGEHERO_API_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.fee = fee or FeeRule(provider="changehero")
        self.base_url = base_url.rstrip("/")

    @property
    def name(self) -> str:
        return "changehero"

    def supports(self, request: SwapRequest) -> bool:
        return bool(
            request.from_token_symbol
            and request.to_token_symbol
            and request.from_token_decimals is not None
            and request.to_token_decimals is not None
            and request.user_address
        )

    async def _call(self, method: str, params: dict) -> Any:
        """Make a JSON-RPC call."""
        async with self._client() as client:
            response = await client.post(
                f"{self.base_url}/",
                headers={"Accept": "application/json", "api-key": self.api_key},
                json={
                    "jsonrpc": "2.0",
                    "id": next(_request_ids),
                    "method": method,
                    "params": params,
                },
            )
            response.raise_for_status()
            payload = response.json()

        if payload.get("error"):
            error = payload["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise ProviderError(f"ChangeHero {method} error: {message}")
        if payload.get("result") is None:
            raise MalformedResponseError(f"ChangeHero {method} returned no result")
        return payload["result"]

    async def _fetch_quote(self, request: SwapRequest) -> NormalizedQuote:
        from_symbol = request.from_token_symbol.lower()
        to_symbol = request.to_token_symbol.lower()
        amount = from_smallest_units(request.from_token_amount, request.from_token_decimals)
        amount_text = format_amount(amount)

        estimated = await self._call(
            "getExchangeAmount",
            {"from": from_symbol, "to": to_symbol, "amount": amount_text, **self.fee.quote_params},
        )
        to_amount = to_smallest_units(estimated, request.to_token_decimals)

        return NormalizedQuote(
            provider=self.name,
            from_amount=request.from_token_amount,
            to_amount=to_amount,
            fee_percent=self.fee.fee_percent,
            estimated_time=1200,
            quote_context={
                "provider": self.name,
                "from": from_symbol,
                "to": to_symbol,
                "amount": amount_text,
                "fromAmount": request.from_token_amount,
                "fromNetworkId": request.from_network_id,
                "fromTokenAddress": request.from_token_address,
                "address": request.user_address,
                "refundAddress": request.user_address,
            },
        )

    async def _fetch_transaction(self, context: dict) -> TransactionPayload:
        exchange = await self._call(
            "createTransaction",
            {
                "from": context["from"],
                "to": context["to"],
                "amount": context["amount"],
                "address": context["address"],
                "refundAddress": context["refundAddress"],
                **self.fee.build_params,
            },
        )
        deposit_address = exchange.get("payinAddress")
        if not deposit_address:
            raise MalformedResponseError("ChangeHero exchange missing payinAddress")
        logger.info(f"ChangeHero exchange {exchange.get('id')} created, deposit to {deposit_address}")

        amount = int(context["fromAmount"])
        token = context.get("fromTokenAddress")
        chain = parse_network_id(context.get("fromNetworkId"))

        if chain is not None and chain.is_evm and not is_native(token):
            return TransactionPayload(
                to=token,
                value="0",
                data=encode_erc20_transfer(deposit_address, amount),
            )
        return TransactionPayload(to=deposit_address, value=str(amount), data="0x")
