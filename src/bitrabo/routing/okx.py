"""OKX DEX aggregator integration.

Every request is signed with the account's API secret:
``base64(HMAC-SHA256(secret, timestamp + method + requestPath + body))``.
The signature is bound to the timestamp, so it is computed per call.
API docs: https://www.okx.com/web3/build/docs/waas/dex-swap
"""

import base64
import hashlib
import hmac
import logging
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

import httpx

from bitrabo.routing.base import (
    MalformedResponseError,
    NormalizedQuote,
    ProviderError,
    QuoteProvider,
    SwapRequest,
    TransactionPayload,
    optional_str,
)
from bitrabo.routing.fees import FeeRule

logger = logging.getLogger(__name__)

OKX_API_URL = "https://www.okx.com"
SWAP_PATH = "/api/v5/dex/aggregator/swap"

# EVM chains supported by the OKX DEX API
SUPPORTED_CHAIN_IDS = {1, 10, 56, 137, 250, 324, 8453, 42161, 43114, 59144}

SWAP_PARAMS = ("chainId", "amount", "fromTokenAddress", "toTokenAddress", "slippage", "userWalletAddress")


def sign_request(secret: str, timestamp: str, method: str, request_path: str, body: str = "") -> str:
    """Compute the OK-ACCESS-SIGN header value."""
    message = f"{timestamp}{method.upper()}{request_path}{body}"
    digest = hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def _timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-01-01T00:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


class OKXProvider(QuoteProvider):
    """OKX DEX aggregator for same-chain EVM swaps."""

    def __init__(
        self,
        api_key: str,
        secret_key: str,
        passphrase: str,
        project_id: str = "",
        fee: Optional[FeeRule] = None,
        base_url: str = OKX_API_URL,
        default_slippage_bps: int = 50,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.api_key = api_key
        self.secret_key = secret_key
        self.passphrase = passphrase
        self.project_id = project_id
        self.fee = fee or FeeRule(provider="okx")
        self.base_url = base_url.rstrip("/")
        self.default_slippage_bps = default_slippage_bps

    @property
    def name(self) -> str:
        return "okx"

    def supports(self, request: SwapRequest) -> bool:
        chain = request.from_chain
        if request.is_cross_chain or chain is None or not request.user_address:
            return False
        return chain.evm_chain_id in SUPPORTED_CHAIN_IDS

    def _signed_headers(self, method: str, request_path: str, body: str = "") -> dict:
        timestamp = _timestamp()
        headers = {
            "Accept": "application/json",
            "OK-ACCESS-KEY": self.api_key,
            "OK-ACCESS-SIGN": sign_request(self.secret_key, timestamp, method, request_path, body),
            "OK-ACCESS-TIMESTAMP": timestamp,
            "OK-ACCESS-PASSPHRASE": self.passphrase,
            "X-Simulated-Trading": "0",
        }
        if self.project_id:
            headers["OK-ACCESS-PROJECT"] = self.project_id
        return headers

    async def _swap(self, params: dict) -> dict:
        # The signed path must match the request byte for byte, so the
        # query string is encoded here rather than by httpx
        request_path = f"{SWAP_PATH}?{urlencode({**params, **self.fee.quote_params})}"
        async with self._client() as client:
            response = await client.get(
                f"{self.base_url}{request_path}",
                headers=self._signed_headers("GET", request_path),
            )
            response.raise_for_status()
            payload = response.json()

        if str(payload.get("code")) != "0":
            raise ProviderError(f"OKX error {payload.get('code')}: {payload.get('msg', 'unknown')}")
        results = payload.get("data") or []
        if not results:
            raise MalformedResponseError("OKX returned no route")
        return results[0]

    @staticmethod
    def _parse_tx(result: dict) -> TransactionPayload:
        tx = result.get("tx")
        if not tx:
            raise MalformedResponseError("OKX response missing tx")
        return TransactionPayload(
            to=tx["to"],
            value=str(tx.get("value", "0")),
            data=tx["data"],
            gas_limit=optional_str(tx.get("gas")),
        )

    async def _fetch_quote(self, request: SwapRequest) -> NormalizedQuote:
        params = {
            "chainId": request.from_chain.evm_chain_id,
            "amount": request.from_token_amount,
            "fromTokenAddress": request.from_token_address,
            "toTokenAddress": request.to_token_address,
            "slippage": request.slippage_or(self.default_slippage_bps) / 10_000,
            "userWalletAddress": request.user_address,
        }

        result = await self._swap(params)
        transaction = self._parse_tx(result)
        # v5 nests amounts under routerResult; older payloads are flat
        router_result = result.get("routerResult") or result

        return NormalizedQuote(
            provider=self.name,
            from_amount=optional_str(router_result.get("fromTokenAmount")) or request.from_token_amount,
            to_amount=str(router_result["toTokenAmount"]),
            to_amount_min=optional_str(result["tx"].get("minReceiveAmount")),
            estimated_gas=transaction.gas_limit,
            fee_percent=self.fee.fee_percent,
            transaction=transaction,
            quote_context={"provider": self.name, **params},
        )

    async def _fetch_transaction(self, context: dict) -> TransactionPayload:
        params = {key: context[key] for key in SWAP_PARAMS}
        return self._parse_tx(await self._swap(params))
