"""Pytest configuration and fixtures."""

import asyncio
import json
import os
from typing import Callable, Optional

import httpx
import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"

from bitrabo.config import Settings
from bitrabo.routing.base import (
    NormalizedQuote,
    QuoteProvider,
    SwapRequest,
    TransactionPayload,
)

USER = "0x1111111111111111111111111111111111111111"
FEE_RECEIVER = "0x2222222222222222222222222222222222222222"
JUPITER_FEE_ACCOUNT = "FeeAcct1111111111111111111111111111111111111"
USDC = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
SOL_USER = "7xKXtg2CW87d97TXJSDpbD5jBkheTqA83TZRuJosgAsU"
SOL_USDC = "EPjFWdzrwSFTq2vdDPZfz9wMhq4f5kXzqa6HWtQU4Km"


class FakeProvider(QuoteProvider):
    """In-memory provider that records how often it is called."""

    def __init__(
        self,
        name: str,
        to_amount: str = "1000",
        scope: str = "any",
        delay: float = 0.0,
        error: Optional[BaseException] = None,
        with_transaction: bool = False,
    ):
        super().__init__(timeout=5.0)
        self._name = name
        self.to_amount = to_amount
        self.scope = scope
        self.delay = delay
        self.error = error
        self.with_transaction = with_transaction
        self.quote_calls = 0
        self.build_calls = 0
        self.last_request: Optional[SwapRequest] = None

    @property
    def name(self) -> str:
        return self._name

    def supports(self, request: SwapRequest) -> bool:
        if self.scope == "same-chain":
            return not request.is_cross_chain
        if self.scope == "cross-chain":
            return request.is_cross_chain
        return True

    def _transaction(self) -> TransactionPayload:
        return TransactionPayload(to=f"0xrouter-{self._name}", value="0", data="0xdeadbeef", gas_limit="21000")

    async def _fetch_quote(self, request: SwapRequest) -> NormalizedQuote:
        self.quote_calls += 1
        self.last_request = request
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return NormalizedQuote(
            provider=self._name,
            from_amount=request.from_token_amount,
            to_amount=self.to_amount,
            fee_percent=0.005,
            transaction=self._transaction() if self.with_transaction else None,
            quote_context={"provider": self._name, "amount": request.from_token_amount},
        )

    async def _fetch_transaction(self, context: dict) -> TransactionPayload:
        self.build_calls += 1
        if self.error is not None:
            raise self.error
        return self._transaction()


def json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, content=json.dumps(payload), headers={"content-type": "application/json"})


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def settings() -> Settings:
    """Settings with every provider configured and a platform fee."""
    return Settings(
        _env_file=None,
        zeroex_api_key="zx-key",
        oneinch_api_key="1inch-key",
        okx_api_key="okx-key",
        okx_secret_key="okx-secret",
        okx_passphrase="okx-pass",
        okx_project_id="okx-project",
        changehero_api_key="ch-key",
        fee_receiver_evm=FEE_RECEIVER,
        jupiter_fee_account=JUPITER_FEE_ACCOUNT,
        platform_fee_percent=0.005,
        provider_timeout_seconds=5.0,
    )


@pytest.fixture
def bare_settings() -> Settings:
    """Settings with no credentials and no fee recipients."""
    return Settings(_env_file=None)


@pytest.fixture
def evm_request() -> SwapRequest:
    """Same-chain Ethereum request: 1 ETH -> USDC."""
    return SwapRequest(
        from_network_id="evm--1",
        to_network_id="evm--1",
        from_token_address="0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
        to_token_address=USDC,
        from_token_amount="1000000000000000000",
        user_address=USER,
        slippage_bps=100,
    )


@pytest.fixture
def cross_chain_request() -> SwapRequest:
    """Ethereum USDC -> BNB Chain native."""
    return SwapRequest(
        from_network_id="evm--1",
        to_network_id="evm--56",
        from_token_address=USDC,
        to_token_address="0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
        from_token_amount="5000000",
        user_address=USER,
    )


@pytest.fixture
def solana_request() -> SwapRequest:
    """Solana native SOL -> USDC."""
    return SwapRequest(
        from_network_id="sol--101",
        to_network_id="sol--101",
        from_token_address="",
        to_token_address=SOL_USDC,
        from_token_amount="1000000000",
        user_address=SOL_USER,
        slippage_bps=50,
    )
