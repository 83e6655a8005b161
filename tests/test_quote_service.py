"""Tests for the quote service mapping layer."""

import pytest

from bitrabo.routing.base import NormalizedQuote, QuoteAggregator, QuoteContextError
from bitrabo.units import NATIVE_TOKEN_ADDRESS
from bitrabo.web.contracts.quotes import QuoteParams
from bitrabo.web.services.quote_service import QuoteService

from conftest import FEE_RECEIVER, JUPITER_FEE_ACCOUNT, USDC, USER, FakeProvider


def params(**overrides) -> QuoteParams:
    values = {
        "from_network_id": "evm--1",
        "to_network_id": "evm--1",
        "from_token_address": NATIVE_TOKEN_ADDRESS,
        "to_token_address": USDC,
        "from_token_amount": "2",
        "user_address": USER,
    }
    values.update(overrides)
    return QuoteParams(**values)


@pytest.fixture
def service(settings):
    return QuoteService(QuoteAggregator([FakeProvider("a", "4000")]), settings)


class TestSwapRequestConversion:
    """Tests for QuoteService.to_swap_request."""

    def test_default_decimals(self, service):
        request = service.to_swap_request(params())
        assert request.from_token_amount == "2000000000000000000"
        assert request.slippage_bps is None

    def test_token_decimals(self, service):
        request = service.to_swap_request(params(from_token_amount="2.5", from_token_decimals=6))
        assert request.from_token_amount == "2500000"

    def test_bare_chain_ids(self, service):
        request = service.to_swap_request(params(from_network_id="1", to_network_id="56"))
        assert request.from_network_id == "evm--1"
        assert request.to_network_id == "evm--56"
        assert request.is_cross_chain

    def test_missing_from_token_is_native(self, service):
        request = service.to_swap_request(params(from_token_address=None))
        assert request.from_token_address == NATIVE_TOKEN_ADDRESS

    def test_slippage_percent_to_bps(self, service):
        assert service.to_swap_request(params(slippage_percentage=1.5)).slippage_bps == 150

    def test_zero_slippage_uses_provider_default(self, service):
        assert service.to_swap_request(params(slippage_percentage=0)).slippage_bps is None

    def test_incomplete(self, service):
        assert service.to_swap_request(params(to_network_id=None)) is None
        assert service.to_swap_request(params(to_token_address="")) is None
        assert service.to_swap_request(params(from_token_amount="-1")) is None
        assert service.to_swap_request(params(from_network_id="solana")) is None


class TestQuoteResultMapping:
    """Tests for QuoteService.to_quote_result."""

    def quote(self, provider: str, fee_percent: float = 0.005) -> NormalizedQuote:
        return NormalizedQuote(
            provider=provider,
            to_amount="4000",
            fee_percent=fee_percent,
            quote_context={"provider": provider},
            is_best=True,
        )

    def test_fee_receivers(self, service):
        request = service.to_swap_request(params())
        assert service.to_quote_result(self.quote("0x"), request).fee.fee_receiver == FEE_RECEIVER
        assert service.to_quote_result(self.quote("jupiter"), request).fee.fee_receiver == JUPITER_FEE_ACCOUNT
        assert service.to_quote_result(self.quote("changehero"), request).fee.fee_receiver is None
        assert service.to_quote_result(self.quote("1inch", 0.0), request).fee.fee_receiver is None

    def test_provider_names(self, service):
        request = service.to_swap_request(params())
        assert service.to_quote_result(self.quote("lifi"), request).info.provider_name == "LI.FI (Bitrabo)"
        assert service.to_quote_result(self.quote("custom"), request).info.provider_name == "custom"

    def test_raw_rate_without_decimals(self, service):
        request = service.to_swap_request(params(from_token_amount="0.000000000000002"))
        result = service.to_quote_result(self.quote("0x"), request)
        assert result.instant_rate == "2"

    def test_camel_case_output(self, service):
        request = service.to_swap_request(params())
        dumped = service.to_quote_result(self.quote("0x"), request).model_dump(by_alias=True)
        assert dumped["toAmount"] == "4000"
        assert dumped["isBest"] is True
        assert dumped["quoteResultCtx"] == {"provider": "0x"}


class TestBuildTx:
    """Tests for QuoteService.build_tx."""

    @pytest.mark.asyncio
    async def test_build(self, service):
        result = await service.build_tx({"provider": "a"})
        assert result.result.info.provider == "a"
        assert result.tx.to == "0xrouter-a"

    @pytest.mark.asyncio
    async def test_unroutable(self, service):
        with pytest.raises(QuoteContextError):
            await service.build_tx({"provider": "zzz"})
