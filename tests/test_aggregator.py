"""Tests for the aggregation engine."""

import httpx
import pytest

from bitrabo.routing.base import (
    NormalizedQuote,
    QuoteAggregator,
    QuoteContextError,
    TransactionPayload,
    Unavailable,
    UnavailableReason,
)
from bitrabo.routing.factory import create_aggregator, create_providers

from conftest import FakeProvider


class TestNormalizedQuote:
    """Tests for quote record validation."""

    def test_rejects_decimal_amount(self):
        with pytest.raises(ValueError):
            NormalizedQuote(provider="a", to_amount="1.5", fee_percent=0, quote_context={"provider": "a"})

    def test_requires_transaction_or_context(self):
        with pytest.raises(ValueError):
            NormalizedQuote(provider="a", to_amount="100", fee_percent=0)


class TestQuoteAggregator:
    """Tests for QuoteAggregator.aggregate."""

    @pytest.mark.asyncio
    async def test_best_quote_is_highest(self, evm_request):
        aggregator = QuoteAggregator([FakeProvider("a", "1000"), FakeProvider("b", "1200")])

        quotes = await aggregator.aggregate(evm_request)

        assert [q.provider for q in quotes] == ["b", "a"]
        assert quotes[0].is_best
        assert not quotes[1].is_best

    @pytest.mark.asyncio
    async def test_get_best_quote(self, evm_request):
        aggregator = QuoteAggregator([FakeProvider("a", "1000"), FakeProvider("b", "1200")])

        best = await aggregator.get_best_quote(evm_request)

        assert best.provider == "b"
        assert best.is_best

    @pytest.mark.asyncio
    async def test_only_provider_times_out(self, evm_request):
        slow = FakeProvider("slow", delay=1.0)
        aggregator = QuoteAggregator([slow], timeout=0.05)

        assert await aggregator.aggregate(evm_request) == []
        assert await aggregator.get_best_quote(evm_request) is None

    @pytest.mark.asyncio
    async def test_timeout_does_not_cancel_siblings(self, evm_request):
        aggregator = QuoteAggregator(
            [FakeProvider("slow", "5000", delay=1.0), FakeProvider("fast", "1000")],
            timeout=0.05,
        )

        quotes = await aggregator.aggregate(evm_request)

        assert [q.provider for q in quotes] == ["fast"]

    @pytest.mark.asyncio
    async def test_cross_chain_skips_same_chain_providers(self, cross_chain_request):
        same_chain = FakeProvider("same", "9000", scope="same-chain")
        bridge = FakeProvider("bridge", "1000", scope="cross-chain")
        aggregator = QuoteAggregator([same_chain, bridge])

        quotes = await aggregator.aggregate(cross_chain_request)

        assert [q.provider for q in quotes] == ["bridge"]
        assert same_chain.quote_calls == 0
        assert bridge.quote_calls == 1

    @pytest.mark.asyncio
    async def test_no_eligible_providers(self, cross_chain_request):
        aggregator = QuoteAggregator([FakeProvider("same", scope="same-chain")])
        assert await aggregator.aggregate(cross_chain_request) == []

    @pytest.mark.asyncio
    async def test_failures_are_isolated(self, evm_request):
        aggregator = QuoteAggregator([
            FakeProvider("down", error=httpx.ConnectError("connection refused")),
            FakeProvider("broken", error=KeyError("toAmount")),
            FakeProvider("crashed", error=RuntimeError("boom")),
            FakeProvider("ok", "700"),
        ])

        quotes = await aggregator.aggregate(evm_request)

        assert [q.provider for q in quotes] == ["ok"]
        baseline = await QuoteAggregator([FakeProvider("ok", "700")]).aggregate(evm_request)
        assert quotes == baseline
        assert quotes[0].is_best

    @pytest.mark.asyncio
    async def test_zero_amount_is_unavailable(self, evm_request):
        provider = FakeProvider("zero", "0")

        result = await provider.get_quote(evm_request)

        assert isinstance(result, Unavailable)
        assert result.reason == UnavailableReason.UPSTREAM_ERROR

    @pytest.mark.asyncio
    async def test_exactly_one_best(self, evm_request):
        aggregator = QuoteAggregator([FakeProvider(name, "1000") for name in ("a", "b", "c")])

        quotes = await aggregator.aggregate(evm_request)

        assert len(quotes) == 3
        assert sum(q.is_best for q in quotes) == 1

    @pytest.mark.asyncio
    async def test_tie_uses_priority(self, evm_request):
        aggregator = QuoteAggregator(
            [FakeProvider("okx", "1000"), FakeProvider("1inch", "1000")],
            priority=["1inch", "okx"],
        )

        quotes = await aggregator.aggregate(evm_request)

        assert quotes[0].provider == "1inch"


class TestProviderGuard:
    """Tests for fault conversion in QuoteProvider.get_quote."""

    @pytest.mark.asyncio
    async def test_inapplicable_without_io(self, cross_chain_request):
        provider = FakeProvider("same", scope="same-chain")

        result = await provider.get_quote(cross_chain_request)

        assert result.reason == UnavailableReason.INAPPLICABLE
        assert provider.quote_calls == 0

    @pytest.mark.asyncio
    async def test_timeout_reason(self, evm_request):
        provider = FakeProvider("a", error=httpx.ReadTimeout("read timeout"))
        result = await provider.get_quote(evm_request)
        assert result.reason == UnavailableReason.TIMEOUT

    @pytest.mark.asyncio
    async def test_malformed_reason(self, evm_request):
        provider = FakeProvider("a", error=KeyError("dstAmount"))
        result = await provider.get_quote(evm_request)
        assert result.reason == UnavailableReason.MALFORMED


class TestBuildTransaction:
    """Tests for routing build-tx back to the quoting provider."""

    @pytest.mark.asyncio
    async def test_routes_to_issuing_provider(self, evm_request):
        x = FakeProvider("x", "1000")
        y = FakeProvider("y", "900")
        aggregator = QuoteAggregator([x, y])
        best = await aggregator.get_best_quote(evm_request)

        tx = await aggregator.build_transaction(best.quote_context)

        assert isinstance(tx, TransactionPayload)
        assert tx.to == "0xrouter-x"
        assert x.build_calls == 1
        assert y.build_calls == 0

    @pytest.mark.asyncio
    async def test_unknown_provider(self):
        aggregator = QuoteAggregator([FakeProvider("x")])
        with pytest.raises(QuoteContextError):
            await aggregator.build_transaction({"provider": "nope"})

    @pytest.mark.asyncio
    async def test_missing_context(self):
        aggregator = QuoteAggregator([FakeProvider("x")])
        with pytest.raises(QuoteContextError):
            await aggregator.build_transaction(None)
        with pytest.raises(QuoteContextError):
            await aggregator.build_transaction({})

    @pytest.mark.asyncio
    async def test_provider_rejects_foreign_context(self):
        with pytest.raises(QuoteContextError):
            await FakeProvider("x").build_transaction({"provider": "y"})

    @pytest.mark.asyncio
    async def test_build_failure_is_unavailable(self):
        provider = FakeProvider("x", error=httpx.ConnectError("down"))
        aggregator = QuoteAggregator([provider])

        result = await aggregator.build_transaction({"provider": "x"})

        assert isinstance(result, Unavailable)
        assert result.reason == UnavailableReason.UPSTREAM_ERROR


class TestFactory:
    """Tests for provider construction from settings."""

    def test_all_providers_with_credentials(self, settings):
        providers = create_providers(settings)
        assert {p.name for p in providers} == {"0x", "1inch", "okx", "jupiter", "lifi", "changehero"}

    def test_keyless_providers_only(self, bare_settings):
        providers = create_providers(bare_settings)
        assert {p.name for p in providers} == {"jupiter", "lifi"}

    def test_enabled_providers_filter(self, settings):
        limited = settings.model_copy(update={"enabled_providers": "lifi, 0x, unknown"})
        providers = create_providers(limited)
        assert [p.name for p in providers] == ["lifi", "0x"]

    def test_aggregator_configuration(self, settings):
        aggregator = create_aggregator(settings)
        assert aggregator.timeout == settings.provider_timeout_seconds
        assert aggregator.priority == ["1inch", "0x", "okx", "lifi", "jupiter", "changehero"]
