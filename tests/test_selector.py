"""Tests for best-quote selection."""

from bitrabo.routing.base import NormalizedQuote
from bitrabo.routing.selector import ranking_key, select_best


def quote(provider: str, to_amount: str) -> NormalizedQuote:
    return NormalizedQuote(
        provider=provider,
        to_amount=to_amount,
        fee_percent=0.0,
        quote_context={"provider": provider},
    )


class TestSelectBest:
    """Tests for select_best."""

    def test_highest_amount_wins(self):
        ranked = select_best([quote("a", "1000"), quote("b", "1200"), quote("c", "900")])
        assert [q.provider for q in ranked] == ["b", "a", "c"]
        assert [q.is_best for q in ranked] == [True, False, False]

    def test_compares_as_integers(self):
        # "999" > "1000" as strings
        ranked = select_best([quote("a", "999"), quote("b", "1000")])
        assert ranked[0].provider == "b"

    def test_large_amounts(self):
        big = str(10**30)
        ranked = select_best([quote("a", big), quote("b", str(10**30 + 1))])
        assert ranked[0].provider == "b"

    def test_tie_uses_priority(self):
        ranked = select_best([quote("okx", "1000"), quote("1inch", "1000")], priority=["1inch", "okx"])
        assert ranked[0].provider == "1inch"

    def test_tie_without_priority_uses_provider_id(self):
        ranked = select_best([quote("zeta", "1000"), quote("alpha", "1000")])
        assert ranked[0].provider == "alpha"

    def test_unlisted_provider_ranks_after_listed(self):
        key_listed = ranking_key(quote("okx", "1"), ["okx"])
        key_unlisted = ranking_key(quote("aaa", "1"), ["okx"])
        assert key_listed < key_unlisted

    def test_exactly_one_best(self):
        ranked = select_best([quote(p, "1000") for p in ("a", "b", "c", "d")])
        assert sum(q.is_best for q in ranked) == 1

    def test_idempotent(self):
        first = select_best([quote("a", "1000"), quote("b", "1200")], ["a", "b"])
        second = select_best(first, ["a", "b"])
        assert first == second

    def test_inputs_untouched(self):
        original = [quote("a", "1000"), quote("b", "1200")]
        select_best(original)
        assert not any(q.is_best for q in original)

    def test_empty(self):
        assert select_best([]) == []
