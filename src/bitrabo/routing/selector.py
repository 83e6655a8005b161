"""Best-quote selection."""

from dataclasses import replace
from typing import TYPE_CHECKING, Iterable, Optional, Sequence

if TYPE_CHECKING:
    from bitrabo.routing.base import NormalizedQuote


def ranking_key(quote: "NormalizedQuote", priority: Sequence[str] = ()) -> tuple:
    """Sort key: highest destination amount, then provider priority, then id.

    Providers missing from ``priority`` rank after listed ones.
    """
    try:
        rank = list(priority).index(quote.provider)
    except ValueError:
        rank = len(priority)
    return (-int(quote.to_amount), rank, quote.provider)


def select_best(
    quotes: Iterable["NormalizedQuote"],
    priority: Optional[Sequence[str]] = None,
) -> list["NormalizedQuote"]:
    """Order quotes best-first and flag exactly the first as best.

    Returns new records; the inputs are left untouched.
    """
    priority = list(priority or [])
    ordered = sorted(quotes, key=lambda q: ranking_key(q, priority))
    return [replace(q, is_best=(i == 0)) for i, q in enumerate(ordered)]
