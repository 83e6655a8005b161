"""Abstract quoting interface and the multi-provider aggregation engine."""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Union

import httpx

from bitrabo.routing.selector import select_best
from bitrabo.units import NetworkId, is_integer_string, parse_network_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapRequest:
    """A request to swap one token for another, possibly across chains.

    ``from_token_amount`` is an integer string in the source token's
    smallest unit.
    """

    from_network_id: str
    to_network_id: str
    from_token_address: str
    to_token_address: str
    from_token_amount: str
    user_address: str = ""
    slippage_bps: Optional[int] = None

    # Only needed by symbol-based exchanges
    from_token_symbol: Optional[str] = None
    to_token_symbol: Optional[str] = None
    from_token_decimals: Optional[int] = None
    to_token_decimals: Optional[int] = None

    @property
    def from_chain(self) -> Optional[NetworkId]:
        return parse_network_id(self.from_network_id)

    @property
    def to_chain(self) -> Optional[NetworkId]:
        return parse_network_id(self.to_network_id)

    @property
    def is_cross_chain(self) -> bool:
        return self.from_chain != self.to_chain

    def slippage_or(self, default_bps: int) -> int:
        """Requested slippage in basis points, falling back to a default."""
        return self.slippage_bps if self.slippage_bps is not None else default_bps


@dataclass(frozen=True)
class TransactionPayload:
    """A ready-to-sign call."""

    to: str
    value: str = "0"
    data: str = "0x"
    gas_limit: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "to": self.to,
            "value": self.value,
            "data": self.data,
            "gasLimit": self.gas_limit,
        }


@dataclass(frozen=True)
class NormalizedQuote:
    """A provider quote in the shared schema.

    Amounts are integer strings in the destination token's smallest unit.
    Either ``transaction`` or a non-empty ``quote_context`` must be present.
    """

    provider: str
    to_amount: str
    fee_percent: float
    from_amount: Optional[str] = None
    to_amount_min: Optional[str] = None
    estimated_gas: Optional[str] = None
    estimated_time: Optional[int] = None
    transaction: Optional[TransactionPayload] = None
    quote_context: dict[str, Any] = field(default_factory=dict)
    is_best: bool = False

    def __post_init__(self):
        if not is_integer_string(self.to_amount):
            raise ValueError(f"{self.provider}: to_amount must be an integer string, got {self.to_amount!r}")
        if self.to_amount_min is not None and not is_integer_string(self.to_amount_min):
            raise ValueError(f"{self.provider}: to_amount_min must be an integer string")
        if self.transaction is None and not self.quote_context:
            raise ValueError(f"{self.provider}: quote needs a transaction or a quote context")

    @property
    def to_amount_int(self) -> int:
        return int(self.to_amount)


class UnavailableReason(str, Enum):
    """Why a provider produced no quote."""

    INAPPLICABLE = "inapplicable"
    UPSTREAM_ERROR = "upstream_error"
    TIMEOUT = "timeout"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class Unavailable:
    """Explicit "no quote" outcome from a provider."""

    provider: str
    reason: UnavailableReason
    detail: str = ""


ProviderResult = Union[NormalizedQuote, Unavailable]


def optional_str(value: Any) -> Optional[str]:
    """Stringify upstream numbers, keeping None as None."""
    return None if value is None else str(value)


class QuoteContextError(ValueError):
    """Raised when a quote context cannot be routed to a known provider."""


class MalformedResponseError(ValueError):
    """Raised by providers when an upstream payload lacks expected fields."""


class ProviderError(Exception):
    """Raised by providers when the upstream reports an error in a 2xx body."""


class QuoteProvider(ABC):
    """Base class for quoting providers.

    Subclasses implement ``supports``, ``_fetch_quote`` and
    ``_fetch_transaction``. The public ``get_quote`` and
    ``build_transaction`` wrappers never raise: every fault becomes an
    ``Unavailable``.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self._transport = transport

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider id, e.g. ``1inch``."""
        pass

    @abstractmethod
    def supports(self, request: SwapRequest) -> bool:
        """Whether the request is within this provider's scope.

        Must not perform I/O.
        """
        pass

    @abstractmethod
    async def _fetch_quote(self, request: SwapRequest) -> NormalizedQuote:
        pass

    @abstractmethod
    async def _fetch_transaction(self, context: dict) -> TransactionPayload:
        pass

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def get_quote(self, request: SwapRequest) -> ProviderResult:
        """Get a normalized quote, or Unavailable."""
        if not self.supports(request):
            return Unavailable(self.name, UnavailableReason.INAPPLICABLE)
        result = await self._guard(self._fetch_quote(request), "quote")
        if isinstance(result, NormalizedQuote) and result.to_amount_int == 0:
            logger.info(f"{self.name} quoted zero output")
            return Unavailable(self.name, UnavailableReason.UPSTREAM_ERROR, "zero output amount")
        return result

    async def build_transaction(self, context: dict) -> Union[TransactionPayload, Unavailable]:
        """Materialize the transaction for a quote this provider returned."""
        if context.get("provider") != self.name:
            raise QuoteContextError(
                f"Quote context from {context.get('provider')!r} cannot be built by {self.name}"
            )
        return await self._guard(self._fetch_transaction(context), "build-tx")

    async def _guard(self, coro, operation: str):
        try:
            return await coro
        except httpx.TimeoutException as e:
            logger.warning(f"{self.name} {operation} timed out: {e}")
            return Unavailable(self.name, UnavailableReason.TIMEOUT, str(e))
        except httpx.HTTPStatusError as e:
            detail = f"HTTP {e.response.status_code}: {e.response.text[:200]}"
            logger.warning(f"{self.name} {operation} rejected: {detail}")
            return Unavailable(self.name, UnavailableReason.UPSTREAM_ERROR, detail)
        except httpx.HTTPError as e:
            logger.warning(f"{self.name} {operation} failed: {type(e).__name__}: {e}")
            return Unavailable(self.name, UnavailableReason.UPSTREAM_ERROR, str(e))
        except ProviderError as e:
            logger.warning(f"{self.name} {operation} error: {e}")
            return Unavailable(self.name, UnavailableReason.UPSTREAM_ERROR, str(e))
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning(f"{self.name} {operation} returned malformed data: {type(e).__name__}: {e}")
            return Unavailable(self.name, UnavailableReason.MALFORMED, str(e))


class QuoteAggregator:
    """Fans a swap request out to eligible providers and ranks the results."""

    def __init__(
        self,
        providers: Optional[list[QuoteProvider]] = None,
        timeout: float = 10.0,
        priority: Optional[list[str]] = None,
    ):
        self.providers: list[QuoteProvider] = providers or []
        self.timeout = timeout
        self.priority: list[str] = priority or []

    def add_provider(self, provider: QuoteProvider) -> None:
        """Add a quoting provider."""
        self.providers.append(provider)

    def get_provider(self, name: str) -> Optional[QuoteProvider]:
        for provider in self.providers:
            if provider.name == name:
                return provider
        return None

    def eligible_providers(self, request: SwapRequest) -> list[QuoteProvider]:
        return [p for p in self.providers if p.supports(request)]

    async def aggregate(self, request: SwapRequest) -> list[NormalizedQuote]:
        """Query all eligible providers concurrently.

        Returns quotes best-first with exactly one marked ``is_best``, or an
        empty list when no provider produced a usable quote.
        """
        eligible = self.eligible_providers(request)
        logger.info(
            f"Aggregating {request.from_token_amount} {request.from_network_id}:{request.from_token_address} -> "
            f"{request.to_network_id}:{request.to_token_address} across {[p.name for p in eligible]}"
        )

        if not eligible:
            logger.warning(f"No providers support {request.from_network_id} -> {request.to_network_id}")
            return []

        results = await asyncio.gather(*(self._quote_with_timeout(p, request) for p in eligible))

        quotes = [r for r in results if isinstance(r, NormalizedQuote)]
        failures = [r for r in results if isinstance(r, Unavailable)]

        if not quotes:
            logger.warning(
                "No quotes available. "
                + "; ".join(f"{u.provider}: {u.reason.value}" for u in failures)
            )
            return []

        ranked = select_best(quotes, self.priority)
        logger.info(
            f"Got {len(ranked)} quote(s), {len(failures)} unavailable. "
            f"Best: {ranked[0].provider} ({ranked[0].to_amount})"
        )
        return ranked

    async def get_best_quote(self, request: SwapRequest) -> Optional[NormalizedQuote]:
        """Best quote across all providers, or None."""
        quotes = await self.aggregate(request)
        return quotes[0] if quotes else None

    async def build_transaction(self, quote_context: Optional[dict]) -> Union[TransactionPayload, Unavailable]:
        """Route a quote context back to the provider that issued it.

        Raises:
            QuoteContextError: context is missing or names an unknown provider
        """
        if not quote_context or not isinstance(quote_context, dict):
            raise QuoteContextError("Missing quote context")
        name = quote_context.get("provider")
        provider = self.get_provider(name) if isinstance(name, str) else None
        if provider is None:
            raise QuoteContextError(f"Unknown provider in quote context: {name!r}")

        logger.info(f"Building transaction via {provider.name}")
        return await provider.build_transaction(quote_context)

    async def _quote_with_timeout(self, provider: QuoteProvider, request: SwapRequest) -> ProviderResult:
        try:
            return await asyncio.wait_for(provider.get_quote(request), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"{provider.name} quote exceeded {self.timeout}s")
            return Unavailable(provider.name, UnavailableReason.TIMEOUT, f"exceeded {self.timeout}s")
        except Exception as e:
            logger.error(f"{provider.name} quote crashed: {type(e).__name__}: {e}")
            return Unavailable(provider.name, UnavailableReason.UPSTREAM_ERROR, str(e))
