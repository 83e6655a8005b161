"""Network identifiers, token addresses and amount units.

Network ids follow the wallet convention ``<impl>--<chain>``, e.g.
``evm--1`` (Ethereum), ``evm--56`` (BNB Chain) or ``sol--101`` (Solana).
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_FLOOR, Context, Decimal, InvalidOperation
from typing import Optional, Union

logger = logging.getLogger(__name__)

NATIVE_TOKEN_ADDRESS = "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee"
SOL_NATIVE_MINT = "So11111111111111111111111111111111111111112"

DEFAULT_DECIMALS = 18


@dataclass(frozen=True)
class NetworkId:
    """Parsed ``<impl>--<chain>`` network identifier."""

    impl: str
    chain: str

    @property
    def is_evm(self) -> bool:
        return self.impl == "evm"

    @property
    def is_solana(self) -> bool:
        return self.impl == "sol"

    @property
    def evm_chain_id(self) -> Optional[int]:
        """Numeric EVM chain id, or None for non-EVM networks."""
        if not self.is_evm or not self.chain.isdigit():
            return None
        return int(self.chain)

    def __str__(self) -> str:
        return f"{self.impl}--{self.chain}"


def parse_network_id(value: Optional[str]) -> Optional[NetworkId]:
    """Parse a network id string.

    A bare number is treated as an EVM chain id (``"1"`` -> ``evm--1``).
    Returns None for empty or unparseable values.
    """
    if not value:
        return None
    text = str(value).strip().lower()
    if "--" in text:
        impl, _, chain = text.partition("--")
        if not impl or not chain:
            return None
        return NetworkId(impl=impl, chain=chain)
    if text.isdigit():
        return NetworkId(impl="evm", chain=text)
    return None


def normalize_native(address: Optional[str]) -> Optional[str]:
    """Canonicalize the native-token placeholder address to lowercase."""
    if not address:
        return address
    if address.lower() == NATIVE_TOKEN_ADDRESS:
        return NATIVE_TOKEN_ADDRESS
    return address


def is_native(address: Optional[str]) -> bool:
    return not address or address.lower() == NATIVE_TOKEN_ADDRESS


def _exact_context(value: Decimal) -> Context:
    """Context with enough digits that rescaling ``value`` is exact."""
    return Context(prec=len(value.as_tuple().digits) + 2, rounding=ROUND_FLOOR)


def to_smallest_units(amount: Union[str, int, Decimal], decimals: int = DEFAULT_DECIMALS) -> str:
    """Convert a human-readable amount to smallest units.

    Rounds down, so the result never exceeds the exact value and is at
    most one unit below it. Returns ``"0"`` for non-positive or invalid input.
    """
    try:
        value = Decimal(str(amount if amount is not None else "0"))
    except InvalidOperation:
        logger.debug(f"Invalid amount: {amount!r}")
        return "0"
    if not value.is_finite() or value <= 0:
        return "0"
    context = _exact_context(value)
    scaled = value.scaleb(decimals, context=context).to_integral_value(rounding=ROUND_FLOOR, context=context)
    return str(int(scaled))


def from_smallest_units(amount: Union[str, int], decimals: int = DEFAULT_DECIMALS) -> Decimal:
    """Convert a smallest-unit integer amount to an exact Decimal."""
    value = Decimal(int(amount))
    return value.scaleb(-decimals, context=_exact_context(value))


def format_amount(value: Decimal) -> str:
    """Plain decimal notation without trailing zeros, e.g. ``"1.5"``."""
    return format(value.normalize(context=_exact_context(value)), "f")


def is_integer_string(value: object) -> bool:
    """True for non-negative base-10 integer strings such as ``"1000"``."""
    return isinstance(value, str) and value.isascii() and value.isdigit()
