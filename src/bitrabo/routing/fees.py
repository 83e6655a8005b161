"""Platform fee injection policy.

Each provider takes the platform's revenue share differently: a percentage
plus a recipient wallet on the quote call, basis points on the quote and a
fee account on the later swap call, or nothing at all. The policy is a pure
function of configuration; request amounts never influence it.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from bitrabo.config import Settings


@dataclass(frozen=True)
class FeeRule:
    """How one provider receives the platform fee.

    Attributes:
        provider: Provider id
        fee_percent: Platform fee as a fraction (0.005 = 0.5%)
        quote_params: Extra parameters for the quote call
        build_params: Extra parameters for the build-tx call
    """

    provider: str
    fee_percent: float = 0.0
    quote_params: dict[str, Any] = field(default_factory=dict)
    build_params: dict[str, Any] = field(default_factory=dict)


def _compact(params: dict[str, Any]) -> dict[str, Any]:
    """Drop unset recipients instead of sending empty values."""
    return {k: v for k, v in params.items() if v not in (None, "")}


def _wallet_rule(provider: str, fraction: float, recipient: Optional[str], params: dict[str, Any]) -> FeeRule:
    """Rule for providers that need a recipient; no recipient means no fee."""
    if not recipient or fraction <= 0:
        return FeeRule(provider=provider)
    return FeeRule(provider=provider, fee_percent=fraction, quote_params=params, build_params=params)


def build_fee_policy(settings: Settings) -> dict[str, FeeRule]:
    """Build the provider -> FeeRule mapping from settings."""
    fraction = settings.platform_fee_percent
    receiver = settings.fee_receiver_evm
    fee_account = settings.jupiter_fee_account
    # 1inch and OKX take the fee in percent rather than as a fraction
    percent = round(fraction * 100, 6)

    policy = {
        "0x": _wallet_rule("0x", fraction, receiver, {
            "buyTokenPercentageFee": fraction,
            "feeRecipient": receiver,
        }),
        "1inch": _wallet_rule("1inch", fraction, receiver, {
            "fee": percent,
            "referrer": receiver,
        }),
        "okx": _wallet_rule("okx", fraction, receiver, {
            "feePercent": percent,
            "toTokenReferrerWalletAddress": receiver,
        }),
        "lifi": FeeRule(
            provider="lifi",
            fee_percent=fraction,
            quote_params=_compact({
                "integrator": settings.lifi_integrator,
                "fee": fraction if fraction > 0 else None,
                "referrer": receiver,
            }),
        ),
        # ChangeHero fees are configured on the partner account
        "changehero": FeeRule(provider="changehero"),
    }

    # Jupiter deducts platformFeeBps at quote time but pays it to the
    # fee account passed on the later swap call
    if fee_account and fraction > 0:
        policy["jupiter"] = FeeRule(
            provider="jupiter",
            fee_percent=fraction,
            quote_params={"platformFeeBps": int(round(fraction * 10_000))},
            build_params={"feeAccount": fee_account},
        )
    else:
        policy["jupiter"] = FeeRule(provider="jupiter")

    return policy
