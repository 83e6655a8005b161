"""Factory for creating quote providers and the aggregator.

Providers that need credentials are only created when their keys are
configured. Settings are passed in explicitly; nothing here reads the
environment.
"""

import logging
from typing import Callable, Optional

import httpx

from bitrabo.config import Settings, get_settings
from bitrabo.routing.base import QuoteAggregator, QuoteProvider
from bitrabo.routing.fees import FeeRule, build_fee_policy

logger = logging.getLogger(__name__)

Transport = Optional[httpx.AsyncBaseTransport]


def create_zeroex_provider(settings: Settings, fee: FeeRule, transport: Transport = None) -> Optional[QuoteProvider]:
    """Create 0x provider (requires ZEROEX_API_KEY)."""
    if not settings.zeroex_api_key:
        logger.warning("ZEROEX_API_KEY not set - 0x disabled")
        return None

    from bitrabo.routing.zeroex import ZeroExProvider
    return ZeroExProvider(
        api_key=settings.zeroex_api_key,
        fee=fee,
        default_slippage_bps=settings.default_slippage_bps,
        timeout=settings.provider_timeout_seconds,
        transport=transport,
    )


def create_oneinch_provider(settings: Settings, fee: FeeRule, transport: Transport = None) -> Optional[QuoteProvider]:
    """Create 1inch provider (requires ONEINCH_API_KEY)."""
    if not settings.oneinch_api_key:
        logger.warning("ONEINCH_API_KEY not set - 1inch disabled")
        return None

    from bitrabo.routing.oneinch import OneInchProvider
    return OneInchProvider(
        api_key=settings.oneinch_api_key,
        fee=fee,
        base_url=settings.oneinch_api_url,
        default_slippage_bps=settings.default_slippage_bps,
        timeout=settings.provider_timeout_seconds,
        transport=transport,
    )


def create_okx_provider(settings: Settings, fee: FeeRule, transport: Transport = None) -> Optional[QuoteProvider]:
    """Create OKX provider (requires key, secret and passphrase)."""
    if not (settings.okx_api_key and settings.okx_secret_key and settings.okx_passphrase):
        logger.warning("OKX credentials incomplete - OKX disabled")
        return None

    from bitrabo.routing.okx import OKXProvider
    return OKXProvider(
        api_key=settings.okx_api_key,
        secret_key=settings.okx_secret_key,
        passphrase=settings.okx_passphrase,
        project_id=settings.okx_project_id,
        fee=fee,
        base_url=settings.okx_api_url,
        default_slippage_bps=settings.default_slippage_bps,
        timeout=settings.provider_timeout_seconds,
        transport=transport,
    )


def create_jupiter_provider(settings: Settings, fee: FeeRule, transport: Transport = None) -> Optional[QuoteProvider]:
    """Create Jupiter provider for Solana."""
    from bitrabo.routing.jupiter import JupiterProvider
    return JupiterProvider(
        fee=fee,
        base_url=settings.jupiter_api_url,
        default_slippage_bps=settings.default_slippage_bps,
        timeout=settings.provider_timeout_seconds,
        transport=transport,
    )


def create_lifi_provider(settings: Settings, fee: FeeRule, transport: Transport = None) -> Optional[QuoteProvider]:
    """Create LI.FI provider for cross-chain EVM swaps."""
    from bitrabo.routing.lifi import LiFiProvider
    return LiFiProvider(
        api_key=settings.lifi_api_key or None,
        fee=fee,
        base_url=settings.lifi_api_url,
        default_slippage_bps=settings.default_slippage_bps,
        timeout=settings.provider_timeout_seconds,
        transport=transport,
    )


def create_changehero_provider(settings: Settings, fee: FeeRule, transport: Transport = None) -> Optional[QuoteProvider]:
    """Create ChangeHero provider (requires CHANGEHERO_API_KEY)."""
    if not settings.changehero_api_key:
        logger.warning("CHANGEHERO_API_KEY not set - ChangeHero disabled")
        return None

    from bitrabo.routing.changehero import ChangeHeroProvider
    return ChangeHeroProvider(
        api_key=settings.changehero_api_key,
        fee=fee,
        base_url=settings.changehero_api_url,
        timeout=settings.provider_timeout_seconds,
        transport=transport,
    )


PROVIDER_FACTORIES: dict[str, Callable[[Settings, FeeRule, Transport], Optional[QuoteProvider]]] = {
    "0x": create_zeroex_provider,
    "1inch": create_oneinch_provider,
    "okx": create_okx_provider,
    "jupiter": create_jupiter_provider,
    "lifi": create_lifi_provider,
    "changehero": create_changehero_provider,
}


def create_providers(settings: Settings, transport: Transport = None) -> list[QuoteProvider]:
    """Create every enabled provider whose configuration is complete."""
    fees = build_fee_policy(settings)
    providers = []

    for provider_id in settings.enabled_provider_ids:
        factory = PROVIDER_FACTORIES.get(provider_id)
        if factory is None:
            logger.warning(f"Unknown provider '{provider_id}' in ENABLED_PROVIDERS, skipping")
            continue
        provider = factory(settings, fees.get(provider_id, FeeRule(provider=provider_id)), transport)
        if provider is not None:
            providers.append(provider)
            logger.info(f"Added {provider.name} provider")

    return providers


def create_aggregator(settings: Optional[Settings] = None, transport: Transport = None) -> QuoteAggregator:
    """Create the quote aggregator from settings.

    Args:
        settings: Application settings (cached settings if None)
        transport: Optional httpx transport shared by all providers

    Returns:
        Configured QuoteAggregator
    """
    settings = settings or get_settings()
    aggregator = QuoteAggregator(
        providers=create_providers(settings, transport),
        timeout=settings.provider_timeout_seconds,
        priority=settings.provider_priority_list,
    )
    logger.info(f"Created aggregator with {len(aggregator.providers)} provider(s)")
    return aggregator
