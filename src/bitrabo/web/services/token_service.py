"""Network and token listings for the swap UI.

Backed by the public LI.FI catalog. Listings are best effort: any upstream
failure yields an empty list.
"""

import logging
from typing import Optional

import httpx

from bitrabo.config import Settings, get_settings
from bitrabo.units import normalize_native, parse_network_id
from bitrabo.web.contracts.assets import NetworkInfo, TokenInfo

logger = logging.getLogger(__name__)

MAX_TOKENS = 50


class TokenService:
    """Service for listing swappable networks and tokens."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = self.settings.lifi_api_url.rstrip("/")
        self._transport = transport

    async def _get(self, path: str, params: Optional[dict] = None) -> dict:
        headers = {"Accept": "application/json"}
        if self.settings.lifi_api_key:
            headers["x-lifi-api-key"] = self.settings.lifi_api_key
        async with httpx.AsyncClient(
            timeout=self.settings.provider_timeout_seconds, transport=self._transport
        ) as client:
            response = await client.get(f"{self.base_url}{path}", params=params, headers=headers)
            response.raise_for_status()
            return response.json()

    async def get_networks(self) -> list[NetworkInfo]:
        """List EVM networks known to the catalog."""
        try:
            data = await self._get("/chains")
            chains = data.get("chains") or []
            return [
                NetworkInfo(network_id=f"evm--{chain['id']}", name=chain.get("name"))
                for chain in chains
                if chain.get("chainType", "EVM") == "EVM"
            ]
        except (httpx.HTTPError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to fetch networks: {e}")
            return []

    async def get_tokens(self, network_id: Optional[str] = None, keywords: Optional[str] = None) -> list[TokenInfo]:
        """List tokens, optionally filtered by network and a symbol/name keyword.

        At most ``MAX_TOKENS`` entries are returned.
        """
        params = {}
        network = parse_network_id(network_id)
        if network is not None and network.evm_chain_id is not None:
            params["chains"] = str(network.evm_chain_id)

        try:
            data = await self._get("/tokens", params=params or None)
            by_chain = data.get("tokens") or {}
            tokens = [token for chain_tokens in by_chain.values() for token in chain_tokens]

            if "chains" in params:
                tokens = [t for t in tokens if str(t.get("chainId")) == params["chains"]]

            if keywords:
                keyword = keywords.lower()
                tokens = [
                    t for t in tokens
                    if keyword in str(t.get("symbol", "")).lower()
                    or keyword in str(t.get("name", "")).lower()
                ]

            return [
                TokenInfo(
                    name=t.get("name"),
                    symbol=t["symbol"],
                    decimals=t["decimals"],
                    logo_uri=t.get("logoURI"),
                    contract_address=normalize_native(t["address"]),
                    network_id=f"evm--{t['chainId']}",
                )
                for t in tokens[:MAX_TOKENS]
            ]
        except (httpx.HTTPError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"Failed to fetch tokens: {e}")
            return []
