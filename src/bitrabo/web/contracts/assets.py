"""Network and token listing contracts."""

from typing import Optional

from pydantic import Field

from bitrabo.web.contracts.quotes import WireModel


class NetworkInfo(WireModel):
    """A network the swap UI can select."""

    network_id: str = Field(..., description="Network id, e.g. evm--1")
    name: Optional[str] = None
    support_single_swap: bool = True
    support_cross_chain_swap: bool = True
    support_limit: bool = False
    default_select_token: list[str] = Field(default_factory=list)


class TokenInfo(WireModel):
    """A token entry in the swap token list."""

    name: Optional[str] = None
    symbol: str
    decimals: int
    logo_uri: Optional[str] = Field(None, alias="logoURI")
    contract_address: str
    network_id: str
    reservation_value: str = "0"
    price: str = "0"
