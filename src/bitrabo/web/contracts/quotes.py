"""Quote request and response contracts.

Field names on the wire are camelCase to match the wallet's swap API.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model serialized with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuoteParams(WireModel):
    """Query parameters of ``GET /swap/v1/quote``.

    ``from_token_amount`` is human-readable (e.g. ``"0.5"``) and is converted
    to smallest units with ``from_token_decimals``.
    """

    from_network_id: Optional[str] = Field(None, description="Source network, e.g. evm--1")
    to_network_id: Optional[str] = Field(None, description="Destination network")
    from_token_address: Optional[str] = Field(None, description="Source token address ('' = native)")
    to_token_address: Optional[str] = Field(None, description="Destination token address")
    from_token_amount: Optional[str] = Field(None, description="Human-readable input amount")
    from_token_decimals: Optional[int] = Field(None, ge=0, le=36, description="Source token decimals")
    to_token_decimals: Optional[int] = Field(None, ge=0, le=36, description="Destination token decimals")
    from_token_symbol: Optional[str] = Field(None, description="Source token symbol")
    to_token_symbol: Optional[str] = Field(None, description="Destination token symbol")
    user_address: Optional[str] = Field(None, description="Sender wallet address")
    slippage_percentage: Optional[float] = Field(
        None, ge=0, le=50, description="Slippage tolerance in percent"
    )


class ProviderInfo(WireModel):
    provider: str
    provider_name: str


class TokenRef(WireModel):
    contract_address: Optional[str] = None
    network_id: Optional[str] = None
    decimals: Optional[int] = None
    symbol: Optional[str] = None


class FeeInfo(WireModel):
    percentage_fee: float = Field(..., description="Platform fee as a fraction")
    fee_receiver: Optional[str] = None


class TxPayload(WireModel):
    to: str
    value: str = "0"
    data: str = "0x"
    gas_limit: Optional[str] = None


class QuoteResult(WireModel):
    """One normalized provider quote."""

    info: ProviderInfo
    from_token_info: TokenRef
    to_token_info: TokenRef
    from_amount: Optional[str] = Field(None, description="Input amount (smallest units)")
    to_amount: str = Field(..., description="Output amount (smallest units)")
    to_amount_min: Optional[str] = Field(None, description="Minimum output after slippage")
    instant_rate: Optional[str] = Field(None, description="Output per input, decimal adjusted when possible")
    estimated_gas: Optional[str] = None
    estimated_time: Optional[int] = Field(None, description="Estimated seconds to complete")
    fee: FeeInfo
    is_best: bool = False
    received_best: bool = False
    kind: str = "sell"
    tx: Optional[TxPayload] = None
    quote_result_ctx: dict[str, Any] = Field(default_factory=dict)


class BuildTxRequest(WireModel):
    """Body of ``POST /swap/v1/build-tx``."""

    quote_result_ctx: Optional[dict[str, Any]] = Field(None, description="Context from a quote result")


class BuildTxResultInfo(WireModel):
    info: ProviderInfo


class BuildTxResult(WireModel):
    result: BuildTxResultInfo
    tx: TxPayload


class ApiResponse(WireModel):
    """Wallet-style envelope: ``{"code": 0, "data": ...}``."""

    code: int = 0
    data: Any = None
    message: Optional[str] = None
