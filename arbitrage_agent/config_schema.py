"""
Configuration schema validation using Pydantic
"""

from typing import Dict, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from .types import (
    DEFAULT_DECIMALS,
    DEFAULT_MAX_SLIPPAGE_BPS,
    DEFAULT_MAX_TRADE_AMOUNT,
    MAX_DECIMALS,
)
from .utils import UINT16_MAX, UINT256_MAX


class TokenSchema(BaseModel):
    """A tradable asset"""

    address: str = Field(default="", description="Contract address (web3 venues)")
    decimals: int = Field(default=DEFAULT_DECIMALS, ge=0, le=MAX_DECIMALS)
    approved: bool = Field(default=False, description="Whitelisted at startup")

    model_config = {"extra": "forbid"}


class VenueSchema(BaseModel):
    """One price/execution venue"""

    name: str
    kind: Literal["paper", "web3"] = "paper"

    # paper
    fee_bps: int = Field(default=0, ge=0, le=10000)
    execution_slippage_bps: int = Field(default=0, ge=0, le=10000)
    rates: Dict[str, Union[float, str]] = Field(default_factory=dict)

    # web3
    router_address: Optional[str] = None
    gas_limit: int = Field(default=250_000, gt=0)
    deadline_sec: int = Field(default=120, gt=0)
    receipt_timeout_sec: int = Field(default=120, gt=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Venue name cannot be empty")
        return v.strip()

    @field_validator("rates")
    @classmethod
    def validate_rates(cls, v):
        for market, rate in v.items():
            parts = market.split("/")
            if len(parts) != 2 or not all(parts):
                raise ValueError(f"Rate key must look like 'IN/OUT', got {market!r}")
            if float(rate) < 0:
                raise ValueError(f"Rate for {market} cannot be negative: {rate}")
        return v

    @model_validator(mode="after")
    def validate_kind_fields(self):
        if self.kind == "web3" and not self.router_address:
            raise ValueError(f"web3 venue {self.name!r} requires router_address")
        return self

    model_config = {"extra": "forbid"}


class NetworkSchema(BaseModel):
    """Where web3 venues read their secrets from"""

    rpc_url_env: str = "RPC_URL"
    private_key_env: str = "PRIVATE_KEY"

    model_config = {"extra": "forbid"}


class AuditSchema(BaseModel):
    log_file: Optional[str] = None
    log_scans: bool = False

    model_config = {"extra": "forbid"}


class MetricsSchema(BaseModel):
    enabled: bool = False

    model_config = {"extra": "forbid"}


class AgentConfig(BaseModel):
    """Complete agent configuration"""

    owner: str = Field(description="Account allowed to trade and reconfigure")
    venue_a: VenueSchema
    venue_b: VenueSchema

    min_profit_bps: int = Field(ge=0, le=UINT16_MAX)
    max_trade_amount: int = DEFAULT_MAX_TRADE_AMOUNT
    max_slippage_bps: int = Field(default=DEFAULT_MAX_SLIPPAGE_BPS, ge=0, le=UINT16_MAX)

    tokens: Dict[str, TokenSchema] = Field(default_factory=dict)
    paper_balances: Dict[str, int] = Field(
        default_factory=dict, description="Starting wallet for paper venues"
    )

    network: NetworkSchema = Field(default_factory=NetworkSchema)
    audit: AuditSchema = Field(default_factory=AuditSchema)
    metrics: MetricsSchema = Field(default_factory=MetricsSchema)

    @field_validator("owner")
    @classmethod
    def validate_owner(cls, v):
        if not v.strip():
            raise ValueError("owner cannot be empty")
        return v.strip()

    @field_validator("max_trade_amount")
    @classmethod
    def validate_max_trade_amount(cls, v):
        if v < 0 or v > UINT256_MAX:
            raise ValueError("max_trade_amount must fit an unsigned 256-bit integer")
        return v

    @field_validator("paper_balances")
    @classmethod
    def validate_paper_balances(cls, v):
        for token, balance in v.items():
            if balance < 0:
                raise ValueError(f"Balance for {token} cannot be negative: {balance}")
        return v

    @model_validator(mode="after")
    def validate_venues(self):
        if self.venue_a.name == self.venue_b.name:
            raise ValueError("venue_a and venue_b must have different names")
        if self.venue_a.kind != self.venue_b.kind:
            # Round-trip accounting reads one wallet for both legs
            raise ValueError("venue_a and venue_b must be the same kind")
        if self.venue_a.kind == "web3":
            missing = [s for s, t in self.tokens.items() if not t.address]
            if missing:
                raise ValueError(f"web3 venues need token addresses; missing for {missing}")
        return self

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }


def validate_agent_config(config_dict: Dict) -> AgentConfig:
    """
    Validate an agent configuration dictionary

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    return AgentConfig(**config_dict)
