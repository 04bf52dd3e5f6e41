"""
Core data types for cross-venue arbitrage.

All amounts are integers in the asset's smallest denomination (wei-style).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, NamedTuple

from .utils import BPS_SCALE

DEFAULT_DECIMALS = 18
# 10**77 is the largest power of ten below 2**256
MAX_DECIMALS = 77

# One unit of an 18-decimal asset
ONE_UNIT = 10**DEFAULT_DECIMALS

DEFAULT_MAX_TRADE_AMOUNT = ONE_UNIT
DEFAULT_MAX_SLIPPAGE_BPS = 50


@dataclass
class AgentState:
    """
    Mutable state of a single agent instance.

    Attributes:
        owner: Account identifier allowed to trade and reconfigure
        venue_a: Identifier of the first venue
        venue_b: Identifier of the second venue
        min_profit_bps: Profit a pair must strictly exceed (u16, out of 10000)
        max_trade_amount: Upper bound for a single trade (u256)
        max_slippage_bps: Per-leg slippage tolerance (u16, out of 10000)
        active: False once an emergency stop has been issued
    """

    owner: str
    venue_a: str
    venue_b: str
    min_profit_bps: int
    max_trade_amount: int = DEFAULT_MAX_TRADE_AMOUNT
    max_slippage_bps: int = DEFAULT_MAX_SLIPPAGE_BPS
    active: bool = True


class Opportunity(NamedTuple):
    """A detected, not yet executed arbitrage pair."""

    token0: str
    token1: str
    profit_bps: int


class ProfitQuote(NamedTuple):
    """
    Result of comparing both venues on one pair.

    ``quote_a`` and ``quote_b`` are the raw outputs for the reference notional.
    """

    profit_bps: int
    buy_on_venue_a: bool
    quote_a: int = 0
    quote_b: int = 0


@dataclass(frozen=True)
class LegFill:
    """
    One executed leg of a round trip.

    Attributes:
        leg: 1 for the buy leg, 2 for the sell leg
        venue: Venue the leg executed on
        token_in: Asset sold
        token_out: Asset bought
        amount_in: Amount of token_in sent
        expected_out: Quote taken immediately before submission
        amount_out: Amount of token_out actually received
    """

    leg: int
    venue: str
    token_in: str
    token_out: str
    amount_in: int
    expected_out: int
    amount_out: int

    @property
    def slippage_bps(self) -> int:
        """Shortfall of the fill against its quote, in bps (negative if better)."""
        if self.expected_out <= 0:
            return 0
        return (self.expected_out - self.amount_out) * BPS_SCALE // self.expected_out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leg": self.leg,
            "venue": self.venue,
            "token_in": self.token_in,
            "token_out": self.token_out,
            "amount_in": self.amount_in,
            "expected_out": self.expected_out,
            "amount_out": self.amount_out,
            "slippage_bps": self.slippage_bps,
        }


@dataclass(frozen=True)
class TradeResult:
    """
    Outcome of a completed round trip.

    Attributes:
        token0: Asset the round trip starts and ends in
        token1: Intermediate asset
        amount_in: Amount of token0 committed to leg 1
        profit_bps: Margin measured by the pre-trade re-validation
        profit_amount: Profit the pre-trade quotes predicted for amount_in
        net_profit: Realized change in the agent's token0 balance
        timestamp: Completion time (Unix seconds)
        buy_on_venue_a: Direction taken
        legs: The two fills, in execution order
    """

    token0: str
    token1: str
    amount_in: int
    profit_bps: int
    profit_amount: int
    net_profit: int
    timestamp: float
    buy_on_venue_a: bool
    legs: tuple = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "token0": self.token0,
            "token1": self.token1,
            "amount_in": self.amount_in,
            "profit_bps": self.profit_bps,
            "profit_amount": self.profit_amount,
            "net_profit": self.net_profit,
            "timestamp": self.timestamp,
            "buy_on_venue_a": self.buy_on_venue_a,
            "legs": [leg.to_dict() for leg in self.legs],
        }


def expected_profit_amount(amount: int, profit_bps: int) -> int:
    """Profit implied by a bps margin on ``amount``, rounded down."""
    return amount * profit_bps // BPS_SCALE


def slippage_floor(expected_out: int, max_slippage_bps: int) -> int:
    """Minimum acceptable output for a leg quoted at ``expected_out``."""
    if max_slippage_bps >= BPS_SCALE:
        return 0
    return expected_out * (BPS_SCALE - max_slippage_bps) // BPS_SCALE


def describe_direction(buy_on_venue_a: bool, venue_a: str, venue_b: str) -> str:
    """Human readable direction, e.g. 'buy on VenueA, sell on VenueB'."""
    buy, sell = (venue_a, venue_b) if buy_on_venue_a else (venue_b, venue_a)
    return f"buy on {buy}, sell on {sell}"
