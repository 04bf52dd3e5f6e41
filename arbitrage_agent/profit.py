"""
Profit and direction calculation from two venue quotes.

This is the only place a cross-venue margin is computed. Both the scanner
and the execution controller call ``ProfitEngine.calculate_profit`` so a
scan result and an execution re-validation always agree on the math.

Conversion policy:
- Integer arithmetic only, floor division
- Margin is measured against the LOWER quote
- Result must fit a u16 (at most 65535 bps)
"""

from typing import Dict, Optional

from .exceptions import QuoteDivisionByZero, QuoteOverflow, VenueError
from .types import DEFAULT_DECIMALS, MAX_DECIMALS, ProfitQuote
from .utils import BPS_SCALE, UINT16_MAX
from .venues.base_venue import VenueClient


def compare_quotes(quote_a: int, quote_b: int, token_in: str = "", token_out: str = "") -> ProfitQuote:
    """
    Turn two quotes for the same notional into ``(profit_bps, buy_on_venue_a)``.

    Args:
        quote_a: Output quoted by venue A
        quote_b: Output quoted by venue B
        token_in: Asset quoted from (for error context)
        token_out: Asset quoted to (for error context)

    Returns:
        ProfitQuote pointing at the venue with the higher quote as the buy side

    Raises:
        QuoteDivisionByZero: If the lower quote is zero
        QuoteOverflow: If the margin exceeds 65535 bps

    Example:
        >>> compare_quotes(102 * 10**16, 100 * 10**16).profit_bps
        200
    """
    if quote_a > quote_b:
        buy_on_venue_a = True
        higher, lower = quote_a, quote_b
    else:
        buy_on_venue_a = False
        higher, lower = quote_b, quote_a

    if lower == 0:
        raise QuoteDivisionByZero(
            f"Venue quoted zero output for {token_in}->{token_out}",
            token_in=token_in,
            token_out=token_out,
            details={"quote_a": quote_a, "quote_b": quote_b},
        )

    profit_bps = (higher - lower) * BPS_SCALE // lower
    if profit_bps > UINT16_MAX:
        raise QuoteOverflow(
            f"Margin of {profit_bps} bps on {token_in}->{token_out} exceeds {UINT16_MAX}",
            token_in=token_in,
            token_out=token_out,
            details={"quote_a": quote_a, "quote_b": quote_b, "profit_bps": profit_bps},
        )

    return ProfitQuote(profit_bps, buy_on_venue_a, quote_a, quote_b)


class ProfitEngine:
    """
    Quotes one whole unit of ``token0`` on both venues and compares them.

    The notional is ``10 ** decimals`` of ``token0``; assets missing from
    ``token_decimals`` are assumed to have 18 decimals.
    """

    def __init__(
        self,
        venue_a: VenueClient,
        venue_b: VenueClient,
        token_decimals: Optional[Dict[str, int]] = None,
    ):
        self.venue_a = venue_a
        self.venue_b = venue_b
        self.token_decimals = dict(token_decimals or {})
        for token, decimals in self.token_decimals.items():
            if decimals < 0 or decimals > MAX_DECIMALS:
                raise ValueError(f"decimals for {token} must be in [0, {MAX_DECIMALS}]: {decimals}")

    def reference_amount(self, token: str) -> int:
        """One unit of ``token`` in its smallest denomination."""
        return 10 ** self.token_decimals.get(token, DEFAULT_DECIMALS)

    def quote_both(self, token0: str, token1: str) -> ProfitQuote:
        amount_in = self.reference_amount(token0)
        quote_a = self._quote(self.venue_a, token0, token1, amount_in)
        quote_b = self._quote(self.venue_b, token0, token1, amount_in)
        return compare_quotes(quote_a, quote_b, token0, token1)

    def calculate_profit(self, token0: str, token1: str) -> tuple:
        """Return ``(profit_bps, buy_on_venue_a)`` for ``token0 -> token1``."""
        result = self.quote_both(token0, token1)
        return result.profit_bps, result.buy_on_venue_a

    def _quote(self, venue: VenueClient, token_in: str, token_out: str, amount_in: int) -> int:
        amount_out = venue.quote(token_in, token_out, amount_in)
        if amount_out < 0:
            raise VenueError(
                f"{venue.name} quoted a negative amount for {token_in}->{token_out}",
                venue=venue.name,
                details={"amount_out": amount_out},
            )
        return amount_out
