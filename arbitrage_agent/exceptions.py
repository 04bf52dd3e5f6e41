"""
Exception hierarchy for the cross-venue arbitrage agent.

Errors fall into two families that callers must be able to tell apart:

- ``RejectedError``: the call was refused before any trade was submitted.
  Nothing changed on either venue.
- ``ExecutionError``: at least one leg was submitted. The agent's holdings may
  differ from what was intended and an operator may need to intervene.
"""

from typing import Any, Dict, Optional


class ArbitrageAgentError(Exception):
    """Base exception for all arbitrage agent errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(ArbitrageAgentError):
    """Raised when a configuration file is missing or invalid."""

    pass


class ValidationError(ArbitrageAgentError):
    """Raised when a value falls outside its allowed type range."""

    pass


class RejectedError(ArbitrageAgentError):
    """Raised when a call is refused before any venue trade is submitted."""

    pass


class NotActive(RejectedError):
    """Raised when a trading operation is attempted on a stopped agent."""

    pass


class Unauthorized(RejectedError):
    """Raised when a caller other than the owner invokes a gated operation."""

    def __init__(
        self,
        message: str,
        caller: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.caller = caller


class AmountExceedsMax(RejectedError):
    """Raised when a trade amount is above the configured per-trade cap."""

    def __init__(
        self,
        message: str,
        amount: Optional[int] = None,
        limit: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.amount = amount
        self.limit = limit


class TokenNotApproved(RejectedError):
    """Raised when an asset is not on the whitelist."""

    def __init__(
        self,
        message: str,
        token: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.token = token


class InsufficientProfit(RejectedError):
    """Raised when the re-validated profit does not clear the threshold."""

    def __init__(
        self,
        message: str,
        profit_bps: Optional[int] = None,
        min_profit_bps: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.profit_bps = profit_bps
        self.min_profit_bps = min_profit_bps


class QuoteError(RejectedError):
    """Raised when venue quotes cannot produce a valid profit figure."""

    def __init__(
        self,
        message: str,
        token_in: Optional[str] = None,
        token_out: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.token_in = token_in
        self.token_out = token_out


class QuoteOverflow(QuoteError):
    """Raised when a profit margin does not fit in 16-bit basis points."""

    pass


class QuoteDivisionByZero(QuoteError):
    """Raised when a venue quotes zero output for a nonzero input."""

    pass


class VenueError(ArbitrageAgentError):
    """Raised when a venue quote or swap call fails."""

    def __init__(
        self,
        message: str,
        venue: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.venue = venue


class ExecutionError(ArbitrageAgentError):
    """Raised when a failure happens after a trade leg has been submitted."""

    def __init__(
        self,
        message: str,
        token0: Optional[str] = None,
        token1: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.token0 = token0
        self.token1 = token1


class SwapNotConfirmed(ExecutionError):
    """
    Raised by a venue when a swap was broadcast but its outcome is unknown.

    The transaction may still have settled, so callers must treat this as a
    post-submission failure and reconcile against ``tx_hash``.
    """

    def __init__(
        self,
        message: str,
        venue: Optional[str] = None,
        tx_hash: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details=details)
        self.venue = venue
        self.tx_hash = tx_hash


class PartialExecutionError(ExecutionError):
    """
    Raised when leg 1 settled but leg 2 failed.

    The agent now holds ``first_leg.amount_out`` of ``first_leg.token_out``
    that was meant to be sold back. Nothing reconciles this automatically.
    """

    def __init__(
        self,
        message: str,
        first_leg: Any = None,
        cause: Optional[BaseException] = None,
        token0: Optional[str] = None,
        token1: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, token0, token1, details)
        self.first_leg = first_leg
        self.cause = cause


class NegativeRealizedProfit(ExecutionError):
    """Raised when both legs settled but the token0 balance went down."""

    def __init__(
        self,
        message: str,
        initial_balance: Optional[int] = None,
        final_balance: Optional[int] = None,
        legs: Optional[tuple] = None,
        token0: Optional[str] = None,
        token1: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, token0, token1, details)
        self.initial_balance = initial_balance
        self.final_balance = final_balance
        self.legs = legs or ()

    @property
    def loss(self) -> int:
        """Absolute amount of token0 lost."""
        if self.initial_balance is None or self.final_balance is None:
            return 0
        return self.initial_balance - self.final_balance
