"""Tests for the exceptions module."""

import pytest

from arbitrage_agent.exceptions import (
    AmountExceedsMax,
    ArbitrageAgentError,
    ConfigurationError,
    ExecutionError,
    InsufficientProfit,
    NegativeRealizedProfit,
    NotActive,
    PartialExecutionError,
    QuoteDivisionByZero,
    QuoteError,
    QuoteOverflow,
    RejectedError,
    TokenNotApproved,
    Unauthorized,
    ValidationError,
    VenueError,
)


def test_base_exception():
    """Test the base exception class."""
    error = ArbitrageAgentError("Test error")
    assert str(error) == "Test error"
    assert error.details == {}

    error_with_details = ArbitrageAgentError("Test error", {"key": "value"})
    assert error_with_details.details == {"key": "value"}


def test_configuration_error():
    error = ConfigurationError("Config error", {"config_file": "agent.yaml"})
    assert str(error) == "Config error"
    assert error.details["config_file"] == "agent.yaml"
    assert isinstance(error, ArbitrageAgentError)


@pytest.mark.parametrize(
    "exc_class",
    [NotActive, Unauthorized, AmountExceedsMax, TokenNotApproved, InsufficientProfit, QuoteOverflow, QuoteDivisionByZero],
)
def test_rejections_are_not_execution_errors(exc_class):
    error = exc_class("refused")
    assert isinstance(error, RejectedError)
    assert not isinstance(error, ExecutionError)


@pytest.mark.parametrize("exc_class", [PartialExecutionError, NegativeRealizedProfit])
def test_post_submission_failures_are_execution_errors(exc_class):
    error = exc_class("failed")
    assert isinstance(error, ExecutionError)
    assert not isinstance(error, RejectedError)


def test_quote_errors_share_a_base():
    assert issubclass(QuoteOverflow, QuoteError)
    assert issubclass(QuoteDivisionByZero, QuoteError)

    error = QuoteOverflow("too big", token_in="WETH", token_out="USDC")
    assert error.token_in == "WETH"
    assert error.token_out == "USDC"


def test_unauthorized_keeps_caller():
    error = Unauthorized("owner only", caller="0xdead")
    assert error.caller == "0xdead"


def test_amount_exceeds_max_attributes():
    error = AmountExceedsMax("too much", amount=11, limit=10)
    assert error.amount == 11
    assert error.limit == 10


def test_insufficient_profit_attributes():
    error = InsufficientProfit("thin", profit_bps=20, min_profit_bps=50)
    assert error.profit_bps == 20
    assert error.min_profit_bps == 50


def test_venue_error():
    error = VenueError("router down", venue="VenueA", details={"rpc": "timeout"})
    assert error.venue == "VenueA"
    assert error.details["rpc"] == "timeout"
    assert not isinstance(error, RejectedError)


def test_partial_execution_error_keeps_cause():
    cause = VenueError("leg 2 reverted")
    error = PartialExecutionError("stuck", first_leg="fill", cause=cause, token0="WETH", token1="USDC")
    assert error.first_leg == "fill"
    assert error.cause is cause
    assert error.token0 == "WETH"
    assert error.token1 == "USDC"


def test_negative_realized_profit_loss():
    error = NegativeRealizedProfit("lost", initial_balance=100, final_balance=97)
    assert error.loss == 3
    assert error.legs == ()

    assert NegativeRealizedProfit("unknown").loss == 0


def test_validation_error():
    error = ValidationError("Validation failed")
    assert str(error) == "Validation failed"
    assert isinstance(error, ArbitrageAgentError)
    assert not isinstance(error, RejectedError)
