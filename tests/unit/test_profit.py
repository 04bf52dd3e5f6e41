"""Tests for the profit engine."""

from unittest.mock import Mock

import pytest

from arbitrage_agent.exceptions import QuoteDivisionByZero, QuoteOverflow, VenueError
from arbitrage_agent.profit import ProfitEngine, compare_quotes
from arbitrage_agent.types import ONE_UNIT
from arbitrage_agent.venues.base_venue import VenueClient

UNIT = 10**18


def make_venue(name, amount_out):
    venue = Mock(spec=VenueClient)
    venue.name = name
    venue.quote.return_value = amount_out
    return venue


class TestCompareQuotes:
    def test_two_percent_spread(self):
        result = compare_quotes(102 * 10**16, 100 * 10**16)
        assert result.profit_bps == 200
        assert result.buy_on_venue_a is True

    def test_direction_follows_higher_quote(self):
        result = compare_quotes(100 * 10**16, 102 * 10**16)
        assert result.profit_bps == 200
        assert result.buy_on_venue_a is False

    def test_equal_quotes_favor_venue_b(self):
        assert compare_quotes(UNIT, UNIT)[:2] == (0, False)

    def test_floor_division(self):
        # 15 / 1_000_000 of the lower quote is below one basis point
        assert compare_quotes(1_000_015, 1_000_000).profit_bps == 0
        assert compare_quotes(1_003, 1_000).profit_bps == 30
        assert compare_quotes(10_199, 10_000).profit_bps == 199

    def test_measured_against_lower_quote(self):
        # 1 over 99 is 101.01 bps, not 100 bps
        assert compare_quotes(100, 99).profit_bps == 101

    def test_zero_lower_quote(self):
        with pytest.raises(QuoteDivisionByZero):
            compare_quotes(UNIT, 0, "WETH", "USDC")
        with pytest.raises(QuoteDivisionByZero):
            compare_quotes(0, 0)

    def test_maximum_representable_margin(self):
        assert compare_quotes(10_000 + 65_535, 10_000).profit_bps == 65_535

    def test_overflow(self):
        with pytest.raises(QuoteOverflow) as exc_info:
            compare_quotes(10_000 + 65_536, 10_000, "WETH", "USDC")
        assert exc_info.value.details["profit_bps"] == 65_536
        assert exc_info.value.token_in == "WETH"

    def test_raw_quotes_are_kept(self):
        result = compare_quotes(7, 5)
        assert (result.quote_a, result.quote_b) == (7, 5)


class TestProfitEngine:
    def test_quotes_reference_amount_on_both_venues(self):
        venue_a = make_venue("A", 102 * 10**16)
        venue_b = make_venue("B", 100 * 10**16)
        engine = ProfitEngine(venue_a, venue_b)

        assert engine.calculate_profit("WETH", "USDC") == (200, True)
        venue_a.quote.assert_called_once_with("WETH", "USDC", ONE_UNIT)
        venue_b.quote.assert_called_once_with("WETH", "USDC", ONE_UNIT)

    def test_six_decimal_token_quotes_one_whole_unit(self):
        venue_a = make_venue("A", 5)
        venue_b = make_venue("B", 5)
        engine = ProfitEngine(venue_a, venue_b, token_decimals={"USDC": 6})

        engine.quote_both("USDC", "WETH")
        venue_a.quote.assert_called_once_with("USDC", "WETH", 10**6)
        venue_b.quote.assert_called_once_with("USDC", "WETH", 10**6)

    def test_reference_amount_defaults_to_18_decimals(self):
        engine = ProfitEngine(make_venue("A", 1), make_venue("B", 1), token_decimals={"USDC": 6})
        assert engine.reference_amount("USDC") == 10**6
        assert engine.reference_amount("WETH") == ONE_UNIT

    @pytest.mark.parametrize("decimals", [-1, 78])
    def test_invalid_decimals(self, decimals):
        with pytest.raises(ValueError):
            ProfitEngine(make_venue("A", 1), make_venue("B", 1), token_decimals={"X": decimals})

    def test_zero_quote_propagates(self):
        engine = ProfitEngine(make_venue("A", UNIT), make_venue("B", 0))
        with pytest.raises(QuoteDivisionByZero):
            engine.calculate_profit("WETH", "SCAM")

    def test_negative_quote_is_a_venue_error(self):
        engine = ProfitEngine(make_venue("A", -1), make_venue("B", UNIT))
        with pytest.raises(VenueError):
            engine.calculate_profit("WETH", "USDC")

    def test_venue_failure_propagates(self):
        venue_a = make_venue("A", UNIT)
        venue_a.quote.side_effect = VenueError("no pool", venue="A")
        engine = ProfitEngine(venue_a, make_venue("B", UNIT))
        with pytest.raises(VenueError, match="no pool"):
            engine.calculate_profit("WETH", "USDC")
