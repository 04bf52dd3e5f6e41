"""
Execution controller: gates, orders and accounts for a two-leg round trip.

Preconditions are checked in a fixed order and every one of them raises
before any swap is submitted:

1. agent active                 -> NotActive
2. caller is owner              -> Unauthorized
3. amount within cap            -> AmountExceedsMax
4. both tokens whitelisted      -> TokenNotApproved
5. fresh margin above threshold -> InsufficientProfit

Profit is always re-quoted here; a scan result handed in by a caller may
already be stale.

Once a leg 1 swap has been broadcast, failures are reported as
``ExecutionError`` subclasses (``SwapNotConfirmed``, ``PartialExecutionError``
or ``NegativeRealizedProfit``) so they are never confused with a rejected call.
"""

from typing import Any, Dict, Optional

from .audit import AuditEventType, AuditLog
from .exceptions import (
    AmountExceedsMax,
    ExecutionError,
    InsufficientProfit,
    NegativeRealizedProfit,
    PartialExecutionError,
    RejectedError,
    SwapNotConfirmed,
    ValidationError,
    VenueError,
)
from .interfaces import SystemTimeProvider, TimeProvider
from .metrics import AgentMetrics
from .profit import ProfitEngine
from .registry import TokenRegistry
from .state import ConfigStore
from .types import (
    LegFill,
    ProfitQuote,
    TradeResult,
    describe_direction,
    expected_profit_amount,
    slippage_floor,
)
from .utils import BPS_SCALE, check_uint256, format_bps, get_logger
from .venues.base_venue import BalanceProvider, VenueClient

logger = get_logger(__name__)


class ExecutionController:
    """
    Executes arbitrage round trips between two venues.

    The buy leg goes to the venue with the higher ``token0 -> token1`` quote,
    the sell leg returns leg 1's realized output to token0 on the other venue.
    Legs are strictly sequential and never retried.
    """

    def __init__(
        self,
        config: ConfigStore,
        registry: TokenRegistry,
        engine: ProfitEngine,
        venue_a: VenueClient,
        venue_b: VenueClient,
        balances: BalanceProvider,
        audit: AuditLog,
        time_provider: Optional[TimeProvider] = None,
        metrics: Optional[AgentMetrics] = None,
    ):
        self.config = config
        self.registry = registry
        self.engine = engine
        self.venue_a = venue_a
        self.venue_b = venue_b
        self.balances = balances
        self.audit = audit
        self.time_provider = time_provider or SystemTimeProvider()
        self.metrics = metrics

        self.executions_attempted = 0
        self.executions_rejected = 0
        self.executions_successful = 0
        self.executions_failed = 0
        self.total_net_profit = 0
        self.last_result: Optional[TradeResult] = None

    def execute_arbitrage(self, caller: str, token0: str, token1: str, amount: int) -> bool:
        """Run a round trip and return True. Every failure raises."""
        self.execute_trade(caller, token0, token1, amount)
        return True

    def execute_trade(self, caller: str, token0: str, token1: str, amount: int) -> TradeResult:
        """
        Validate and execute a round trip, returning its ``TradeResult``.

        Args:
            caller: Account requesting the trade; must be the owner
            token0: Asset to start and end in
            token1: Intermediate asset
            amount: Amount of token0 to commit to leg 1

        Raises:
            RejectedError: A precondition failed; nothing was submitted
            VenueError: Leg 1 failed to execute; nothing settled
            SwapNotConfirmed: Leg 1 was broadcast but its outcome is unknown
            PartialExecutionError: Leg 1 settled, leg 2 failed
            NegativeRealizedProfit: Both legs settled at a loss
        """
        self.executions_attempted += 1

        try:
            profit = self.validate(caller, token0, token1, amount)
        except (RejectedError, ValidationError, VenueError):
            # Nothing was submitted
            self.executions_rejected += 1
            self._record_outcome("rejected")
            raise

        logger.info(
            f"Executing {token0}/{token1} amount={amount} at {format_bps(profit.profit_bps)} "
            f"({describe_direction(profit.buy_on_venue_a, self.venue_a.name, self.venue_b.name)})"
        )
        return self._execute(token0, token1, amount, profit)

    def validate(self, caller: str, token0: str, token1: str, amount: int) -> ProfitQuote:
        """Check preconditions 1-5 in order. Returns the fresh profit quote."""
        self.config.require_active("execute_arbitrage")
        self.config.require_owner(caller, "execute_arbitrage")

        check_uint256("amount", amount)
        if amount == 0:
            raise ValidationError("amount must be positive")
        if amount > self.config.max_trade_amount:
            logger.warning(
                f"Rejected: amount {amount} exceeds max {self.config.max_trade_amount}"
            )
            raise AmountExceedsMax(
                f"Amount {amount} exceeds max trade amount {self.config.max_trade_amount}",
                amount=amount,
                limit=self.config.max_trade_amount,
            )

        self.registry.require_approved(token0, token1)

        profit = self.engine.quote_both(token0, token1)
        threshold = self.config.min_profit_bps
        if profit.profit_bps <= threshold:
            logger.warning(
                f"Rejected {token0}/{token1}: {profit.profit_bps} bps <= {threshold} bps"
            )
            raise InsufficientProfit(
                f"Profit {profit.profit_bps} bps does not exceed {threshold} bps",
                profit_bps=profit.profit_bps,
                min_profit_bps=threshold,
            )
        return profit

    def _execute(self, token0: str, token1: str, amount: int, profit: ProfitQuote) -> TradeResult:
        if profit.buy_on_venue_a:
            buy_venue, sell_venue = self.venue_a, self.venue_b
        else:
            buy_venue, sell_venue = self.venue_b, self.venue_a

        try:
            initial_balance = self.balances.balance_of(token0)
        except Exception:
            # Nothing was submitted
            self.executions_rejected += 1
            self._record_outcome("rejected")
            logger.warning(f"Rejected {token0}/{token1}: initial {token0} balance unavailable")
            raise

        try:
            first = self._run_leg(1, buy_venue, token0, token1, amount, is_buy=True)
        except SwapNotConfirmed as e:
            self.executions_failed += 1
            self._record_outcome("leg1_unconfirmed")
            logger.error(
                f"Leg 1 on {buy_venue.name} was sent but not confirmed (tx {e.tx_hash}); "
                f"{token1} may be held: {e}"
            )
            self.audit.emit(
                AuditEventType.EXECUTION_FAILED,
                stage="leg1_unconfirmed",
                token0=token0,
                token1=token1,
                amount_in=amount,
                venue=buy_venue.name,
                tx_hash=e.tx_hash,
                error=str(e),
            )
            e.token0, e.token1 = token0, token1
            raise
        except Exception as e:
            self.executions_failed += 1
            self._record_outcome("leg1_failed")
            logger.error(f"Leg 1 on {buy_venue.name} failed, nothing settled: {e}")
            self.audit.emit(
                AuditEventType.EXECUTION_FAILED,
                stage="leg1",
                token0=token0,
                token1=token1,
                amount_in=amount,
                venue=buy_venue.name,
                error=str(e),
            )
            raise

        try:
            second = self._run_leg(2, sell_venue, token1, token0, first.amount_out, is_buy=False)
        except Exception as e:
            self.executions_failed += 1
            self._record_outcome("partial")
            logger.error(
                f"PARTIAL EXECUTION: leg 2 on {sell_venue.name} failed after leg 1 settled; "
                f"holding {first.amount_out} {token1}: {e}"
            )
            self.audit.emit(
                AuditEventType.EXECUTION_FAILED,
                stage="leg2",
                token0=token0,
                token1=token1,
                amount_in=amount,
                venue=sell_venue.name,
                stranded_token=token1,
                stranded_amount=first.amount_out,
                first_leg=first.to_dict(),
                error=str(e),
            )
            raise PartialExecutionError(
                f"Leg 2 failed after leg 1 settled; {first.amount_out} {token1} held",
                first_leg=first,
                cause=e,
                token0=token0,
                token1=token1,
            ) from e

        try:
            final_balance = self.balances.balance_of(token0)
        except Exception as e:
            self.executions_failed += 1
            logger.error(f"Both legs of {token0}/{token1} settled but the final balance read failed: {e}")
            self.audit.emit(
                AuditEventType.EXECUTION_FAILED,
                stage="settlement",
                token0=token0,
                token1=token1,
                amount_in=amount,
                legs=[first.to_dict(), second.to_dict()],
                error=str(e),
            )
            raise ExecutionError(
                f"Both legs settled but the final {token0} balance could not be read",
                token0=token0,
                token1=token1,
                details={"legs": [first.to_dict(), second.to_dict()]},
            ) from e

        net_profit = final_balance - initial_balance
        realized_bps = net_profit * BPS_SCALE / amount

        if net_profit < 0:
            self.executions_failed += 1
            self.total_net_profit += net_profit
            self._record_outcome("loss", realized_bps)
            logger.error(
                f"Round trip {token0}/{token1} lost {-net_profit} {token0} "
                f"(expected {format_bps(profit.profit_bps)})"
            )
            self.audit.emit(
                AuditEventType.EXECUTION_FAILED,
                stage="settlement",
                token0=token0,
                token1=token1,
                amount_in=amount,
                initial_balance=initial_balance,
                final_balance=final_balance,
                legs=[first.to_dict(), second.to_dict()],
            )
            raise NegativeRealizedProfit(
                f"Balance of {token0} fell by {-net_profit}",
                initial_balance=initial_balance,
                final_balance=final_balance,
                legs=(first, second),
                token0=token0,
                token1=token1,
            )

        result = TradeResult(
            token0=token0,
            token1=token1,
            amount_in=amount,
            profit_bps=profit.profit_bps,
            profit_amount=expected_profit_amount(amount, profit.profit_bps),
            net_profit=net_profit,
            timestamp=self.time_provider.current_timestamp(),
            buy_on_venue_a=profit.buy_on_venue_a,
            legs=(first, second),
        )

        self.executions_successful += 1
        self.total_net_profit += net_profit
        self.last_result = result
        self._record_outcome("success", realized_bps)

        logger.info(
            f"Round trip {token0}/{token1} done: net profit {net_profit} "
            f"(expected {result.profit_amount})"
        )
        self.audit.emit(
            AuditEventType.ARBITRAGE_EXECUTED,
            token0=token0,
            token1=token1,
            amount_in=amount,
            profit_bps=profit.profit_bps,
            profit_amount=result.profit_amount,
            net_profit=net_profit,
            buy_on_venue_a=profit.buy_on_venue_a,
            legs=[first.to_dict(), second.to_dict()],
        )
        return result

    def _run_leg(
        self,
        leg: int,
        venue: VenueClient,
        token_in: str,
        token_out: str,
        amount_in: int,
        is_buy: bool,
    ) -> LegFill:
        expected_out = venue.quote(token_in, token_out, amount_in)
        min_out = slippage_floor(expected_out, self.config.max_slippage_bps)
        amount_out = venue.execute(
            token_in, token_out, amount_in, is_buy, min_amount_out=min_out
        )

        fill = LegFill(
            leg=leg,
            venue=venue.name,
            token_in=token_in,
            token_out=token_out,
            amount_in=amount_in,
            expected_out=expected_out,
            amount_out=amount_out,
        )
        logger.info(
            f"Leg {leg} on {venue.name}: {amount_in} {token_in} -> {amount_out} {token_out} "
            f"(slippage {fill.slippage_bps} bps)"
        )
        return fill

    def _record_outcome(self, outcome: str, realized_bps: Optional[float] = None) -> None:
        if self.metrics is not None:
            self.metrics.record_execution(outcome, realized_bps)

    def get_stats(self) -> Dict[str, Any]:
        """Get execution statistics."""
        success_rate = (
            self.executions_successful / self.executions_attempted * 100
            if self.executions_attempted > 0
            else 0.0
        )
        return {
            "executions_attempted": self.executions_attempted,
            "executions_rejected": self.executions_rejected,
            "executions_successful": self.executions_successful,
            "executions_failed": self.executions_failed,
            "success_rate_pct": success_rate,
            "total_net_profit": self.total_net_profit,
        }
