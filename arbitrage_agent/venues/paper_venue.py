"""
Paper Trading Venue

Simulates swap execution against a fixed rate table with configurable fees
and execution slippage. Balances live in a ``PaperLedger`` that both paper
venues share, so the agent's round-trip accounting sees one wallet.
"""

import logging
import threading
from decimal import ROUND_DOWN, Decimal, localcontext
from typing import Any, Dict, Optional, Tuple

from ..exceptions import VenueError
from ..utils import BPS_SCALE
from .base_venue import VenueClient

logger = logging.getLogger(__name__)


class PaperLedger:
    """In-memory wallet shared by paper venues."""

    def __init__(self, initial_balances: Optional[Dict[str, int]] = None):
        self._balances: Dict[str, int] = dict(initial_balances or {})
        self._lock = threading.Lock()

    def balance_of(self, token: str) -> int:
        with self._lock:
            return self._balances.get(token, 0)

    def credit(self, token: str, amount: int) -> None:
        with self._lock:
            self._balances[token] = self._balances.get(token, 0) + amount

    def debit(self, token: str, amount: int) -> None:
        with self._lock:
            available = self._balances.get(token, 0)
            if available < amount:
                raise VenueError(
                    f"Insufficient {token} balance: {available} < {amount}",
                    details={"token": token, "available": available, "required": amount},
                )
            self._balances[token] = available - amount

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._balances)


class PaperVenue(VenueClient):
    """
    Paper venue that prices swaps from a rate table.

    Features:
    - Per-direction rates, with the inverse used when only one side is set
    - Swap fee in basis points applied to the output
    - Execution slippage in basis points applied on top of the quote
    - ``min_amount_out`` enforcement, like an AMM router's amountOutMin
    """

    def __init__(self, name: str, ledger: PaperLedger, config: Optional[Dict[str, Any]] = None):
        """
        Initialize paper venue

        Args:
            name: Venue identifier
            ledger: Wallet the venue debits and credits
            config: Configuration containing:
                - fee_bps: Swap fee in basis points (default: 0)
                - execution_slippage_bps: Shortfall of fills versus quotes (default: 0)
                - rates: Mapping of "IN/OUT" -> output per unit of input
        """
        super().__init__(name)
        config = config or {}
        self.ledger = ledger
        self.fee_bps = int(config.get("fee_bps", 0))
        self.execution_slippage_bps = int(config.get("execution_slippage_bps", 0))
        self._rates: Dict[Tuple[str, str], Decimal] = {}

        for market, rate in config.get("rates", {}).items():
            token_in, token_out = market.split("/")
            self.set_rate(token_in, token_out, rate)

        self.metrics = {"quotes": 0, "swaps": 0, "rejected_swaps": 0}

    def set_rate(self, token_in: str, token_out: str, rate: Any) -> None:
        """Set the amount of ``token_out`` one unit of ``token_in`` buys."""
        rate_d = Decimal(str(rate))
        if rate_d < 0:
            raise ValueError(f"Rate must not be negative: {rate}")
        self._rates[(token_in, token_out)] = rate_d

    def _rate(self, token_in: str, token_out: str) -> Decimal:
        direct = self._rates.get((token_in, token_out))
        if direct is not None:
            return direct
        inverse = self._rates.get((token_out, token_in))
        if inverse:
            return Decimal(1) / inverse
        raise VenueError(
            f"{self.name} has no market for {token_in}/{token_out}", venue=self.name
        )

    def quote(self, token_in: str, token_out: str, amount_in: int) -> int:
        if amount_in < 0:
            raise VenueError(f"amount_in must not be negative: {amount_in}", venue=self.name)
        self.metrics["quotes"] += 1
        # u256 amounts need more digits than the default context keeps
        with localcontext() as ctx:
            ctx.prec = 100
            rate = self._rate(token_in, token_out)
            gross = Decimal(amount_in) * rate
            net = gross * (BPS_SCALE - self.fee_bps) / BPS_SCALE
            return int(net.to_integral_value(rounding=ROUND_DOWN))

    def execute(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        is_buy: bool,
        min_amount_out: int = 0,
    ) -> int:
        quoted = self.quote(token_in, token_out, amount_in)
        amount_out = quoted * (BPS_SCALE - self.execution_slippage_bps) // BPS_SCALE

        if amount_out < min_amount_out:
            self.metrics["rejected_swaps"] += 1
            raise VenueError(
                f"{self.name}: output {amount_out} below minimum {min_amount_out}",
                venue=self.name,
                details={"amount_out": amount_out, "min_amount_out": min_amount_out},
            )

        self.ledger.debit(token_in, amount_in)
        self.ledger.credit(token_out, amount_out)
        self.metrics["swaps"] += 1

        logger.debug(
            f"[PAPER] {self.name} {'BUY' if is_buy else 'SELL'} "
            f"{amount_in} {token_in} -> {amount_out} {token_out}"
        )
        return amount_out
