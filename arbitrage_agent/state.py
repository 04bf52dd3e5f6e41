"""
Owner-gated configuration store.

Holds the agent's ``AgentState`` and is the only code that mutates it.
Every mutator checks the caller against the owner first and raises a typed
``Unauthorized`` rather than asserting.
"""

from typing import Optional

from .audit import AuditEventType, AuditLog
from .exceptions import NotActive, Unauthorized, ValidationError
from .types import DEFAULT_MAX_SLIPPAGE_BPS, DEFAULT_MAX_TRADE_AMOUNT, AgentState
from .utils import check_uint16, check_uint256, get_logger

logger = get_logger(__name__)

MAX_REASON_BYTES = 32


class ConfigStore:
    """
    Owns ``AgentState`` for one agent.

    Configuration changes are allowed whether or not the agent is active;
    only ``emergency_stop`` changes the active flag and there is no way back.
    """

    def __init__(
        self,
        owner: str,
        venue_a: str,
        venue_b: str,
        min_profit_bps: int,
        audit: AuditLog,
        max_trade_amount: int = DEFAULT_MAX_TRADE_AMOUNT,
        max_slippage_bps: int = DEFAULT_MAX_SLIPPAGE_BPS,
    ):
        if not owner:
            raise ValidationError("owner must be a non-empty account identifier")
        self._state = AgentState(
            owner=owner,
            venue_a=venue_a,
            venue_b=venue_b,
            min_profit_bps=check_uint16("min_profit_bps", min_profit_bps),
            max_trade_amount=check_uint256("max_trade_amount", max_trade_amount),
            max_slippage_bps=check_uint16("max_slippage_bps", max_slippage_bps),
        )
        self.audit = audit

    @property
    def state(self) -> AgentState:
        return self._state

    @property
    def owner(self) -> str:
        return self._state.owner

    @property
    def active(self) -> bool:
        return self._state.active

    @property
    def min_profit_bps(self) -> int:
        return self._state.min_profit_bps

    @property
    def max_trade_amount(self) -> int:
        return self._state.max_trade_amount

    @property
    def max_slippage_bps(self) -> int:
        return self._state.max_slippage_bps

    def require_owner(self, caller: Optional[str], operation: str) -> None:
        if caller != self._state.owner:
            logger.warning(f"Rejected {operation}: caller {caller!r} is not the owner")
            raise Unauthorized(
                f"{operation} is restricted to the owner",
                caller=caller,
                details={"operation": operation},
            )

    def require_active(self, operation: str) -> None:
        if not self._state.active:
            logger.warning(f"Rejected {operation}: agent is not active")
            raise NotActive(f"Agent is stopped; {operation} is unavailable")

    def update_config(
        self,
        caller: str,
        min_profit_bps: int,
        max_trade_amount: int,
        max_slippage_bps: int,
    ) -> None:
        """Overwrite all three tunables. Only type ranges are validated."""
        self.require_owner(caller, "update_config")

        # Validate all three before writing any of them
        min_profit_bps = check_uint16("min_profit_bps", min_profit_bps)
        max_trade_amount = check_uint256("max_trade_amount", max_trade_amount)
        max_slippage_bps = check_uint16("max_slippage_bps", max_slippage_bps)

        self._state.min_profit_bps = min_profit_bps
        self._state.max_trade_amount = max_trade_amount
        self._state.max_slippage_bps = max_slippage_bps

        logger.info(
            f"Config updated: min_profit_bps={min_profit_bps} "
            f"max_trade_amount={max_trade_amount} max_slippage_bps={max_slippage_bps}"
        )
        self.audit.emit(
            AuditEventType.CONFIG_UPDATED,
            min_profit_bps=min_profit_bps,
            max_trade_amount=max_trade_amount,
            max_slippage_bps=max_slippage_bps,
        )

    def emergency_stop(self, caller: str, reason: str) -> None:
        """Deactivate the agent permanently and record a short reason code."""
        self.require_owner(caller, "emergency_stop")

        if not isinstance(reason, str) or len(reason.encode("utf-8")) > MAX_REASON_BYTES:
            raise ValidationError(
                f"reason must be a string of at most {MAX_REASON_BYTES} bytes",
                {"reason": repr(reason)},
            )

        self._state.active = False
        logger.critical(f"EMERGENCY STOP: {reason}")
        self.audit.emit(AuditEventType.EMERGENCY_STOP, reason=reason)
