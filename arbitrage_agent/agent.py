"""
Arbitrage agent facade.

Wires the config store, whitelist, profit engine, scanner, execution
controller and audit log around one ``AgentState`` and serializes every
public entry point through a single lock, so scans, trades and
configuration changes never interleave.
"""

import os
import threading
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .audit import AuditEventType, AuditLog
from .config_schema import AgentConfig, VenueSchema
from .controller import ExecutionController
from .exceptions import ConfigurationError
from .interfaces import SystemTimeProvider, TimeProvider
from .metrics import AgentMetrics
from .profit import ProfitEngine
from .registry import TokenRegistry
from .scanner import OpportunityScanner
from .state import ConfigStore
from .types import (
    DEFAULT_MAX_SLIPPAGE_BPS,
    DEFAULT_MAX_TRADE_AMOUNT,
    AgentState,
    Opportunity,
    TradeResult,
)
from .utils import get_logger
from .venues import BalanceProvider, PaperLedger, PaperVenue, VenueClient

logger = get_logger(__name__)


class ArbitrageAgent:
    """
    Cross-venue arbitrage agent.

    Public operations:
        find_opportunities(tokens)                         any caller, active
        execute_arbitrage(caller, token0, token1, amount)  owner, active
        update_config(caller, ...)                         owner
        approve_token(caller, token, approved)             owner
        emergency_stop(caller, reason)                     owner
    """

    def __init__(
        self,
        owner: str,
        venue_a: VenueClient,
        venue_b: VenueClient,
        min_profit_bps: int,
        balances: BalanceProvider,
        max_trade_amount: int = DEFAULT_MAX_TRADE_AMOUNT,
        max_slippage_bps: int = DEFAULT_MAX_SLIPPAGE_BPS,
        token_decimals: Optional[Dict[str, int]] = None,
        approved_tokens: Optional[Iterable[str]] = None,
        audit: Optional[AuditLog] = None,
        metrics: Optional[AgentMetrics] = None,
        time_provider: Optional[TimeProvider] = None,
        log_scans: bool = False,
    ):
        self.time_provider = time_provider or SystemTimeProvider()
        self.audit = audit or AuditLog(time_provider=self.time_provider)
        self.metrics = metrics
        self.log_scans = log_scans

        self.config = ConfigStore(
            owner=owner,
            venue_a=venue_a.name,
            venue_b=venue_b.name,
            min_profit_bps=min_profit_bps,
            audit=self.audit,
            max_trade_amount=max_trade_amount,
            max_slippage_bps=max_slippage_bps,
        )
        self.registry = TokenRegistry(self.config, self.audit, initial=approved_tokens)
        self.engine = ProfitEngine(venue_a, venue_b, token_decimals)
        self.scanner = OpportunityScanner(self.config, self.registry, self.engine)
        self.controller = ExecutionController(
            config=self.config,
            registry=self.registry,
            engine=self.engine,
            venue_a=venue_a,
            venue_b=venue_b,
            balances=balances,
            audit=self.audit,
            time_provider=self.time_provider,
            metrics=metrics,
        )

        self._lock = threading.RLock()
        logger.info(
            f"Agent ready: owner={owner} venues={venue_a.name}/{venue_b.name} "
            f"min_profit_bps={min_profit_bps}"
        )

    @property
    def state(self) -> AgentState:
        """A copy of the current state; mutating it has no effect on the agent."""
        with self._lock:
            s = self.config.state
            return AgentState(
                owner=s.owner,
                venue_a=s.venue_a,
                venue_b=s.venue_b,
                min_profit_bps=s.min_profit_bps,
                max_trade_amount=s.max_trade_amount,
                max_slippage_bps=s.max_slippage_bps,
                active=s.active,
            )

    @property
    def active(self) -> bool:
        return self.config.active

    def is_approved(self, token: str) -> bool:
        with self._lock:
            return self.registry.is_approved(token)

    def calculate_profit(self, token0: str, token1: str) -> tuple:
        with self._lock:
            return self.engine.calculate_profit(token0, token1)

    def find_opportunities(self, tokens: Sequence[str]) -> List[Opportunity]:
        with self._lock:
            found = self.scanner.find_opportunities(tokens)

            if self.metrics is not None:
                self.metrics.record_scan(len(found))
            if self.log_scans:
                for opp in found:
                    self.audit.emit(
                        AuditEventType.OPPORTUNITY_FOUND,
                        token0=opp.token0,
                        token1=opp.token1,
                        profit_bps=opp.profit_bps,
                    )
            return found

    def execute_arbitrage(self, caller: str, token0: str, token1: str, amount: int) -> bool:
        with self._lock:
            return self.controller.execute_arbitrage(caller, token0, token1, amount)

    def execute_trade(self, caller: str, token0: str, token1: str, amount: int) -> TradeResult:
        """Same as ``execute_arbitrage`` but returns the ``TradeResult``."""
        with self._lock:
            return self.controller.execute_trade(caller, token0, token1, amount)

    def update_config(
        self, caller: str, min_profit_bps: int, max_trade_amount: int, max_slippage_bps: int
    ) -> None:
        with self._lock:
            self.config.update_config(caller, min_profit_bps, max_trade_amount, max_slippage_bps)

    def approve_token(self, caller: str, token: str, approved: bool) -> None:
        with self._lock:
            self.registry.approve_token(caller, token, approved)

    def emergency_stop(self, caller: str, reason: str) -> None:
        with self._lock:
            self.config.emergency_stop(caller, reason)
            if self.metrics is not None:
                self.metrics.set_active(False)

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {**self.controller.get_stats(), "active": self.config.active}

    @classmethod
    def from_config(
        cls,
        config: AgentConfig,
        time_provider: Optional[TimeProvider] = None,
        metrics: Optional[AgentMetrics] = None,
    ) -> "ArbitrageAgent":
        """
        Build an agent and its venues from a validated ``AgentConfig``.

        Paper venues share one ``PaperLedger`` seeded from ``paper_balances``.
        Web3 venues read ``network.rpc_url_env`` and ``network.private_key_env``
        from the environment.
        """
        if config.venue_a.kind == "paper":
            ledger = PaperLedger(config.paper_balances)
            venue_a = PaperVenue(config.venue_a.name, ledger, _paper_settings(config.venue_a))
            venue_b = PaperVenue(config.venue_b.name, ledger, _paper_settings(config.venue_b))
            balances: BalanceProvider = ledger
        else:
            venue_a, venue_b, balances = _build_web3_venues(config)

        if metrics is None and config.metrics.enabled:
            metrics = AgentMetrics()

        time_provider = time_provider or SystemTimeProvider()
        audit = AuditLog(log_file=config.audit.log_file, time_provider=time_provider)

        return cls(
            owner=config.owner,
            venue_a=venue_a,
            venue_b=venue_b,
            min_profit_bps=config.min_profit_bps,
            balances=balances,
            max_trade_amount=config.max_trade_amount,
            max_slippage_bps=config.max_slippage_bps,
            token_decimals={s: t.decimals for s, t in config.tokens.items()},
            approved_tokens=[s for s, t in config.tokens.items() if t.approved],
            audit=audit,
            metrics=metrics,
            time_provider=time_provider,
            log_scans=config.audit.log_scans,
        )


def _paper_settings(venue: VenueSchema) -> Dict[str, Any]:
    return {
        "fee_bps": venue.fee_bps,
        "execution_slippage_bps": venue.execution_slippage_bps,
        "rates": venue.rates,
    }


def _build_web3_venues(config: AgentConfig):
    from eth_account import Account
    from web3 import Web3

    from .venues import Erc20BalanceReader, Web3Venue

    rpc_url = os.getenv(config.network.rpc_url_env)
    if not rpc_url:
        raise ConfigurationError(
            f"RPC URL environment variable {config.network.rpc_url_env} not set"
        )
    private_key = os.getenv(config.network.private_key_env)
    if not private_key:
        raise ConfigurationError(
            f"Private key environment variable {config.network.private_key_env} not set"
        )

    web3 = Web3(Web3.HTTPProvider(rpc_url))
    if not web3.is_connected():
        raise ConfigurationError(f"Failed to connect to RPC at {rpc_url}")

    account = Account.from_key(private_key)
    logger.info(f"Loaded account: {account.address}")

    addresses = {symbol: token.address for symbol, token in config.tokens.items()}
    venues = [
        Web3Venue(
            name=v.name,
            web3=web3,
            router_address=v.router_address,
            account=account,
            token_addresses=addresses,
            gas_limit=v.gas_limit,
            deadline_sec=v.deadline_sec,
            receipt_timeout_sec=v.receipt_timeout_sec,
        )
        for v in (config.venue_a, config.venue_b)
    ]
    return venues[0], venues[1], Erc20BalanceReader(web3, account.address, addresses)
