"""
Cross-venue arbitrage agent.

Compares a pair's price on two venues, reports pairs whose spread clears an
owner-set threshold and executes two-leg round trips for the owner under a
trade-size cap, a token whitelist and an irreversible emergency stop.
"""

from arbitrage_agent.version import __version__

PROJECT_NAME = "arbitrage-agent"
VERSION = __version__

from arbitrage_agent.agent import ArbitrageAgent
from arbitrage_agent.audit import AuditEventType, AuditLog, AuditRecord
from arbitrage_agent.config_loader import load_agent_config
from arbitrage_agent.config_schema import AgentConfig
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
    SwapNotConfirmed,
    TokenNotApproved,
    Unauthorized,
    ValidationError,
    VenueError,
)
from arbitrage_agent.profit import ProfitEngine, compare_quotes
from arbitrage_agent.types import AgentState, LegFill, Opportunity, ProfitQuote, TradeResult

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "ArbitrageAgent",
    "AgentConfig",
    "load_agent_config",
    "AuditEventType",
    "AuditLog",
    "AuditRecord",
    "ProfitEngine",
    "compare_quotes",
    "AgentState",
    "LegFill",
    "Opportunity",
    "ProfitQuote",
    "TradeResult",
    "ArbitrageAgentError",
    "ConfigurationError",
    "ValidationError",
    "RejectedError",
    "NotActive",
    "Unauthorized",
    "AmountExceedsMax",
    "TokenNotApproved",
    "InsufficientProfit",
    "QuoteError",
    "QuoteOverflow",
    "QuoteDivisionByZero",
    "VenueError",
    "ExecutionError",
    "SwapNotConfirmed",
    "PartialExecutionError",
    "NegativeRealizedProfit",
]
