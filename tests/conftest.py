"""
Shared fixtures: a paper wallet, two paper venues quoting WETH/USDC 200 bps
apart, and an agent wired to them with a pinned clock.
"""

import pytest
from prometheus_client import CollectorRegistry

from arbitrage_agent.agent import ArbitrageAgent
from arbitrage_agent.audit import AuditLog
from arbitrage_agent.interfaces import DeterministicTimeProvider
from arbitrage_agent.metrics import AgentMetrics
from arbitrage_agent.venues import PaperLedger, PaperVenue

OWNER = "0xA11CE00000000000000000000000000000000001"
STRANGER = "0xB0B0000000000000000000000000000000000002"
UNIT = 10**18


@pytest.fixture
def owner():
    return OWNER


@pytest.fixture
def stranger():
    return STRANGER


@pytest.fixture
def time_provider():
    return DeterministicTimeProvider()


@pytest.fixture
def audit(time_provider):
    return AuditLog(time_provider=time_provider)


@pytest.fixture
def metrics():
    return AgentMetrics(CollectorRegistry())


@pytest.fixture
def ledger():
    return PaperLedger({"WETH": 10 * UNIT})


@pytest.fixture
def venue_a(ledger):
    return PaperVenue("VenueA", ledger, {"rates": {"WETH/USDC": "2040", "WETH/DAI": "2000", "USDC/DAI": "1"}})


@pytest.fixture
def venue_b(ledger):
    return PaperVenue("VenueB", ledger, {"rates": {"WETH/USDC": "2000", "WETH/DAI": "2000", "USDC/DAI": "1"}})


@pytest.fixture
def agent(venue_a, venue_b, ledger, audit, metrics, time_provider):
    return ArbitrageAgent(
        owner=OWNER,
        venue_a=venue_a,
        venue_b=venue_b,
        min_profit_bps=50,
        balances=ledger,
        max_trade_amount=5 * UNIT,
        approved_tokens=["WETH", "USDC", "DAI"],
        audit=audit,
        metrics=metrics,
        time_provider=time_provider,
    )
