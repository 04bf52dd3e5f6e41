"""
Prometheus metrics for the arbitrage agent.

Counters for scans and execution outcomes, a realized-margin histogram and
an ``active`` gauge. Pass a private ``CollectorRegistry`` in tests so
instances do not collide on the process-wide default registry.
"""

import threading
from typing import Optional

from prometheus_client import (
    REGISTRY,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class AgentMetrics:
    """Prometheus-compatible metrics for scan and execution activity"""

    OUTCOMES = ("success", "rejected", "leg1_failed", "leg1_unconfirmed", "partial", "loss")

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """Initialize metrics with custom registry or default"""
        self.registry = registry or REGISTRY
        self._lock = threading.RLock()
        self._initialize_metrics()

    def _initialize_metrics(self):
        self.scans_total = Counter(
            "arbitrage_agent_scans_total",
            "Total number of opportunity scans",
            registry=self.registry,
        )

        self.opportunities_found_total = Counter(
            "arbitrage_agent_opportunities_found_total",
            "Total pairs that cleared the profit threshold during scans",
            registry=self.registry,
        )

        self.executions_total = Counter(
            "arbitrage_agent_executions_total",
            "Execution attempts by outcome",
            ["outcome"],
            registry=self.registry,
        )

        self.realized_profit_bps = Histogram(
            "arbitrage_agent_realized_profit_basis_points",
            "Realized round-trip profit in basis points of amount_in",
            buckets=[-100, -50, -20, -10, -5, 0, 5, 10, 20, 50, 100, 200, 500],
            registry=self.registry,
        )

        self.active = Gauge(
            "arbitrage_agent_active",
            "1 while the agent accepts trading calls, 0 after an emergency stop",
            registry=self.registry,
        )
        self.active.set(1)

    def record_scan(self, opportunities_found: int) -> None:
        with self._lock:
            self.scans_total.inc()
            if opportunities_found:
                self.opportunities_found_total.inc(opportunities_found)

    def record_execution(self, outcome: str, realized_bps: Optional[float] = None) -> None:
        if outcome not in self.OUTCOMES:
            raise ValueError(f"Unknown execution outcome: {outcome}")
        with self._lock:
            self.executions_total.labels(outcome=outcome).inc()
            if realized_bps is not None:
                self.realized_profit_bps.observe(realized_bps)

    def set_active(self, active: bool) -> None:
        self.active.set(1 if active else 0)

    def export(self) -> bytes:
        """Render all metrics in the Prometheus text format."""
        return generate_latest(self.registry)
