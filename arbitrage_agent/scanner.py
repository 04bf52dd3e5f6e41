"""
Exhaustive pairwise opportunity scan.

Every unordered index pair (i, j), i < j, of the caller's list is checked,
so the work is quadratic in the list length. Lists are caller-bounded and
small. Duplicates in the input are not collapsed.
"""

from typing import List, Sequence

from .profit import ProfitEngine
from .registry import TokenRegistry
from .state import ConfigStore
from .types import Opportunity
from .utils import get_logger

logger = get_logger(__name__)


class OpportunityScanner:
    def __init__(self, config: ConfigStore, registry: TokenRegistry, engine: ProfitEngine):
        self.config = config
        self.registry = registry
        self.engine = engine

    def find_opportunities(self, tokens: Sequence[str]) -> List[Opportunity]:
        """
        Return whitelisted pairs whose margin strictly exceeds ``min_profit_bps``.

        Read-only: no state is written and nothing is audited here. Output is
        in pair generation order (ascending i, then ascending j).

        Raises:
            NotActive: If the agent has been stopped
            QuoteDivisionByZero, QuoteOverflow, VenueError: From quoting a pair
        """
        self.config.require_active("find_opportunities")

        threshold = self.config.min_profit_bps
        found: List[Opportunity] = []
        evaluated = 0

        for i in range(len(tokens)):
            for j in range(i + 1, len(tokens)):
                evaluated += 1
                token0, token1 = tokens[i], tokens[j]
                if not (self.registry.is_approved(token0) and self.registry.is_approved(token1)):
                    continue

                profit_bps, _ = self.engine.calculate_profit(token0, token1)
                if profit_bps > threshold:
                    found.append(Opportunity(token0, token1, profit_bps))

        logger.debug(
            f"Scanned {evaluated} pairs over {len(tokens)} tokens, "
            f"{len(found)} above {threshold} bps"
        )
        return found
