"""
Base Venue Interface

The abstraction layer between the agent and a price/execution venue.
The agent treats both venues identically through this interface; routing,
fee tiers and pool selection belong to the concrete adapter.
"""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


class VenueClient(ABC):
    """Abstract base class for venue adapters"""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def quote(self, token_in: str, token_out: str, amount_in: int) -> int:
        """
        Quote the output for swapping ``amount_in`` of ``token_in``.

        Must not change any state. May reflect live liquidity.
        """
        pass

    @abstractmethod
    def execute(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        is_buy: bool,
        min_amount_out: int = 0,
    ) -> int:
        """
        Submit the swap and return the output actually received.

        The realized output may differ from the last quote. Adapters that
        support it must fail the swap when the output would fall below
        ``min_amount_out``.
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


@runtime_checkable
class BalanceProvider(Protocol):
    """Reports the agent's own holdings of an asset."""

    def balance_of(self, token: str) -> int:
        """Return the agent's balance of ``token`` in smallest units."""
        ...
