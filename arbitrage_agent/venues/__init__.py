from .base_venue import BalanceProvider, VenueClient
from .paper_venue import PaperLedger, PaperVenue
from .web3_venue import Erc20BalanceReader, Web3Venue

__all__ = [
    "BalanceProvider",
    "VenueClient",
    "PaperLedger",
    "PaperVenue",
    "Erc20BalanceReader",
    "Web3Venue",
]
