"""
Uniswap V2 style router adapter.

Quotes through the router's ``getAmountsOut`` and executes through
``swapExactTokensForTokens`` with transactions signed locally by an
``eth_account`` account. The realized output of a swap is measured as the
change in the account's ERC20 balance of the output token, not read from the
router's return value.
"""

import logging
import time
from typing import Dict, List, Optional

from eth_account.signers.local import LocalAccount
from web3 import Web3

from ..exceptions import SwapNotConfirmed, VenueError
from .abi import ERC20_ABI, UNISWAP_V2_ROUTER_ABI
from .base_venue import VenueClient

logger = logging.getLogger(__name__)


def resolve_address(token: str, token_addresses: Dict[str, str]) -> str:
    """Map a token symbol to its checksum address; addresses pass through."""
    address = token_addresses.get(token, token)
    if not Web3.is_address(address):
        raise VenueError(f"Unknown token {token!r}: no address configured")
    return Web3.to_checksum_address(address)


class Erc20BalanceReader:
    """Reads the agent wallet's ERC20 balances."""

    def __init__(self, web3: Web3, holder: str, token_addresses: Optional[Dict[str, str]] = None):
        self.web3 = web3
        self.holder = Web3.to_checksum_address(holder)
        self.token_addresses = token_addresses or {}

    def balance_of(self, token: str) -> int:
        address = resolve_address(token, self.token_addresses)
        contract = self.web3.eth.contract(address=address, abi=ERC20_ABI)
        try:
            return int(contract.functions.balanceOf(self.holder).call())
        except Exception as e:
            raise VenueError(f"Failed to read {token} balance: {e}") from e


class Web3Venue(VenueClient):
    """
    Venue backed by an on-chain Uniswap V2 style router.

    Supports:
    - Read-only quotes via ``getAmountsOut``
    - Exact-input swaps with an ``amountOutMin`` floor and deadline
    - Automatic router allowance top-up before a swap
    """

    def __init__(
        self,
        name: str,
        web3: Web3,
        router_address: str,
        account: LocalAccount,
        token_addresses: Optional[Dict[str, str]] = None,
        gas_limit: int = 250_000,
        deadline_sec: int = 120,
        receipt_timeout_sec: int = 120,
    ):
        """
        Initialize router venue.

        Args:
            name: Venue identifier
            web3: Connected Web3 instance
            router_address: Router contract address
            account: Signing account; swaps are sent from and to this address
            token_addresses: Symbol -> address map for token identifiers
            gas_limit: Gas limit for swap and approve transactions
            deadline_sec: Seconds until a submitted swap expires on-chain
            receipt_timeout_sec: Seconds to wait for a receipt
        """
        super().__init__(name)
        self.web3 = web3
        self.router_address = Web3.to_checksum_address(router_address)
        self.router = web3.eth.contract(address=self.router_address, abi=UNISWAP_V2_ROUTER_ABI)
        self.account = account
        self.token_addresses = token_addresses or {}
        self.gas_limit = gas_limit
        self.deadline_sec = deadline_sec
        self.receipt_timeout_sec = receipt_timeout_sec
        self.balances = Erc20BalanceReader(web3, account.address, self.token_addresses)

    def _path(self, token_in: str, token_out: str) -> List[str]:
        return [
            resolve_address(token_in, self.token_addresses),
            resolve_address(token_out, self.token_addresses),
        ]

    def quote(self, token_in: str, token_out: str, amount_in: int) -> int:
        path = self._path(token_in, token_out)
        try:
            amounts = self.router.functions.getAmountsOut(amount_in, path).call()
        except Exception as e:
            raise VenueError(
                f"{self.name}: getAmountsOut failed for {token_in}->{token_out}: {e}",
                venue=self.name,
            ) from e
        return int(amounts[-1])

    def execute(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        is_buy: bool,
        min_amount_out: int = 0,
    ) -> int:
        path = self._path(token_in, token_out)
        self._ensure_allowance(path[0], amount_in)

        before = self.balances.balance_of(token_out)
        deadline = int(time.time()) + self.deadline_sec

        logger.info(
            f"{self.name}: {'BUY' if is_buy else 'SELL'} {amount_in} {token_in} -> "
            f"{token_out} (min out {min_amount_out})"
        )
        swap = self.router.functions.swapExactTokensForTokens(
            amount_in, min_amount_out, path, self.account.address, deadline
        )
        receipt = self._send(swap, f"swap {token_in}->{token_out}", settles=True)

        try:
            after = self.balances.balance_of(token_out)
        except VenueError as e:
            tx_hash = self.web3.to_hex(receipt["transactionHash"])
            raise SwapNotConfirmed(
                f"{self.name}: swap {token_in}->{token_out} mined in {tx_hash} "
                f"but the {token_out} balance could not be read: {e}",
                venue=self.name,
                tx_hash=tx_hash,
            ) from e
        return after - before

    def _ensure_allowance(self, token_address: str, amount: int) -> None:
        token = self.web3.eth.contract(address=token_address, abi=ERC20_ABI)
        try:
            allowance = token.functions.allowance(
                self.account.address, self.router_address
            ).call()
        except Exception as e:
            raise VenueError(f"{self.name}: allowance check failed: {e}", venue=self.name) from e

        if allowance >= amount:
            return

        logger.info(f"{self.name}: approving router for {amount} of {token_address}")
        self._send(token.functions.approve(self.router_address, amount), "approve")

    def _send(self, contract_fn, label: str, settles: bool = False):
        """
        Build, sign, submit and wait for a contract call. Returns the receipt.

        Failures before broadcast raise ``VenueError``. With ``settles`` set, a
        failure while waiting for the receipt raises ``SwapNotConfirmed``
        because the transaction may still be mined.
        """
        try:
            tx = contract_fn.build_transaction(
                {
                    "from": self.account.address,
                    "nonce": self.web3.eth.get_transaction_count(self.account.address),
                    "gas": self.gas_limit,
                    "gasPrice": self.web3.eth.gas_price,
                    "chainId": self.web3.eth.chain_id,
                }
            )
            signed = self.account.sign_transaction(tx)
            tx_hash = self.web3.eth.send_raw_transaction(signed.raw_transaction)
        except Exception as e:
            raise VenueError(f"{self.name}: {label} failed: {e}", venue=self.name) from e

        try:
            receipt = self.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout_sec
            )
        except Exception as e:
            if not settles:
                raise VenueError(f"{self.name}: {label} failed: {e}", venue=self.name) from e
            raise SwapNotConfirmed(
                f"{self.name}: {label} sent in {self.web3.to_hex(tx_hash)} but not confirmed: {e}",
                venue=self.name,
                tx_hash=self.web3.to_hex(tx_hash),
            ) from e

        if receipt["status"] != 1:
            raise VenueError(
                f"{self.name}: {label} reverted in tx {self.web3.to_hex(tx_hash)}",
                venue=self.name,
                details={"tx_hash": self.web3.to_hex(tx_hash)},
            )
        return receipt
