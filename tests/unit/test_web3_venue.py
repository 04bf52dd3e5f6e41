"""Tests for the router-backed venue, with the node mocked out."""

from unittest.mock import Mock

import pytest

from arbitrage_agent.exceptions import ExecutionError, SwapNotConfirmed, VenueError
from arbitrage_agent.venues import Erc20BalanceReader, Web3Venue
from arbitrage_agent.venues.abi import UNISWAP_V2_ROUTER_ABI
from arbitrage_agent.venues.web3_venue import resolve_address

ROUTER = "0x" + "7a" * 20
WALLET = "0x" + "11" * 20
WETH = "0x" + "c0" * 20
USDC = "0x" + "a0" * 20
TOKENS = {"WETH": WETH, "USDC": USDC}


@pytest.fixture
def router():
    return Mock(name="router")


@pytest.fixture
def erc20():
    token = Mock(name="erc20")
    token.functions.allowance.return_value.call.return_value = 10**30
    return token


@pytest.fixture
def web3(router, erc20):
    w3 = Mock(name="web3")
    w3.eth.contract.side_effect = lambda address, abi: router if abi is UNISWAP_V2_ROUTER_ABI else erc20
    w3.eth.send_raw_transaction.return_value = b"\x01" * 32
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1, "transactionHash": b"\x01" * 32}
    w3.to_hex.return_value = "0x" + "01" * 32
    return w3


@pytest.fixture
def account():
    acct = Mock(name="account")
    acct.address = WALLET
    acct.sign_transaction.return_value = Mock(raw_transaction=b"signed")
    return acct


@pytest.fixture
def venue(web3, account):
    return Web3Venue("Uni", web3, ROUTER, account, token_addresses=TOKENS)


def test_resolve_address():
    assert resolve_address("WETH", TOKENS).lower() == WETH
    assert resolve_address(USDC, {}).lower() == USDC
    with pytest.raises(VenueError, match="Unknown token"):
        resolve_address("SCAM", TOKENS)


def test_quote_reads_last_amount(venue, router):
    router.functions.getAmountsOut.return_value.call.return_value = [10**18, 2000 * 10**6]

    assert venue.quote("WETH", "USDC", 10**18) == 2000 * 10**6
    amount, path = router.functions.getAmountsOut.call_args[0]
    assert amount == 10**18
    assert [p.lower() for p in path] == [WETH, USDC]


def test_quote_failure(venue, router):
    router.functions.getAmountsOut.return_value.call.side_effect = Exception("execution reverted")
    with pytest.raises(VenueError, match="getAmountsOut failed"):
        venue.quote("WETH", "USDC", 10**18)


def test_execute_returns_balance_delta(venue, router, erc20, web3, account):
    erc20.functions.balanceOf.return_value.call.side_effect = [100, 2100]

    out = venue.execute("WETH", "USDC", 10**18, is_buy=True, min_amount_out=1990)

    assert out == 2000
    args = router.functions.swapExactTokensForTokens.call_args[0]
    assert args[0] == 10**18
    assert args[1] == 1990
    assert args[3] == WALLET
    account.sign_transaction.assert_called_once()
    web3.eth.send_raw_transaction.assert_called_once_with(b"signed")
    erc20.functions.approve.assert_not_called()


def test_execute_tops_up_allowance(venue, erc20, account):
    erc20.functions.allowance.return_value.call.return_value = 0
    erc20.functions.balanceOf.return_value.call.side_effect = [0, 5]

    venue.execute("WETH", "USDC", 10**18, is_buy=True)

    erc20.functions.approve.assert_called_once()
    assert erc20.functions.approve.call_args[0][1] == 10**18
    assert account.sign_transaction.call_count == 2


def test_reverted_swap(venue, erc20, web3):
    erc20.functions.balanceOf.return_value.call.return_value = 0
    web3.eth.wait_for_transaction_receipt.return_value = {"status": 0}

    with pytest.raises(VenueError, match="reverted"):
        venue.execute("WETH", "USDC", 10**18, is_buy=True)


def test_send_failure(venue, erc20, web3):
    erc20.functions.balanceOf.return_value.call.return_value = 0
    web3.eth.send_raw_transaction.side_effect = Exception("nonce too low")

    with pytest.raises(VenueError, match="nonce too low"):
        venue.execute("WETH", "USDC", 10**18, is_buy=True)


def test_receipt_timeout_after_broadcast(venue, erc20, web3):
    erc20.functions.balanceOf.return_value.call.return_value = 0
    web3.eth.wait_for_transaction_receipt.side_effect = Exception("timeout")

    with pytest.raises(SwapNotConfirmed, match="not confirmed") as exc_info:
        venue.execute("WETH", "USDC", 10**18, is_buy=True)

    assert isinstance(exc_info.value, ExecutionError)
    assert not isinstance(exc_info.value, VenueError)
    assert exc_info.value.venue == "Uni"
    assert exc_info.value.tx_hash == "0x" + "01" * 32
    web3.eth.send_raw_transaction.assert_called_once()


def test_balance_read_failure_after_swap(venue, erc20, web3):
    erc20.functions.balanceOf.return_value.call.side_effect = [100, Exception("rpc down")]

    with pytest.raises(SwapNotConfirmed, match="balance could not be read") as exc_info:
        venue.execute("WETH", "USDC", 10**18, is_buy=True)

    assert exc_info.value.tx_hash == "0x" + "01" * 32
    web3.to_hex.assert_called_with(b"\x01" * 32)


def test_approve_timeout_is_a_venue_error(venue, erc20, web3):
    erc20.functions.allowance.return_value.call.return_value = 0
    web3.eth.wait_for_transaction_receipt.side_effect = Exception("timeout")

    with pytest.raises(VenueError, match="timeout") as exc_info:
        venue.execute("WETH", "USDC", 10**18, is_buy=True)

    assert not isinstance(exc_info.value, SwapNotConfirmed)
    erc20.functions.balanceOf.assert_not_called()


def test_balance_reader(web3, erc20):
    erc20.functions.balanceOf.return_value.call.return_value = 42
    reader = Erc20BalanceReader(web3, WALLET, TOKENS)

    assert reader.balance_of("WETH") == 42


def test_balance_reader_failure(web3, erc20):
    erc20.functions.balanceOf.return_value.call.side_effect = Exception("rpc down")
    reader = Erc20BalanceReader(web3, WALLET, TOKENS)

    with pytest.raises(VenueError, match="Failed to read WETH balance"):
        reader.balance_of("WETH")
