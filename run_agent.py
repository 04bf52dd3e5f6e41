#!/usr/bin/env python3
"""
Cross-venue arbitrage agent CLI.

Builds an agent from a YAML config, then either scans token pairs and
prints the opportunities or executes one round trip as the owner.

Usage:
    python3 run_agent.py --config configs/paper_agent.yaml scan --tokens WETH USDC DAI
    python3 run_agent.py --config configs/paper_agent.yaml execute \\
        --caller 0xOwner --token0 WETH --token1 USDC --amount 1000000000000000000
"""

import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv
from tabulate import tabulate

import logging_config
from arbitrage_agent.agent import ArbitrageAgent
from arbitrage_agent.config_loader import load_agent_config
from arbitrage_agent.exceptions import (
    ArbitrageAgentError,
    ConfigurationError,
    ExecutionError,
    RejectedError,
)
from arbitrage_agent.utils import format_bps


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Cross-venue arbitrage agent",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List profitable pairs among three tokens
  python3 run_agent.py --config configs/paper_agent.yaml scan --tokens WETH USDC DAI

  # Execute one round trip as the owner
  python3 run_agent.py --config configs/paper_agent.yaml execute \\
      --caller 0xOwner --token0 WETH --token1 USDC --amount 1000000000000000000
        """,
    )

    parser.add_argument(
        "--config",
        default="configs/paper_agent.yaml",
        help="Path to config YAML file (default: configs/paper_agent.yaml)",
    )
    parser.add_argument(
        "--log-level",
        choices=["minimal", "info", "debug"],
        default="info",
        help="Console log verbosity (default: info)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan token pairs for opportunities")
    scan.add_argument(
        "--tokens",
        nargs="+",
        help="Tokens to pair up (default: every approved token in the config)",
    )

    execute = sub.add_parser("execute", help="Execute one round trip")
    execute.add_argument("--caller", required=True, help="Caller account (must be the owner)")
    execute.add_argument("--token0", required=True, help="Token to start and end in")
    execute.add_argument("--token1", required=True, help="Intermediate token")
    execute.add_argument("--amount", required=True, type=int, help="Amount of token0, in base units")

    return parser.parse_args(argv)


def print_opportunities(opportunities) -> None:
    if not opportunities:
        print("No opportunities above threshold")
        return

    rows = [[o.token0, o.token1, o.profit_bps, format_bps(o.profit_bps)] for o in opportunities]
    print(tabulate(rows, headers=["Token0", "Token1", "Profit (bps)", "Profit"], tablefmt="grid"))


def print_trade(result) -> None:
    rows = [
        [leg.leg, leg.venue, f"{leg.token_in} -> {leg.token_out}", leg.amount_in, leg.expected_out, leg.amount_out]
        for leg in result.legs
    ]
    print(
        tabulate(
            rows,
            headers=["Leg", "Venue", "Route", "Amount In", "Quoted Out", "Filled Out"],
            tablefmt="grid",
        )
    )
    print(f"Quoted margin: {format_bps(result.profit_bps)} (expected profit {result.profit_amount})")
    print(f"Realized net profit: {result.net_profit} {result.token0}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for config/setup errors, 2 for rejected
        or failed trades)
    """
    load_dotenv()
    args = parse_args(argv)

    if args.log_level == "debug":
        logging_config.setup_debug()
    elif args.log_level == "minimal":
        logging_config.setup_minimal()
    else:
        logging_config.setup()

    try:
        config = load_agent_config(args.config)
        agent = ArbitrageAgent.from_config(config)
    except ConfigurationError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"❌ Initialization failed: {e}", file=sys.stderr)
        return 1

    if args.command == "scan":
        tokens = args.tokens or [s for s, t in config.tokens.items() if t.approved]
        try:
            opportunities = agent.find_opportunities(tokens)
        except ArbitrageAgentError as e:
            print(f"❌ Scan failed: {e}", file=sys.stderr)
            return 2
        print_opportunities(opportunities)
        return 0

    try:
        result = agent.execute_trade(args.caller, args.token0, args.token1, args.amount)
    except RejectedError as e:
        print(f"⛔ Rejected: {e}", file=sys.stderr)
        return 2
    except ExecutionError as e:
        print(f"❌ Execution failed: {e}", file=sys.stderr)
        return 2
    except ArbitrageAgentError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2

    print_trade(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())
