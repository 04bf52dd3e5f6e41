"""
Logging configuration for cleaner output.

Usage:
    import logging_config
    logging_config.setup()
"""

import logging
import sys


def setup(level=logging.INFO):
    """
    Configure logging for cleaner, more readable output.

    - Suppresses per-request HTTP logs from the web3 provider
    - Uses shorter timestamp format (HH:MM:SS instead of full datetime)
    """

    # Root logger - minimal format
    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers
    root.handlers.clear()

    # Create console handler with clean format
    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    # Minimal format: time + level + message
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(message)s", datefmt="%H:%M:%S"
    )
    console.setFormatter(formatter)
    root.addHandler(console)

    # Suppress noisy loggers
    logging.getLogger("web3").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)

    # Keep application loggers at the requested level
    logging.getLogger("__main__").setLevel(level)
    logging.getLogger("arbitrage_agent").setLevel(level)


def setup_minimal():
    """
    Even more minimal logging - only warnings and errors.
    Rejections, failed legs and emergency stops still show up.
    """
    setup(level=logging.WARNING)


def setup_debug():
    """
    Verbose logging for debugging.
    Shows every pair quote and provider request.
    """
    setup(level=logging.DEBUG)
    logging.getLogger("web3").setLevel(logging.DEBUG)
