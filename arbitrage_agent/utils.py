"""
Common helpers for the arbitrage agent.

Logging setup, timestamp and JSON helpers, and the fixed-width integer
range checks used at the configuration boundary.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Union

from .exceptions import ValidationError

BPS_SCALE = 10_000
UINT16_MAX = 2**16 - 1
UINT256_MAX = 2**256 - 1


# Timestamp utilities
def timestamp_to_iso(timestamp: float) -> str:
    """Convert Unix timestamp to ISO 8601 string."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


# JSON utilities
def safe_json_dump(data: Any, **kwargs) -> str:
    """
    Serialize data to JSON with sensible defaults.

    Large integers (u256 amounts) are kept as JSON integers; anything the
    encoder does not know is passed through ``_json_default_handler``.
    """
    defaults = {"ensure_ascii": False, "default": _json_default_handler}
    defaults.update(kwargs)
    return json.dumps(data, **defaults)


def _json_default_handler(obj: Any) -> Any:
    """Default JSON serialization handler for custom types."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    elif hasattr(obj, "value") and hasattr(obj, "name"):
        return obj.value
    elif hasattr(obj, "__dict__"):
        return obj.__dict__
    else:
        return str(obj)


# Range checks
def check_uint16(name: str, value: Any) -> int:
    """Return ``value`` if it is an int in [0, 65535], else raise ValidationError."""
    return _check_uint(name, value, UINT16_MAX)


def check_uint256(name: str, value: Any) -> int:
    """Return ``value`` if it is an int in [0, 2**256 - 1], else raise ValidationError."""
    return _check_uint(name, value, UINT256_MAX)


def _check_uint(name: str, value: Any, upper: int) -> int:
    # bool is an int subclass; True is not a valid amount
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"{name} must be an integer, got {type(value).__name__}",
            {"field": name, "value": repr(value)},
        )
    if value < 0 or value > upper:
        raise ValidationError(
            f"{name}={value} is outside [0, {upper}]",
            {"field": name, "value": value, "max": upper},
        )
    return value


def format_bps(bps: int) -> str:
    """Format basis points as a signed percentage string. 200 -> '+2.00%'"""
    pct = bps / 100
    if pct >= 0:
        return f"+{pct:.2f}%"
    return f"{pct:.2f}%"


# Logging utilities
def get_logger(name: str, level: Union[str, int] = logging.INFO) -> logging.Logger:
    """
    Get a logger with the agent's console format.

    Args:
        name: Logger name (typically __name__)
        level: Logging level, applied only if the logger has none yet
    """
    logger = logging.getLogger(name)

    if logger.level == logging.NOTSET:
        logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
            datefmt="%H:%M:%S",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
