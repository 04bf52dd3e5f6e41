"""
Injectable time source for audit timestamps and trade records.

Components take a ``TimeProvider`` in their constructor instead of calling
``time.time()`` directly, so tests and replays can pin the clock.
"""

import time
from typing import Protocol, runtime_checkable


@runtime_checkable
class TimeProvider(Protocol):
    """Protocol for time-related operations."""

    def current_timestamp(self) -> float:
        """Get current Unix timestamp."""
        ...


class SystemTimeProvider:
    """Production time provider using system time."""

    def current_timestamp(self) -> float:
        return time.time()


class DeterministicTimeProvider:
    """Deterministic time provider for testing and replays."""

    def __init__(self, start_time: float = 1640995200.0):  # 2022-01-01
        self._current_time = start_time

    def current_timestamp(self) -> float:
        return self._current_time

    def advance_time(self, seconds: float) -> None:
        """Manually advance time by specified seconds."""
        self._current_time += seconds

    def set_time(self, timestamp: float) -> None:
        """Set current time to specific timestamp."""
        self._current_time = timestamp
