"""
Append-only audit trail of agent activity.

Records are kept in memory, optionally appended to a JSON Lines file, and
pushed to subscriber callbacks. The agent only writes here; reading back is
for external observers.
"""

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from .interfaces import SystemTimeProvider, TimeProvider
from .utils import safe_json_dump, timestamp_to_iso

logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    OPPORTUNITY_FOUND = "opportunity_found"
    ARBITRAGE_EXECUTED = "arbitrage_executed"
    EXECUTION_FAILED = "execution_failed"
    CONFIG_UPDATED = "config_updated"
    TOKEN_APPROVAL = "token_approval"
    EMERGENCY_STOP = "emergency_stop"


@dataclass(frozen=True)
class AuditRecord:
    """A single audit entry. ``fields`` carries the operation's parameters."""

    event: AuditEventType
    timestamp: float
    fields: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": self.event.value,
            "timestamp": self.timestamp,
            "time_iso": timestamp_to_iso(self.timestamp),
            **self.fields,
        }


Subscriber = Callable[[AuditRecord], None]


class AuditLog:
    def __init__(
        self,
        log_file: Optional[Union[str, Path]] = None,
        time_provider: Optional[TimeProvider] = None,
    ):
        self.time_provider = time_provider or SystemTimeProvider()
        self.log_file = Path(log_file) if log_file else None
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

        self._records: List[AuditRecord] = []
        self._subscribers: List[Subscriber] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers.append(callback)

    def emit(self, event: AuditEventType, **fields: Any) -> AuditRecord:
        record = AuditRecord(
            event=event,
            timestamp=self.time_provider.current_timestamp(),
            fields=fields,
        )

        with self._lock:
            self._records.append(record)
            subscribers = list(self._subscribers)
            if self.log_file:
                with open(self.log_file, "a") as f:
                    f.write(safe_json_dump(record.to_dict()) + "\n")

        for callback in subscribers:
            try:
                callback(record)
            except Exception as e:
                # A broken observer must not undo or block an operation that already happened
                logger.error(f"Audit subscriber {callback!r} failed on {event.value}: {e}")

        logger.debug(f"audit {event.value}: {fields}")
        return record

    def records(self, event: Optional[AuditEventType] = None) -> List[AuditRecord]:
        """Snapshot of records, optionally filtered by event type."""
        with self._lock:
            if event is None:
                return list(self._records)
            return [r for r in self._records if r.event == event]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
