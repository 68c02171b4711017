"""
Copyright (C) 2026 Garudex Labs.  All Rights Reserved.
Tributary, a product of Garudex Labs

Ledger notifications.

The distribution ledger emits one event per successful state change. Events
are recorded in an in-memory EventLog and forwarded to subscribers, such as
the JsonlEventSink which appends them to a JSON Lines journal.
"""

import fcntl
import json
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from tributary.core.retry import retry_on_transient_failure
from tributary.exceptions import FileWriteError
from tributary.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class LedgerEvent:
    """Base class for ledger notifications."""

    sequence: int = field(default=0, init=False)
    timestamp: str = field(default="", init=False)

    @property
    def event_type(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization, digests as 0x hex."""
        data = {"event_type": self.event_type}
        for key, value in asdict(self).items():
            if isinstance(value, bytes):
                value = "0x" + value.hex()
            data[key] = value
        return data

    def to_json_line(self) -> str:
        """Convert to JSON Lines format (single line JSON)."""
        return json.dumps(self.to_dict(), separators=(',', ':'))


@dataclass
class RootUpdated(LedgerEvent):
    old_root: Optional[bytes] = None
    new_root: bytes = b""


@dataclass
class AuthorityUpdated(LedgerEvent):
    old_authority: str = ""
    new_authority: str = ""


@dataclass
class Deposited(LedgerEvent):
    depositor: str = ""
    amount: int = 0


@dataclass
class Withdrawn(LedgerEvent):
    recipient: str = ""
    amount: int = 0


@dataclass
class Claimed(LedgerEvent):
    """Settlement of a claim; amount is the delta payout, not the cumulative total."""

    beneficiary: str = ""
    amount: int = 0


Subscriber = Callable[[LedgerEvent], None]


@dataclass(frozen=True)
class DeliveryFailure:
    """A subscriber that raised while handling an event."""
    event: LedgerEvent
    subscriber: Subscriber
    error: Exception


class EventLog:
    """
    Ordered record of emitted events.

    Sequence numbers start at 1 and increase by one per event. Events are
    emitted after the state change they describe has committed, so a
    subscriber that raises cannot undo it; the failure is logged and kept in
    failed_deliveries for the operator to replay.
    """

    def __init__(self):
        self._events: List[LedgerEvent] = []
        self._subscribers: List[Subscriber] = []
        self._failed: List[DeliveryFailure] = []

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback invoked with every emitted event."""
        self._subscribers.append(callback)

    def emit(self, event: LedgerEvent) -> LedgerEvent:
        """Stamp, record and publish an event."""
        event.sequence = len(self._events) + 1
        event.timestamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        self._events.append(event)
        logger.debug("ledger_event", **event.to_dict())

        for callback in self._subscribers:
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    "event_delivery_failed",
                    event_type=event.event_type,
                    sequence=event.sequence,
                    subscriber=repr(callback),
                    error=str(e),
                    exc_info=True,
                )
                self._failed.append(DeliveryFailure(event=event, subscriber=callback, error=e))
        return event

    @property
    def failed_deliveries(self) -> List[DeliveryFailure]:
        """Subscriber failures in emission order."""
        return list(self._failed)

    def redeliver(self) -> int:
        """
        Retry every failed delivery once.

        Returns:
            Number of deliveries still failing
        """
        pending, self._failed = self._failed, []
        for failure in pending:
            try:
                failure.subscriber(failure.event)
            except Exception as e:
                logger.error(
                    "event_redelivery_failed",
                    event_type=failure.event.event_type,
                    sequence=failure.event.sequence,
                    error=str(e),
                )
                self._failed.append(DeliveryFailure(failure.event, failure.subscriber, e))
        return len(self._failed)

    def __iter__(self):
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def of_type(self, event_type: type) -> List[LedgerEvent]:
        return [e for e in self._events if isinstance(e, event_type)]

    def last(self) -> Optional[LedgerEvent]:
        return self._events[-1] if self._events else None


class JsonlEventSink:
    """
    Appends ledger events to a JSON Lines journal.

    Implements:
    - Append-only semantics (one JSON object per line)
    - File locking for concurrent writers
    - fsync after every event for durability
    - Retry with exponential backoff on transient I/O errors

    Example:
        >>> sink = JsonlEventSink("~/.tributary/events.jsonl")
        >>> ledger.events.subscribe(sink)
    """

    def __init__(self, journal_path: str):
        self.journal_path = Path(journal_path).expanduser()
        self.journal_path.parent.mkdir(parents=True, exist_ok=True)
        if not self.journal_path.exists():
            self.journal_path.touch()
            logger.info(f"Created new event journal at {self.journal_path}")

    def __call__(self, event: LedgerEvent) -> None:
        try:
            self._atomic_append(event)
        except OSError as e:
            logger.error(
                f"Failed to append event to journal {self.journal_path}: {e}",
                exc_info=True,
            )
            raise FileWriteError(
                f"Failed to append event to journal {self.journal_path}: {e}"
            ) from e

    @retry_on_transient_failure(max_retries=3, base_delay=0.1, backoff_factor=2.0)
    def _atomic_append(self, event: LedgerEvent) -> None:
        with open(self.journal_path, 'a') as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(event.to_json_line() + '\n')
                f.flush()
                os.fsync(f.fileno())
            finally:
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    def read_events(self) -> List[Dict[str, Any]]:
        """Read every journaled event as a dictionary, in append order."""
        with open(self.journal_path, 'r') as f:
            return [json.loads(line) for line in f if line.strip()]
