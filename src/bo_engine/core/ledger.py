"""
bo-engine Event Ledger

Ordered, timestamped, step-tagged record of a run's decisions, enough
to reconstruct its trace without re-executing it.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional
import json
import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class EventType(str, Enum):
    """Kinds of ledger event."""

    INIT_RUN = "INIT_RUN"
    FIT_SURROGATE = "FIT_SURROGATE"
    ASK = "ASK"
    EVAL = "EVAL"
    TELL = "TELL"
    DONE = "DONE"
    ANNOTATION = "ANNOTATION"


class DoneReason(str, Enum):
    """Why a run stopped."""

    BUDGET_EXHAUSTED = "budget_exhausted"
    NO_CANDIDATE = "no_candidate"


def _jsonable(value: Any) -> Any:
    """Convert numpy values and containers to plain JSON types."""
    if isinstance(value, np.ndarray):
        return _jsonable(value.tolist())
    if isinstance(value, np.generic):
        return _jsonable(value.item())
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, float) and not np.isfinite(value):
        return None
    return value


@dataclass
class Event:
    """One ledger entry."""

    type: EventType
    step: int
    payload: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "step": self.step,
            "timestamp": self.timestamp.isoformat(),
            "payload": _jsonable(self.payload),
        }


class EventLedger:
    """
    Append-only event log.

    Example:
        ledger = EventLedger()
        ledger.record(EventType.EVAL, step=3, x=[0.1, 2.0], y=4.2)
        ledger.write_jsonl("run.jsonl")
    """

    def __init__(self, enabled: bool = True):
        """
        Initialize ledger.

        Args:
            enabled: When False, ``record`` is a no-op
        """
        self.enabled = enabled
        self._events: List[Event] = []

    def record(self, event_type: EventType, step: int, **payload: Any) -> Optional[Event]:
        """
        Append an event.

        Args:
            event_type: Event kind
            step: Runner step the event belongs to
            **payload: Event data

        Returns:
            The recorded event, or None when the ledger is disabled
        """
        if not self.enabled:
            return None
        event = Event(type=EventType(event_type), step=step, payload=payload)
        self._events.append(event)
        logger.debug(f"{event.type.value} @ step {step}")
        return event

    def annotate(
        self,
        note: str,
        step: int = 0,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Event]:
        """Append a free-form annotation."""
        return self.record(EventType.ANNOTATION, step, note=note, metadata=metadata or {})

    def events(self, event_type: Optional[EventType] = None) -> List[Event]:
        """Events in order, optionally filtered by kind."""
        if event_type is None:
            return list(self._events)
        return [e for e in self._events if e.type == event_type]

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def to_records(self) -> List[Dict[str, Any]]:
        """JSON-safe dicts, one per event."""
        return [e.to_dict() for e in self._events]

    def write_jsonl(self, path: Path | str) -> Path:
        """
        Write events as JSON lines.

        Args:
            path: Output file

        Returns:
            Path written
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            for record in self.to_records():
                f.write(json.dumps(record) + "\n")
        logger.info(f"Wrote {len(self._events)} events to {path}")
        return path

    def to_dataframe(self) -> pd.DataFrame:
        """One row per event: type, step, timestamp, payload."""
        return pd.DataFrame(
            self.to_records(),
            columns=["type", "step", "timestamp", "payload"],
        )
