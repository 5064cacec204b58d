"""
bo-engine Core

Runner state machine and event ledger.
"""

from bo_engine.core.ledger import DoneReason, Event, EventLedger, EventType
from bo_engine.core.runner import (
    BORunner,
    InitialDesign,
    RunConfig,
    RunPhase,
    RunState,
)

__all__ = [
    "BORunner",
    "InitialDesign",
    "RunConfig",
    "RunPhase",
    "RunState",
    "DoneReason",
    "Event",
    "EventLedger",
    "EventType",
]
