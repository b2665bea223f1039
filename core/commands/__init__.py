"""
Move Masters Command Layer — Outcomes as Values
==================================================
Every job operation produces exactly one Outcome.
REJECTED operations are first-class citizens, never exceptions.
"""

from core.commands.outcomes import (
    CommandOutcome,
    CommandStatus,
)
from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)

__all__ = [
    # ── Outcomes ──────────────────────────────────────────────
    "CommandOutcome",
    "CommandStatus",
    # ── Rejection ─────────────────────────────────────────────
    "RejectionReason",
    "ReasonCode",
]
