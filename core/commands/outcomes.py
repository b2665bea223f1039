"""
Move Masters Command Layer — Command Outcome Contract
========================================================
Every job operation produces exactly one Outcome. No exceptions.

ACCEPTED → the operation was applied; subject is the NEW snapshot.
REJECTED → the operation was refused; subject is the UNCHANGED
           snapshot and reason is mandatory.

Rules:
- Exactly one outcome per operation
- Outcome is immutable (frozen dataclass)
- REJECTED must contain reason (RejectionReason)
- ACCEPTED must NOT contain reason
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

from core.commands.rejection import RejectionReason

T = TypeVar("T")


# ══════════════════════════════════════════════════════════════
# COMMAND STATUS
# ══════════════════════════════════════════════════════════════

class CommandStatus(Enum):
    """Binary operation decision. No middle ground."""
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


# ══════════════════════════════════════════════════════════════
# COMMAND OUTCOME
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CommandOutcome(Generic[T]):
    """
    Deterministic result of a job operation.

    Fields:
        status:  ACCEPTED or REJECTED.
        subject: The snapshot after the operation (accepted) or the
                 original snapshot, untouched (rejected).
        reason:  RejectionReason (mandatory if REJECTED, None if ACCEPTED).

    Invariants:
        - REJECTED + reason is None → ValueError
        - ACCEPTED + reason is not None → ValueError
    """

    status: CommandStatus
    subject: T
    reason: Optional[RejectionReason] = None

    def __post_init__(self):
        if not isinstance(self.status, CommandStatus):
            raise ValueError(
                f"status must be CommandStatus, got {type(self.status).__name__}."
            )

        if self.status == CommandStatus.REJECTED and self.reason is None:
            raise ValueError(
                "REJECTED outcome must include a RejectionReason. "
                "No silent rejections allowed."
            )

        if self.status == CommandStatus.ACCEPTED and self.reason is not None:
            raise ValueError(
                "ACCEPTED outcome must NOT include a RejectionReason."
            )

    @classmethod
    def accept(cls, subject: T) -> CommandOutcome[T]:
        return cls(status=CommandStatus.ACCEPTED, subject=subject)

    @classmethod
    def reject(
        cls,
        subject: T,
        *,
        code: str,
        message: str,
        policy_name: str,
    ) -> CommandOutcome[T]:
        return cls(
            status=CommandStatus.REJECTED,
            subject=subject,
            reason=RejectionReason(
                code=code, message=message, policy_name=policy_name,
            ),
        )

    @property
    def is_accepted(self) -> bool:
        return self.status == CommandStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status == CommandStatus.REJECTED

    @property
    def code(self) -> Optional[str]:
        return self.reason.code if self.reason is not None else None
