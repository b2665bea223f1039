"""
Move Masters Command Layer — Rejection Model
===============================================
Structured rejection reasons for refused job operations.

A rejection is NOT an exception. It is an explanation structure
returned inside a CommandOutcome so the caller can render the exact
reason and retry with corrected input.

Every rejection must be:
- Deterministic (same snapshot + input → same rejection)
- Auditable (code + message + policy)
- Machine-readable (code)
- Human-readable (message)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for an operation rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'GATE_BLOCKED').
        message:     Human-readable explanation.
        policy_name: Name of the gate or policy that refused the operation
                     (e.g. 'liability_gate', 'custody_handshake').
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Authorization ─────────────────────────────────────────
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # ── Workflow ──────────────────────────────────────────────
    GATE_BLOCKED = "GATE_BLOCKED"
    TERMINAL_STATE = "TERMINAL_STATE"
    INVALID_STATE = "INVALID_STATE"
    ROUTING_REQUIRED = "ROUTING_REQUIRED"
    ROUTING_NOT_APPLICABLE = "ROUTING_NOT_APPLICABLE"

    # ── Ledger ────────────────────────────────────────────────
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_CHARGE = "INVALID_CHARGE"
    PAYMENT_OUTSTANDING = "PAYMENT_OUTSTANDING"

    # ── Custody ───────────────────────────────────────────────
    ALREADY_RECORDED = "ALREADY_RECORDED"
    ARRIVAL_NOT_RECORDED = "ARRIVAL_NOT_RECORDED"
    SCHEDULE_REQUIRED = "SCHEDULE_REQUIRED"

    # ── Inventory ─────────────────────────────────────────────
    INVENTORY_LOCKED = "INVENTORY_LOCKED"
    GROUP_NOT_FOUND = "GROUP_NOT_FOUND"
    INVALID_QUANTITY = "INVALID_QUANTITY"
    INVALID_ITEM = "INVALID_ITEM"
