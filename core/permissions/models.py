"""
Move Masters Permissions — Role Identities and Capabilities
==============================================================
Five mutually exclusive role identities. The role is selected
externally and trusted; there is no authentication in the core.
"""

from __future__ import annotations

from enum import Enum


class Role(Enum):
    """Who is acting on the job."""
    DRIVER = "DRIVER"
    HELPER = "HELPER"
    OFFICE = "OFFICE"
    WAREHOUSE = "WAREHOUSE"
    CLIENT = "CLIENT"

    @classmethod
    def parse(cls, value: str) -> Role:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"role '{value}' not valid. "
                f"Must be one of: {sorted(r.value for r in cls)}"
            ) from None


ALL_ROLES = frozenset(Role)


# ── Side-action capabilities (not workflow gates) ─────────────
ACTION_SIGN_ORIGIN = "signature.origin.record"
ACTION_SIGN_DELIVERY = "signature.delivery.record"
ACTION_CLEAR_PAYMENT = "payment.clearance.record"
ACTION_EDIT_CHARGES = "ledger.charges.edit"
ACTION_RECORD_ARRIVAL = "custody.arrival.record"
ACTION_RECORD_HANDSHAKE = "custody.handshake.record"
ACTION_DISPATCH_OUTBOUND = "custody.outbound.dispatch"
ACTION_EDIT_INVENTORY = "inventory.items.edit"
ACTION_VERIFY_INVENTORY = "inventory.items.verify"

VALID_ACTIONS = frozenset({
    ACTION_SIGN_ORIGIN,
    ACTION_SIGN_DELIVERY,
    ACTION_CLEAR_PAYMENT,
    ACTION_EDIT_CHARGES,
    ACTION_RECORD_ARRIVAL,
    ACTION_RECORD_HANDSHAKE,
    ACTION_DISPATCH_OUTBOUND,
    ACTION_EDIT_INVENTORY,
    ACTION_VERIFY_INVENTORY,
})
