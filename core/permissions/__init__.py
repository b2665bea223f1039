"""
Move Masters Permissions - Public API
=======================================
"""

from core.permissions.evaluator import (
    PermissionEvaluationResult,
    PermissionEvaluator,
    can_cross,
    can_perform,
)
from core.permissions.models import (
    ACTION_CLEAR_PAYMENT,
    ACTION_DISPATCH_OUTBOUND,
    ACTION_EDIT_CHARGES,
    ACTION_EDIT_INVENTORY,
    ACTION_RECORD_ARRIVAL,
    ACTION_RECORD_HANDSHAKE,
    ACTION_SIGN_DELIVERY,
    ACTION_SIGN_ORIGIN,
    ACTION_VERIFY_INVENTORY,
    ALL_ROLES,
    VALID_ACTIONS,
    Role,
)
from core.permissions.registry import (
    ACTION_CAPABILITY_MAP,
    GATE_AUTHORITY_MAP,
    GateAuthority,
    resolve_action_roles,
    resolve_gate_authority,
)

__all__ = [
    "Role",
    "ALL_ROLES",
    "VALID_ACTIONS",
    "ACTION_SIGN_ORIGIN",
    "ACTION_SIGN_DELIVERY",
    "ACTION_CLEAR_PAYMENT",
    "ACTION_EDIT_CHARGES",
    "ACTION_RECORD_ARRIVAL",
    "ACTION_RECORD_HANDSHAKE",
    "ACTION_DISPATCH_OUTBOUND",
    "ACTION_EDIT_INVENTORY",
    "ACTION_VERIFY_INVENTORY",
    "GateAuthority",
    "GATE_AUTHORITY_MAP",
    "ACTION_CAPABILITY_MAP",
    "resolve_gate_authority",
    "resolve_action_roles",
    "PermissionEvaluator",
    "PermissionEvaluationResult",
    "can_cross",
    "can_perform",
]
