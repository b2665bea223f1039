"""
Move Masters Permissions - Gate Authority and Capability Registry
===================================================================
Data, not branching code. Adding a gated state or a side action is
an entry here; the workflow engine never compares roles inline.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional

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
    Role,
)


@dataclass(frozen=True)
class GateAuthority:
    """Roles allowed to move a job out of an authority-gated state."""
    state: str
    roles: FrozenSet[Role]
    advisory: str


# States absent from this map accept any role (their gates, if any,
# are field preconditions only). HELPER and WAREHOUSE never appear.
GATE_AUTHORITY_MAP = {
    "BINDING_ESTIMATE": GateAuthority(
        state="BINDING_ESTIMATE",
        roles=frozenset({Role.OFFICE}),
        advisory=(
            "HUB AUTHORIZATION REQUIRED: only the office can lock the "
            "binding estimate and proceed."
        ),
    ),
    "IN_TRANSIT": GateAuthority(
        state="IN_TRANSIT",
        roles=frozenset({Role.OFFICE}),
        advisory=(
            "ROUTING COMMAND REQUIRED: only the office can route the "
            "shipment to the warehouse or to direct delivery."
        ),
    ),
}

ACTION_CAPABILITY_MAP = {
    ACTION_SIGN_ORIGIN: frozenset({Role.CLIENT}),
    ACTION_SIGN_DELIVERY: frozenset({Role.CLIENT}),
    ACTION_CLEAR_PAYMENT: frozenset({Role.OFFICE}),
    ACTION_EDIT_CHARGES: frozenset({Role.OFFICE}),
    ACTION_RECORD_ARRIVAL: frozenset({Role.DRIVER}),
    ACTION_RECORD_HANDSHAKE: frozenset({Role.WAREHOUSE, Role.OFFICE}),
    ACTION_DISPATCH_OUTBOUND: frozenset({Role.OFFICE}),
    ACTION_EDIT_INVENTORY: frozenset({Role.DRIVER, Role.OFFICE}),
    ACTION_VERIFY_INVENTORY: frozenset({Role.DRIVER}),
}


def resolve_gate_authority(state: str) -> Optional[GateAuthority]:
    """Resolve the authority requirement for leaving a state, if any."""
    return GATE_AUTHORITY_MAP.get(state)


def resolve_action_roles(action: str) -> Optional[FrozenSet[Role]]:
    """Resolve the roles holding a side-action capability."""
    return ACTION_CAPABILITY_MAP.get(action)
