"""
Move Masters Workflow Primitive — Gated Sequential State Machine
==================================================================
A generic, deterministic state machine for lifecycles that move
forward through a fixed sequence of states, where some states are
GATES: leaving them requires a precondition over the subject.

The definition is data:
    sequence        — the fixed forward order of states
    gates           — state → GateRule (precondition to leave it)
    branches        — state → BranchRule (caller-supplied decision picks
                      the next state instead of sequence order)
    exit_operations — state → name of the dedicated operation that owns
                      leaving it (plain advance is refused there)

RULES (NON-NEGOTIABLE):
- State transitions are deterministic (same input → same output)
- Invalid transitions REJECTED — no silent state skips
- Every transition is recorded with actor role + timestamp
- State machine definition is immutable (frozen)

This file contains NO persistence logic and NO role checks.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, FrozenSet, Optional, Tuple


# ══════════════════════════════════════════════════════════════
# TRANSITION RECORD
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StateTransition:
    """
    An immutable record of a single state transition.
    """
    transition_id: uuid.UUID
    from_state: str
    to_state: str
    actor_role: str
    transitioned_at: datetime
    reason: str = ""

    def __post_init__(self):
        if not isinstance(self.transition_id, uuid.UUID):
            raise ValueError("transition_id must be UUID.")
        if not self.from_state or not isinstance(self.from_state, str):
            raise ValueError("from_state must be non-empty string.")
        if not self.to_state or not isinstance(self.to_state, str):
            raise ValueError("to_state must be non-empty string.")
        if not self.actor_role or not isinstance(self.actor_role, str):
            raise ValueError("actor_role must be non-empty string.")
        if not isinstance(self.transitioned_at, datetime):
            raise TypeError("transitioned_at must be datetime.")

    @classmethod
    def record(
        cls,
        from_state: str,
        to_state: str,
        actor_role: str,
        at: datetime,
        reason: str = "",
    ) -> StateTransition:
        return cls(
            transition_id=uuid.uuid4(),
            from_state=from_state,
            to_state=to_state,
            actor_role=actor_role,
            transitioned_at=at,
            reason=reason,
        )

    def to_dict(self) -> dict:
        return {
            "transition_id": str(self.transition_id),
            "from_state": self.from_state,
            "to_state": self.to_state,
            "actor_role": self.actor_role,
            "transitioned_at": self.transitioned_at.isoformat(),
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: dict) -> StateTransition:
        return cls(
            transition_id=uuid.UUID(data["transition_id"]),
            from_state=data["from_state"],
            to_state=data["to_state"],
            actor_role=data["actor_role"],
            transitioned_at=datetime.fromisoformat(data["transitioned_at"]),
            reason=data.get("reason", ""),
        )


# ══════════════════════════════════════════════════════════════
# GATE AND BRANCH RULES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class GateRule:
    """
    Precondition that must hold over the subject to leave `state`.

    predicate=None means the gate is authority-only (no field check).
    """
    state: str
    name: str
    blocked_message: str
    predicate: Optional[Callable[[Any], bool]] = None

    def __post_init__(self):
        if not self.state:
            raise ValueError("Gate state must be non-empty.")
        if not self.name:
            raise ValueError("Gate name must be non-empty.")
        if not self.blocked_message:
            raise ValueError("Gate blocked_message must be non-empty.")

    def is_satisfied(self, subject: Any) -> bool:
        if self.predicate is None:
            return True
        return bool(self.predicate(subject))


@dataclass(frozen=True)
class BranchRule:
    """
    Non-sequential exit: a caller-supplied decision selects the next state.
    """
    state: str
    name: str
    targets: Dict[str, str]

    def __post_init__(self):
        if not self.targets:
            raise ValueError("BranchRule must declare at least one target.")

    def target_for(self, decision: str) -> Optional[str]:
        return self.targets.get(decision)


# ══════════════════════════════════════════════════════════════
# WORKFLOW DEFINITION (state machine schema)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class WorkflowDefinition:
    """
    Defines the fixed sequence, gates and branches for a workflow type.
    Shared across all instances of the workflow.
    """
    name: str
    sequence: Tuple[str, ...]
    terminal_states: FrozenSet[str]
    gates: Dict[str, GateRule] = field(default_factory=dict)
    branches: Dict[str, BranchRule] = field(default_factory=dict)
    exit_operations: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.name:
            raise ValueError("Workflow name must be non-empty.")
        if len(self.sequence) < 2:
            raise ValueError("sequence must contain at least two states.")
        if len(set(self.sequence)) != len(self.sequence):
            raise ValueError("sequence states must be unique.")

        members = set(self.sequence)
        for state in self.terminal_states:
            if state not in members:
                raise ValueError(f"terminal state '{state}' not in sequence.")
        for state, gate in self.gates.items():
            if state not in members or gate.state != state:
                raise ValueError(f"gate '{gate.name}' bound to unknown state '{state}'.")
        for state, branch in self.branches.items():
            if state not in members or branch.state != state:
                raise ValueError(f"branch '{branch.name}' bound to unknown state '{state}'.")
            for target in branch.targets.values():
                if target not in members:
                    raise ValueError(
                        f"branch '{branch.name}' targets unknown state '{target}'."
                    )
        for state in self.exit_operations:
            if state not in members:
                raise ValueError(f"exit operation bound to unknown state '{state}'.")

    @property
    def initial_state(self) -> str:
        return self.sequence[0]

    def is_member(self, state: str) -> bool:
        return state in self.sequence

    def index_of(self, state: str) -> int:
        try:
            return self.sequence.index(state)
        except ValueError:
            raise ValueError(
                f"State '{state}' is not part of workflow '{self.name}'."
            ) from None

    def is_terminal(self, state: str) -> bool:
        return state in self.terminal_states

    def next_state(self, state: str) -> Optional[str]:
        """Sequential successor, or None at the end of the sequence."""
        idx = self.index_of(state)
        if idx + 1 >= len(self.sequence):
            return None
        return self.sequence[idx + 1]

    def gate_for(self, state: str) -> Optional[GateRule]:
        return self.gates.get(state)

    def branch_for(self, state: str) -> Optional[BranchRule]:
        return self.branches.get(state)

    def exit_operation_for(self, state: str) -> Optional[str]:
        return self.exit_operations.get(state)

    def unmet_gate(self, state: str, subject: Any) -> Optional[GateRule]:
        """The gate on `state` if its precondition is currently unmet."""
        gate = self.gate_for(state)
        if gate is not None and not gate.is_satisfied(subject):
            return gate
        return None
