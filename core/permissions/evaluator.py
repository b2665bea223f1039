"""
Move Masters Permissions - Deterministic Permission Evaluator
===============================================================
The single place where a role is compared against an authority
requirement. Distinguishes "authorization required" (this module)
from "precondition unmet" (workflow gates).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from core.commands.rejection import ReasonCode
from core.permissions.models import Role
from core.permissions.registry import (
    resolve_action_roles,
    resolve_gate_authority,
)


def _state_name(state) -> str:
    return state.value if isinstance(state, Enum) else str(state)


@dataclass(frozen=True)
class PermissionEvaluationResult:
    allowed: bool
    rejection_code: Optional[str] = None
    message: str = ""


class PermissionEvaluator:
    @staticmethod
    def _allow() -> PermissionEvaluationResult:
        return PermissionEvaluationResult(allowed=True)

    @staticmethod
    def _deny(message: str) -> PermissionEvaluationResult:
        return PermissionEvaluationResult(
            allowed=False,
            rejection_code=ReasonCode.PERMISSION_DENIED,
            message=message,
        )

    @staticmethod
    def evaluate_crossing(state, role: Role) -> PermissionEvaluationResult:
        """
        Evaluate whether `role` may move a job out of `state`.

        Only authority-gated states restrict roles; all other states
        are open to any role.
        """
        if not isinstance(role, Role):
            raise TypeError("role must be Role.")

        authority = resolve_gate_authority(_state_name(state))
        if authority is None or role in authority.roles:
            return PermissionEvaluator._allow()

        return PermissionEvaluator._deny(
            f"{authority.advisory} (acting role: {role.value})"
        )

    @staticmethod
    def evaluate_action(action: str, role: Role) -> PermissionEvaluationResult:
        """Evaluate a side action such as signing or custody recording."""
        if not isinstance(role, Role):
            raise TypeError("role must be Role.")

        roles = resolve_action_roles(action)
        if roles is None:
            return PermissionEvaluator._deny(
                f"No capability mapping for action '{action}'."
            )
        if role in roles:
            return PermissionEvaluator._allow()

        allowed = ", ".join(sorted(r.value for r in roles))
        return PermissionEvaluator._deny(
            f"AUTHORIZATION REQUIRED: '{action}' is reserved for "
            f"{allowed} (acting role: {role.value})."
        )


def can_cross(state, role: Role) -> bool:
    """Pure capability predicate driven by the gate authority table."""
    return PermissionEvaluator.evaluate_crossing(state, role).allowed


def can_perform(action: str, role: Role) -> bool:
    return PermissionEvaluator.evaluate_action(action, role).allowed
