"""
Move Masters Core Primitives — Reusable Building Blocks
=========================================================
Primitives are engine-agnostic. They are:

- Pure Python (no Django dependency)
- Immutable (frozen dataclasses)
- Deterministic (same input → same output)

Primitives:
    workflow    — Gated sequential state machine with branch support
"""

from core.primitives.workflow import (
    BranchRule,
    GateRule,
    StateTransition,
    WorkflowDefinition,
)

__all__ = [
    "BranchRule",
    "GateRule",
    "StateTransition",
    "WorkflowDefinition",
]
