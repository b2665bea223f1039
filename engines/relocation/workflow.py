"""
Move Masters Relocation Engine — Job Workflow
================================================
The 14-state job lifecycle expressed as a WorkflowDefinition: gates,
the IN_TRANSIT routing branch and the warehouse exit are table
entries, not branching code.

advance() runs an ordered chain of checks; the first check that
returns a RejectionReason wins and the job is returned untouched:

    terminal → exit operation → authority (can_cross) → gate
    precondition → routing

Accepted transitions append a StateTransition to the job history and
apply the entry effects of the target state.

Also owns the client signature recorders, which feed two gates.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Union

from core.commands.outcomes import CommandOutcome
from core.commands.rejection import ReasonCode, RejectionReason
from core.permissions import (
    ACTION_SIGN_DELIVERY,
    ACTION_SIGN_ORIGIN,
    PermissionEvaluator,
    Role,
)
from core.primitives.workflow import (
    BranchRule,
    GateRule,
    StateTransition,
    WorkflowDefinition,
)
from engines.relocation.models import (
    CustodyHolder,
    Job,
    JobStatus,
    RoutingDecision,
)

logger = logging.getLogger("movemasters.workflow")


# ══════════════════════════════════════════════════════════════
# WORKFLOW DEFINITION (gate table as data)
# ══════════════════════════════════════════════════════════════

JOB_WORKFLOW = WorkflowDefinition(
    name="relocation_job",
    sequence=tuple(s.value for s in JobStatus),
    terminal_states=frozenset({JobStatus.COMPLETED.value}),
    gates={
        "BINDING_ESTIMATE": GateRule(
            state="BINDING_ESTIMATE",
            name="rate_lock_gate",
            blocked_message="Binding estimate must be locked by the office.",
        ),
        "CLIENT_APPROVAL": GateRule(
            state="CLIENT_APPROVAL",
            name="liability_gate",
            blocked_message=(
                "LIABILITY GATE: Client must sign the Bill of Lading to "
                "proceed to Loading."
            ),
            predicate=lambda job: job.origin_signed,
        ),
        "LOAD_VERIFICATION": GateRule(
            state="LOAD_VERIFICATION",
            name="handoff_gate",
            blocked_message=(
                "HANDOFF GATE: Pickup departure signature required from Client."
            ),
            predicate=lambda job: job.origin_signed,
        ),
        "IN_TRANSIT": GateRule(
            state="IN_TRANSIT",
            name="routing_gate",
            blocked_message="Routing command must be issued by the office.",
        ),
        "DESTINATION_GATE": GateRule(
            state="DESTINATION_GATE",
            name="financial_gate",
            blocked_message=(
                "FINANCIAL GATE: Final balance must be cleared by Hub to "
                "unlock Unloading."
            ),
            predicate=lambda job: job.delivery_paid,
        ),
        "FINAL_AUDIT": GateRule(
            state="FINAL_AUDIT",
            name="completion_gate",
            blocked_message=(
                "COMPLETION GATE: Final delivery handoff signature required "
                "from Client."
            ),
            predicate=lambda job: job.delivery_signed,
        ),
    },
    branches={
        "IN_TRANSIT": BranchRule(
            state="IN_TRANSIT",
            name="transit_routing",
            targets={
                RoutingDecision.WAREHOUSE.value: JobStatus.WAREHOUSE_CUSTODY.value,
                RoutingDecision.DIRECT.value: JobStatus.DESTINATION_GATE.value,
            },
        ),
    },
    exit_operations={
        "WAREHOUSE_CUSTODY": "dispatch_from_warehouse",
    },
)

# Field changes applied whenever a job enters the given state.
ENTRY_EFFECTS = {
    JobStatus.WAREHOUSE_CUSTODY: {"custody_holder": CustodyHolder.DRIVER},
    JobStatus.DESTINATION_GATE: {"custody_holder": CustodyHolder.DRIVER},
    JobStatus.COMPLETED: {"custody_holder": CustodyHolder.CLIENT},
}


def transition_job(
    job: Job,
    to_status: JobStatus,
    role: Role,
    *,
    at: datetime,
    reason: str = "",
) -> Job:
    """Move a job to `to_status`, recording history and entry effects."""
    record = StateTransition.record(
        from_state=job.status.value,
        to_state=to_status.value,
        actor_role=role.value,
        at=at,
        reason=reason,
    )
    changes = dict(ENTRY_EFFECTS.get(to_status, {}))
    return job.with_changes(
        status=to_status,
        history=job.history + (record,),
        **changes,
    )


# ══════════════════════════════════════════════════════════════
# CHECKS (each returns RejectionReason or None)
# ══════════════════════════════════════════════════════════════

def check_not_terminal(job: Job) -> Optional[RejectionReason]:
    if JOB_WORKFLOW.is_terminal(job.status.value):
        return RejectionReason(
            code=ReasonCode.TERMINAL_STATE,
            message=f"Job {job.job_id} is completed; no further changes are allowed.",
            policy_name="terminal_state",
        )
    return None


def check_exit_operation(job: Job) -> Optional[RejectionReason]:
    operation = JOB_WORKFLOW.exit_operation_for(job.status.value)
    if operation is not None:
        return RejectionReason(
            code=ReasonCode.INVALID_STATE,
            message=(
                f"{job.status.value} is exited through '{operation}', "
                "not a plain advance."
            ),
            policy_name=operation,
        )
    return None


def check_authority(job: Job, role: Role) -> Optional[RejectionReason]:
    result = PermissionEvaluator.evaluate_crossing(job.status, role)
    if result.allowed:
        return None
    gate = JOB_WORKFLOW.gate_for(job.status.value)
    return RejectionReason(
        code=result.rejection_code,
        message=result.message,
        policy_name=gate.name if gate else "gate_authority",
    )


def check_gate(job: Job) -> Optional[RejectionReason]:
    gate = JOB_WORKFLOW.unmet_gate(job.status.value, job)
    if gate is None:
        return None
    return RejectionReason(
        code=ReasonCode.GATE_BLOCKED,
        message=gate.blocked_message,
        policy_name=gate.name,
    )


def evaluate_gate(job: Job, role: Optional[Role] = None) -> Optional[RejectionReason]:
    """
    Why the job cannot currently leave its state, or None.

    Without a role only field preconditions are considered; with a role
    the authority requirement is checked as well.
    """
    if role is not None:
        rejection = check_authority(job, role)
        if rejection is not None:
            return rejection
    return check_gate(job)


def is_gate_blocked(job: Job, role: Optional[Role] = None) -> bool:
    """Derived, read-only: recomputed from current fields, never stored."""
    return evaluate_gate(job, role) is not None


# ══════════════════════════════════════════════════════════════
# ADVANCE
# ══════════════════════════════════════════════════════════════

def _resolve_target(
    job: Job,
    routing: Union[RoutingDecision, str, None],
) -> Union[JobStatus, RejectionReason]:
    branch = JOB_WORKFLOW.branch_for(job.status.value)

    if branch is None:
        if routing is not None:
            return RejectionReason(
                code=ReasonCode.ROUTING_NOT_APPLICABLE,
                message=f"No routing decision is taken at {job.status.value}.",
                policy_name="transit_routing",
            )
        return JobStatus(JOB_WORKFLOW.next_state(job.status.value))

    if routing is None:
        return RejectionReason(
            code=ReasonCode.ROUTING_REQUIRED,
            message=(
                "ROUTING COMMAND REQUIRED: Hub must decide between Warehouse "
                "or Direct Delivery."
            ),
            policy_name=branch.name,
        )

    try:
        decision = RoutingDecision.parse(routing)
    except ValueError as exc:
        return RejectionReason(
            code=ReasonCode.ROUTING_REQUIRED,
            message=str(exc),
            policy_name=branch.name,
        )
    return JobStatus(branch.target_for(decision.value))


def advance(
    job: Job,
    role: Role,
    routing: Union[RoutingDecision, str, None] = None,
    *,
    at: datetime,
) -> CommandOutcome[Job]:
    """
    Move the job one step forward (or along the IN_TRANSIT branch).

    Raises TypeError for a non-Role actor; every business failure is
    returned as a rejected outcome carrying the unchanged job.
    """
    if not isinstance(role, Role):
        raise TypeError("role must be Role.")

    rejection = (
        check_not_terminal(job)
        or check_exit_operation(job)
        or check_authority(job, role)
        or check_gate(job)
    )
    target = None
    if rejection is None:
        resolved = _resolve_target(job, routing)
        if isinstance(resolved, RejectionReason):
            rejection = resolved
        else:
            target = resolved

    if rejection is not None:
        logger.info(
            f"Job {job.job_id} advance by {role.value} rejected at "
            f"{job.status.value}: [{rejection.code}] {rejection.policy_name}"
        )
        return CommandOutcome.reject(
            job,
            code=rejection.code,
            message=rejection.message,
            policy_name=rejection.policy_name,
        )

    reason = ""
    if JOB_WORKFLOW.branch_for(job.status.value) is not None:
        reason = f"routing:{RoutingDecision.parse(routing).value}"

    updated = transition_job(job, target, role, at=at, reason=reason)
    logger.info(
        f"Job {job.job_id} advanced {job.status.value} -> "
        f"{target.value} by {role.value}"
    )
    return CommandOutcome.accept(updated)


# ══════════════════════════════════════════════════════════════
# SIGNATURES
# ══════════════════════════════════════════════════════════════

# Stages at which the client is presented with each handoff document.
ORIGIN_SIGNATURE_STATUSES = frozenset({
    JobStatus.CLIENT_APPROVAL,
    JobStatus.LOAD_VERIFICATION,
})
DELIVERY_SIGNATURE_STATUSES = frozenset({JobStatus.FINAL_AUDIT})


def check_status_in(
    job: Job,
    statuses: frozenset,
    policy_name: str,
) -> Optional[RejectionReason]:
    if job.status in statuses:
        return None
    allowed = ", ".join(s.value for s in JobStatus if s in statuses)
    return RejectionReason(
        code=ReasonCode.INVALID_STATE,
        message=f"{policy_name} is not available at {job.status.value}; allowed during {allowed}.",
        policy_name=policy_name,
    )


def _record_signature(
    job: Job,
    role: Role,
    *,
    action: str,
    flag: str,
    statuses: frozenset,
    policy_name: str,
) -> CommandOutcome[Job]:
    rejection = check_not_terminal(job)
    if rejection is None:
        permission = PermissionEvaluator.evaluate_action(action, role)
        if not permission.allowed:
            rejection = RejectionReason(
                code=permission.rejection_code,
                message=permission.message,
                policy_name=policy_name,
            )
    if rejection is None:
        rejection = check_status_in(job, statuses, policy_name)

    if rejection is not None:
        logger.info(
            f"Job {job.job_id} {policy_name} by {role.value} rejected: "
            f"[{rejection.code}]"
        )
        return CommandOutcome.reject(
            job,
            code=rejection.code,
            message=rejection.message,
            policy_name=rejection.policy_name,
        )

    if getattr(job, flag):
        return CommandOutcome.accept(job)

    logger.info(f"Job {job.job_id} {policy_name} recorded by {role.value}")
    return CommandOutcome.accept(job.with_changes(**{flag: True}))


def record_origin_signature(job: Job, role: Role) -> CommandOutcome[Job]:
    """
    Client signs the pickup Bill of Lading during CLIENT_APPROVAL or
    LOAD_VERIFICATION. Re-signing is a no-op.
    """
    return _record_signature(
        job, role,
        action=ACTION_SIGN_ORIGIN,
        flag="origin_signed",
        statuses=ORIGIN_SIGNATURE_STATUSES,
        policy_name="origin_signature",
    )


def record_delivery_signature(job: Job, role: Role) -> CommandOutcome[Job]:
    """Client signs the delivery handoff at FINAL_AUDIT. Re-signing is a no-op."""
    return _record_signature(
        job, role,
        action=ACTION_SIGN_DELIVERY,
        flag="delivery_signed",
        statuses=DELIVERY_SIGNATURE_STATUSES,
        policy_name="delivery_signature",
    )
