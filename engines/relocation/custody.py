"""
Move Masters Relocation Engine — Custody Handoff Protocol
============================================================
Two-step liability transfer active only while the job sits in
WAREHOUSE_CUSTODY:

    1. Arrival   — transporting crew records the arrival timestamp.
    2. Handshake — warehouse/office records the handshake and takes
                   custody. LOCKED until step 1 is recorded.

Exit is a separate operation: outbound dispatch, gated on a scheduled
outbound date, moves the job to DESTINATION_GATE and returns custody
to the driver.

Timestamps are write-once. A second write is rejected, never
overwritten.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional

from core.commands.outcomes import CommandOutcome
from core.commands.rejection import ReasonCode, RejectionReason
from core.permissions import (
    ACTION_DISPATCH_OUTBOUND,
    ACTION_RECORD_ARRIVAL,
    ACTION_RECORD_HANDSHAKE,
    PermissionEvaluator,
    Role,
)
from engines.relocation.models import CustodyHolder, Job, JobStatus
from engines.relocation.workflow import check_not_terminal, transition_job

logger = logging.getLogger("movemasters.custody")


# ══════════════════════════════════════════════════════════════
# CUSTODY STEP VIEW (derived)
# ══════════════════════════════════════════════════════════════

class CustodyStep:
    """Derived progress of the handoff, for display."""
    NOT_ACTIVE = "NOT_ACTIVE"
    AWAITING_ARRIVAL = "AWAITING_ARRIVAL"
    AWAITING_HANDSHAKE = "AWAITING_HANDSHAKE"
    IN_WAREHOUSE = "IN_WAREHOUSE"


def custody_step(job: Job) -> str:
    if job.status != JobStatus.WAREHOUSE_CUSTODY:
        return CustodyStep.NOT_ACTIVE
    if job.warehouse_arrival_timestamp is None:
        return CustodyStep.AWAITING_ARRIVAL
    if job.warehouse_handshake_timestamp is None:
        return CustodyStep.AWAITING_HANDSHAKE
    return CustodyStep.IN_WAREHOUSE


# ══════════════════════════════════════════════════════════════
# CHECKS
# ══════════════════════════════════════════════════════════════

def _check_in_custody(job: Job, policy_name: str) -> Optional[RejectionReason]:
    if job.status != JobStatus.WAREHOUSE_CUSTODY:
        return RejectionReason(
            code=ReasonCode.INVALID_STATE,
            message=(
                "Custody handoff is only active in WAREHOUSE_CUSTODY, "
                f"job is {job.status.value}."
            ),
            policy_name=policy_name,
        )
    return None


def _check_role(action: str, role: Role, policy_name: str) -> Optional[RejectionReason]:
    permission = PermissionEvaluator.evaluate_action(action, role)
    if permission.allowed:
        return None
    return RejectionReason(
        code=permission.rejection_code,
        message=permission.message,
        policy_name=policy_name,
    )


def _outcome(job: Job, rejection: RejectionReason, role: Role) -> CommandOutcome[Job]:
    logger.info(
        f"Job {job.job_id} {rejection.policy_name} by {role.value} rejected: "
        f"[{rejection.code}]"
    )
    return CommandOutcome.reject(
        job,
        code=rejection.code,
        message=rejection.message,
        policy_name=rejection.policy_name,
    )


# ══════════════════════════════════════════════════════════════
# OPERATIONS
# ══════════════════════════════════════════════════════════════

def record_warehouse_arrival(job: Job, role: Role, *, at: datetime) -> CommandOutcome[Job]:
    rejection = (
        _check_in_custody(job, "custody_arrival")
        or _check_role(ACTION_RECORD_ARRIVAL, role, "custody_arrival")
    )
    if rejection is None and job.warehouse_arrival_timestamp is not None:
        rejection = RejectionReason(
            code=ReasonCode.ALREADY_RECORDED,
            message=(
                "Warehouse arrival already recorded at "
                f"{job.warehouse_arrival_timestamp.isoformat()}."
            ),
            policy_name="custody_arrival",
        )
    if rejection is not None:
        return _outcome(job, rejection, role)

    logger.info(f"Job {job.job_id} warehouse arrival recorded by {role.value}")
    return CommandOutcome.accept(job.with_changes(warehouse_arrival_timestamp=at))


def record_warehouse_handshake(job: Job, role: Role, *, at: datetime) -> CommandOutcome[Job]:
    rejection = (
        _check_in_custody(job, "custody_handshake")
        or _check_role(ACTION_RECORD_HANDSHAKE, role, "custody_handshake")
    )
    if rejection is None and job.warehouse_arrival_timestamp is None:
        rejection = RejectionReason(
            code=ReasonCode.ARRIVAL_NOT_RECORDED,
            message="LOCKED: driver arrival must be recorded before the handshake.",
            policy_name="custody_handshake",
        )
    if rejection is None and job.warehouse_handshake_timestamp is not None:
        rejection = RejectionReason(
            code=ReasonCode.ALREADY_RECORDED,
            message=(
                "Warehouse handshake already recorded at "
                f"{job.warehouse_handshake_timestamp.isoformat()}."
            ),
            policy_name="custody_handshake",
        )
    if rejection is not None:
        return _outcome(job, rejection, role)

    logger.info(
        f"Job {job.job_id} custody handed to WAREHOUSE, handshake by {role.value}"
    )
    return CommandOutcome.accept(
        job.with_changes(
            warehouse_handshake_timestamp=at,
            custody_holder=CustodyHolder.WAREHOUSE,
        )
    )


def schedule_outbound(job: Job, scheduled: date) -> CommandOutcome[Job]:
    """Lock the outbound delivery date. Re-scheduling replaces it."""
    if isinstance(scheduled, datetime) or not isinstance(scheduled, date):
        raise TypeError("scheduled must be a date.")

    rejection = check_not_terminal(job)
    if rejection is not None:
        return CommandOutcome.reject(
            job,
            code=rejection.code,
            message=rejection.message,
            policy_name="outbound_schedule",
        )

    logger.info(f"Job {job.job_id} outbound scheduled for {scheduled.isoformat()}")
    return CommandOutcome.accept(job.with_changes(outbound_scheduled_date=scheduled))


def dispatch_from_warehouse(job: Job, role: Role, *, at: datetime) -> CommandOutcome[Job]:
    """Release the shipment to the final leg: DESTINATION_GATE, driver custody."""
    rejection = (
        _check_in_custody(job, "outbound_dispatch")
        or _check_role(ACTION_DISPATCH_OUTBOUND, role, "outbound_dispatch")
    )
    if rejection is None and job.outbound_scheduled_date is None:
        rejection = RejectionReason(
            code=ReasonCode.SCHEDULE_REQUIRED,
            message=(
                "System Gate: Delivery date must be locked by Hub before "
                "outtake authorization."
            ),
            policy_name="outbound_dispatch",
        )
    if rejection is not None:
        return _outcome(job, rejection, role)

    updated = transition_job(
        job, JobStatus.DESTINATION_GATE, role, at=at, reason="outbound_dispatch",
    )
    logger.info(
        f"Job {job.job_id} dispatched from warehouse by {role.value} "
        f"for {job.outbound_scheduled_date.isoformat()}"
    )
    return CommandOutcome.accept(updated)
