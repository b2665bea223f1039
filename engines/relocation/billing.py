"""
Move Masters Relocation Engine — Job Billing Operations
==========================================================
Job-level wrappers over the tariff ledger: payment registration,
office charge edits and payment clearance.

Clearance is what unlocks the financial gate. Whether a partial
payment may satisfy it is a TariffPolicy decision
(require_zero_balance_for_clearance), never an implicit gap.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.commands.outcomes import CommandOutcome
from core.commands.rejection import ReasonCode
from core.config.rules import TariffPolicy
from core.permissions import (
    ACTION_CLEAR_PAYMENT,
    ACTION_EDIT_CHARGES,
    PermissionEvaluator,
    Role,
)
from engines.relocation import tariff
from engines.relocation.models import Job, JobStatus
from engines.relocation.workflow import check_not_terminal, check_status_in

logger = logging.getLogger("movemasters.ledger")

PAYMENT_LEGS = {
    "pickup": "pickup_paid",
    "delivery": "delivery_paid",
}

# Legs that may only be cleared at a given stage; pickup is unrestricted.
CLEARANCE_STATUSES = {
    "delivery": frozenset({JobStatus.DESTINATION_GATE}),
}


def _rejected(job: Job, rejection, operation: str) -> CommandOutcome[Job]:
    logger.info(
        f"Job {job.job_id} {operation} rejected: "
        f"[{rejection.code}] {rejection.message}"
    )
    return CommandOutcome.reject(
        job,
        code=rejection.code,
        message=rejection.message,
        policy_name=rejection.policy_name,
    )


def register_payment(job: Job, amount) -> CommandOutcome[Job]:
    """
    Append a received payment to the job ledger.

    Never sets a payment-cleared flag by itself.
    """
    rejection = check_not_terminal(job)
    if rejection is not None:
        return _rejected(job, rejection, "payment registration")

    outcome = tariff.register_payment(job.ledger, amount)
    if outcome.is_rejected:
        return _rejected(job, outcome.reason, "payment registration")

    logger.info(
        f"Job {job.job_id} payment registered: "
        f"{outcome.subject.partial_payments[-1]}"
    )
    return CommandOutcome.accept(job.with_changes(ledger=outcome.subject))


def update_charges(job: Job, role: Role, changes: dict) -> CommandOutcome[Job]:
    """Office edit of individual charge fields (never partial_payments)."""
    rejection = check_not_terminal(job)
    if rejection is not None:
        return _rejected(job, rejection, "charge edit")

    permission = PermissionEvaluator.evaluate_action(ACTION_EDIT_CHARGES, role)
    if not permission.allowed:
        return CommandOutcome.reject(
            job,
            code=permission.rejection_code,
            message=permission.message,
            policy_name="charge_edit",
        )

    outcome = tariff.update_charges(job.ledger, changes)
    if outcome.is_rejected:
        return _rejected(job, outcome.reason, "charge edit")

    logger.info(f"Job {job.job_id} charges updated by {role.value}: {sorted(changes)}")
    return CommandOutcome.accept(job.with_changes(ledger=outcome.subject))


def clear_payment(
    job: Job,
    role: Role,
    leg: str,
    policy: Optional[TariffPolicy] = None,
) -> CommandOutcome[Job]:
    """
    Office marks the pickup or delivery payment as cleared. The
    delivery leg is only cleared at DESTINATION_GATE.

    With require_zero_balance_for_clearance the flag is only set once
    the ledger balance due is at or below zero.
    """
    if leg not in PAYMENT_LEGS:
        raise ValueError(f"leg must be one of {sorted(PAYMENT_LEGS)}, got '{leg}'.")
    policy = policy or TariffPolicy()
    policy_name = f"{leg}_payment_clearance"

    rejection = check_not_terminal(job)
    if rejection is not None:
        return _rejected(job, rejection, f"{leg} clearance")

    permission = PermissionEvaluator.evaluate_action(ACTION_CLEAR_PAYMENT, role)
    if not permission.allowed:
        return CommandOutcome.reject(
            job,
            code=permission.rejection_code,
            message=permission.message,
            policy_name=policy_name,
        )

    if leg in CLEARANCE_STATUSES:
        rejection = check_status_in(job, CLEARANCE_STATUSES[leg], policy_name)
        if rejection is not None:
            return _rejected(job, rejection, f"{leg} clearance")

    flag = PAYMENT_LEGS[leg]
    if getattr(job, flag):
        return CommandOutcome.accept(job)

    if policy.require_zero_balance_for_clearance:
        totals = tariff.compute_ledger_totals(job.ledger, policy)
        if not totals.is_settled:
            logger.info(
                f"Job {job.job_id} {leg} clearance refused, balance due "
                f"{totals.balance_due}"
            )
            return CommandOutcome.reject(
                job,
                code=ReasonCode.PAYMENT_OUTSTANDING,
                message=(
                    f"Balance due of {totals.balance_due} must be settled "
                    f"before the {leg} payment can be cleared."
                ),
                policy_name=policy_name,
            )

    logger.info(f"Job {job.job_id} {leg} payment cleared by {role.value}")
    return CommandOutcome.accept(job.with_changes(**{flag: True}))


def clear_delivery_payment(
    job: Job, role: Role, policy: Optional[TariffPolicy] = None,
) -> CommandOutcome[Job]:
    return clear_payment(job, role, "delivery", policy)


def clear_pickup_payment(
    job: Job, role: Role, policy: Optional[TariffPolicy] = None,
) -> CommandOutcome[Job]:
    return clear_payment(job, role, "pickup", policy)
