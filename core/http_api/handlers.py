"""
Move Masters HTTP API - Framework-Agnostic Handlers
=====================================================
Pure handler functions over contracts and injected dependencies.
Each returns a response envelope dict; transports pick the status.
"""

from __future__ import annotations

from typing import Any

from core.commands.outcomes import CommandOutcome
from core.http_api.contracts import (
    ActorRoleHttpRequest,
    AdvanceHttpRequest,
    JobReadRequest,
    OutboundScheduleHttpRequest,
    PaymentClearHttpRequest,
    PaymentHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import rejection_response, success_response
from engines.relocation.custody import custody_step
from engines.relocation.inventory import group_inventory
from engines.relocation.models import Job
from engines.relocation.workflow import evaluate_gate


def _meta(job: Job) -> dict[str, Any]:
    return {"job_id": job.job_id, "status": job.status.value}


def _serialize_job(job: Job) -> dict[str, Any]:
    data = job.to_dict()
    data["status_label"] = job.status_label
    data["custody_step"] = custody_step(job)
    data["inventory_groups"] = [g.to_dict() for g in group_inventory(job.inventory)]
    return data


def _outcome_response(outcome: CommandOutcome) -> dict[str, Any]:
    job = outcome.subject
    if outcome.is_rejected:
        return rejection_response(
            outcome.reason,
            status=job.status.value,
        )
    return success_response({"job": _serialize_job(job)}, meta=_meta(job))


# ── Reads ─────────────────────────────────────────────────────

def get_job(request: JobReadRequest, dependencies: HttpApiDependencies) -> dict[str, Any]:
    job = dependencies.job_desk.get_job()
    blocking = evaluate_gate(job, request.actor_role)
    return success_response(
        {
            "job": _serialize_job(job),
            "gate_blocked": blocking is not None,
            "gate_reason": None if blocking is None else blocking.to_dict(),
        },
        meta=_meta(job),
    )


def get_ledger_totals(dependencies: HttpApiDependencies) -> dict[str, Any]:
    desk = dependencies.job_desk
    return success_response(
        {"totals": desk.compute_ledger_totals().to_dict()},
        meta=_meta(desk.get_job()),
    )


def get_payout(
    request: ActorRoleHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    desk = dependencies.job_desk
    outcome = desk.payout_for(request.actor_role)
    if outcome.is_rejected:
        return rejection_response(outcome.reason)
    return success_response(
        {"payout": outcome.subject.to_dict()},
        meta=_meta(desk.get_job()),
    )


# ── Workflow ──────────────────────────────────────────────────

def post_advance(
    request: AdvanceHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    return _outcome_response(
        dependencies.job_desk.advance(request.actor_role, request.routing)
    )


def post_origin_signature(
    request: ActorRoleHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    return _outcome_response(
        dependencies.job_desk.record_origin_signature(request.actor_role)
    )


def post_delivery_signature(
    request: ActorRoleHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    return _outcome_response(
        dependencies.job_desk.record_delivery_signature(request.actor_role)
    )


# ── Ledger ────────────────────────────────────────────────────

def post_payment(
    request: PaymentHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    return _outcome_response(dependencies.job_desk.register_payment(request.amount))


def post_payment_clear(
    request: PaymentClearHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    desk = dependencies.job_desk
    if request.leg == "pickup":
        outcome = desk.clear_pickup_payment(request.actor_role)
    else:
        outcome = desk.clear_delivery_payment(request.actor_role)
    return _outcome_response(outcome)


# ── Custody ───────────────────────────────────────────────────

def post_warehouse_arrival(
    request: ActorRoleHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    return _outcome_response(
        dependencies.job_desk.record_warehouse_arrival(request.actor_role)
    )


def post_warehouse_handshake(
    request: ActorRoleHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    return _outcome_response(
        dependencies.job_desk.record_warehouse_handshake(request.actor_role)
    )


def post_outbound_schedule(
    request: OutboundScheduleHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    return _outcome_response(
        dependencies.job_desk.schedule_outbound(request.scheduled_date)
    )


def post_outbound_dispatch(
    request: ActorRoleHttpRequest,
    dependencies: HttpApiDependencies,
) -> dict[str, Any]:
    return _outcome_response(
        dependencies.job_desk.dispatch_from_warehouse(request.actor_role)
    )
