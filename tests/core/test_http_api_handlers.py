from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from core.commands.rejection import ReasonCode, RejectionReason
from core.http_api.contracts import (
    ActorRoleHttpRequest,
    AdvanceHttpRequest,
    HttpApiResponse,
    JobReadRequest,
    OutboundScheduleHttpRequest,
    PaymentClearHttpRequest,
    PaymentHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    http_status_for,
    map_rejection_reason,
    rejection_response,
)
from core.http_api.handlers import (
    get_job,
    get_ledger_totals,
    get_payout,
    post_advance,
    post_delivery_signature,
    post_origin_signature,
    post_outbound_dispatch,
    post_outbound_schedule,
    post_payment,
    post_payment_clear,
    post_warehouse_arrival,
    post_warehouse_handshake,
)
from core.permissions import Role
from core.time.clock import FixedClock
from engines.relocation.models import Address, Job, JobStatus, RoutingDecision
from engines.relocation.services import JobDesk
from engines.relocation.tariff import ChargeLedger


FIXED_NOW = datetime(2026, 2, 1, 9, 30, tzinfo=timezone.utc)
ORIGIN = Address("Pat Client", "123 Skyline Dr", "New York, NY 10001")
DESTINATION = Address("Pat Client", "456 Continental Ave", "Jersey City, NJ 07302")


def _deps(status: JobStatus = JobStatus.DISPATCHED, **changes) -> HttpApiDependencies:
    ledger = ChargeLedger(weight_base_lbs=2000, weight_base_rate="0.50")
    job = Job.create("ORD-7", ORIGIN, DESTINATION, ledger).with_changes(
        status=status, **changes,
    )
    return HttpApiDependencies(job_desk=JobDesk(job, clock=FixedClock(FIXED_NOW)))


def test_contracts_validate_types():
    with pytest.raises(ValueError):
        ActorRoleHttpRequest(actor_role="OFFICE")
    with pytest.raises(ValueError):
        AdvanceHttpRequest(actor_role=Role.OFFICE, routing="DIRECT")
    with pytest.raises(ValueError):
        PaymentHttpRequest(amount="100")
    with pytest.raises(ValueError):
        PaymentClearHttpRequest(actor_role=Role.OFFICE, leg="deposit")
    with pytest.raises(ValueError):
        OutboundScheduleHttpRequest(scheduled_date=FIXED_NOW)
    with pytest.raises(ValueError):
        HttpApiDependencies(job_desk=object())


def test_failed_response_requires_error():
    with pytest.raises(ValueError):
        HttpApiResponse(ok=False).to_dict()


def test_rejection_mapping_is_stable():
    reason = RejectionReason(
        code=ReasonCode.GATE_BLOCKED,
        message="FINANCIAL GATE: blocked.",
        policy_name="financial_gate",
    )
    mapped = map_rejection_reason(reason)
    assert mapped.code == "GATE_BLOCKED"
    assert mapped.details["policy_name"] == "financial_gate"
    assert mapped.details["message_key"] == "rejection.gate_blocked"

    payload = rejection_response(reason, status="DESTINATION_GATE")
    assert payload["ok"] is False
    assert payload["error"]["details"]["status"] == "DESTINATION_GATE"


def test_get_job_projects_gate_and_custody():
    deps = _deps(JobStatus.BINDING_ESTIMATE)

    as_driver = get_job(JobReadRequest(actor_role=Role.DRIVER), deps)
    assert as_driver["ok"] is True
    assert as_driver["data"]["gate_blocked"] is True
    assert as_driver["data"]["gate_reason"]["code"] == "PERMISSION_DENIED"

    anonymous = get_job(JobReadRequest(), deps)
    assert anonymous["data"]["gate_blocked"] is False
    job = anonymous["data"]["job"]
    assert job["status_label"] == "Rate Lock"
    assert job["custody_step"] == "NOT_ACTIVE"
    assert anonymous["meta"] == {"job_id": "ORD-7", "status": "BINDING_ESTIMATE"}


def test_advance_success_and_rejection():
    deps = _deps()
    accepted = post_advance(AdvanceHttpRequest(actor_role=Role.DRIVER), deps)
    assert accepted["ok"] is True
    assert accepted["data"]["job"]["status"] == "ARRIVED_ORIGIN"
    assert accepted["data"]["job"]["history"][0]["transitioned_at"] == FIXED_NOW.isoformat()

    routed = post_advance(
        AdvanceHttpRequest(actor_role=Role.OFFICE, routing=RoutingDecision.DIRECT),
        deps,
    )
    assert routed["ok"] is False
    assert routed["error"]["code"] == "ROUTING_NOT_APPLICABLE"
    assert routed["error"]["details"]["status"] == "ARRIVED_ORIGIN"


def test_signatures_through_handlers():
    deps = _deps(JobStatus.CLIENT_APPROVAL)
    denied = post_origin_signature(ActorRoleHttpRequest(actor_role=Role.DRIVER), deps)
    assert denied["error"]["code"] == "PERMISSION_DENIED"

    signed = post_origin_signature(ActorRoleHttpRequest(actor_role=Role.CLIENT), deps)
    assert signed["data"]["job"]["origin_signed"] is True

    early = post_delivery_signature(ActorRoleHttpRequest(actor_role=Role.CLIENT), deps)
    assert early["error"]["code"] == "INVALID_STATE"
    assert early["error"]["details"]["status"] == "CLIENT_APPROVAL"

    audit = _deps(JobStatus.FINAL_AUDIT)
    delivery = post_delivery_signature(ActorRoleHttpRequest(actor_role=Role.CLIENT), audit)
    assert delivery["data"]["job"]["delivery_signed"] is True


def test_payment_and_ledger_totals():
    deps = _deps(JobStatus.DESTINATION_GATE)
    bad = post_payment(PaymentHttpRequest(amount=Decimal("-1")), deps)
    assert bad["error"]["code"] == "INVALID_AMOUNT"
    not_a_number = post_payment(PaymentHttpRequest(amount=Decimal("NaN")), deps)
    assert not_a_number["error"]["code"] == "INVALID_AMOUNT"
    assert http_status_for(not_a_number) == 409

    outstanding = post_payment_clear(PaymentClearHttpRequest(actor_role=Role.OFFICE), deps)
    assert outstanding["error"]["code"] == "PAYMENT_OUTSTANDING"

    paid = post_payment(PaymentHttpRequest(amount=Decimal("1000")), deps)
    assert paid["data"]["job"]["ledger"]["partial_payments"] == ["1000"]

    totals = get_ledger_totals(deps)["data"]["totals"]
    assert totals["grand_total"] == "1000.00"
    assert totals["balance_due"] == "0.00"

    cleared = post_payment_clear(PaymentClearHttpRequest(actor_role=Role.OFFICE), deps)
    assert cleared["data"]["job"]["delivery_paid"] is True

    pickup = post_payment_clear(
        PaymentClearHttpRequest(actor_role=Role.OFFICE, leg="pickup"), deps,
    )
    assert pickup["data"]["job"]["pickup_paid"] is True


def test_payout_statement():
    deps = _deps()
    driver = get_payout(ActorRoleHttpRequest(actor_role=Role.DRIVER), deps)
    assert driver["data"]["payout"]["gross"] == "250.00"

    office = get_payout(ActorRoleHttpRequest(actor_role=Role.OFFICE), deps)
    assert office["ok"] is False
    assert office["error"]["details"]["policy_name"] == "payout_statement"


def test_custody_handoff_through_handlers():
    deps = _deps(JobStatus.WAREHOUSE_CUSTODY)
    early = post_warehouse_handshake(ActorRoleHttpRequest(actor_role=Role.WAREHOUSE), deps)
    assert early["error"]["code"] == "ARRIVAL_NOT_RECORDED"

    arrived = post_warehouse_arrival(ActorRoleHttpRequest(actor_role=Role.DRIVER), deps)
    assert arrived["data"]["job"]["custody_step"] == "AWAITING_HANDSHAKE"

    handed = post_warehouse_handshake(ActorRoleHttpRequest(actor_role=Role.WAREHOUSE), deps)
    assert handed["data"]["job"]["custody_holder"] == "WAREHOUSE"

    unscheduled = post_outbound_dispatch(ActorRoleHttpRequest(actor_role=Role.OFFICE), deps)
    assert unscheduled["error"]["code"] == "SCHEDULE_REQUIRED"

    post_outbound_schedule(OutboundScheduleHttpRequest(scheduled_date=date(2026, 3, 2)), deps)
    dispatched = post_outbound_dispatch(ActorRoleHttpRequest(actor_role=Role.OFFICE), deps)
    assert dispatched["data"]["job"]["status"] == "DESTINATION_GATE"
    assert dispatched["data"]["job"]["custody_holder"] == "DRIVER"
    assert dispatched["meta"]["status"] == "DESTINATION_GATE"


def test_http_status_by_code():
    def rejected(code):
        return rejection_response(
            RejectionReason(code=code, message="m", policy_name="p")
        )

    assert http_status_for({"ok": True, "data": None}) == 200
    assert http_status_for(rejected(ReasonCode.PERMISSION_DENIED)) == 403
    assert http_status_for(rejected(ReasonCode.GROUP_NOT_FOUND)) == 404
    assert http_status_for(rejected(ReasonCode.GATE_BLOCKED)) == 409
    assert http_status_for(rejected(ReasonCode.SCHEDULE_REQUIRED)) == 409
