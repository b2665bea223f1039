"""
Move Masters Job Aggregate — Tests
=====================================
"""

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from core.permissions import Role
from engines.relocation.models import (
    JOB_STATUS_SEQUENCE,
    STATUS_LABELS,
    Address,
    CustodyHolder,
    InventoryItem,
    Job,
    JobStatus,
    RoutingDecision,
)
from engines.relocation.tariff import ChargeLedger
from engines.relocation.workflow import advance

NOW = datetime(2026, 2, 20, 9, 0, tzinfo=timezone.utc)

ORIGIN = Address("Pat Client", "123 Skyline Dr", "New York, NY 10001", "555-0100")
DESTINATION = Address("Pat Client", "456 Continental Ave", "Jersey City, NJ 07302")


class TestJobStatus:
    def test_fourteen_states_in_order(self):
        assert len(JOB_STATUS_SEQUENCE) == 14
        assert JOB_STATUS_SEQUENCE[0] == JobStatus.DISPATCHED
        assert JOB_STATUS_SEQUENCE[-1] == JobStatus.COMPLETED

    def test_every_state_has_label(self):
        assert set(STATUS_LABELS) == set(JobStatus)
        assert STATUS_LABELS[JobStatus.WAREHOUSE_CUSTODY] == "Vault"


class TestRoutingDecision:
    def test_parse(self):
        assert RoutingDecision.parse("warehouse") == RoutingDecision.WAREHOUSE
        assert RoutingDecision.parse(RoutingDecision.DIRECT) == RoutingDecision.DIRECT

    def test_parse_invalid(self):
        with pytest.raises(ValueError):
            RoutingDecision.parse("AIRFREIGHT")


class TestJobCreation:
    def test_create_defaults(self):
        job = Job.create("ORD-1", ORIGIN, DESTINATION)
        assert job.status == JobStatus.DISPATCHED
        assert job.custody_holder == CustodyHolder.DRIVER
        assert not (job.origin_signed or job.delivery_signed)
        assert not (job.pickup_paid or job.delivery_paid)
        assert job.ledger == ChargeLedger()
        assert job.history == ()
        assert job.status_label == "Dispatch"

    def test_requires_job_id(self):
        with pytest.raises(ValueError, match="job_id"):
            Job.create("", ORIGIN, DESTINATION)

    def test_address_requires_street(self):
        with pytest.raises(ValueError, match="street"):
            Address("Pat", "", "New York, NY 10001")

    def test_status_must_be_enum(self):
        with pytest.raises(ValueError, match="status"):
            Job.create("ORD-1", ORIGIN, DESTINATION).with_changes(status="LOADING")

    def test_with_changes_returns_new_snapshot(self):
        job = Job.create("ORD-1", ORIGIN, DESTINATION)
        signed = job.with_changes(origin_signed=True)
        assert signed is not job
        assert not job.origin_signed


class TestJobSerialization:
    def test_roundtrip_full_job(self):
        job = Job.create(
            "ORD-1",
            ORIGIN,
            DESTINATION,
            ChargeLedger(weight_base_lbs=2000, weight_base_rate="0.50", partial_payments=(500,)),
            inventory=(InventoryItem("1", "Sofa", "Good", verified=True),),
        )
        job = advance(job, Role.DRIVER, at=NOW).subject
        job = job.with_changes(
            status=JobStatus.WAREHOUSE_CUSTODY,
            warehouse_arrival_timestamp=NOW,
            warehouse_handshake_timestamp=NOW,
            custody_holder=CustodyHolder.WAREHOUSE,
            outbound_scheduled_date=date(2026, 3, 2),
        )
        assert Job.from_dict(job.to_dict()) == job

    def test_to_dict_shape(self):
        data = Job.create("ORD-1", ORIGIN, DESTINATION).to_dict()
        assert data["status"] == "DISPATCHED"
        assert data["custody_holder"] == "DRIVER"
        assert data["warehouse_arrival_timestamp"] is None
        assert data["origin"]["phone"] == "555-0100"
        assert data["destination"]["phone"] == ""
        assert data["inventory"] == []
