"""
Move Masters Custody Handoff — Tests
=======================================
Arrival → handshake ordering, write-once timestamps, outbound
scheduling and dispatch back to the final leg.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from core.commands.rejection import ReasonCode
from core.permissions import Role
from engines.relocation.custody import (
    CustodyStep,
    custody_step,
    dispatch_from_warehouse,
    record_warehouse_arrival,
    record_warehouse_handshake,
    schedule_outbound,
)
from engines.relocation.models import Address, CustodyHolder, Job, JobStatus

NOW = datetime(2026, 2, 20, 9, 0, tzinfo=timezone.utc)
LATER = NOW + timedelta(hours=1)
OUTBOUND = date(2026, 3, 2)

ORIGIN = Address("Pat Client", "123 Skyline Dr", "New York, NY 10001")
DESTINATION = Address("Pat Client", "456 Continental Ave", "Jersey City, NJ 07302")


def _job(status: JobStatus = JobStatus.WAREHOUSE_CUSTODY, **changes) -> Job:
    return Job.create("ORD-1", ORIGIN, DESTINATION).with_changes(status=status, **changes)


def _arrived() -> Job:
    return record_warehouse_arrival(_job(), Role.DRIVER, at=NOW).subject


class TestArrival:
    def test_driver_records_arrival(self):
        outcome = record_warehouse_arrival(_job(), Role.DRIVER, at=NOW)
        assert outcome.is_accepted
        assert outcome.subject.warehouse_arrival_timestamp == NOW
        assert outcome.subject.custody_holder == CustodyHolder.DRIVER

    @pytest.mark.parametrize("role", [Role.HELPER, Role.OFFICE, Role.WAREHOUSE, Role.CLIENT])
    def test_other_roles_denied(self, role):
        outcome = record_warehouse_arrival(_job(), role, at=NOW)
        assert outcome.code == ReasonCode.PERMISSION_DENIED
        assert outcome.subject.warehouse_arrival_timestamp is None

    def test_helper_cannot_unlock_handshake(self):
        job = record_warehouse_arrival(_job(), Role.HELPER, at=NOW).subject
        outcome = record_warehouse_handshake(job, Role.WAREHOUSE, at=NOW)
        assert outcome.code == ReasonCode.ARRIVAL_NOT_RECORDED

    def test_second_arrival_rejected_first_write_wins(self):
        job = _arrived()
        outcome = record_warehouse_arrival(job, Role.DRIVER, at=LATER)
        assert outcome.code == ReasonCode.ALREADY_RECORDED
        assert outcome.subject.warehouse_arrival_timestamp == NOW

    def test_only_active_in_warehouse_custody(self):
        outcome = record_warehouse_arrival(_job(JobStatus.IN_TRANSIT), Role.DRIVER, at=NOW)
        assert outcome.code == ReasonCode.INVALID_STATE


class TestHandshake:
    def test_handshake_before_arrival_is_locked(self):
        outcome = record_warehouse_handshake(_job(), Role.WAREHOUSE, at=NOW)
        assert outcome.code == ReasonCode.ARRIVAL_NOT_RECORDED
        assert outcome.subject.custody_holder == CustodyHolder.DRIVER
        assert outcome.subject.warehouse_handshake_timestamp is None

    @pytest.mark.parametrize("role", [Role.WAREHOUSE, Role.OFFICE])
    def test_handshake_transfers_custody(self, role):
        outcome = record_warehouse_handshake(_arrived(), role, at=LATER)
        assert outcome.is_accepted
        assert outcome.subject.warehouse_handshake_timestamp == LATER
        assert outcome.subject.custody_holder == CustodyHolder.WAREHOUSE

    def test_handshake_succeeds_exactly_once(self):
        job = record_warehouse_handshake(_arrived(), Role.WAREHOUSE, at=LATER).subject
        again = record_warehouse_handshake(job, Role.OFFICE, at=LATER + timedelta(hours=1))
        assert again.code == ReasonCode.ALREADY_RECORDED
        assert again.subject.warehouse_handshake_timestamp == LATER

    @pytest.mark.parametrize("role", [Role.DRIVER, Role.HELPER, Role.CLIENT])
    def test_crew_cannot_handshake(self, role):
        outcome = record_warehouse_handshake(_arrived(), role, at=LATER)
        assert outcome.code == ReasonCode.PERMISSION_DENIED

    def test_custody_steps(self):
        assert custody_step(_job(JobStatus.IN_TRANSIT)) == CustodyStep.NOT_ACTIVE
        assert custody_step(_job()) == CustodyStep.AWAITING_ARRIVAL
        job = _arrived()
        assert custody_step(job) == CustodyStep.AWAITING_HANDSHAKE
        job = record_warehouse_handshake(job, Role.WAREHOUSE, at=LATER).subject
        assert custody_step(job) == CustodyStep.IN_WAREHOUSE


class TestOutbound:
    def test_schedule_sets_date(self):
        outcome = schedule_outbound(_job(), OUTBOUND)
        assert outcome.subject.outbound_scheduled_date == OUTBOUND

    def test_schedule_requires_date(self):
        with pytest.raises(TypeError):
            schedule_outbound(_job(), "2026-03-02")

    def test_schedule_after_completion_rejected(self):
        outcome = schedule_outbound(_job(JobStatus.COMPLETED), OUTBOUND)
        assert outcome.code == ReasonCode.TERMINAL_STATE

    def test_dispatch_without_schedule(self):
        job = _job()
        outcome = dispatch_from_warehouse(job, Role.OFFICE, at=NOW)
        assert outcome.code == ReasonCode.SCHEDULE_REQUIRED
        assert outcome.subject is job
        assert outcome.subject.status == JobStatus.WAREHOUSE_CUSTODY

    def test_dispatch_after_schedule(self):
        job = record_warehouse_handshake(_arrived(), Role.WAREHOUSE, at=NOW).subject
        job = schedule_outbound(job, OUTBOUND).subject
        assert job.custody_holder == CustodyHolder.WAREHOUSE

        outcome = dispatch_from_warehouse(job, Role.OFFICE, at=LATER)
        assert outcome.is_accepted
        assert outcome.subject.status == JobStatus.DESTINATION_GATE
        assert outcome.subject.custody_holder == CustodyHolder.DRIVER
        record = outcome.subject.history[-1]
        assert record.from_state == "WAREHOUSE_CUSTODY"
        assert record.to_state == "DESTINATION_GATE"
        assert record.reason == "outbound_dispatch"

    def test_dispatch_is_office_only(self):
        job = schedule_outbound(_job(), OUTBOUND).subject
        outcome = dispatch_from_warehouse(job, Role.WAREHOUSE, at=NOW)
        assert outcome.code == ReasonCode.PERMISSION_DENIED

    def test_dispatch_outside_warehouse_custody(self):
        job = schedule_outbound(_job(JobStatus.IN_TRANSIT), OUTBOUND).subject
        outcome = dispatch_from_warehouse(job, Role.OFFICE, at=NOW)
        assert outcome.code == ReasonCode.INVALID_STATE


class TestCustodyInvariant:
    def test_warehouse_custody_outside_vault_rejected(self):
        with pytest.raises(ValueError, match="WAREHOUSE_CUSTODY"):
            _job(JobStatus.DESTINATION_GATE, custody_holder=CustodyHolder.WAREHOUSE)

    def test_handshake_without_arrival_rejected(self):
        with pytest.raises(ValueError, match="without arrival"):
            _job(warehouse_handshake_timestamp=NOW)
