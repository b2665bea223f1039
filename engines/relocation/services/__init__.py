"""
Move Masters Relocation Engine — Job Desk Service
====================================================
The JobDesk is the exclusive owner of one job snapshot. Every
operation runs under a per-job lock:

    read snapshot → pure engine function → swap snapshot if accepted

so concurrent callers are serialized and a rejected operation never
leaves a partial change behind. Time comes from the injected Clock,
rates and billing switches from the injected ConfigStore.
"""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Callable, Optional, Tuple

from core.commands.outcomes import CommandOutcome
from core.commands.rejection import ReasonCode
from core.config.rules import ConfigStore, InMemoryConfigStore
from core.permissions import Role
from core.time.clock import Clock, SystemClock
from engines.relocation import billing, custody, inventory, workflow
from engines.relocation.inventory import InventoryGroup, group_inventory
from engines.relocation.models import Job, RoutingDecision
from engines.relocation.payouts import PayoutStatement, payout_for
from engines.relocation.tariff import LedgerTotals, compute_ledger_totals

logger = logging.getLogger("movemasters.desk")

JobOperation = Callable[[Job], CommandOutcome[Job]]


class JobDesk:
    """Single-writer owner of one relocation job."""

    def __init__(
        self,
        job: Job,
        *,
        clock: Optional[Clock] = None,
        config: Optional[ConfigStore] = None,
    ):
        if not isinstance(job, Job):
            raise TypeError("job must be Job.")
        self._job = job
        self._clock = clock or SystemClock()
        self._config = config or InMemoryConfigStore()
        self._lock = threading.Lock()

    @property
    def job_id(self) -> str:
        return self._job.job_id

    def get_job(self) -> Job:
        return self._job

    def _execute(self, operation: str, fn: JobOperation) -> CommandOutcome[Job]:
        with self._lock:
            outcome = fn(self._job)
            if outcome.is_accepted:
                self._job = outcome.subject
            logger.debug(
                f"Job {self._job.job_id} {operation}: {outcome.status.value}"
            )
            return outcome

    # ── Workflow ──────────────────────────────────────────────

    def advance(
        self,
        role: Role,
        routing: Optional[RoutingDecision] = None,
    ) -> CommandOutcome[Job]:
        at = self._clock.now_utc()
        return self._execute(
            "advance", lambda job: workflow.advance(job, role, routing, at=at),
        )

    def is_gate_blocked(self, role: Optional[Role] = None) -> bool:
        return workflow.is_gate_blocked(self._job, role)

    def record_origin_signature(self, role: Role) -> CommandOutcome[Job]:
        return self._execute(
            "origin_signature",
            lambda job: workflow.record_origin_signature(job, role),
        )

    def record_delivery_signature(self, role: Role) -> CommandOutcome[Job]:
        return self._execute(
            "delivery_signature",
            lambda job: workflow.record_delivery_signature(job, role),
        )

    # ── Ledger ────────────────────────────────────────────────

    def compute_ledger_totals(self) -> LedgerTotals:
        return compute_ledger_totals(
            self._job.ledger, self._config.get_tariff_policy(),
        )

    def register_payment(self, amount) -> CommandOutcome[Job]:
        return self._execute(
            "payment", lambda job: billing.register_payment(job, amount),
        )

    def update_charges(self, role: Role, **changes) -> CommandOutcome[Job]:
        return self._execute(
            "charge_edit", lambda job: billing.update_charges(job, role, changes),
        )

    def clear_delivery_payment(self, role: Role) -> CommandOutcome[Job]:
        policy = self._config.get_tariff_policy()
        return self._execute(
            "delivery_clearance",
            lambda job: billing.clear_delivery_payment(job, role, policy),
        )

    def clear_pickup_payment(self, role: Role) -> CommandOutcome[Job]:
        policy = self._config.get_tariff_policy()
        return self._execute(
            "pickup_clearance",
            lambda job: billing.clear_pickup_payment(job, role, policy),
        )

    def payout_for(self, role: Role) -> CommandOutcome[Optional[PayoutStatement]]:
        statement = payout_for(role, self._job.ledger, self._config.get_pay_scale())
        if statement is None:
            return CommandOutcome.reject(
                None,
                code=ReasonCode.PERMISSION_DENIED,
                message=f"No payout statement exists for role {role.value}.",
                policy_name="payout_statement",
            )
        return CommandOutcome.accept(statement)

    # ── Custody ───────────────────────────────────────────────

    def record_warehouse_arrival(self, role: Role) -> CommandOutcome[Job]:
        at = self._clock.now_utc()
        return self._execute(
            "warehouse_arrival",
            lambda job: custody.record_warehouse_arrival(job, role, at=at),
        )

    def record_warehouse_handshake(self, role: Role) -> CommandOutcome[Job]:
        at = self._clock.now_utc()
        return self._execute(
            "warehouse_handshake",
            lambda job: custody.record_warehouse_handshake(job, role, at=at),
        )

    def schedule_outbound(self, scheduled: date) -> CommandOutcome[Job]:
        return self._execute(
            "outbound_schedule",
            lambda job: custody.schedule_outbound(job, scheduled),
        )

    def dispatch_from_warehouse(self, role: Role) -> CommandOutcome[Job]:
        at = self._clock.now_utc()
        return self._execute(
            "outbound_dispatch",
            lambda job: custody.dispatch_from_warehouse(job, role, at=at),
        )

    # ── Inventory ─────────────────────────────────────────────

    def inventory_groups(self) -> Tuple[InventoryGroup, ...]:
        return group_inventory(self._job.inventory)

    def add_inventory_items(
        self,
        role: Role,
        name: str,
        quantity: int = 1,
        condition: str = inventory.DEFAULT_BULK_CONDITION,
    ) -> CommandOutcome[Job]:
        return self._execute(
            "inventory_add",
            lambda job: inventory.add_items(job, role, name, quantity, condition),
        )

    def set_inventory_group_verified(
        self, role: Role, key: str, verified: bool,
    ) -> CommandOutcome[Job]:
        return self._execute(
            "inventory_verify",
            lambda job: inventory.set_group_verified(job, role, key, verified),
        )

    def edit_inventory_group(
        self, role: Role, key: str, name: str, condition: str,
    ) -> CommandOutcome[Job]:
        return self._execute(
            "inventory_edit",
            lambda job: inventory.edit_group(job, role, key, name, condition),
        )

    def delete_inventory_group(self, role: Role, key: str) -> CommandOutcome[Job]:
        return self._execute(
            "inventory_delete",
            lambda job: inventory.delete_group(job, role, key),
        )
