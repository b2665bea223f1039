"""
Move Masters Relocation Engine — Inventory Lines
===================================================
Items sharing a case-insensitive (name, condition) pair form a group.
Groups are a read-only projection in first-seen order; every write
still addresses the individual item records.

Stage locks:
    edit (add / rename / delete) — DRIVER or OFFICE, only while the
        job is DISPATCHED, ARRIVED_ORIGIN or SURVEY_WALKTHROUGH
    verify                       — DRIVER, only while SURVEY_WALKTHROUGH
        or LOADING
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from core.commands.outcomes import CommandOutcome
from core.commands.rejection import ReasonCode, RejectionReason
from core.permissions import (
    ACTION_EDIT_INVENTORY,
    ACTION_VERIFY_INVENTORY,
    PermissionEvaluator,
    Role,
)
from engines.relocation.models import InventoryItem, Job, JobStatus

logger = logging.getLogger("movemasters.inventory")

DEFAULT_BULK_CONDITION = "PBO (Packed by Owner)"

EDITABLE_STATUSES = frozenset({
    JobStatus.DISPATCHED,
    JobStatus.ARRIVED_ORIGIN,
    JobStatus.SURVEY_WALKTHROUGH,
})

VERIFIABLE_STATUSES = frozenset({
    JobStatus.SURVEY_WALKTHROUGH,
    JobStatus.LOADING,
})


@dataclass(frozen=True)
class InventoryGroup:
    key: str
    name: str
    condition: str
    item_ids: Tuple[str, ...]
    total_count: int
    verified_count: int

    @property
    def fully_verified(self) -> bool:
        return self.verified_count == self.total_count

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "name": self.name,
            "condition": self.condition,
            "item_ids": list(self.item_ids),
            "total_count": self.total_count,
            "verified_count": self.verified_count,
        }


def group_inventory(items: Tuple[InventoryItem, ...]) -> Tuple[InventoryGroup, ...]:
    """Group items by (name, condition); the first item seen names the group."""
    order: List[str] = []
    members: Dict[str, List[InventoryItem]] = {}
    for item in items:
        if item.group_key not in members:
            order.append(item.group_key)
            members[item.group_key] = []
        members[item.group_key].append(item)

    groups = []
    for key in order:
        first = members[key][0]
        groups.append(
            InventoryGroup(
                key=key,
                name=first.name,
                condition=first.condition,
                item_ids=tuple(i.item_id for i in members[key]),
                total_count=len(members[key]),
                verified_count=sum(1 for i in members[key] if i.verified),
            )
        )
    return tuple(groups)


# ══════════════════════════════════════════════════════════════
# CHECKS
# ══════════════════════════════════════════════════════════════

def _check(
    job: Job,
    role: Role,
    action: str,
    statuses: frozenset,
    policy_name: str,
) -> Optional[RejectionReason]:
    permission = PermissionEvaluator.evaluate_action(action, role)
    if not permission.allowed:
        return RejectionReason(
            code=permission.rejection_code,
            message=permission.message,
            policy_name=policy_name,
        )
    if job.status not in statuses:
        allowed = ", ".join(s.value for s in JobStatus if s in statuses)
        return RejectionReason(
            code=ReasonCode.INVENTORY_LOCKED,
            message=(
                f"Inventory is locked at {job.status.value}; "
                f"allowed during {allowed}."
            ),
            policy_name=policy_name,
        )
    return None


def _check_item_fields(name, condition, policy_name: str) -> Optional[RejectionReason]:
    if not isinstance(name, str) or not name.strip():
        return RejectionReason(
            code=ReasonCode.INVALID_ITEM,
            message=f"Item name must not be blank, got {name!r}.",
            policy_name=policy_name,
        )
    if not isinstance(condition, str):
        return RejectionReason(
            code=ReasonCode.INVALID_ITEM,
            message=f"Item condition must be text, got {condition!r}.",
            policy_name=policy_name,
        )
    return None


def _find_group(job: Job, key: str) -> Optional[InventoryGroup]:
    for group in group_inventory(job.inventory):
        if group.key == key:
            return group
    return None


def _reject(job: Job, rejection: RejectionReason) -> CommandOutcome[Job]:
    logger.info(
        f"Job {job.job_id} {rejection.policy_name} rejected: [{rejection.code}]"
    )
    return CommandOutcome.reject(
        job,
        code=rejection.code,
        message=rejection.message,
        policy_name=rejection.policy_name,
    )


def _group_not_found(job: Job, key: str, policy_name: str) -> CommandOutcome[Job]:
    return _reject(
        job,
        RejectionReason(
            code=ReasonCode.GROUP_NOT_FOUND,
            message=f"No inventory group '{key}'.",
            policy_name=policy_name,
        ),
    )


# ══════════════════════════════════════════════════════════════
# OPERATIONS
# ══════════════════════════════════════════════════════════════

def add_items(
    job: Job,
    role: Role,
    name: str,
    quantity: int = 1,
    condition: str = DEFAULT_BULK_CONDITION,
) -> CommandOutcome[Job]:
    rejection = _check(job, role, ACTION_EDIT_INVENTORY, EDITABLE_STATUSES, "inventory_edit")
    if rejection is not None:
        return _reject(job, rejection)

    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        return _reject(
            job,
            RejectionReason(
                code=ReasonCode.INVALID_QUANTITY,
                message=f"quantity must be a positive integer, got {quantity!r}.",
                policy_name="inventory_edit",
            ),
        )

    rejection = _check_item_fields(name, condition, "inventory_edit")
    if rejection is not None:
        return _reject(job, rejection)

    batch = uuid.uuid4().hex[:12]
    new_items = tuple(
        InventoryItem(
            item_id=f"blk-{batch}-{i}",
            name=name.strip(),
            condition=condition.strip(),
        )
        for i in range(quantity)
    )
    logger.info(
        f"Job {job.job_id} inventory: {quantity} x '{name.strip()}' added by {role.value}"
    )
    return CommandOutcome.accept(job.with_changes(inventory=job.inventory + new_items))


def set_group_verified(
    job: Job,
    role: Role,
    key: str,
    verified: bool,
) -> CommandOutcome[Job]:
    rejection = _check(
        job, role, ACTION_VERIFY_INVENTORY, VERIFIABLE_STATUSES, "inventory_verify",
    )
    if rejection is not None:
        return _reject(job, rejection)

    group = _find_group(job, key)
    if group is None:
        return _group_not_found(job, key, "inventory_verify")

    ids = set(group.item_ids)
    inventory = tuple(
        InventoryItem(item.item_id, item.name, item.condition, bool(verified))
        if item.item_id in ids else item
        for item in job.inventory
    )
    logger.info(
        f"Job {job.job_id} inventory group '{key}' verified={bool(verified)} "
        f"by {role.value}"
    )
    return CommandOutcome.accept(job.with_changes(inventory=inventory))


def edit_group(
    job: Job,
    role: Role,
    key: str,
    name: str,
    condition: str,
) -> CommandOutcome[Job]:
    """Rename / recondition every item of a group (may merge groups)."""
    rejection = (
        _check(job, role, ACTION_EDIT_INVENTORY, EDITABLE_STATUSES, "inventory_edit")
        or _check_item_fields(name, condition, "inventory_edit")
    )
    if rejection is not None:
        return _reject(job, rejection)

    group = _find_group(job, key)
    if group is None:
        return _group_not_found(job, key, "inventory_edit")

    ids = set(group.item_ids)
    inventory = tuple(
        InventoryItem(item.item_id, name.strip(), condition.strip(), item.verified)
        if item.item_id in ids else item
        for item in job.inventory
    )
    logger.info(f"Job {job.job_id} inventory group '{key}' edited by {role.value}")
    return CommandOutcome.accept(job.with_changes(inventory=inventory))


def delete_group(job: Job, role: Role, key: str) -> CommandOutcome[Job]:
    rejection = _check(job, role, ACTION_EDIT_INVENTORY, EDITABLE_STATUSES, "inventory_edit")
    if rejection is not None:
        return _reject(job, rejection)

    group = _find_group(job, key)
    if group is None:
        return _group_not_found(job, key, "inventory_edit")

    ids = set(group.item_ids)
    logger.info(f"Job {job.job_id} inventory group '{key}' deleted by {role.value}")
    return CommandOutcome.accept(
        job.with_changes(
            inventory=tuple(i for i in job.inventory if i.item_id not in ids)
        )
    )
