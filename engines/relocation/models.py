"""
Move Masters Relocation Engine — Job Aggregate
=================================================
The Job is the central aggregate: status, addresses, ledger,
signature and payment flags, custody holder and timestamps, the
outbound schedule, inventory lines and the transition history.

Jobs are immutable snapshots. Every operation takes a Job and
returns a new Job (or a rejection that carries the untouched one).
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple

from core.primitives.workflow import StateTransition
from engines.relocation.tariff import ChargeLedger


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class JobStatus(Enum):
    """The 14 job states, declared in fixed forward order."""
    DISPATCHED = "DISPATCHED"
    ARRIVED_ORIGIN = "ARRIVED_ORIGIN"
    SURVEY_WALKTHROUGH = "SURVEY_WALKTHROUGH"
    BINDING_ESTIMATE = "BINDING_ESTIMATE"
    OFFICE_VERIFICATION = "OFFICE_VERIFICATION"
    CLIENT_APPROVAL = "CLIENT_APPROVAL"
    LOADING = "LOADING"
    LOAD_VERIFICATION = "LOAD_VERIFICATION"
    IN_TRANSIT = "IN_TRANSIT"
    WAREHOUSE_CUSTODY = "WAREHOUSE_CUSTODY"
    DESTINATION_GATE = "DESTINATION_GATE"
    UNLOADING = "UNLOADING"
    FINAL_AUDIT = "FINAL_AUDIT"
    COMPLETED = "COMPLETED"


JOB_STATUS_SEQUENCE = tuple(JobStatus)

# Short labels used by progress displays.
STATUS_LABELS = {
    JobStatus.DISPATCHED: "Dispatch",
    JobStatus.ARRIVED_ORIGIN: "Arrival",
    JobStatus.SURVEY_WALKTHROUGH: "Survey",
    JobStatus.BINDING_ESTIMATE: "Rate Lock",
    JobStatus.OFFICE_VERIFICATION: "Review",
    JobStatus.CLIENT_APPROVAL: "Signature",
    JobStatus.LOADING: "Loading",
    JobStatus.LOAD_VERIFICATION: "Evidence",
    JobStatus.IN_TRANSIT: "Transit",
    JobStatus.WAREHOUSE_CUSTODY: "Vault",
    JobStatus.DESTINATION_GATE: "Payment",
    JobStatus.UNLOADING: "Unload",
    JobStatus.FINAL_AUDIT: "Audit",
    JobStatus.COMPLETED: "Done",
}


class CustodyHolder(Enum):
    """Party currently bearing liability for the goods."""
    DRIVER = "DRIVER"
    WAREHOUSE = "WAREHOUSE"
    CLIENT = "CLIENT"


class RoutingDecision(Enum):
    """Office routing command issued when leaving IN_TRANSIT."""
    WAREHOUSE = "WAREHOUSE"
    DIRECT = "DIRECT"

    @classmethod
    def parse(cls, value) -> RoutingDecision:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(
                f"routing '{value}' not valid. "
                f"Must be one of: {sorted(r.value for r in cls)}"
            ) from None


# ══════════════════════════════════════════════════════════════
# VALUE OBJECTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Address:
    name: str
    street: str
    city_state_zip: str
    phone: str = ""

    def __post_init__(self):
        if not self.street or not isinstance(self.street, str):
            raise ValueError("street must be a non-empty string.")
        if not self.city_state_zip or not isinstance(self.city_state_zip, str):
            raise ValueError("city_state_zip must be a non-empty string.")

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> Address:
        return cls(**data)


@dataclass(frozen=True)
class InventoryItem:
    """
    One individually addressable inventory line.

    Items sharing a case-insensitive (name, condition) pair form a
    logical group; the group itself is never stored.
    """
    item_id: str
    name: str
    condition: str = ""
    verified: bool = False

    def __post_init__(self):
        if not self.item_id or not isinstance(self.item_id, str):
            raise ValueError("item_id must be a non-empty string.")
        if not self.name or not isinstance(self.name, str):
            raise ValueError("name must be a non-empty string.")
        if not isinstance(self.condition, str):
            raise ValueError("condition must be a string.")
        if not isinstance(self.verified, bool):
            raise ValueError("verified must be bool.")

    @property
    def group_key(self) -> str:
        return f"{self.name.strip().lower()}|{self.condition.strip().lower()}"

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> InventoryItem:
        return cls(**data)


# ══════════════════════════════════════════════════════════════
# JOB AGGREGATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Job:
    job_id: str
    status: JobStatus
    origin: Address
    destination: Address
    ledger: ChargeLedger = field(default_factory=ChargeLedger)
    origin_signed: bool = False
    delivery_signed: bool = False
    pickup_paid: bool = False
    delivery_paid: bool = False
    custody_holder: CustodyHolder = CustodyHolder.DRIVER
    warehouse_arrival_timestamp: Optional[datetime] = None
    warehouse_handshake_timestamp: Optional[datetime] = None
    outbound_scheduled_date: Optional[date] = None
    inventory: Tuple[InventoryItem, ...] = ()
    history: Tuple[StateTransition, ...] = ()

    def __post_init__(self):
        if not self.job_id or not isinstance(self.job_id, str):
            raise ValueError("job_id must be a non-empty string.")
        if not isinstance(self.status, JobStatus):
            raise ValueError(f"status must be JobStatus, got {self.status!r}.")
        if not isinstance(self.origin, Address):
            raise TypeError("origin must be Address.")
        if not isinstance(self.destination, Address):
            raise TypeError("destination must be Address.")
        if not isinstance(self.ledger, ChargeLedger):
            raise TypeError("ledger must be ChargeLedger.")
        if not isinstance(self.custody_holder, CustodyHolder):
            raise ValueError("custody_holder must be CustodyHolder.")

        for flag in ("origin_signed", "delivery_signed", "pickup_paid", "delivery_paid"):
            if not isinstance(getattr(self, flag), bool):
                raise ValueError(f"{flag} must be bool.")

        for stamp in ("warehouse_arrival_timestamp", "warehouse_handshake_timestamp"):
            value = getattr(self, stamp)
            if value is not None and not isinstance(value, datetime):
                raise TypeError(f"{stamp} must be datetime or None.")

        if self.outbound_scheduled_date is not None:
            if isinstance(self.outbound_scheduled_date, datetime) or not isinstance(
                self.outbound_scheduled_date, date
            ):
                raise TypeError("outbound_scheduled_date must be date or None.")

        if (
            self.warehouse_handshake_timestamp is not None
            and self.warehouse_arrival_timestamp is None
        ):
            raise ValueError("warehouse handshake recorded without arrival.")

        if (
            self.custody_holder == CustodyHolder.WAREHOUSE
            and self.status != JobStatus.WAREHOUSE_CUSTODY
        ):
            raise ValueError(
                "custody_holder WAREHOUSE is only valid while status is "
                f"WAREHOUSE_CUSTODY, got {self.status.value}."
            )

        object.__setattr__(self, "inventory", tuple(self.inventory))
        object.__setattr__(self, "history", tuple(self.history))
        for item in self.inventory:
            if not isinstance(item, InventoryItem):
                raise TypeError("inventory entries must be InventoryItem.")
        for record in self.history:
            if not isinstance(record, StateTransition):
                raise TypeError("history entries must be StateTransition.")

    @classmethod
    def create(
        cls,
        job_id: str,
        origin: Address,
        destination: Address,
        ledger: Optional[ChargeLedger] = None,
        inventory: Tuple[InventoryItem, ...] = (),
    ) -> Job:
        """A freshly dispatched job: status DISPATCHED, custody with the driver."""
        return cls(
            job_id=job_id,
            status=JobStatus.DISPATCHED,
            origin=origin,
            destination=destination,
            ledger=ledger or ChargeLedger(),
            inventory=tuple(inventory),
        )

    @property
    def is_completed(self) -> bool:
        return self.status == JobStatus.COMPLETED

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]

    def with_changes(self, **changes) -> Job:
        return dataclasses.replace(self, **changes)

    # ── Serialization ─────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "job_id": self.job_id,
            "status": self.status.value,
            "origin": self.origin.to_dict(),
            "destination": self.destination.to_dict(),
            "ledger": self.ledger.to_dict(),
            "origin_signed": self.origin_signed,
            "delivery_signed": self.delivery_signed,
            "pickup_paid": self.pickup_paid,
            "delivery_paid": self.delivery_paid,
            "custody_holder": self.custody_holder.value,
            "warehouse_arrival_timestamp": _iso(self.warehouse_arrival_timestamp),
            "warehouse_handshake_timestamp": _iso(self.warehouse_handshake_timestamp),
            "outbound_scheduled_date": _iso(self.outbound_scheduled_date),
            "inventory": [item.to_dict() for item in self.inventory],
            "history": [record.to_dict() for record in self.history],
        }

    @classmethod
    def from_dict(cls, data: dict) -> Job:
        arrival = data.get("warehouse_arrival_timestamp")
        handshake = data.get("warehouse_handshake_timestamp")
        outbound = data.get("outbound_scheduled_date")
        return cls(
            job_id=data["job_id"],
            status=JobStatus(data["status"]),
            origin=Address.from_dict(data["origin"]),
            destination=Address.from_dict(data["destination"]),
            ledger=ChargeLedger.from_dict(data.get("ledger", {})),
            origin_signed=data.get("origin_signed", False),
            delivery_signed=data.get("delivery_signed", False),
            pickup_paid=data.get("pickup_paid", False),
            delivery_paid=data.get("delivery_paid", False),
            custody_holder=CustodyHolder(data.get("custody_holder", "DRIVER")),
            warehouse_arrival_timestamp=(
                datetime.fromisoformat(arrival) if arrival else None
            ),
            warehouse_handshake_timestamp=(
                datetime.fromisoformat(handshake) if handshake else None
            ),
            outbound_scheduled_date=date.fromisoformat(outbound) if outbound else None,
            inventory=tuple(
                InventoryItem.from_dict(item) for item in data.get("inventory", ())
            ),
            history=tuple(
                StateTransition.from_dict(record) for record in data.get("history", ())
            ),
        )


def _iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None
