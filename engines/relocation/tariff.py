"""
Move Masters Relocation Engine — Tariff Ledger
=================================================
Pure, deterministic aggregation over a job's charge lines.

A ChargeLedger is a flat record of independently priced components:
weight, cubic volume, hourly labor, packing, flat accessorials,
conditional storage, an append-only list of partial payments and a
manual price adjustment.

RULES (NON-NEGOTIABLE):
- All money is Decimal (no binary floats in totals)
- Every monetary field is non-negative except price_adjustment
- partial_payments is append-only (audit trail)
- compute_ledger_totals has no hidden state (same ledger → same totals)

This file contains NO persistence logic.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple

from core.commands.outcomes import CommandOutcome
from core.commands.rejection import ReasonCode
from core.config.rules import TariffPolicy

ZERO = Decimal("0")

WEIGHT_FIELDS = (
    "weight_base_lbs", "weight_base_rate", "weight_add_lbs", "weight_add_rate",
)
CUBIC_FIELDS = (
    "cubic_estimate_cu_ft", "cubic_base_cu_ft", "cubic_base_rate",
    "cubic_add_cu_ft", "cubic_add_rate",
)
HOURLY_FIELDS = ("hourly_men", "hourly_trucks", "hourly_rate")
HOURLY_WINDOW_FIELDS = (
    "hourly_part1_start", "hourly_part1_end",
    "hourly_part2_start", "hourly_part2_end",
)
PACKING_FIELDS = ("packing_materials_total", "full_packing_service", "packing_other")
ACCESSORIAL_FIELDS = (
    "fuel_surcharge",
    "stairs_origin",
    "stairs_dest",
    "long_carry_origin",
    "long_carry_dest",
    "shuttle_origin",
    "shuttle_dest",
    "misc_bulky_item",
    "split_stop_off",
    "pgs_service",
    "valuation_charge",
)
STORAGE_FIELDS = ("storage_days", "storage_cu_ft", "storage_rate", "storage_other")

NON_NEGATIVE_FIELDS = (
    WEIGHT_FIELDS + CUBIC_FIELDS + HOURLY_FIELDS + PACKING_FIELDS
    + ACCESSORIAL_FIELDS + STORAGE_FIELDS
)

_CLOCK_FORMATS = ("%I:%M %p", "%I:%M%p", "%H:%M")


def to_decimal(value) -> Decimal:
    """Coerce int/float/str/Decimal to Decimal via its string form."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary value.")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation:
        raise ValueError(f"'{value}' is not a number.") from None


def parse_clock_time(value: str) -> datetime:
    """Parse a wall-clock string such as '08:00 AM' or '13:30'."""
    text = value.strip().upper()
    for fmt in _CLOCK_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ValueError(f"'{value}' is not a clock time (expected e.g. '08:00 AM').")


def window_hours(start: str, end: str) -> Decimal:
    """
    Duration of one labor window in hours.

    A window with either bound blank counts as zero. An end earlier than
    the start is read as crossing midnight.
    """
    if not start or not end:
        return ZERO
    begin = parse_clock_time(start)
    finish = parse_clock_time(end)
    if finish < begin:
        finish += timedelta(days=1)
    minutes = int((finish - begin).total_seconds() // 60)
    return Decimal(minutes) / Decimal(60)


# ══════════════════════════════════════════════════════════════
# CHARGE LEDGER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ChargeLedger:
    """
    Flat record of a job's priced components.

    pgs_service is the special-handling service fee. Storage charges
    count only when storage_days > 0.
    """
    weight_base_lbs: Decimal = ZERO
    weight_base_rate: Decimal = ZERO
    weight_add_lbs: Decimal = ZERO
    weight_add_rate: Decimal = ZERO

    cubic_estimate_cu_ft: Decimal = ZERO
    cubic_base_cu_ft: Decimal = ZERO
    cubic_base_rate: Decimal = ZERO
    cubic_add_cu_ft: Decimal = ZERO
    cubic_add_rate: Decimal = ZERO

    hourly_part1_start: str = ""
    hourly_part1_end: str = ""
    hourly_part2_start: str = ""
    hourly_part2_end: str = ""
    hourly_men: Decimal = ZERO
    hourly_trucks: Decimal = ZERO
    hourly_rate: Decimal = ZERO

    packing_materials_total: Decimal = ZERO
    full_packing_service: Decimal = ZERO
    packing_other: Decimal = ZERO

    fuel_surcharge: Decimal = ZERO
    stairs_origin: Decimal = ZERO
    stairs_dest: Decimal = ZERO
    long_carry_origin: Decimal = ZERO
    long_carry_dest: Decimal = ZERO
    shuttle_origin: Decimal = ZERO
    shuttle_dest: Decimal = ZERO
    misc_bulky_item: Decimal = ZERO
    split_stop_off: Decimal = ZERO
    pgs_service: Decimal = ZERO
    valuation_charge: Decimal = ZERO

    storage_days: Decimal = ZERO
    storage_cu_ft: Decimal = ZERO
    storage_rate: Decimal = ZERO
    storage_other: Decimal = ZERO

    partial_payments: Tuple[Decimal, ...] = ()
    price_adjustment: Decimal = ZERO

    def __post_init__(self):
        for name in NON_NEGATIVE_FIELDS:
            value = to_decimal(getattr(self, name))
            if not value.is_finite() or value < 0:
                raise ValueError(f"{name} must be a non-negative number, got {value}.")
            object.__setattr__(self, name, value)

        adjustment = to_decimal(self.price_adjustment)
        if not adjustment.is_finite():
            raise ValueError("price_adjustment must be a finite number.")
        object.__setattr__(self, "price_adjustment", adjustment)

        payments = []
        for amount in self.partial_payments:
            amount = to_decimal(amount)
            if not amount.is_finite() or amount <= 0:
                raise ValueError(f"partial payment must be positive, got {amount}.")
            payments.append(amount)
        object.__setattr__(self, "partial_payments", tuple(payments))

        for name in HOURLY_WINDOW_FIELDS:
            value = getattr(self, name)
            if value is None:
                value = ""
            if not isinstance(value, str):
                raise TypeError(f"{name} must be a string.")
            if value:
                parse_clock_time(value)
            object.__setattr__(self, name, value.strip())

    @property
    def total_paid(self) -> Decimal:
        return sum(self.partial_payments, ZERO)

    @property
    def logged_hours(self) -> Decimal:
        return (
            window_hours(self.hourly_part1_start, self.hourly_part1_end)
            + window_hours(self.hourly_part2_start, self.hourly_part2_end)
        )

    def to_dict(self) -> dict:
        data = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if f.name == "partial_payments":
                data[f.name] = [str(p) for p in value]
            elif isinstance(value, Decimal):
                data[f.name] = str(value)
            else:
                data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> ChargeLedger:
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown ledger fields: {unknown}.")
        kwargs = dict(data)
        kwargs["partial_payments"] = tuple(kwargs.get("partial_payments", ()))
        return cls(**kwargs)


# ══════════════════════════════════════════════════════════════
# LEDGER TOTALS (derived, never stored)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LedgerTotals:
    weight_total: Decimal
    cubic_total: Decimal
    hourly_total: Decimal
    packing_total: Decimal
    other_total: Decimal
    storage_total: Decimal
    grand_total: Decimal
    total_paid: Decimal
    balance_due: Decimal
    overage_cu_ft: Decimal
    overage_revenue: Decimal

    @property
    def is_settled(self) -> bool:
        return self.balance_due <= 0

    def to_dict(self) -> dict:
        return {
            f.name: str(getattr(self, f.name))
            for f in dataclasses.fields(self)
        }


def cubic_overage(ledger: ChargeLedger) -> Decimal:
    """Measured volume beyond the original estimate, never negative."""
    return max(ZERO, ledger.cubic_base_cu_ft - ledger.cubic_estimate_cu_ft)


def overage_revenue(ledger: ChargeLedger) -> Decimal:
    return cubic_overage(ledger) * ledger.cubic_base_rate


def compute_ledger_totals(
    ledger: ChargeLedger,
    policy: Optional[TariffPolicy] = None,
) -> LedgerTotals:
    """
    Aggregate a ledger into totals, balance due and overage.

    balance_due = grand_total - sum(partial_payments) + price_adjustment
    """
    policy = policy or TariffPolicy()

    weight_total = (
        ledger.weight_base_lbs * ledger.weight_base_rate
        + ledger.weight_add_lbs * ledger.weight_add_rate
    )
    cubic_total = (
        ledger.cubic_base_cu_ft * ledger.cubic_base_rate
        + ledger.cubic_add_cu_ft * ledger.cubic_add_rate
    )
    hourly_total = ledger.hourly_men * ledger.hourly_trucks * ledger.hourly_rate
    if policy.bill_hourly_by_duration:
        hourly_total = hourly_total * ledger.logged_hours

    packing_total = sum((getattr(ledger, f) for f in PACKING_FIELDS), ZERO)
    other_total = sum((getattr(ledger, f) for f in ACCESSORIAL_FIELDS), ZERO)

    if ledger.storage_days > 0:
        storage_total = ledger.storage_cu_ft * ledger.storage_rate + ledger.storage_other
    else:
        storage_total = ZERO

    grand_total = (
        weight_total + cubic_total + hourly_total
        + packing_total + other_total + storage_total
    )
    total_paid = ledger.total_paid

    return LedgerTotals(
        weight_total=weight_total,
        cubic_total=cubic_total,
        hourly_total=hourly_total,
        packing_total=packing_total,
        other_total=other_total,
        storage_total=storage_total,
        grand_total=grand_total,
        total_paid=total_paid,
        balance_due=grand_total - total_paid + ledger.price_adjustment,
        overage_cu_ft=cubic_overage(ledger),
        overage_revenue=overage_revenue(ledger),
    )


# ══════════════════════════════════════════════════════════════
# LEDGER OPERATIONS (functional update)
# ══════════════════════════════════════════════════════════════

def register_payment(ledger: ChargeLedger, amount) -> CommandOutcome[ChargeLedger]:
    """Append a received payment. Prior entries are never edited."""
    try:
        value = to_decimal(amount)
    except (TypeError, ValueError):
        value = None

    if value is None or not value.is_finite() or value <= 0:
        return CommandOutcome.reject(
            ledger,
            code=ReasonCode.INVALID_AMOUNT,
            message=f"Payment amount must be greater than zero, got {amount!r}.",
            policy_name="payment_registration",
        )

    return CommandOutcome.accept(
        dataclasses.replace(
            ledger, partial_payments=ledger.partial_payments + (value,),
        )
    )


def update_charges(ledger: ChargeLedger, changes: dict) -> CommandOutcome[ChargeLedger]:
    """
    Replace individual charge fields. partial_payments cannot be edited
    here; payments only ever enter through register_payment.
    """
    known = {f.name for f in dataclasses.fields(ChargeLedger)}

    if "partial_payments" in changes:
        return CommandOutcome.reject(
            ledger,
            code=ReasonCode.INVALID_CHARGE,
            message="partial_payments is append-only; use payment registration.",
            policy_name="charge_edit",
        )

    unknown = sorted(set(changes) - known)
    if unknown:
        return CommandOutcome.reject(
            ledger,
            code=ReasonCode.INVALID_CHARGE,
            message=f"Unknown charge fields: {unknown}.",
            policy_name="charge_edit",
        )

    try:
        updated = dataclasses.replace(ledger, **changes)
    except (TypeError, ValueError) as exc:
        return CommandOutcome.reject(
            ledger,
            code=ReasonCode.INVALID_CHARGE,
            message=str(exc),
            policy_name="charge_edit",
        )

    return CommandOutcome.accept(updated)
