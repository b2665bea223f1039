"""
Move Masters Relocation Engine — Crew Payout Statements
==========================================================
Advisory earnings statements derived from the ledger. The ledger is
read, never mutated.

    driver: daily base + commission on cubic overage revenue
    helper: hourly wage x logged hours + flat bonuses (no overage)

A fixed fraction of gross is surfaced as a recommended tax reserve.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Tuple

from core.config.rules import PayScale
from core.permissions import Role
from engines.relocation.tariff import ChargeLedger, overage_revenue

CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PayoutLine:
    label: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {"label": self.label, "amount": str(self.amount)}


@dataclass(frozen=True)
class PayoutStatement:
    role: Role
    lines: Tuple[PayoutLine, ...]
    gross: Decimal
    tax_reserve: Decimal
    projected_net: Decimal

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "lines": [line.to_dict() for line in self.lines],
            "gross": str(self.gross),
            "tax_reserve": str(self.tax_reserve),
            "projected_net": str(self.projected_net),
        }


def _statement(role: Role, lines: Tuple[PayoutLine, ...], scale: PayScale) -> PayoutStatement:
    gross = _money(sum((line.amount for line in lines), Decimal("0")))
    reserve = _money(gross * scale.tax_reserve_rate)
    return PayoutStatement(
        role=role,
        lines=lines,
        gross=gross,
        tax_reserve=reserve,
        projected_net=gross - reserve,
    )


def driver_payout(ledger: ChargeLedger, scale: Optional[PayScale] = None) -> PayoutStatement:
    scale = scale or PayScale()
    commission = overage_revenue(ledger) * scale.driver_overage_commission_rate
    lines = (
        PayoutLine("Daily Base", _money(scale.driver_daily_base)),
        PayoutLine("Overage Commission", _money(commission)),
    )
    return _statement(Role.DRIVER, lines, scale)


def helper_payout(ledger: ChargeLedger, scale: Optional[PayScale] = None) -> PayoutStatement:
    """Logged window hours when present, else the scale's default shift."""
    scale = scale or PayScale()
    hours = ledger.logged_hours or scale.helper_default_hours
    lines = (PayoutLine("Hourly Wage", _money(scale.helper_hourly_rate * hours)),)
    lines += tuple(
        PayoutLine(label, _money(amount)) for label, amount in scale.helper_bonuses
    )
    return _statement(Role.HELPER, lines, scale)


PAYOUT_BUILDERS = {
    Role.DRIVER: driver_payout,
    Role.HELPER: helper_payout,
}


def payout_for(
    role: Role,
    ledger: ChargeLedger,
    scale: Optional[PayScale] = None,
) -> Optional[PayoutStatement]:
    """Statement for a crew role, None for roles that are not paid per job."""
    builder = PAYOUT_BUILDERS.get(role)
    if builder is None:
        return None
    return builder(ledger, scale)
