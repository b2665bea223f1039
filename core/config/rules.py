"""
Move Masters Core Config — Admin-Configurable Tariff and Pay Rules
=====================================================================
Doctrine: No pay scale or billing policy hardcoded in engine logic.
Payout rates and tariff policy switches come from admin-configured
data, not from source code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Protocol, Tuple


def _decimal(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


# ══════════════════════════════════════════════════════════════
# PAY SCALE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PayScale:
    """
    Staff pay scale used for payout statements.

    driver_overage_commission_rate and tax_reserve_rate are fractions
    (0.12 means 12%). helper_bonuses is a tuple of (label, amount).
    """

    driver_daily_base: Decimal = Decimal("250.00")
    driver_overage_commission_rate: Decimal = Decimal("0.12")
    helper_hourly_rate: Decimal = Decimal("22.50")
    helper_default_hours: Decimal = Decimal("6.75")
    helper_bonuses: Tuple[Tuple[str, Decimal], ...] = (
        ("Field Tips", Decimal("40.00")),
        ("On-Time Bonus", Decimal("15.00")),
    )
    tax_reserve_rate: Decimal = Decimal("0.25")

    def __post_init__(self) -> None:
        for name in (
            "driver_daily_base",
            "driver_overage_commission_rate",
            "helper_hourly_rate",
            "helper_default_hours",
            "tax_reserve_rate",
        ):
            value = _decimal(getattr(self, name))
            if value < 0:
                raise ValueError(f"{name} must be non-negative, got {value}.")
            object.__setattr__(self, name, value)

        for name in ("driver_overage_commission_rate", "tax_reserve_rate"):
            if getattr(self, name) > 1:
                raise ValueError(
                    f"{name} must be between 0 and 1, got {getattr(self, name)}."
                )

        bonuses = []
        for label, amount in self.helper_bonuses:
            if not label or not isinstance(label, str):
                raise ValueError("bonus label must be a non-empty string.")
            amount = _decimal(amount)
            if amount < 0:
                raise ValueError(f"bonus '{label}' must be non-negative.")
            bonuses.append((label, amount))
        object.__setattr__(self, "helper_bonuses", tuple(bonuses))

    @classmethod
    def from_dict(cls, data: dict) -> PayScale:
        kwargs = dict(data)
        if "helper_bonuses" in kwargs:
            bonuses = kwargs["helper_bonuses"]
            if isinstance(bonuses, dict):
                bonuses = bonuses.items()
            kwargs["helper_bonuses"] = tuple(
                (label, amount) for label, amount in bonuses
            )
        return cls(**kwargs)


# ══════════════════════════════════════════════════════════════
# TARIFF POLICY
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TariffPolicy:
    """
    Billing policy switches.

    bill_hourly_by_duration:
        False — hourly labor = men x trucks x rate (flat crew rate).
        True  — additionally multiplied by logged hours.
    require_zero_balance_for_clearance:
        A payment-cleared flag may only be set once balance due <= 0.
    """

    bill_hourly_by_duration: bool = False
    require_zero_balance_for_clearance: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.bill_hourly_by_duration, bool):
            raise ValueError("bill_hourly_by_duration must be a bool.")
        if not isinstance(self.require_zero_balance_for_clearance, bool):
            raise ValueError("require_zero_balance_for_clearance must be a bool.")

    @classmethod
    def from_dict(cls, data: dict) -> TariffPolicy:
        return cls(**data)


# ══════════════════════════════════════════════════════════════
# CONFIG STORE PROTOCOL
# ══════════════════════════════════════════════════════════════

class ConfigStore(Protocol):
    """
    Protocol for admin-configured rule storage.

    Implementations may back this with a database, file, or in-memory store.
    """

    def get_pay_scale(self) -> PayScale:
        ...  # pragma: no cover

    def get_tariff_policy(self) -> TariffPolicy:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IN-MEMORY CONFIG STORE (for testing / bootstrap)
# ══════════════════════════════════════════════════════════════

@dataclass
class InMemoryConfigStore:
    """Simple in-memory config store for testing and bootstrap."""

    pay_scale: PayScale = field(default_factory=PayScale)
    tariff_policy: TariffPolicy = field(default_factory=TariffPolicy)

    def get_pay_scale(self) -> PayScale:
        return self.pay_scale

    def get_tariff_policy(self) -> TariffPolicy:
        return self.tariff_policy

    def set_pay_scale(self, pay_scale: PayScale) -> None:
        self.pay_scale = pay_scale

    def set_tariff_policy(self, policy: TariffPolicy) -> None:
        self.tariff_policy = policy

    @classmethod
    def from_settings(cls, settings: Optional[dict]) -> InMemoryConfigStore:
        """Build from a settings mapping with PAY_SCALE / TARIFF_POLICY keys."""
        settings = settings or {}
        return cls(
            pay_scale=PayScale.from_dict(settings.get("PAY_SCALE", {})),
            tariff_policy=TariffPolicy.from_dict(settings.get("TARIFF_POLICY", {})),
        )
