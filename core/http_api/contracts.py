"""
Move Masters HTTP API - Contracts
===================================
Framework-agnostic request/response DTOs for job endpoints.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from core.permissions import Role
from engines.relocation.billing import PAYMENT_LEGS
from engines.relocation.models import RoutingDecision


@dataclass(frozen=True)
class JobReadRequest:
    actor_role: Optional[Role] = None

    def __post_init__(self):
        if self.actor_role is not None and not isinstance(self.actor_role, Role):
            raise ValueError("actor_role must be Role or None.")


@dataclass(frozen=True)
class ActorRoleHttpRequest:
    actor_role: Role

    def __post_init__(self):
        if not isinstance(self.actor_role, Role):
            raise ValueError("actor_role must be Role.")


@dataclass(frozen=True)
class AdvanceHttpRequest:
    actor_role: Role
    routing: Optional[RoutingDecision] = None

    def __post_init__(self):
        if not isinstance(self.actor_role, Role):
            raise ValueError("actor_role must be Role.")
        if self.routing is not None and not isinstance(self.routing, RoutingDecision):
            raise ValueError("routing must be RoutingDecision or None.")


@dataclass(frozen=True)
class PaymentHttpRequest:
    amount: Decimal

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            raise ValueError("amount must be Decimal.")


@dataclass(frozen=True)
class PaymentClearHttpRequest:
    actor_role: Role
    leg: str = "delivery"

    def __post_init__(self):
        if not isinstance(self.actor_role, Role):
            raise ValueError("actor_role must be Role.")
        if self.leg not in PAYMENT_LEGS:
            raise ValueError(f"leg must be one of {sorted(PAYMENT_LEGS)}.")


@dataclass(frozen=True)
class OutboundScheduleHttpRequest:
    scheduled_date: date

    def __post_init__(self):
        if isinstance(self.scheduled_date, datetime) or not isinstance(
            self.scheduled_date, date
        ):
            raise ValueError("scheduled_date must be date.")


@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResponse:
    ok: bool
    data: Any = None
    error: Optional[HttpApiErrorBody] = None
    meta: Optional[dict[str, Any]] = None

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            payload = {"ok": True, "data": self.data}
        else:
            if self.error is None:
                raise ValueError("error must be set when ok is False.")
            payload = {"ok": False, "error": self.error.to_dict()}
        if self.meta is not None:
            payload["meta"] = dict(self.meta)
        return payload
