"""
Move Masters Django Adapter Views
===================================
Pass-through HTTP views over core/http_api handlers.

Status codes come from core.http_api.errors.http_status_for: 200
accepted, 403 role denied, 409 state conflict, 400 malformed request.
"""

from __future__ import annotations

import json
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies
from core.http_api.contracts import (
    ActorRoleHttpRequest,
    AdvanceHttpRequest,
    JobReadRequest,
    OutboundScheduleHttpRequest,
    PaymentClearHttpRequest,
    PaymentHttpRequest,
)
from core.http_api.errors import (
    INVALID_REQUEST,
    METHOD_NOT_ALLOWED,
    error_response,
    http_status_for,
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
from engines.relocation.models import RoutingDecision

logger = logging.getLogger("movemasters.http")


def _json_error(code: str, message: str) -> JsonResponse:
    payload = error_response(code=code, message=message, details={})
    return JsonResponse(payload, status=http_status_for(payload))


def _json_payload(payload: dict[str, Any]) -> JsonResponse:
    return JsonResponse(payload, status=http_status_for(payload))


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _parse_role(value: Any) -> Role:
    if value is None or value == "":
        raise ValueError("actor_role is required.")
    return Role.parse(value)


def _parse_amount(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValueError("amount must be a number.")
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError("amount must be a number.") from exc


def _parse_date(value: Any) -> date:
    if not isinstance(value, str):
        raise ValueError("date must be an ISO date string (YYYY-MM-DD).")
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError("date must be an ISO date string (YYYY-MM-DD).") from exc


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        METHOD_NOT_ALLOWED,
        "Method not allowed for this endpoint.",
    )


def _dispatch_write(write_handler, request_contract_factory, request: HttpRequest):
    if request.method != "POST":
        return _method_not_allowed()
    try:
        body = _parse_json_body(request)
        contract = request_contract_factory(body)
    except (ValueError, KeyError) as exc:
        logger.info(f"Rejected malformed request to {request.path}: {exc}")
        return _json_error(INVALID_REQUEST, str(exc))

    return _json_payload(write_handler(contract, build_dependencies()))


# ── Contract factories ────────────────────────────────────────

def _actor_role_contract_factory(body):
    return ActorRoleHttpRequest(actor_role=_parse_role(body.get("actor_role")))


def _advance_contract_factory(body):
    routing = body.get("routing")
    return AdvanceHttpRequest(
        actor_role=_parse_role(body.get("actor_role")),
        routing=None if routing in (None, "") else RoutingDecision.parse(routing),
    )


def _payment_contract_factory(body):
    return PaymentHttpRequest(amount=_parse_amount(body.get("amount")))


def _payment_clear_contract_factory(body):
    return PaymentClearHttpRequest(
        actor_role=_parse_role(body.get("actor_role")),
        leg=body.get("leg", "delivery"),
    )


def _outbound_schedule_contract_factory(body):
    return OutboundScheduleHttpRequest(scheduled_date=_parse_date(body.get("date")))


# ── Reads ─────────────────────────────────────────────────────

@csrf_exempt
def job_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    raw_role = request.GET.get("actor_role")
    try:
        contract = JobReadRequest(
            actor_role=None if not raw_role else Role.parse(raw_role)
        )
    except ValueError as exc:
        return _json_error(INVALID_REQUEST, str(exc))
    return _json_payload(get_job(contract, build_dependencies()))


@csrf_exempt
def ledger_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    return _json_payload(get_ledger_totals(build_dependencies()))


@csrf_exempt
def payout_view(request: HttpRequest) -> JsonResponse:
    if request.method != "GET":
        return _method_not_allowed()
    try:
        contract = ActorRoleHttpRequest(
            actor_role=_parse_role(request.GET.get("actor_role"))
        )
    except ValueError as exc:
        return _json_error(INVALID_REQUEST, str(exc))
    return _json_payload(get_payout(contract, build_dependencies()))


# ── Writes ────────────────────────────────────────────────────

@csrf_exempt
def advance_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(post_advance, _advance_contract_factory, request)


@csrf_exempt
def origin_signature_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(post_origin_signature, _actor_role_contract_factory, request)


@csrf_exempt
def delivery_signature_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        post_delivery_signature, _actor_role_contract_factory, request,
    )


@csrf_exempt
def payment_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(post_payment, _payment_contract_factory, request)


@csrf_exempt
def payment_clear_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        post_payment_clear, _payment_clear_contract_factory, request,
    )


@csrf_exempt
def warehouse_arrival_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        post_warehouse_arrival, _actor_role_contract_factory, request,
    )


@csrf_exempt
def warehouse_handshake_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        post_warehouse_handshake, _actor_role_contract_factory, request,
    )


@csrf_exempt
def outbound_schedule_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        post_outbound_schedule, _outbound_schedule_contract_factory, request,
    )


@csrf_exempt
def outbound_dispatch_view(request: HttpRequest) -> JsonResponse:
    return _dispatch_write(
        post_outbound_dispatch, _actor_role_contract_factory, request,
    )
