"""
Move Masters HTTP API - Public API
====================================
"""

from core.http_api.contracts import (
    ActorRoleHttpRequest,
    AdvanceHttpRequest,
    HttpApiErrorBody,
    HttpApiResponse,
    JobReadRequest,
    OutboundScheduleHttpRequest,
    PaymentClearHttpRequest,
    PaymentHttpRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    error_response,
    http_status_for,
    map_rejection_reason,
    rejection_response,
    success_response,
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

__all__ = [
    "JobReadRequest",
    "ActorRoleHttpRequest",
    "AdvanceHttpRequest",
    "PaymentHttpRequest",
    "PaymentClearHttpRequest",
    "OutboundScheduleHttpRequest",
    "HttpApiErrorBody",
    "HttpApiResponse",
    "HttpApiDependencies",
    "error_response",
    "http_status_for",
    "success_response",
    "map_rejection_reason",
    "rejection_response",
    "get_job",
    "get_ledger_totals",
    "get_payout",
    "post_advance",
    "post_origin_signature",
    "post_delivery_signature",
    "post_payment",
    "post_payment_clear",
    "post_warehouse_arrival",
    "post_warehouse_handshake",
    "post_outbound_schedule",
    "post_outbound_dispatch",
]
