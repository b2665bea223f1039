"""
Move Masters HTTP API - Error Mapping
=======================================
Stable transport mapping for job operation rejections.

Every rejection carries its policy_name and a message_key so clients
can localize the text; the HTTP status is derived from the code.
"""

from __future__ import annotations

from typing import Any, Optional

from core.commands.rejection import ReasonCode, RejectionReason
from core.http_api.contracts import HttpApiErrorBody, HttpApiResponse

# Transport-level failures raised before any job operation runs.
INVALID_REQUEST = "INVALID_REQUEST"
METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

DEFAULT_REJECTION_STATUS = 409

HTTP_STATUS_BY_CODE = {
    INVALID_REQUEST: 400,
    METHOD_NOT_ALLOWED: 405,
    ReasonCode.PERMISSION_DENIED: 403,
    ReasonCode.GROUP_NOT_FOUND: 404,
}


def http_status_for(payload: dict[str, Any]) -> int:
    """200 for success; otherwise by error code, 409 for state conflicts."""
    if payload["ok"]:
        return 200
    return HTTP_STATUS_BY_CODE.get(payload["error"]["code"], DEFAULT_REJECTION_STATUS)


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(
        ok=False,
        error=HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ),
    ).to_dict()


def success_response(
    data: Any,
    *,
    meta: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return HttpApiResponse(ok=True, data=data, meta=meta).to_dict()


def map_rejection_reason(reason: RejectionReason) -> HttpApiErrorBody:
    return HttpApiErrorBody(
        code=reason.code,
        message=reason.message,
        details={
            "policy_name": reason.policy_name,
            "message_key": f"rejection.{reason.code.lower()}",
        },
    )


def rejection_response(
    reason: RejectionReason,
    *,
    status: Optional[str] = None,
) -> dict[str, Any]:
    """Envelope for a refused operation; status is the job status it was refused at."""
    mapped = map_rejection_reason(reason)
    details = dict(mapped.details)
    if status is not None:
        details["status"] = status
    return error_response(
        code=mapped.code,
        message=mapped.message,
        details=details,
    )
