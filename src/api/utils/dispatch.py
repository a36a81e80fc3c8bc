"""
Handler dispatch.

Routes run their use case through `respond` (plain) or `dispatch_audited`
(mutating admin calls). The audited path hands the handler's outcome to the
AuditRecorder before the response is emitted.
"""

from typing import Any, Awaitable, Callable, Dict, Optional

from fastapi import status

from src.api.error import ClientError, ServerError
from src.api.guards import AdminContext
from src.app.services.audit_recorder import AuditAction, AuditRecorder, HandlerOutcome
from src.libs.result import Error, Result

ErrorStatusMap = Dict[str, int]


def envelope(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    return body


def error_envelope(error: Error, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"code": error.code, "message": error.message}
    if details:
        body.update(details)
    return {"success": False, "error": body}


def outcome_of(
    result: Result, error_status: ErrorStatusMap, success_status: int = status.HTTP_200_OK
) -> HandlerOutcome:
    if result.is_ok():
        return HandlerOutcome(success_status, result.value)
    return HandlerOutcome(
        error_status.get(result.error.code, status.HTTP_500_INTERNAL_SERVER_ERROR), None
    )


def raise_for_error(result: Result, error_status: ErrorStatusMap) -> None:
    if result.is_ok():
        return
    error = result.error
    status_code = error_status.get(error.code)
    if status_code is None:
        raise ServerError(error)
    raise ClientError(error, status_code=status_code)


def respond(
    result: Result,
    error_status: Optional[ErrorStatusMap] = None,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    raise_for_error(result, error_status or {})
    return envelope(result.value, message)


async def dispatch_audited(
    recorder: AuditRecorder,
    action: AuditAction,
    admin: AdminContext,
    handler: Callable[[], Awaitable[Result]],
    error_status: Optional[ErrorStatusMap] = None,
    success_status: int = status.HTTP_200_OK,
    message: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Run the handler, then the audit callback, then build the response.

    The recorder only writes for 2xx outcomes and never raises, so the
    handler's result decides the response alone.
    """
    error_status = error_status or {}
    result = await handler()
    await recorder.record(action, admin.audit_input(), outcome_of(result, error_status, success_status))
    return respond(result, error_status, message)
