"""Common RPC error-boundary helpers for server dispatch."""

from __future__ import annotations

from typing import Any, Callable

from boxcar.protocol.models import Response
from boxcar.utils.exceptions import FaultCode, RpcFault, classify_exception


def rpc_fault_result(
    *,
    method: str,
    exc: RpcFault,
    log_info: Callable[..., None],
) -> Response:
    """Map an RpcFault (method, params, application) to a fault response."""
    log_info("RPC method {} faulted with {}: {}", method, exc.fault_code, exc.fault_string)
    return Response.fault(exc.fault_code, exc.fault_string)


def unhandled_exception_result(
    *,
    method: str,
    exc: Exception,
    log_exception: Callable[..., None],
) -> Response:
    """Map unexpected exceptions to an application-error fault."""
    _, category = classify_exception(exc)
    log_exception("RPC method {} failed with [{}]: {}", method, category.value, exc)
    return Response.fault(FaultCode.APPLICATION_ERROR, f"{FaultCode.APPLICATION_ERROR_MSG}: {exc}")


def fault_for_exception(
    *,
    method: str,
    exc: Exception,
    log_info: Callable[..., None],
    log_exception: Callable[..., None],
) -> Response:
    """Pick the right mapping for any exception raised while dispatching."""
    if isinstance(exc, RpcFault):
        return rpc_fault_result(method=method, exc=exc, log_info=log_info)
    return unhandled_exception_result(method=method, exc=exc, log_exception=log_exception)


def fault_struct(response: Response) -> dict[str, Any]:
    """The two-member fault struct carried by a fault response."""
    return {"faultCode": response.fault_code, "faultString": response.fault_string}
