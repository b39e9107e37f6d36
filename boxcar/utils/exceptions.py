"""
Exception hierarchy and error classification for boxcar.

Provides:
- Custom exception classes carrying an error category
- Wire faults (``RpcFault`` and subclasses) with standard fault codes
- Mapping of arbitrary exceptions onto fault codes
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Error categories for classification."""
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    METHOD = "method"
    PARAMS = "params"
    APPLICATION = "application"
    REGISTRATION = "registration"


class FaultCode:
    """Numeric fault codes and their standard messages."""

    PARSE_ERROR = -32700
    PARSE_ERROR_MSG = "Parse Error, not well formed"

    SERVER_ERROR_METHOD = -32601
    SERVER_ERROR_METHOD_MSG = "Server Error, requested method not found"

    SERVER_ERROR_PARAMS = -32602
    SERVER_ERROR_PARAMS_MSG = "Server Error, invalid method parameters"

    APPLICATION_ERROR = -32500
    APPLICATION_ERROR_MSG = "Application Error"

    TRANSPORT_ERROR = -32300
    TRANSPORT_ERROR_MSG = "Transport Layer Error"


class BoxcarError(Exception):
    """Base exception for all boxcar errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.APPLICATION,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }


class ProtocolError(BoxcarError):
    """Malformed HTTP framing or unsupported HTTP method."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, category=ErrorCategory.PROTOCOL, details=details)


class DeserializationError(ProtocolError):
    """XML that does not describe a valid call or response."""


class SerializationError(BoxcarError):
    """A value that cannot be rendered on the wire."""

    def __init__(self, message: str):
        super().__init__(message, category=ErrorCategory.PROTOCOL)


class RegistrationError(BoxcarError):
    """Invalid or duplicate handler registration."""

    def __init__(self, message: str, name: str | None = None):
        details = {"name": name} if name is not None else {}
        super().__init__(message, category=ErrorCategory.REGISTRATION, details=details)


class RpcFault(BoxcarError):
    """An error that travels to the remote caller as a fault struct."""

    def __init__(
        self,
        fault_code: int,
        fault_string: str,
        category: ErrorCategory = ErrorCategory.APPLICATION,
    ):
        super().__init__(fault_string, category=category, details={"fault_code": fault_code})
        self.fault_code = fault_code
        self.fault_string = fault_string

    def to_fault(self) -> dict[str, Any]:
        return {"faultCode": self.fault_code, "faultString": self.fault_string}

    def __str__(self) -> str:
        return f"Code: {self.fault_code} Message: {self.fault_string}"


class MethodError(RpcFault):
    """Unknown object or method, or a method that is not exposed."""

    def __init__(self, detail: str):
        super().__init__(
            FaultCode.SERVER_ERROR_METHOD,
            f"{FaultCode.SERVER_ERROR_METHOD_MSG}: {detail}",
            category=ErrorCategory.METHOD,
        )


class ParamsError(RpcFault):
    """Parameter count or type mismatch."""

    def __init__(self, detail: str):
        super().__init__(
            FaultCode.SERVER_ERROR_PARAMS,
            f"{FaultCode.SERVER_ERROR_PARAMS_MSG}: {detail}",
            category=ErrorCategory.PARAMS,
        )


class ApplicationError(RpcFault):
    """Failure raised inside a handler, or a handler that returned nothing."""

    def __init__(self, detail: str):
        super().__init__(
            FaultCode.APPLICATION_ERROR,
            f"{FaultCode.APPLICATION_ERROR_MSG}: {detail}",
            category=ErrorCategory.APPLICATION,
        )


class TransportError(RpcFault):
    """Outbound call could not reach the server or got a non-XML-RPC answer."""

    def __init__(self, detail: str):
        super().__init__(
            FaultCode.TRANSPORT_ERROR,
            f"{FaultCode.TRANSPORT_ERROR_MSG}: {detail}",
            category=ErrorCategory.TRANSPORT,
        )


def classify_exception(exc: BaseException) -> tuple[int, ErrorCategory]:
    """
    Classify an exception and return (fault_code, category).

    Returns:
        Tuple of (fault_code, category)
    """
    if isinstance(exc, RpcFault):
        return exc.fault_code, exc.category

    if isinstance(exc, DeserializationError):
        return FaultCode.PARSE_ERROR, ErrorCategory.PROTOCOL

    if isinstance(exc, BoxcarError):
        return FaultCode.APPLICATION_ERROR, exc.category

    if isinstance(exc, (ConnectionError, TimeoutError)):
        return FaultCode.TRANSPORT_ERROR, ErrorCategory.TRANSPORT

    return FaultCode.APPLICATION_ERROR, ErrorCategory.APPLICATION
