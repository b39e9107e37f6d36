"""Utility functions for boxcar."""

from boxcar.utils.exceptions import (
    BoxcarError,
    ProtocolError,
    DeserializationError,
    SerializationError,
    RegistrationError,
    RpcFault,
    MethodError,
    ParamsError,
    ApplicationError,
    TransportError,
    ErrorCategory,
    FaultCode,
    classify_exception,
)

__all__ = [
    "BoxcarError",
    "ProtocolError",
    "DeserializationError",
    "SerializationError",
    "RegistrationError",
    "RpcFault",
    "MethodError",
    "ParamsError",
    "ApplicationError",
    "TransportError",
    "ErrorCategory",
    "FaultCode",
    "classify_exception",
]
