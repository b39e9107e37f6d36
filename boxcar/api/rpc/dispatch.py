"""Resolve ``object.method`` names and invoke handler methods.

Per-call lifecycle:

    RECEIVED -> DESERIALIZED -> RESOLVED -> INVOKED -> SUCCEEDED | FAULTED

Deserialization and resolution failures jump straight to FAULTED.
"""

from __future__ import annotations

import asyncio
import inspect
import types
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Sequence, Union, get_args, get_origin

from loguru import logger

from boxcar.api.rpc.error_boundary import fault_for_exception
from boxcar.api.rpc.registry import HandlerEntry, MethodRegistry, MethodSpec
from boxcar.protocol.models import Request, Response
from boxcar.protocol.values import Value, wire_type_of
from boxcar.utils.exceptions import ApplicationError, MethodError, ParamsError, RpcFault


class CallState(Enum):
    RECEIVED = "received"
    DESERIALIZED = "deserialized"
    RESOLVED = "resolved"
    INVOKED = "invoked"
    SUCCEEDED = "succeeded"
    FAULTED = "faulted"


@dataclass(slots=True)
class CallContext:
    """Tracks where a single call is in its lifecycle."""

    state: CallState = CallState.RECEIVED
    method_name: str | None = None
    history: list[CallState] = field(default_factory=lambda: [CallState.RECEIVED])

    def advance(self, state: CallState) -> None:
        self.state = state
        self.history.append(state)
        logger.trace("Call {} -> {}", self.method_name or "?", state.value)


def accepts(annotation: Any, value: Any) -> bool:
    """Whether a decoded wire value may be bound to a parameter annotation."""
    if annotation in (inspect.Parameter.empty, Any, object):
        return True
    if annotation is None or annotation is type(None):
        return value is None
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return any(accepts(arg, value) for arg in get_args(annotation))
    if origin is not None:
        annotation = origin
    if not isinstance(annotation, type):
        return True
    if annotation is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if annotation is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if annotation is bytes:
        return isinstance(value, (bytes, bytearray))
    return isinstance(value, annotation)


def describe_call(method_name: str, params: Sequence[Value]) -> str:
    kinds = " ".join(wire_type_of(p) or "nil" for p in params)
    return f"{method_name}( {kinds} )" if kinds else f"{method_name}( )"


def bind_params(spec: MethodSpec, params: Sequence[Value]) -> list[Value]:
    """Check positional params against a method's signature; return call args."""
    args = list(params)
    if spec.signature is None:
        return args
    try:
        bound = spec.signature.bind(*args)
    except TypeError as e:
        logger.info("{}: {}", ParamsError.__name__, e)
        raise ParamsError(f"Argument count mismatch invoking {spec.name}") from e
    for name, value in bound.arguments.items():
        annotation = spec.param_types.get(name, inspect.Parameter.empty)
        kind = spec.signature.parameters[name].kind
        values = value if kind is inspect.Parameter.VAR_POSITIONAL else (value,)
        if not all(accepts(annotation, item) for item in values):
            raise ParamsError(f"Argument type mismatch invoking {describe_call(spec.name, args)}")
    return args


class Dispatcher:
    """Route requests to registered handlers and turn outcomes into responses."""

    def __init__(self, registry: MethodRegistry):
        self.registry = registry

    def invoke(self, request: Request, context: CallContext | None = None) -> Value:
        """Resolve and invoke; raise ``RpcFault`` subclasses on failure."""
        entry = self.registry.resolve(request.object_name)
        if context is not None:
            context.advance(CallState.RESOLVED)
        return self.invoke_method(entry, request.method, request.params, context)

    def invoke_method(
        self,
        entry: HandlerEntry,
        method_name: str,
        params: Sequence[Value],
        context: CallContext | None = None,
    ) -> Value:
        spec = entry.methods.get(method_name)
        if spec is None:
            raise MethodError(f"Method {method_name} not found on {entry.name}")
        if not entry.is_exposed(method_name):
            raise MethodError(f"Method {method_name} is not exposed.")
        args = bind_params(spec, params)

        if context is not None:
            context.advance(CallState.INVOKED)
        try:
            result = spec.func(*args)
            if inspect.iscoroutine(result):
                result = asyncio.run(result)
        except RpcFault:
            raise
        except Exception as e:
            raise ApplicationError(f"Invoked method {method_name}: {e}") from e
        if result is None:
            raise ApplicationError(f"Method {method_name} returned no value.")
        return result

    def dispatch(self, request: Request, context: CallContext | None = None) -> Response:
        """Invoke a request and always return a Response (value or fault)."""
        context = context or CallContext()
        context.method_name = request.method_name
        try:
            value = self.invoke(request, context)
        except Exception as exc:
            context.advance(CallState.FAULTED)
            return fault_for_exception(
                method=request.method_name,
                exc=exc,
                log_info=logger.info,
                log_exception=logger.exception,
            )
        context.advance(CallState.SUCCEEDED)
        return Response(value)
