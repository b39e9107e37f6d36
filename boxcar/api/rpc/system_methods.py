"""The ``system`` pseudo-handler: introspection and multiCall."""

from __future__ import annotations

from typing import Any

from loguru import logger

from boxcar.api.rpc.dispatch import Dispatcher
from boxcar.api.rpc.error_boundary import fault_struct
from boxcar.api.rpc.registry import MethodRegistry, exposed
from boxcar.protocol import tokens
from boxcar.protocol.models import Request, Response
from boxcar.utils.exceptions import ParamsError

NO_HELP = "No help available for: {}"


@exposed
class SystemMethods:
    """Registered as ``system`` by every server."""

    def __init__(self, registry: MethodRegistry, dispatcher: Dispatcher):
        self._registry = registry
        self._dispatcher = dispatcher

    @exposed
    def listMethods(self) -> list:
        """Return every callable ``object.method`` name on this server."""
        names: list[str] = []
        for entry in self._registry.entries():
            names.extend(f"{entry.name}.{method}" for method in entry.exposed_methods())
        return names

    @exposed
    def methodSignature(self, name: str) -> list:
        """Return ``[[return type, param types...]]``, or an empty array if unknown."""
        request = Request(name)
        entry = self._registry.get(request.object_name)
        if entry is None or not entry.is_exposed(request.method):
            return []
        spec = entry.methods.get(request.method)
        if spec is None or spec.signature is None:
            return []
        return [spec.wire_signature()]

    @exposed
    def methodHelp(self, name: str) -> str:
        """Return the help text registered for a fully qualified method name."""
        return self._registry.help_for(name) or NO_HELP.format(name)

    @exposed
    def multiCall(self, calls: list) -> list:
        """
        Run a batch of calls in order.

        Each element is a struct ``{methodName, params}``. A successful call
        contributes ``[result]``; a failed one contributes its fault struct.
        A failure never stops the remaining calls.
        """
        results: list[Any] = []
        for index, call in enumerate(calls):
            try:
                request = _nested_request(call)
            except ParamsError as e:
                logger.info("multiCall entry {} rejected: {}", index, e.fault_string)
                results.append(e.to_fault())
                continue
            response = self._dispatcher.dispatch(request)
            results.append(_envelope(response))
        return results


def _nested_request(call: Any) -> Request:
    if not isinstance(call, dict):
        raise ParamsError("multiCall entries must be structs")
    name = call.get(tokens.METHOD_NAME)
    if not isinstance(name, str) or not name:
        raise ParamsError("multiCall entry without methodName")
    params = call.get(tokens.PARAMS, [])
    if not isinstance(params, list):
        raise ParamsError(f"multiCall params for {name} must be an array")
    return Request(name, params)


def _envelope(response: Response) -> Any:
    if response.is_fault:
        return fault_struct(response)
    return [response.value]
