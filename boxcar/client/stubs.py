"""Statically defined client stubs for remote handler objects.

A stub binds an ``RpcClient`` to one remote object name and exposes that
object's methods as ordinary Python methods:

    class CalcStub(ClientStub):
        def add(self, a: int, b: int) -> int:
            return self._call("add", a, b)

    calc = CalcStub("http://127.0.0.1:8080/", "calc")
"""

from __future__ import annotations

from typing import Any

from boxcar.client.boxcar import BoxcarRequest, unpack_results
from boxcar.client.http_client import RpcClient


class ClientStub:
    """Base for stubs: holds a client and the remote object name."""

    def __init__(self, client: RpcClient | str, object_name: str, **client_options: Any):
        if isinstance(client, str):
            client = RpcClient(client, **client_options)
        self.client = client
        self.object_name = object_name

    def _call(self, method: str, *params: Any) -> Any:
        return self.client.call(f"{self.object_name}.{method}", *params)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.client.url!r}, {self.object_name!r})"


class SystemStub(ClientStub):
    """Introspection and multiCall on a remote server."""

    def __init__(self, client: RpcClient | str, **client_options: Any):
        super().__init__(client, "system", **client_options)

    def list_methods(self) -> list[str]:
        return self._call("listMethods")

    def method_signature(self, name: str) -> list[list[str]]:
        return self._call("methodSignature", name)

    def method_help(self, name: str) -> str:
        return self._call("methodHelp", name)

    def multi_call(self, boxcar: BoxcarRequest) -> list[Any]:
        """Send a boxcar; results are values or ``RpcFault`` instances, in order."""
        return unpack_results(self._call("multiCall", boxcar.to_request().params[0]))
