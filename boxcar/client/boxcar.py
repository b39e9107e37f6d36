"""Boxcarred requests: several calls sent as one ``system.multiCall``."""

from __future__ import annotations

from typing import Any

from boxcar.protocol import tokens
from boxcar.protocol.models import Request
from boxcar.utils.exceptions import RpcFault

MULTICALL = "system.multiCall"


class BoxcarRequest:
    """Collects Requests and renders them as a single multiCall request."""

    def __init__(self, requests: list[Request] | None = None):
        self.requests: list[Request] = list(requests or [])

    def add(self, method_name: str | Request, *params: Any) -> "BoxcarRequest":
        if isinstance(method_name, Request):
            self.requests.append(method_name)
        else:
            self.requests.append(Request(method_name, list(params)))
        return self

    def to_request(self) -> Request:
        calls = [
            {tokens.METHOD_NAME: r.method_name, tokens.PARAMS: list(r.params)}
            for r in self.requests
        ]
        return Request(MULTICALL, [calls])

    def __len__(self) -> int:
        return len(self.requests)


def unpack_results(results: list[Any]) -> list[Any]:
    """
    Turn multiCall output into plain values and ``RpcFault`` instances.

    ``[value]`` becomes ``value``; a fault struct becomes an ``RpcFault``.
    """
    unpacked: list[Any] = []
    for item in results:
        if isinstance(item, dict) and tokens.FAULT_CODE in item:
            unpacked.append(RpcFault(item[tokens.FAULT_CODE], item.get(tokens.FAULT_STRING, "")))
        elif isinstance(item, list) and len(item) == 1:
            unpacked.append(item[0])
        else:
            unpacked.append(item)
    return unpacked
