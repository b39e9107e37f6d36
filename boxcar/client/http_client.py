"""Outbound XML-RPC calls over HTTP."""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from boxcar.client.boxcar import BoxcarRequest, unpack_results
from boxcar.protocol.deserializer import ResponseDeserializer
from boxcar.protocol.models import Request, Response
from boxcar.protocol.serializer import serialize_bytes
from boxcar.utils.exceptions import RpcFault, TransportError

USER_AGENT = "boxcar"


class RpcClient:
    """
    Sends Requests to one server URL.

    Args:
        url: Server endpoint, e.g. ``http://127.0.0.1:8080/RPC2``.
        timeout: Seconds to wait; ``None`` or ``0`` blocks indefinitely.
        proxy: Optional forward proxy URL.
    """

    def __init__(self, url: str, *, timeout: float | None = None, proxy: str | None = None):
        self.url = url
        self.timeout = timeout or None
        self.proxy = proxy or None

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, proxy=self.proxy)

    def send(self, request: Request) -> Response:
        """POST a request and return the decoded Response (value or fault)."""
        body = serialize_bytes(request)
        headers = {"Content-Type": "text/xml", "User-Agent": USER_AGENT}
        try:
            with self._client() as client:
                resp = client.post(self.url, content=body, headers=headers)
        except httpx.TimeoutException as exc:
            raise TransportError(f"timed out calling {request.method_name} at {self.url}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"could not reach {self.url}: {exc}") from exc

        if resp.status_code != 200:
            raise TransportError(f"HTTP {resp.status_code} from {self.url}")
        if not resp.content:
            raise TransportError(f"empty response from {self.url}")
        response = ResponseDeserializer().deserialize(resp.content)
        if response.is_fault:
            logger.debug("{} returned fault {}: {}", request.method_name, response.fault_code, response.fault_string)
        return response

    def invoke(self, request: Request) -> Any:
        """Like ``send`` but return the value, raising ``RpcFault`` on a fault."""
        response = self.send(request)
        if response.is_fault:
            raise RpcFault(response.fault_code, response.fault_string)
        return response.value

    def call(self, method_name: str, *params: Any) -> Any:
        return self.invoke(Request(method_name, list(params)))

    def invoke_boxcar(self, boxcar: BoxcarRequest) -> list[Any]:
        """Send a boxcar and return its results unpacked in call order."""
        return unpack_results(self.invoke(boxcar.to_request()))

    def __repr__(self) -> str:
        return f"RpcClient({self.url!r})"
