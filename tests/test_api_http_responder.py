"""Responder tests over a socket pair."""

from __future__ import annotations

import socket

import pytest

from boxcar.api.http.responder import Responder
from boxcar.api.rpc.dispatch import Dispatcher
from boxcar.api.rpc.registry import MethodRegistry
from boxcar.protocol.deserializer import loads_response
from boxcar.protocol.models import Request
from boxcar.protocol.serializer import serialize_bytes


class Echo:
    def say(self, text: str) -> str:
        return text


def make_dispatcher() -> Dispatcher:
    registry = MethodRegistry()
    registry.add("echo", Echo())
    return Dispatcher(registry)


def run_exchange(payload: bytes) -> tuple[bytes, socket.socket]:
    server_side, client_side = socket.socketpair()
    client_side.sendall(payload)
    responder = Responder(make_dispatcher(), server_side, "peer")
    responder.run()
    chunks = []
    while True:
        data = client_side.recv(65536)
        if not data:
            break
        chunks.append(data)
    client_side.close()
    return b"".join(chunks), server_side


def test_post_round_trip_and_close() -> None:
    body = serialize_bytes(Request("echo.say", ["hi"]))
    raw, server_side = run_exchange(
        b"POST / HTTP/1.1\r\nContent-Length: " + str(len(body)).encode() + b"\r\n\r\n" + body
    )
    head, _, payload = raw.partition(b"\r\n\r\n")
    assert head.startswith(b"HTTP/1.1 200 OK\r\n")
    assert loads_response(payload).value == "hi"
    assert server_side.fileno() == -1


def test_non_post_writes_nothing_and_closes() -> None:
    raw, server_side = run_exchange(b"GET / HTTP/1.0\r\n\r\n")
    assert raw == b""
    assert server_side.fileno() == -1


def test_protocol_error_is_logged(caplog_loguru) -> None:
    raw, server_side = run_exchange(b"BREW /pot HTCPCP/1.0\r\n\r\n")
    assert raw == b""
    assert server_side.fileno() == -1
    assert any("Unsupported HTTP method: BREW" in m for m in caplog_loguru)


@pytest.mark.parametrize(
    "length_header",
    [
        b"",
        b"Content-Length: 20\r\n",
        b"Content-Length: {long}\r\n",
    ],
    ids=["missing", "short", "long"],
)
def test_content_length_does_not_bound_the_body(length_header: bytes) -> None:
    body = serialize_bytes(Request("echo.say", ["hi"]))
    length_header = length_header.replace(b"{long}", str(len(body) + 50).encode())
    raw, server_side = run_exchange(b"POST / HTTP/1.0\r\n" + length_header + b"\r\n" + body)
    head, _, payload = raw.partition(b"\r\n\r\n")
    assert head.startswith(b"HTTP/1.0 200 OK\r\n")
    assert loads_response(payload).value == "hi"
    assert server_side.fileno() == -1
