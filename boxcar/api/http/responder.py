"""One decode-dispatch-encode cycle over an accepted connection."""

from __future__ import annotations

import socket
from contextlib import ExitStack
from typing import Any

from loguru import logger

from boxcar.api.http.framing import DEFAULT_PROTOCOL, HttpRequest
from boxcar.api.rpc.dispatch import CallContext, CallState, Dispatcher
from boxcar.protocol.deserializer import RequestDeserializer
from boxcar.protocol.models import Response
from boxcar.protocol.serializer import serialize_bytes
from boxcar.utils.exceptions import ProtocolError

SERVER_NAME = "boxcar"


class Responder:
    """
    Handles a single connection.

    Reads one HTTP request, answers POSTs with an XML-RPC response and then
    closes the input stream, output stream and socket on every exit path.
    """

    def __init__(self, dispatcher: Dispatcher, conn: socket.socket, address: Any = None):
        self.dispatcher = dispatcher
        self.conn = conn
        self.address = address
        self.rfile = conn.makefile("rb")
        self.wfile = conn.makefile("wb")
        self.http_request: HttpRequest | None = None

    def run(self) -> None:
        try:
            self.http_request = HttpRequest.read(self.rfile)
            if self.http_request.method != "POST":
                logger.warning("Ignoring {} from {}: only POST is served", self.http_request, self.address)
                return
            self.respond(self.http_request)
        except ProtocolError as e:
            logger.warning("Dropping connection from {}: {}", self.address, e)
        except OSError as e:
            logger.warning("Connection error from {}: {}", self.address, e)
        except Exception as e:
            logger.exception("Responder failed for {}: {}", self.address, e)
        finally:
            self.close()

    def respond(self, http_request: HttpRequest) -> Response:
        context = CallContext()
        request = RequestDeserializer().deserialize(http_request.body)
        context.advance(CallState.DESERIALIZED)
        body = http_request.body
        if body.length is not None and body.length != body.consumed:
            logger.debug("Content-Length {} differs from the {} body bytes read", body.length, body.consumed)
        logger.debug("Call {} from {}", request.method_name, self.address)

        response = self.dispatcher.dispatch(request, context)
        self.write_response(response, http_request.protocol)
        return response

    def write_response(self, response: Response, protocol: str | None = None) -> None:
        body = serialize_bytes(response)
        head = (
            f"{protocol or DEFAULT_PROTOCOL} 200 OK\r\n"
            "Connection: close\r\n"
            f"Content-Length: {len(body)}\r\n"
            f"Server: {SERVER_NAME}\r\n"
            "Content-Type: text/xml\r\n"
            "\r\n"
        )
        self.wfile.write(head.encode("latin-1"))
        self.wfile.write(body)
        self.wfile.flush()

    def close(self) -> None:
        try:
            with ExitStack() as stack:
                stack.callback(self.conn.close)
                stack.callback(self.rfile.close)
                stack.callback(self.wfile.close)
        except OSError as e:
            logger.debug("Error closing connection from {}: {}", self.address, e)
