"""XML-RPC listener.

Owns the listening socket and the accept loop; every accepted connection is
handed to a ``Responder`` through the configured dispatch strategy.

Usage:
    server = RpcServer(8080)
    server.add("echo", Echo())
    server.start()
    ...
    server.stop()
"""

from __future__ import annotations

import socket
import threading
from typing import Any, Iterable, Iterator

from loguru import logger

from boxcar.api.http.responder import Responder
from boxcar.api.rpc.dispatch import Dispatcher
from boxcar.api.rpc.registry import HandlerEntry, MethodRegistry
from boxcar.api.rpc.system_methods import SystemMethods
from boxcar.api.strategies import DispatchStrategy, ThreadPerConnection

DEFAULT_HOST = "0.0.0.0"
ACCEPT_POLL_SECONDS = 0.5
BACKLOG = 64


class RpcServer:
    """
    Threaded XML-RPC server.

    Handlers are registered by name; ``system`` is always present and
    provides introspection and multiCall. The listener can be stopped and
    started again; stopping does not wait for in-flight connections.
    """

    def __init__(
        self,
        port: int,
        host: str = DEFAULT_HOST,
        *,
        strategy: DispatchStrategy | None = None,
    ):
        self.host = host
        self.port = port
        self.strategy = strategy or ThreadPerConnection()
        self.registry = MethodRegistry()
        self.dispatcher = Dispatcher(self.registry)
        self.registry.add("system", SystemMethods(self.registry, self.dispatcher))
        self._socket: socket.socket | None = None
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()
        self._lock = threading.Lock()

    def add(self, name: str, handler: Any, *, expose: Iterable[str] | None = None) -> HandlerEntry:
        """Register a handler; see ``MethodRegistry.add``."""
        return self.registry.add(name, handler, expose=expose)

    def remove(self, name: str) -> bool:
        return self.registry.remove(name)

    def __getitem__(self, name: str) -> Any:
        return self.registry[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.registry)

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def address(self) -> tuple[str, int] | None:
        """Bound (host, port); the real port when constructed with port 0."""
        if self._socket is None:
            return None
        host, port = self._socket.getsockname()[:2]
        return host, port

    def start(self) -> None:
        """Bind the listener and run the accept loop on a background thread."""
        with self._lock:
            if self.running:
                return
            try:
                sock = socket.create_server((self.host, self.port), backlog=BACKLOG)
            except OSError as e:
                logger.error("Cannot bind {}:{}: {}", self.host, self.port, e)
                raise
            sock.settimeout(ACCEPT_POLL_SECONDS)
            self._socket = sock
            self._stop.clear()
            self._thread = threading.Thread(
                target=self._accept_loop,
                args=(sock,),
                daemon=True,
                name="boxcar-accept",
            )
            self._thread.start()
        host, port = self.address
        logger.info("boxcar listening on {}:{}", host, port)

    def stop(self) -> None:
        """Unbind the listener. In-flight responders run to completion."""
        with self._lock:
            self._stop.set()
            thread, self._thread = self._thread, None
            sock, self._socket = self._socket, None
        if thread is not None:
            thread.join(timeout=5.0)
        if sock is not None:
            sock.close()
            logger.info("boxcar listener on port {} stopped", self.port)

    def close(self) -> None:
        """Stop listening and shut the dispatch strategy down."""
        self.stop()
        self.strategy.shutdown(wait=True)

    def serve_forever(self) -> None:
        """Start if needed and block until ``stop()`` is called from elsewhere."""
        self.start()
        thread = self._thread
        while thread is not None and thread.is_alive():
            thread.join(timeout=ACCEPT_POLL_SECONDS)

    def __enter__(self) -> "RpcServer":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _accept_loop(self, sock: socket.socket) -> None:
        while not self._stop.is_set():
            try:
                conn, address = sock.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if self._stop.is_set():
                    break
                logger.warning("Accept failed: {}", e)
                self._stop.wait(0.05)
                continue
            conn.settimeout(None)
            try:
                self.strategy.submit(Responder(self.dispatcher, conn, address).run)
            except Exception as e:
                logger.exception("Could not hand off connection from {}: {}", address, e)
                conn.close()
