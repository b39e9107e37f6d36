"""Network helpers for CLI commands."""

from __future__ import annotations

import errno
import socket


def is_port_in_use(host: str, port: int) -> bool:
    """
    Return True if another socket holds ``host:port``.

    The probe binds the way ``RpcServer.start`` does (``socket.create_server``,
    address reuse on POSIX), so a port left in TIME_WAIT by a previous server
    is not reported as busy. Port 0 always resolves to a free port. Other bind
    errors, such as an address that is not local, propagate.
    """
    if port == 0:
        return False
    try:
        probe = socket.create_server((host, port))
    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            return True
        raise
    probe.close()
    return False
