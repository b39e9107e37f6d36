"""Pytest hooks and fixtures."""

from __future__ import annotations

import pytest
from loguru import logger

from boxcar.api.server import RpcServer


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line(
        "markers",
        "network: opens real loopback sockets",
    )


class Echo:
    """Echo handler used across tests."""

    def say(self, text: str) -> str:
        """Return the text unchanged."""
        return text


@pytest.fixture
def caplog_loguru():
    """Collect loguru messages emitted during a test."""
    messages: list[str] = []
    sink_id = logger.add(lambda m: messages.append(str(m)), level="DEBUG", format="{level} {message}")
    yield messages
    logger.remove(sink_id)


@pytest.fixture
def server():
    """A started server on an ephemeral loopback port with ``echo`` registered."""
    srv = RpcServer(0, "127.0.0.1")
    srv.add("echo", Echo())
    srv.start()
    yield srv
    srv.close()


@pytest.fixture
def server_url(server) -> str:
    host, port = server.address
    return f"http://{host}:{port}/RPC2"
