"""Tests for statically defined client stubs."""

from __future__ import annotations

import pytest

from boxcar.client.boxcar import BoxcarRequest
from boxcar.client.http_client import RpcClient
from boxcar.client.stubs import ClientStub, SystemStub
from boxcar.utils.exceptions import RpcFault

pytestmark = pytest.mark.network


class EchoStub(ClientStub):
    def say(self, text: str) -> str:
        return self._call("say", text)


def test_custom_stub_forwards_calls(server_url: str) -> None:
    echo = EchoStub(server_url, "echo", timeout=5)
    assert echo.say("via stub") == "via stub"
    assert repr(echo) == f"EchoStub({server_url!r}, 'echo')"


def test_stub_accepts_existing_client(server_url: str) -> None:
    client = RpcClient(server_url)
    assert EchoStub(client, "echo").client is client


def test_system_stub(server_url: str) -> None:
    system = SystemStub(server_url)
    assert "echo.say" in system.list_methods()
    assert system.method_signature("echo.say") == [["string", "string"]]
    assert system.method_help("echo.say") == "Return the text unchanged."
    assert system.method_help("echo.nope") == "No help available for: echo.nope"


def test_system_stub_multi_call(server_url: str) -> None:
    results = SystemStub(server_url).multi_call(BoxcarRequest().add("echo.say", "a").add("echo.say"))
    assert results[0] == "a"
    assert isinstance(results[1], RpcFault)


def test_wrong_object_raises_fault(server_url: str) -> None:
    with pytest.raises(RpcFault):
        EchoStub(server_url, "nobody").say("x")
