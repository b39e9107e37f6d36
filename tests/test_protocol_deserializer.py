"""Tests for the streaming deserializer."""

from __future__ import annotations

import io
import threading
from datetime import datetime

import pytest

from boxcar.protocol.deserializer import (
    Deserializer,
    RequestDeserializer,
    deserialize,
    loads_request,
    loads_response,
)
from boxcar.protocol.models import Request, Response
from boxcar.protocol.serializer import serialize, serialize_bytes
from boxcar.utils.exceptions import DeserializationError

SAMPLES = [
    True,
    False,
    0,
    -2147483648,
    2147483647,
    3.5,
    -0.0,
    "",
    "plain text",
    "<&>",
    datetime(1998, 7, 17, 14, 8, 55),
    datetime(999, 1, 2, 3, 4, 5),
    datetime(1, 1, 1),
    datetime(9999, 12, 31, 23, 59, 59),
    b"",
    b"\x00\xffbinary",
    [],
    [1, "two", [3.0, [False]]],
    {},
    {"name": "x", "nested": {"list": [1, 2], "when": datetime(2020, 1, 1)}},
]


@pytest.mark.parametrize("value", SAMPLES)
def test_value_round_trip(value) -> None:
    assert loads_response(serialize(Response(value))).value == value


def test_request_round_trip() -> None:
    req = Request("calc.add", [1, 2.5, {"k": ["v"]}])
    assert loads_request(serialize(req)) == req


def test_request_with_empty_params() -> None:
    req = loads_request('<?xml version="1.0"?><methodCall><methodName>system.listMethods</methodName><params/></methodCall>')
    assert req == Request("system.listMethods", [])


def test_request_without_params_element() -> None:
    req = loads_request("<methodCall><methodName>ping</methodName></methodCall>")
    assert req.params == []


def test_fault_round_trip() -> None:
    res = loads_response(serialize(Response.fault(-32601, "missing")))
    assert res.is_fault
    assert (res.fault_code, res.fault_string) == (-32601, "missing")


def test_generic_deserializer_dispatches_on_root() -> None:
    assert isinstance(deserialize(serialize(Request("a.b"))), Request)
    assert isinstance(deserialize(serialize(Response(1))), Response)


def test_indented_documents_parse() -> None:
    req = Request("echo.say", [["a", {"b": 1}]])
    assert loads_request(serialize(req, indent=True)) == req


def test_untyped_value_is_a_string() -> None:
    xml = "<methodResponse><params><param><value>bare text</value></param></params></methodResponse>"
    assert loads_response(xml).value == "bare text"


def test_int_alias_is_accepted() -> None:
    xml = "<methodResponse><params><param><value><int>12</int></value></param></params></methodResponse>"
    assert loads_response(xml).value == 12


class TestNullQuirk:
    def test_null_param_comes_back_as_none(self) -> None:
        assert loads_request(serialize(Request("m", [None, 1]))).params == [None, 1]

    def test_null_disappears_inside_containers(self) -> None:
        value = {"keep": 1, "drop": None, "list": [None, 2]}
        assert loads_response(serialize(Response(value))).value == {"keep": 1, "list": [2]}


class TestStreams:
    def test_reads_from_binary_stream(self) -> None:
        stream = io.BytesIO(serialize_bytes(Request("echo.say", ["x" * 20000])))
        assert loads_request(stream).params == ["x" * 20000]

    def test_stops_at_root_end(self) -> None:
        data = serialize_bytes(Request("a.b", [1])) + b"trailing junk that is never read"
        stream = io.BytesIO(data)
        assert loads_request(stream).method_name == "a.b"

    def test_rejects_unreadable_source(self) -> None:
        with pytest.raises(TypeError):
            loads_request(12345)


def test_shared_instance_is_thread_safe() -> None:
    parser = RequestDeserializer()
    errors: list[Exception] = []

    def work(i: int) -> None:
        try:
            for _ in range(50):
                req = parser.deserialize(serialize(Request(f"obj.m{i}", [i, [i, {"i": i}]])))
                assert req.params == [i, [i, {"i": i}]]
        except Exception as e:  # collected for the main thread
            errors.append(e)

    threads = [threading.Thread(target=work, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert errors == []


@pytest.mark.parametrize(
    "xml",
    [
        "",
        "<methodCall><methodName>a</methodName>",
        "<methodCall><methodName>a</methodName><params><param><value><i4>x</i4></value></param></params></methodCall>",
        "<methodCall><params/></methodCall>",
        "<methodCall><methodName> </methodName></methodCall>",
        "<methodCall><methodName>a</methodName><methodName>b</methodName></methodCall>",
        "<methodCall><methodName>a</methodName><params><value><i4>1</i4></value></params></methodCall>",
        "<methodCall><methodName>a</methodName><params><param><value><nil/></value></param></params></methodCall>",
        "<methodCall><methodName>a</methodName><params><param><value><i4>1</i4><i4>2</i4></value></param></params></methodCall>",
        "<methodCall><methodName>a</methodName><params><param><value>x<i4>2</i4></value></param></params></methodCall>",
        "<methodCall><methodName>a</methodName><params><param><value><struct><member><value><i4>1</i4></value></member></struct></value></param></params></methodCall>",
        "<methodCall><methodName>a</methodName><params><param><value><struct>"
        "<member><name>k</name><value>1</value></member><member><name>k</name><value>2</value></member>"
        "</struct></value></param></params></methodCall>",
        "<methodCall><methodName>a</methodName><params><param></param></params></methodCall>",
        "<foo/>",
    ],
)
def test_malformed_requests(xml: str) -> None:
    with pytest.raises(DeserializationError):
        loads_request(xml)


@pytest.mark.parametrize(
    "xml",
    [
        "<methodResponse/>",
        "<methodResponse><params></params></methodResponse>",
        "<methodResponse><params><param><value>1</value></param><param><value>2</value></param></params></methodResponse>",
        "<methodResponse><fault><value><string>no</string></value></fault></methodResponse>",
        "<methodResponse><fault><value><struct>"
        "<member><name>faultCode</name><value><string>1</string></value></member>"
        "<member><name>faultString</name><value>x</value></member>"
        "</struct></value></fault></methodResponse>",
        "<methodResponse><fault><value><struct>"
        "<member><name>faultCode</name><value><i4>1</i4></value></member>"
        "</struct></value></fault></methodResponse>",
        "<methodResponse><params><param><value>1</value></param></params><fault/></methodResponse>",
    ],
)
def test_malformed_responses(xml: str) -> None:
    with pytest.raises(DeserializationError):
        loads_response(xml)


def test_wrong_envelope_for_typed_deserializer() -> None:
    with pytest.raises(DeserializationError, match="expected <methodCall>"):
        loads_request(serialize(Response(1)))


def test_base_deserializer_accepts_either_envelope() -> None:
    parser = Deserializer()
    assert parser.deserialize("<methodCall><methodName>x</methodName></methodCall>").method_name == "x"
