"""Tests for boxcar.protocol.serializer."""

from __future__ import annotations

from datetime import datetime

import pytest

from boxcar.protocol.models import Request, Response
from boxcar.protocol.serializer import serialize, serialize_bytes
from boxcar.utils.exceptions import SerializationError


def test_request_envelope() -> None:
    xml = serialize(Request("echo.say", ["hi", 3]))
    assert xml == (
        '<?xml version="1.0"?>'
        "<methodCall><methodName>echo.say</methodName><params>"
        "<param><value><string>hi</string></value></param>"
        "<param><value><i4>3</i4></value></param>"
        "</params></methodCall>"
    )


def test_success_response_envelope() -> None:
    xml = serialize(Response(True))
    assert xml.endswith(
        "<methodResponse><params><param><value><boolean>1</boolean></value></param></params></methodResponse>"
    )


def test_fault_response_envelope() -> None:
    xml = serialize(Response.fault(-32500, "Application Error: boom"))
    assert "<params>" not in xml
    assert "<fault><value><struct>" in xml
    assert "<member><name>faultCode</name><value><i4>-32500</i4></value></member>" in xml
    assert "<member><name>faultString</name><value><string>Application Error: boom</string></value></member>" in xml


def test_empty_array_renders_data_without_children() -> None:
    assert serialize([]) == "<value><array><data /></array></value>"


def test_nested_containers() -> None:
    xml = serialize({"list": [1, {"x": 2.5}]})
    assert xml == (
        "<value><struct><member><name>list</name><value><array><data>"
        "<value><i4>1</i4></value>"
        "<value><struct><member><name>x</name><value><double>2.5</double></value></member></struct></value>"
        "</data></array></value></member></struct></value>"
    )


def test_null_emits_no_element() -> None:
    assert serialize(None) == "<value />"
    assert serialize([None, 1]) == "<value><array><data><value /><value><i4>1</i4></value></data></array></value>"


def test_unknown_types_are_skipped() -> None:
    assert serialize([object()]) == "<value><array><data><value /></data></array></value>"


def test_datetime_and_bytes() -> None:
    xml = serialize([datetime(2001, 2, 3, 4, 5, 6), b"\x00\x01"])
    assert "<dateTime.iso8601>20010203T04:05:06</dateTime.iso8601>" in xml
    assert "<base64>AAE=</base64>" in xml


def test_text_is_escaped() -> None:
    assert serialize("a<b&c") == "<value><string>a&lt;b&amp;c</string></value>"


def test_struct_keys_must_be_strings() -> None:
    with pytest.raises(SerializationError):
        serialize({1: "x"})


def test_indent_option() -> None:
    text = serialize(Response(1), indent=True)
    assert text.splitlines()[:3] == ['<?xml version="1.0"?>', "<methodResponse>", "    <params>"]


def test_serialize_bytes_is_utf8() -> None:
    data = serialize_bytes(Request("m", ["é"]))
    assert "é".encode("utf-8") in data
