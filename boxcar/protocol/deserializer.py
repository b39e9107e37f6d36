"""Streaming XML-RPC deserializer.

The parser consumes start/end element events from an incremental XML pull
parser and drives a small state machine:

- an element stack validates nesting against ``tokens.ALLOWED_PARENTS``;
- a stack of container frames (value, array, struct, member) accumulates
  nested values;
- leaf type elements convert their text when they close and hand the
  result to the enclosing value frame.

All mutable parsing state lives in a ``_ParseState`` created per call, so a
deserializer instance can be shared between threads. Parsing stops as soon
as the root element closes, which lets callers read a request body straight
off a socket without waiting for EOF.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Any, Iterator

from boxcar.protocol import tokens
from boxcar.protocol.models import Request, Response
from boxcar.protocol.values import Value, decode_scalar
from boxcar.utils.exceptions import DeserializationError

CHUNK_SIZE = 8192

# an empty <value/>: Null at param level, dropped inside arrays and structs
_ABSENT = object()

_TEXT_FREE = frozenset({
    tokens.METHOD_CALL,
    tokens.METHOD_RESPONSE,
    tokens.PARAMS,
    tokens.PARAM,
    tokens.FAULT,
    tokens.ARRAY,
    tokens.DATA,
    tokens.STRUCT,
    tokens.MEMBER,
})


class _ValueFrame:
    __slots__ = ("result", "typed")

    def __init__(self) -> None:
        self.result: Any = _ABSENT
        self.typed = False


class _ArrayFrame:
    __slots__ = ("items",)

    def __init__(self) -> None:
        self.items: list[Value] = []


class _StructFrame:
    __slots__ = ("members",)

    def __init__(self) -> None:
        self.members: dict[str, Value] = {}


class _MemberFrame:
    __slots__ = ("name", "value", "has_value")

    def __init__(self) -> None:
        self.name: str | None = None
        self.value: Any = _ABSENT
        self.has_value = False


class _ParseState:
    """Mutable state of one parse."""

    def __init__(self, expected_root: str | None):
        self.expected_root = expected_root
        self.root: str | None = None
        self.done = False
        self.elements: list[str] = []
        self.frames: list[Any] = []
        self.method_name: str | None = None
        self.params: list[Value] = []
        self.param_value: Any = _ABSENT
        self.param_filled = False
        self.saw_params = False
        self.saw_fault = False
        self.fault_value: Any = _ABSENT

    def handle(self, event: str, elem: ET.Element) -> None:
        if event == "start":
            self.start(elem.tag)
        else:
            self.end(elem)

    def start(self, tag: str) -> None:
        if self.done:
            raise DeserializationError(f"unexpected <{tag}> after the document element")
        parent = self.elements[-1] if self.elements else None
        allowed = tokens.ALLOWED_PARENTS.get(tag)
        if allowed is None:
            raise DeserializationError(f"unexpected element <{tag}>")
        if parent not in allowed:
            where = f"<{parent}>" if parent else "document root"
            raise DeserializationError(f"<{tag}> is not allowed at {where}")

        if parent is None:
            if self.expected_root and tag != self.expected_root:
                raise DeserializationError(f"expected <{self.expected_root}>, got <{tag}>")
            self.root = tag
        if parent == tokens.VALUE:
            frame = self.frames[-1]
            if frame.typed:
                raise DeserializationError("<value> holds more than one typed element")
            frame.typed = True

        if tag == tokens.VALUE:
            self.frames.append(_ValueFrame())
        elif tag == tokens.ARRAY:
            self.frames.append(_ArrayFrame())
        elif tag == tokens.STRUCT:
            self.frames.append(_StructFrame())
        elif tag == tokens.MEMBER:
            self.frames.append(_MemberFrame())
        elif tag == tokens.PARAMS:
            if self.saw_params or self.saw_fault:
                raise DeserializationError("<params> must appear once and not alongside <fault>")
            self.saw_params = True
        elif tag == tokens.FAULT:
            if self.saw_params or self.saw_fault:
                raise DeserializationError("<fault> must appear once and not alongside <params>")
            self.saw_fault = True
        elif tag == tokens.PARAM:
            self.param_value = _ABSENT
            self.param_filled = False
        elif tag == tokens.METHOD_NAME and self.method_name is not None:
            raise DeserializationError("<methodName> appears more than once")

        self.elements.append(tag)

    def end(self, elem: ET.Element) -> None:
        tag = self.elements.pop()
        self._check_text(elem)

        if tag in tokens.SCALAR_TYPES:
            self.frames[-1].result = decode_scalar(tag, elem.text)
        elif tag == tokens.VALUE:
            frame = self.frames.pop()
            if frame.typed:
                value = frame.result
            else:
                # untyped <value>text</value> is a string
                value = _ABSENT if elem.text is None else elem.text
            self._deliver(value)
        elif tag == tokens.ARRAY:
            self.frames[-2].result = self.frames.pop().items
        elif tag == tokens.STRUCT:
            self.frames[-2].result = self.frames.pop().members
        elif tag == tokens.NAME:
            member = self.frames[-1]
            if member.name is not None:
                raise DeserializationError("<member> has more than one <name>")
            member.name = elem.text or ""
        elif tag == tokens.MEMBER:
            self._close_member(self.frames.pop())
        elif tag == tokens.PARAM:
            if not self.param_filled:
                raise DeserializationError("<param> without <value>")
            self.params.append(None if self.param_value is _ABSENT else self.param_value)
        elif tag == tokens.FAULT:
            self.fault_value = _check_fault(self.fault_value)
        elif tag == tokens.METHOD_NAME:
            name = (elem.text or "").strip()
            if not name:
                raise DeserializationError("empty <methodName>")
            self.method_name = name

        if not self.elements:
            self.done = True
        # children are fully consumed; keep memory bounded to the open path
        del elem[:]

    def _check_text(self, elem: ET.Element) -> None:
        if elem.tag in _TEXT_FREE and elem.text and elem.text.strip():
            raise DeserializationError(f"unexpected text inside <{elem.tag}>")
        if elem.tag == tokens.VALUE and len(elem) and elem.text and elem.text.strip():
            raise DeserializationError("<value> mixes text with a typed element")
        for child in elem:
            if child.tail and child.tail.strip():
                raise DeserializationError(f"unexpected text after <{child.tag}>")

    def _deliver(self, value: Any) -> None:
        parent = self.elements[-1]
        if parent == tokens.DATA:
            if value is not _ABSENT:
                self.frames[-1].items.append(value)
        elif parent == tokens.MEMBER:
            member = self.frames[-1]
            if member.has_value:
                raise DeserializationError("<member> has more than one <value>")
            member.value = value
            member.has_value = True
        elif parent == tokens.PARAM:
            if self.param_filled:
                raise DeserializationError("<param> has more than one <value>")
            self.param_value = value
            self.param_filled = True
        elif parent == tokens.FAULT:
            if self.fault_value is not _ABSENT:
                raise DeserializationError("<fault> has more than one <value>")
            self.fault_value = value

    def _close_member(self, member: _MemberFrame) -> None:
        if member.name is None:
            raise DeserializationError("<member> without <name>")
        if not member.has_value:
            raise DeserializationError(f"<member> {member.name!r} without <value>")
        members = self.frames[-1].members
        if member.name in members:
            raise DeserializationError(f"duplicate struct member {member.name!r}")
        if member.value is not _ABSENT:
            members[member.name] = member.value


def _check_fault(value: Any) -> dict[str, Value]:
    if not isinstance(value, dict) or set(value) != {tokens.FAULT_CODE, tokens.FAULT_STRING}:
        raise DeserializationError("<fault> must hold a struct of faultCode and faultString")
    code = value[tokens.FAULT_CODE]
    if not isinstance(code, int) or isinstance(code, bool):
        raise DeserializationError("faultCode must be an integer")
    if not isinstance(value[tokens.FAULT_STRING], str):
        raise DeserializationError("faultString must be a string")
    return value


def _chunks(source: Any) -> Iterator[str | bytes]:
    if isinstance(source, (str, bytes)):
        yield source
        return
    if isinstance(source, (bytearray, memoryview)):
        yield bytes(source)
        return
    read = getattr(source, "read1", None) or getattr(source, "read", None)
    if read is None:
        raise TypeError(f"cannot deserialize from {type(source).__name__}")
    while True:
        data = read(CHUNK_SIZE)
        if not data:
            return
        yield data


class Deserializer:
    """Build a Request or Response from XML text, bytes or a readable stream."""

    expected_root: str | None = None

    def deserialize(self, source: Any) -> Request | Response:
        state = self._parse(source)
        if state.root == tokens.METHOD_CALL:
            return self._build_request(state)
        return self._build_response(state)

    def _parse(self, source: Any) -> _ParseState:
        state = _ParseState(self.expected_root)
        parser = ET.XMLPullParser(events=("start", "end"))
        try:
            for chunk in _chunks(source):
                parser.feed(chunk)
                for event, elem in parser.read_events():
                    state.handle(event, elem)
                    # errors for bytes past the root are queued behind its end event
                    if state.done:
                        return state
            parser.close()
            for event, elem in parser.read_events():
                state.handle(event, elem)
        except ET.ParseError as e:
            raise DeserializationError(f"malformed XML: {e}") from e
        if not state.done:
            raise DeserializationError("document ended before the root element closed")
        return state

    def _build_request(self, state: _ParseState) -> Request:
        if state.method_name is None:
            raise DeserializationError("<methodCall> without <methodName>")
        return Request(state.method_name, state.params)

    def _build_response(self, state: _ParseState) -> Response:
        if state.saw_fault:
            fault = state.fault_value
            return Response.fault(fault[tokens.FAULT_CODE], fault[tokens.FAULT_STRING])
        if len(state.params) != 1:
            raise DeserializationError("<methodResponse> must carry exactly one param or a fault")
        return Response(state.params[0])


class RequestDeserializer(Deserializer):
    """Parses ``methodCall`` documents only."""

    expected_root = tokens.METHOD_CALL

    def deserialize(self, source: Any) -> Request:
        return self._build_request(self._parse(source))


class ResponseDeserializer(Deserializer):
    """Parses ``methodResponse`` documents only."""

    expected_root = tokens.METHOD_RESPONSE

    def deserialize(self, source: Any) -> Response:
        return self._build_response(self._parse(source))


def deserialize(source: Any) -> Request | Response:
    return Deserializer().deserialize(source)


def loads_request(source: Any) -> Request:
    return RequestDeserializer().deserialize(source)


def loads_response(source: Any) -> Response:
    return ResponseDeserializer().deserialize(source)
