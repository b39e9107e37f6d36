"""Request and Response envelopes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from boxcar.protocol import tokens
from boxcar.protocol.values import Value


@dataclass(slots=True)
class Request:
    """A method call: dot-joined ``object.method`` name plus positional params."""

    method_name: str
    params: list[Value] = field(default_factory=list)

    @property
    def object_name(self) -> str:
        """Part before the first '.'; the whole name when there is no dot."""
        head, sep, _ = self.method_name.partition(".")
        return head if sep else self.method_name

    @property
    def method(self) -> str:
        """Part after the first '.'; the whole name when there is no dot."""
        _, sep, tail = self.method_name.partition(".")
        return tail if sep else self.method_name

    def __str__(self) -> str:
        from boxcar.protocol.serializer import serialize

        return serialize(self, indent=True)


class Response:
    """A method result, or a fault struct in its place.

    Setting ``value`` clears the fault status; ``set_fault`` replaces the
    value with a two-member fault struct.
    """

    __slots__ = ("_value", "is_fault")

    def __init__(self, value: Value = None):
        self._value: Value = value
        self.is_fault = False

    @classmethod
    def fault(cls, code: int, message: str) -> "Response":
        response = cls()
        response.set_fault(code, message)
        return response

    @property
    def value(self) -> Value:
        return self._value

    @value.setter
    def value(self, value: Value) -> None:
        self.is_fault = False
        self._value = value

    def set_fault(self, code: int, message: str) -> None:
        self._value = {tokens.FAULT_CODE: int(code), tokens.FAULT_STRING: str(message)}
        self.is_fault = True

    @property
    def fault_code(self) -> int:
        if not self.is_fault:
            return 0
        return self._value[tokens.FAULT_CODE]

    @property
    def fault_string(self) -> str:
        if not self.is_fault:
            return ""
        return self._value[tokens.FAULT_STRING]

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Response):
            return NotImplemented
        return self.is_fault == other.is_fault and self._value == other._value

    def __repr__(self) -> str:
        if self.is_fault:
            return f"Response(fault_code={self.fault_code!r}, fault_string={self.fault_string!r})"
        return f"Response(value={self._value!r})"

    def __str__(self) -> str:
        from boxcar.protocol.serializer import serialize

        return serialize(self, indent=True)
