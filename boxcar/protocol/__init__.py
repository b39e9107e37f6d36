"""XML-RPC wire format: value model, envelopes and codec."""

from boxcar.protocol.deserializer import (
    Deserializer,
    RequestDeserializer,
    ResponseDeserializer,
    deserialize,
    loads_request,
    loads_response,
)
from boxcar.protocol.models import Request, Response
from boxcar.protocol.serializer import serialize, serialize_bytes
from boxcar.protocol.values import Value, wire_type_name, wire_type_of

__all__ = [
    "Deserializer",
    "Request",
    "RequestDeserializer",
    "Response",
    "ResponseDeserializer",
    "Value",
    "deserialize",
    "loads_request",
    "loads_response",
    "serialize",
    "serialize_bytes",
    "wire_type_name",
    "wire_type_of",
]
