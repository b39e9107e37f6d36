"""Element names and formats of the XML-RPC wire format."""

# strptime pattern for <dateTime.iso8601>: literal 'T', no offset, 4-digit year
ISO_DATETIME = "%Y%m%dT%H:%M:%S"

BASE64 = "base64"
STRING = "string"
INT = "i4"
ALT_INT = "int"
DATETIME = "dateTime.iso8601"
BOOLEAN = "boolean"
DOUBLE = "double"

VALUE = "value"
NAME = "name"
ARRAY = "array"
DATA = "data"
MEMBER = "member"
STRUCT = "struct"

PARAM = "param"
PARAMS = "params"
METHOD_CALL = "methodCall"
METHOD_NAME = "methodName"
METHOD_RESPONSE = "methodResponse"
FAULT = "fault"
FAULT_CODE = "faultCode"
FAULT_STRING = "faultString"

SCALAR_TYPES = frozenset({BASE64, STRING, INT, ALT_INT, DATETIME, BOOLEAN, DOUBLE})

# element -> parents it may appear under (None: document root)
ALLOWED_PARENTS: dict[str, frozenset[str | None]] = {
    METHOD_CALL: frozenset({None}),
    METHOD_RESPONSE: frozenset({None}),
    METHOD_NAME: frozenset({METHOD_CALL}),
    PARAMS: frozenset({METHOD_CALL, METHOD_RESPONSE}),
    PARAM: frozenset({PARAMS}),
    VALUE: frozenset({PARAM, DATA, MEMBER, FAULT}),
    ARRAY: frozenset({VALUE}),
    DATA: frozenset({ARRAY}),
    STRUCT: frozenset({VALUE}),
    MEMBER: frozenset({STRUCT}),
    NAME: frozenset({MEMBER}),
    FAULT: frozenset({METHOD_RESPONSE}),
    **{scalar: frozenset({VALUE}) for scalar in SCALAR_TYPES},
}
