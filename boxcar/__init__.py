"""
boxcar - XML-RPC codec, threaded server and client.
"""

__version__ = "0.1.0"
__logo__ = "🚃"

from boxcar.api.rpc.registry import exposed
from boxcar.api.server import RpcServer
from boxcar.client import BoxcarRequest, ClientStub, RpcClient, SystemStub
from boxcar.protocol import Request, Response, deserialize, serialize
from boxcar.utils.exceptions import (
    ApplicationError,
    MethodError,
    ParamsError,
    RpcFault,
    TransportError,
)

__all__ = [
    "__version__",
    "ApplicationError",
    "BoxcarRequest",
    "ClientStub",
    "MethodError",
    "ParamsError",
    "Request",
    "Response",
    "RpcClient",
    "RpcFault",
    "RpcServer",
    "SystemStub",
    "TransportError",
    "deserialize",
    "exposed",
    "serialize",
]
