"""Client side: HTTP transport, boxcar requests and stubs."""

from boxcar.client.boxcar import BoxcarRequest, unpack_results
from boxcar.client.http_client import RpcClient
from boxcar.client.stubs import ClientStub, SystemStub

__all__ = ["BoxcarRequest", "ClientStub", "RpcClient", "SystemStub", "unpack_results"]
