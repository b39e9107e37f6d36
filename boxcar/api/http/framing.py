"""Minimal HTTP/1.x request framing for the RPC listener.

Only what the responder needs: the request line, a header table and a body
stream. No chunked decoding, no persistent connections and no Content-Length
enforcement.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO

from loguru import logger

from boxcar.utils.exceptions import ProtocolError

SUPPORTED_METHODS = frozenset({"GET", "POST"})
DEFAULT_PROTOCOL = "HTTP/1.0"
MAX_LINE = 65536


class BodyReader:
    """
    Request body stream.

    Reads pass straight through to the connection. The parser stops at the
    root end tag, so Content-Length is informational and a wrong value
    neither truncates nor stalls a request.
    """

    def __init__(self, rfile: BinaryIO, length: int | None = None):
        self._rfile = rfile
        self.length = length
        self.consumed = 0

    def read(self, size: int = -1) -> bytes:
        data = self._rfile.read(size)
        self.consumed += len(data)
        return data

    def read1(self, size: int = -1) -> bytes:
        read1 = getattr(self._rfile, "read1", None)
        data = read1(size) if read1 is not None else self._rfile.read(size)
        self.consumed += len(data)
        return data


@dataclass(slots=True)
class HttpRequest:
    method: str
    path: str
    protocol: str = DEFAULT_PROTOCOL
    headers: dict[str, str] = field(default_factory=dict)
    body: BodyReader | None = None

    @classmethod
    def read(cls, rfile: BinaryIO) -> "HttpRequest":
        """Frame one request from a binary stream positioned at the request line."""
        method, path, protocol = parse_request_line(_readline(rfile))
        headers = parse_headers(_header_lines(rfile))
        request = cls(method=method, path=path, protocol=protocol, headers=headers)
        request.body = BodyReader(rfile, request.content_length)
        return request

    def header(self, name: str, default: str | None = None) -> str | None:
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    @property
    def content_length(self) -> int | None:
        raw = self.header("Content-Length")
        if raw is None:
            return None
        try:
            length = int(raw)
        except ValueError:
            logger.debug("Ignoring unparsable Content-Length {!r}", raw)
            return None
        return length if length >= 0 else None

    @property
    def path_dir(self) -> str:
        """Directory part of the request path, up to and including the last '/'."""
        path = self.path.split("?", 1)[0]
        return path[: path.rfind("/") + 1]

    @property
    def path_file(self) -> str:
        """Last segment of the request path."""
        path = self.path.split("?", 1)[0]
        return path[path.rfind("/") + 1 :]

    def __str__(self) -> str:
        return f"{self.method} {self.path} {self.protocol}"


def _readline(rfile: BinaryIO) -> str:
    raw = rfile.readline(MAX_LINE + 1)
    if len(raw) > MAX_LINE:
        raise ProtocolError("HTTP line too long")
    return raw.decode("latin-1")


def _header_lines(rfile: BinaryIO):
    while True:
        line = _readline(rfile)
        if not line or not line.strip():
            return
        yield line


def parse_request_line(line: str) -> tuple[str, str, str]:
    """Split ``METHOD SP target SP protocol``; only GET and POST are accepted."""
    parts = line.strip().split()
    if not parts:
        raise ProtocolError("Void request.")
    token = parts[0].upper()
    if token not in SUPPORTED_METHODS:
        raise ProtocolError(f"Unsupported HTTP method: {parts[0]}", details={"line": line.strip()})
    if len(parts) < 2 or len(parts) > 3:
        raise ProtocolError(f"Malformed request line: {line.strip()!r}", details={"line": line.strip()})
    protocol = parts[2] if len(parts) == 3 else DEFAULT_PROTOCOL
    return token, parts[1], protocol


def parse_headers(lines) -> dict[str, str]:
    """
    Collect ``Key: Value`` lines into a dict.

    Lines without a colon or without a value are skipped, and so is a key
    that was already seen (matched case-insensitively; first one wins).
    """
    headers: dict[str, str] = {}
    seen: set[str] = set()
    for line in lines:
        key, sep, value = line.strip().partition(":")
        key, value = key.strip(), value.strip()
        if not sep or not key or not value:
            logger.debug("Skipping malformed header line {!r}", line.strip())
            continue
        if key.lower() in seen:
            logger.info("Skipping duplicate header {}", key)
            continue
        seen.add(key.lower())
        headers[key] = value
    return headers
