import logging
import socket
import ssl
from contextlib import contextmanager
from typing import Iterator

from .response import FailureKind, ParsedResponse, parse_response
from .urls import default_port, parse_url, split_host_port

logger = logging.getLogger(__name__)

RECV_SIZE = 4096


def build_request(host: str, resource: str) -> bytes:
    req = (
        f"GET {resource} HTTP/1.0\r\n"
        f"Host: {host}\r\n"
        f"\r\n"
    )
    # UTF-8 on the wire; surrogateescape gives back raw argv bytes
    return req.encode("utf-8", "surrogateescape")


@contextmanager
def open_stream(host: str, use_tls: bool = False, timeout: float | None = None) -> Iterator[socket.socket]:
    """Connect to ``host`` (``name`` or ``name:port``), TLS-wrapped if asked.

    The socket is closed on every exit path.
    """
    name, port = split_host_port(host, default_port(use_tls))
    sock = socket.create_connection((name, port), timeout=timeout)
    try:
        if use_tls:
            ctx = ssl.create_default_context()
            sock = ctx.wrap_socket(sock, server_hostname=name)
        yield sock
    finally:
        sock.close()


def read_to_eof(sock: socket.socket) -> bytes:
    chunks = []
    while True:
        data = sock.recv(RECV_SIZE)
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks)


def send_request(url: str, use_tls: bool = False, timeout: float | None = None,
                 legacy_boundary: bool = False) -> ParsedResponse:
    """Send one GET for ``url`` and return the parsed response.

    Never raises for network trouble: DNS errors, refused connections, TLS
    handshake failures, resets and timeouts all come back as the 400 sentinel
    tagged ``CONNECTION_FAILED``.
    """
    host, resource = parse_url(url)
    request = build_request(host, resource)
    try:
        with open_stream(host, use_tls, timeout) as s:
            s.sendall(request)
            raw = read_to_eof(s)
    except (OSError, UnicodeError) as e:
        # UnicodeError: IDNA encoding of a malformed hostname while connecting
        logger.warning("Connection to %s failed: %s", host or "<empty host>", e)
        return ParsedResponse.failed(FailureKind.CONNECTION_FAILED)
    logger.debug("GET %s from %s -> %d bytes", resource, host, len(raw))
    return parse_response(raw, legacy_boundary=legacy_boundary)


class Transport:
    """Callable ``fetch(url)`` with the transport options bound."""

    def __init__(self, use_tls: bool = False, timeout: float | None = None,
                 legacy_boundary: bool = False):
        self.use_tls = use_tls
        self.timeout = timeout
        self.legacy_boundary = legacy_boundary

    def __call__(self, url: str) -> ParsedResponse:
        return send_request(url, self.use_tls, self.timeout, self.legacy_boundary)

    def __repr__(self) -> str:
        scheme = "https" if self.use_tls else "http"
        return f"Transport({scheme}, timeout={self.timeout})"
