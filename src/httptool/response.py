"""
Parsing of raw HTTP/1.0 responses read until the peer closed the connection.

Only the status code and the message body are extracted. There is no
Content-Length or chunked handling: the body is simply every byte after the
blank line that ends the headers.
"""

import enum
import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)

# Reused for "could not connect" and "could not parse"; a real upstream 400
# looks the same from the outside, the failure field tells them apart.
SENTINEL_STATUS = 400
HEADER_END = b"\r\n\r\n"
CRLF = b"\r\n"


class FailureKind(enum.Enum):
    CONNECTION_FAILED = "connection_failed"
    PARSE_FAILED = "parse_failed"


class ResponseParseError(ValueError):
    """Raised when the status line is missing or has no numeric code."""


@dataclass(frozen=True)
class ParsedResponse:
    status_code: int
    body: bytes = b""
    failure: FailureKind | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.status_code == 200

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    @classmethod
    def failed(cls, kind: FailureKind) -> "ParsedResponse":
        return cls(SENTINEL_STATUS, b"", kind)


def parse_status_line(raw: bytes) -> tuple[int, int]:
    """Return (status_code, offset just past the status line)."""
    end = raw.find(b"\n")
    if end == -1:
        raise ResponseParseError("no status line")
    line = raw[:end + 1].decode("iso-8859-1")
    parts = line.split(" ")
    if len(parts) < 2:
        raise ResponseParseError(f"bad status line: {line!r}")
    token = parts[1].strip()
    # digits only, no sign, underscores or non-ASCII numerals
    if not (token.isascii() and token.isdigit()):
        raise ResponseParseError(f"bad status code: {parts[1]!r}")
    code = int(token)
    return code, end + 1


def find_body_offset(raw: bytes) -> int:
    idx = raw.find(HEADER_END)
    if idx == -1:
        return -1
    return idx + len(HEADER_END)


def find_body_offset_legacy(raw: bytes, start: int) -> int:
    """Old double-CRLF scan over the bytes after the status line.

    A CRLF arms a flag and skips ahead; the body starts only if the next two
    bytes are another CRLF. Breaks on bare ``\\n`` line endings and on
    responses without headers, where the blank line directly follows the
    status line that was already consumed.
    """
    content = raw[start:]
    armed = False
    i = 1
    while i < len(content):
        if content[i - 1:i + 1] == CRLF:
            if not armed:
                armed = True
                i += 1
            else:
                return start + i + 1
        else:
            armed = False
        i += 1
    return -1


def parse_response(raw: bytes, legacy_boundary: bool = False) -> ParsedResponse:
    try:
        code, status_end = parse_status_line(raw)
    except ResponseParseError as e:
        logger.debug("Unparseable response (%d bytes): %s", len(raw), e)
        return ParsedResponse.failed(FailureKind.PARSE_FAILED)

    if legacy_boundary:
        offset = find_body_offset_legacy(raw, status_end)
    else:
        offset = find_body_offset(raw)
    if offset == -1:
        logger.debug("No header terminator found, returning empty body")
        return ParsedResponse(code)
    return ParsedResponse(code, raw[offset:])
