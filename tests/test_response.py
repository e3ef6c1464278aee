import pytest

from httptool.response import (
    SENTINEL_STATUS,
    FailureKind,
    ParsedResponse,
    ResponseParseError,
    find_body_offset_legacy,
    parse_response,
    parse_status_line,
)


def test_status_and_body():
    resp = parse_response(b"HTTP/1.0 200 OK\r\nHeader: x\r\n\r\nBODY")
    assert resp == ParsedResponse(200, b"BODY")
    assert resp.ok
    assert resp.text == "BODY"


def test_body_keeps_later_blank_lines():
    raw = b"HTTP/1.0 200 OK\r\nA: 1\r\nB: 2\r\n\r\nline1\r\n\r\nline2"
    assert parse_response(raw).body == b"line1\r\n\r\nline2"


def test_non_200_status():
    resp = parse_response(b"HTTP/1.0 404 Not Found\r\nContent-Type: text/html\r\n\r\n<h1>nope</h1>")
    assert resp.status_code == 404
    assert resp.body == b"<h1>nope</h1>"
    assert resp.failure is None
    assert not resp.ok


@pytest.mark.parametrize("raw", [
    b"",
    b"HTTP/1.0 200 OK",              # no newline at all
    b"garbage\r\n\r\nbody",          # no second token
    b"HTTP/1.0 abc OK\r\n\r\nbody",  # non-numeric code
    b"HTTP/1.0  200 OK\r\n\r\n",     # double space leaves an empty token
])
def test_malformed_status_line_gives_sentinel(raw):
    resp = parse_response(raw)
    assert resp.status_code == SENTINEL_STATUS
    assert resp.body == b""
    assert resp.failure is FailureKind.PARSE_FAILED


def test_real_400_is_not_a_failure():
    resp = parse_response(b"HTTP/1.0 400 Bad Request\r\n\r\n")
    assert resp.status_code == 400
    assert resp.failure is None


def test_missing_header_terminator_gives_empty_body():
    resp = parse_response(b"HTTP/1.0 200 OK\r\nServer: x\r\nno blank line")
    assert resp.status_code == 200
    assert resp.body == b""


def test_headerless_response():
    assert parse_response(b"HTTP/1.0 200 OK\r\n\r\nBODY").body == b"BODY"


def test_status_line_without_reason():
    assert parse_response(b"HTTP/1.0 204\r\n\r\n").status_code == 204


def test_parse_status_line_offset():
    code, end = parse_status_line(b"HTTP/1.0 301 Moved\r\nLocation: /\r\n\r\n")
    assert code == 301
    assert end == len(b"HTTP/1.0 301 Moved\r\n")


def test_parse_status_line_raises():
    with pytest.raises(ResponseParseError):
        parse_status_line(b"")


def test_binary_body_untouched():
    payload = bytes(range(256))
    assert parse_response(b"HTTP/1.0 200 OK\r\n\r\n" + payload).body == payload


class TestLegacyBoundary:
    """The old scan; kept to document where it goes wrong."""

    def test_agrees_on_well_formed_response(self):
        raw = b"HTTP/1.0 200 OK\r\nHeader: x\r\n\r\nBODY"
        assert parse_response(raw, legacy_boundary=True).body == b"BODY"

    def test_misses_body_without_headers(self):
        # the blank line right after the status line is never seen
        raw = b"HTTP/1.0 200 OK\r\n\r\nBODY"
        assert parse_response(raw, legacy_boundary=True).body == b""
        assert parse_response(raw).body == b"BODY"

    def test_misses_bare_newline_endings(self):
        raw = b"HTTP/1.0 200 OK\nHeader: x\n\nBODY"
        assert parse_response(raw, legacy_boundary=True).body == b""

    def test_offset_is_absolute(self):
        raw = b"HTTP/1.0 200 OK\r\nA: b\r\n\r\nxyz"
        _, start = parse_status_line(raw)
        assert raw[find_body_offset_legacy(raw, start):] == b"xyz"


@pytest.mark.parametrize("token", [b"2_00", b"+200", b"-1", "٢٠٠".encode("utf-8"), b"\xb2"])
def test_status_code_must_be_plain_digits(token):
    resp = parse_response(b"HTTP/1.0 " + token + b" OK\r\n\r\nbody")
    assert resp.failure is FailureKind.PARSE_FAILED
    assert resp.status_code == SENTINEL_STATUS
