import logging

logger = logging.getLogger(__name__)

HTTP_PORT = 80
HTTPS_PORT = 443
SCHEMES = ("http://", "https://")


def parse_url(url: str) -> tuple[str, str]:
    """Split a URL into (host, resource).

    An ``http://`` or ``https://`` prefix is dropped. Whatever precedes the
    first ``/`` is the host (possibly ``host:port``); the rest becomes the
    resource, which always starts with ``/``. The host is not validated.
    """
    if url.startswith(SCHEMES):
        url = url.split("//", 1)[1]
    host, sep, rest = url.partition("/")
    resource = "/" + rest if sep else "/"
    return host, resource


def scheme_of(url: str) -> str | None:
    for prefix in SCHEMES:
        if url.startswith(prefix):
            return prefix[:-3]
    return None


def split_host_port(host: str, default_port: int) -> tuple[str, int]:
    # [::1]:8080 / [::1]
    if host.startswith("["):
        end = host.find("]")
        if end != -1:
            name = host[1:end]
            tail = host[end + 1:]
            if tail.startswith(":") and tail[1:].isdigit():
                return name, int(tail[1:])
            return name, default_port
    name, sep, port = host.rpartition(":")
    if sep and port.isdigit() and ":" not in name:
        return name, int(port)
    # leave malformed ports in place, the connect attempt reports them
    return host, default_port


def default_port(use_tls: bool) -> int:
    return HTTPS_PORT if use_tls else HTTP_PORT
