import logging
from typing import BinaryIO, Callable

from .response import ParsedResponse

logger = logging.getLogger(__name__)

Fetch = Callable[[str], ParsedResponse]


def run_once(url: str, fetch: Fetch, out: BinaryIO) -> ParsedResponse:
    """Fetch ``url`` once and write the body, or an error line, to ``out``."""
    resp = fetch(url)
    if resp.status_code != 200:
        if resp.failure is not None:
            logger.info("Request for %s failed: %s", url, resp.failure.value)
        out.write(f"Error! HTTP return code: {resp.status_code}\n".encode("ascii"))
    else:
        out.write(resp.body)
    out.flush()
    return resp
