"""httptool - raw-socket HTTP/1.0 client with a concurrent profiling mode."""

from .response import FailureKind, ParsedResponse, parse_response
from .transport import Transport, send_request
from .urls import parse_url

__version__ = "0.1.0"
