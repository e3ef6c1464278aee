import argparse
import logging
import sys

from .config import ConfigError, Settings
from .profiler import Profiler
from .runner import run_once
from .transport import Transport
from .urls import scheme_of

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="httptool", description="Fetch a URL over raw HTTP/1.0 or profile it with concurrent requests")
    ap.add_argument("--url", "-url", default="", help="Specify URL")
    ap.add_argument("--https", "-https", action="store_true", help="HTTPS is off by default. Set this for HTTPS")
    ap.add_argument("--profile", "-profile", type=int, default=0,
                    help="Set number of reqs here. Default value of 0 means print output mode")
    ap.add_argument("--timeout", type=float, default=None, help="socket timeout in seconds (default: wait forever)")
    ap.add_argument("--concurrency", "-c", type=int, default=None,
                    help="max in-flight requests while profiling (default: all at once)")
    ap.add_argument("--legacy-parser", action="store_true", help="use the old double-CRLF body scan")
    ap.add_argument("--plot", metavar="PATH", default=None, help="save a latency plot (profiling mode)")
    ap.add_argument("--json", action="store_true", help="print the profiling report as JSON")
    ap.add_argument("--log-level", default=None, help="logging level (env HTTPTOOL_LOG_LEVEL, default WARNING)")
    return ap


def profile(settings: Settings, transport: Transport) -> int:
    report = Profiler(transport, settings.profile, settings.concurrency).run(settings.url)
    if settings.json_output:
        print(report.model_dump_json(indent=2))
    else:
        print(report.render())
    if settings.plot_path:
        from .plotting import plot_latencies
        plot_latencies(report, settings.plot_path)
    return 0 if report.success_count > 0 else 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = Settings.from_args(args)
    except ConfigError as e:
        print(e)
        return 2

    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if scheme_of(settings.url) == "https" and not settings.use_tls:
        logger.warning("%s uses https:// but --https is not set, connecting in plain text", settings.url)

    transport = Transport(settings.use_tls, settings.timeout, settings.legacy_parser)
    if settings.profiling:
        return profile(settings, transport)
    resp = run_once(settings.url, transport, sys.stdout.buffer)
    return 0 if resp.status_code == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
