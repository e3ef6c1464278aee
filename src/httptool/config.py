import logging
import os
from dataclasses import dataclass

DEFAULT_LOG_LEVEL = "WARNING"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class Settings:
    url: str
    use_tls: bool = False
    profile: int = 0
    timeout: float | None = None
    concurrency: int | None = None
    legacy_parser: bool = False
    plot_path: str | None = None
    json_output: bool = False
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def profiling(self) -> bool:
        return self.profile > 0

    @classmethod
    def from_args(cls, args) -> "Settings":
        if not args.url:
            raise ConfigError("URL not specified!")
        if args.profile < 0:
            raise ConfigError(f"--profile must be >= 0, got {args.profile}")
        if args.timeout is not None and args.timeout <= 0:
            raise ConfigError(f"--timeout must be > 0, got {args.timeout}")
        if args.concurrency is not None and args.concurrency < 1:
            raise ConfigError(f"--concurrency must be >= 1, got {args.concurrency}")
        level = (args.log_level or os.getenv("HTTPTOOL_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigError(f"unknown log level {level!r}")
        return cls(
            url=args.url,
            use_tls=args.https,
            profile=args.profile,
            timeout=args.timeout,
            concurrency=args.concurrency,
            legacy_parser=args.legacy_parser,
            plot_path=args.plot,
            json_output=args.json,
            log_level=level,
        )
