"""
Concurrent profiling of a single URL.

Every request runs on its own thread and reports a ``ProfileResult`` through
a queue. The thread that called ``Profiler.run`` is the only one that touches
``AggregateStats``, so the aggregate needs no lock.
"""

import logging
import queue
import threading
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from pydantic import BaseModel, Field

from .response import SENTINEL_STATUS, FailureKind, ParsedResponse
from .runner import Fetch

logger = logging.getLogger(__name__)

# Initial "smallest body" value. Stays put when every body is larger.
MIN_BODY_SENTINEL = 100000


@dataclass(frozen=True)
class ProfileResult:
    status_code: int
    body_size: int
    elapsed_ms: int
    failure: Optional[FailureKind] = None


def median_ms(sorted_times: list[int]) -> int:
    # integer midpoint of the two middle samples; exact for odd n
    n = len(sorted_times)
    return (sorted_times[n // 2] + sorted_times[(n - 1) // 2]) // 2


@dataclass
class AggregateStats:
    success_count: int = 0
    total_count: int = 0
    response_times: list[int] = field(default_factory=list)
    error_codes: list[int] = field(default_factory=list)
    max_body_size: int = 0
    min_body_size: int = MIN_BODY_SENTINEL
    sum_response_time_ms: int = 0
    failures: Counter = field(default_factory=Counter)

    def record(self, result: ProfileResult):
        self.total_count += 1
        if result.status_code != 200:
            self.error_codes.append(result.status_code)
            if result.failure is not None:
                self.failures[result.failure] += 1
            return
        self.success_count += 1
        self.sum_response_time_ms += result.elapsed_ms
        self.response_times.append(result.elapsed_ms)
        self.max_body_size = max(self.max_body_size, result.body_size)
        self.min_body_size = min(self.min_body_size, result.body_size)

    def finalize(self):
        self.response_times.sort()

    @property
    def fastest(self) -> Optional[int]:
        return self.response_times[0] if self.success_count else None

    @property
    def slowest(self) -> Optional[int]:
        return self.response_times[-1] if self.success_count else None

    @property
    def mean(self) -> Optional[float]:
        if not self.success_count:
            return None
        return self.sum_response_time_ms / self.success_count

    @property
    def median(self) -> Optional[int]:
        if not self.success_count:
            return None
        return median_ms(self.response_times)


def _plain_number(value: float) -> str:
    # 25.0 -> "25", 25.5 -> "25.5"
    return str(int(value)) if value.is_integer() else str(value)


class ProfileReport(BaseModel):
    url: str
    request_count: int
    success_count: int
    fastest_ms: Optional[int] = None
    slowest_ms: Optional[int] = None
    mean_ms: Optional[float] = None
    median_ms: Optional[int] = None
    error_codes: list[int] = Field(default_factory=list)
    largest_body: Optional[int] = None
    smallest_body: Optional[int] = None
    failures: dict[str, int] = Field(default_factory=dict)
    response_times_ms: list[int] = Field(default_factory=list)

    @classmethod
    def from_stats(cls, url: str, request_count: int, stats: AggregateStats) -> "ProfileReport":
        report = cls(
            url=url,
            request_count=request_count,
            success_count=stats.success_count,
            error_codes=list(stats.error_codes),
            failures={kind.value: n for kind, n in stats.failures.items()},
            response_times_ms=list(stats.response_times),
        )
        if stats.success_count > 0:
            report.fastest_ms = stats.fastest
            report.slowest_ms = stats.slowest
            report.mean_ms = stats.mean
            report.median_ms = stats.median
            report.largest_body = stats.max_body_size
            report.smallest_body = stats.min_body_size
        return report

    def render(self) -> str:
        lines = [
            f"URL : {self.url}",
            f"Num of requests : {self.request_count}",
            f"Num of successes : {self.success_count}",
        ]
        if self.success_count > 0:
            lines += [
                f"Fastest Response time : {self.fastest_ms}",
                f"Slowest Response time : {self.slowest_ms}",
                f"Mean Response time : {_plain_number(self.mean_ms)}",
                f"Median Response time : {self.median_ms}",
                f"Non-Success error codes : {self.error_codes}",
                f"Largest Response size(Only message-body considered) : {self.largest_body}",
                f"Smallest Response size(Only message-body considered) : {self.smallest_body}",
            ]
        return "\n".join(lines)


class Profiler:
    def __init__(self, fetch: Fetch, request_count: int, concurrency: Optional[int] = None):
        if request_count < 0:
            raise ValueError("request_count must be >= 0")
        if concurrency is not None and concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.fetch = fetch
        self.request_count = request_count
        self.concurrency = concurrency

    def _timed_fetch(self, url: str, results: queue.Queue, slots: Optional[threading.Semaphore]):
        if slots is not None:
            slots.acquire()
        try:
            t0 = time.perf_counter()
            try:
                resp = self.fetch(url)
            except Exception:
                # a broken fetch must still report, or run() never returns
                logger.exception("Fetch for %s raised", url)
                resp = ParsedResponse.failed(FailureKind.CONNECTION_FAILED)
            elapsed_ms = int((time.perf_counter() - t0) * 1000)
        finally:
            if slots is not None:
                slots.release()
        results.put(ProfileResult(resp.status_code, len(resp.body), elapsed_ms, resp.failure))

    def collect(self, url: str) -> AggregateStats:
        stats = AggregateStats()
        if self.request_count == 0:
            return stats

        results: queue.Queue = queue.Queue()
        slots = threading.Semaphore(self.concurrency) if self.concurrency else None
        threads = [
            threading.Thread(target=self._timed_fetch, args=(url, results, slots), daemon=True)
            for _ in range(self.request_count)
        ]
        started = []
        for t in threads:
            try:
                t.start()
            except RuntimeError as e:
                # out of threads: the rest never run and count as failed
                logger.error("Started %d of %d requests: %s", len(started), self.request_count, e)
                break
            started.append(t)
        for _ in range(self.request_count - len(started)):
            stats.record(ProfileResult(SENTINEL_STATUS, 0, 0, FailureKind.CONNECTION_FAILED))
        for _ in range(len(started)):
            stats.record(results.get())
        for t in started:
            t.join()
        stats.finalize()
        return stats

    def run(self, url: str) -> ProfileReport:
        logger.info("Profiling %s with %d requests (concurrency=%s)",
                    url, self.request_count, self.concurrency or "unbounded")
        t0 = time.perf_counter()
        stats = self.collect(url)
        logger.info("Profiling finished in %.3fs: %d/%d succeeded",
                    time.perf_counter() - t0, stats.success_count, stats.total_count)
        return ProfileReport.from_stats(url, self.request_count, stats)
