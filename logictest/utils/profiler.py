"""
Profiling utilities for logictest.

Measures wall-clock time (perf_counter), CPU usage and resident memory
(psutil) around a block of code. The runner wraps each test file in a
profile block so per-file durations show up in the run summary.

Usage example:
    from logictest.utils.profiler import profile_block

    with profile_block("select1.test") as stats:
        run_test_file(harness, path)

    print(stats.duration_seconds, stats.peak_rss_bytes)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Any, Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    peak_rss_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)
    extra: dict[str, Any] = field(default_factory=dict)


@contextlib.contextmanager
def profile_block(label: str) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Peak RSS is the larger of the snapshots taken on entry and exit; records
    run synchronously, so there is no background sampler.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()

    # CPU percent needs a priming call
    process.cpu_percent(interval=None)
    start_rss = process.memory_info().rss

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts
        stats.peak_rss_bytes = max(start_rss, process.memory_info().rss)
        stats.cpu_percent = process.cpu_percent(interval=None)


__all__ = ["ProfileStats", "profile_block"]
