"""
Profiling utilities for the Blog Query Challenges.

This module provides context managers to measure what a query solution costs:
- Wall-clock time (perf_counter)
- Number of SQL statements sent to the database (SQLAlchemy engine events)
- CPU usage and peak RSS (psutil, sampled in a background thread)
- Peak Python allocations (tracemalloc)

Counting statements is how the eager-loading challenges are judged: touching
preloaded associations must not issue further SELECTs.

Usage examples:
    from src.utils.profiler import count_queries, profile_block

    with count_queries(engine) as counter:
        [post.author.name for post in posts]
    assert counter.count == 0

    with profile_block("4.2", engine=engine) as stats:
        solve(session)
    print(stats.duration_seconds, stats.query_count)
"""

from __future__ import annotations

import contextlib
import re
import threading
import time
import tracemalloc
from dataclasses import dataclass, field
from typing import Any, Generator, List, Optional

import psutil
from sqlalchemy import Engine, event

# Transaction bookkeeping is not counted as a query.
_TRANSACTION_SQL = re.compile(
    r"^\s*(?:BEGIN|COMMIT|ROLLBACK|RELEASE SAVEPOINT|SAVEPOINT)", re.IGNORECASE
)


@dataclass
class QueryCounter:
    """Statements observed on an engine while the counter was attached."""

    statements: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.statements)

    def exceeds(self, limit: int) -> bool:
        return self.count > limit


@contextlib.contextmanager
def count_queries(engine: Engine) -> Generator[QueryCounter, None, None]:
    """
    Count SQL statements executed on `engine` inside the block.
    """
    counter = QueryCounter()

    def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        if not _TRANSACTION_SQL.match(statement):
            counter.statements.append(statement)

    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    try:
        yield counter
    finally:
        event.remove(engine, "before_cursor_execute", _before_cursor_execute)


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    query_count: Optional[int] = field(default=None)
    peak_rss_bytes: Optional[int] = field(default=None)
    peak_traced_bytes: Optional[int] = field(default=None)
    cpu_percent: Optional[float] = field(default=None)
    extra: dict[str, Any] = field(default_factory=dict)


@contextlib.contextmanager
def profile_block(
    label: str,
    engine: Optional[Engine] = None,
    sample_interval_ms: int = 50,
    enable_tracemalloc: bool = True,
) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block (usually a challenge key).
    engine : Engine | None
        When given, SQL statements executed on it are counted.
    sample_interval_ms : int
        Interval in milliseconds for RSS sampling.
    enable_tracemalloc : bool
        Whether to enable tracemalloc for tracking Python-level allocations.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    peak_rss = process.memory_info().rss
    stop_sampling = threading.Event()

    def _sample_memory() -> None:
        """Background thread to sample RSS at regular intervals."""
        nonlocal peak_rss
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                return
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    tracemalloc_was_running = tracemalloc.is_tracing()
    if enable_tracemalloc and not tracemalloc_was_running:
        tracemalloc.start()

    # CPU percent needs a priming call
    process.cpu_percent(interval=None)

    sampler = threading.Thread(target=_sample_memory, daemon=True)
    sampler.start()

    with contextlib.ExitStack() as stack:
        counter = stack.enter_context(count_queries(engine)) if engine is not None else None
        stats.start_ts = time.perf_counter()
        try:
            yield stats
        finally:
            stats.end_ts = time.perf_counter()
            stats.duration_seconds = stats.end_ts - stats.start_ts

            stop_sampling.set()
            sampler.join(timeout=1.0)

            stats.peak_rss_bytes = peak_rss if peak_rss > 0 else None
            stats.cpu_percent = process.cpu_percent(interval=None)
            if counter is not None:
                stats.query_count = counter.count

            if enable_tracemalloc and tracemalloc.is_tracing():
                _, peak_traced = tracemalloc.get_traced_memory()
                stats.peak_traced_bytes = peak_traced
                # Stop tracemalloc only if we started it
                if not tracemalloc_was_running:
                    tracemalloc.stop()


__all__ = ["ProfileStats", "QueryCounter", "count_queries", "profile_block"]
