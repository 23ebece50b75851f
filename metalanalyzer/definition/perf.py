"""Runtime counters for go-to-definition requests."""

from __future__ import annotations

import logging
import threading
from datetime import timedelta

logger = logging.getLogger(__name__)

_SUMMARY_EVERY = 200


class GotoDefPerf:
    """Counts requests, hits, index sources and latency of go-to-definition."""

    def __init__(self) -> None:
        self.requests = 0
        self.hits = 0
        self.misses = 0
        self.memory_hits = 0
        self.disk_hits = 0
        self.ast_dump_hits = 0
        self.total_elapsed_ns = 0
        self._lock = threading.Lock()

    def record(self, elapsed: float | timedelta, index_source: str | None, has_result: bool) -> None:
        """Record one request; ``elapsed`` is seconds or a timedelta.

        ``index_source`` is ``"memory"``, ``"disk"``, ``"ast_dump"`` or None.
        A summary is logged every 200 requests.
        """
        seconds = elapsed.total_seconds() if isinstance(elapsed, timedelta) else float(elapsed)
        with self._lock:
            self.requests += 1
            requests = self.requests
            if has_result:
                self.hits += 1
            else:
                self.misses += 1
            if index_source == "memory":
                self.memory_hits += 1
            elif index_source == "disk":
                self.disk_hits += 1
            elif index_source == "ast_dump":
                self.ast_dump_hits += 1
            self.total_elapsed_ns += max(int(seconds * 1_000_000_000), 0)
        if requests % _SUMMARY_EVERY == 0:
            self.log_summary()

    def summary(self) -> str:
        """Return a one-line summary of the counters with a recommendation."""
        with self._lock:
            requests = self.requests
            hits, misses = self.hits, self.misses
            memory, disk, ast_dump = self.memory_hits, self.disk_hits, self.ast_dump_hits
            total_ns = self.total_elapsed_ns
        if requests == 0:
            return "[perf][goto-def] no requests recorded yet"

        avg_ms = total_ns / requests / 1_000_000.0
        ast_dump_ratio = ast_dump / requests
        if ast_dump_ratio < 0.03 and avg_ms < 25.0:
            recommendation = "Incremental DB likely not justified yet; current cache hit profile is strong."
        elif ast_dump_ratio > 0.15 or avg_ms > 75.0:
            recommendation = "Incremental DB may be justified; cold-path cost is significant."
        else:
            recommendation = (
                "Profile is mixed; collect more usage data before committing to incremental DB work."
            )
        return (
            f"[perf][goto-def] requests={requests}, hits={hits}, misses={misses}, "
            f"source(memory={memory}, disk={disk}, ast_dump={ast_dump}), "
            f"avg_ms={avg_ms:.2f}. {recommendation}"
        )

    def log_summary(self) -> None:
        """Log the current summary at info level."""
        logger.info("%s", self.summary())