"""Accumulating timers for filesystem operations."""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Optional


logger = logging.getLogger(__name__)


class StopWatch:
    """Accumulates the duration of repeated operations.

    Usage:
        watch = StopWatch("os.link")
        with watch.measure():
            os.link(source, target)
        watch.log_summary()
    """

    def __init__(self, name: str, level: int = logging.INFO, add_file_sizes: bool = False):
        """Initialize the stopwatch.

        Args:
            name: Operation name used in the summary.
            level: Log level of the summary line.
            add_file_sizes: Also accumulate bytes passed to stop().
        """
        self.name = name
        self.level = level
        self.add_file_sizes = add_file_sizes
        self.count = 0
        self.total_seconds = 0.0
        self.total_bytes = 0
        self._started: Optional[float] = None

    def start(self) -> None:
        self._started = time.perf_counter()

    def stop(self, size: int = 0) -> float:
        """Stop the running measurement and return its duration."""
        if self._started is None:
            return 0.0
        elapsed = time.perf_counter() - self._started
        self._started = None
        self.count += 1
        self.total_seconds += elapsed
        if self.add_file_sizes:
            self.total_bytes += size
        return elapsed

    def cancel(self) -> None:
        """Drop a running measurement without recording it."""
        self._started = None

    @contextmanager
    def measure(self, size: int = 0) -> Iterator[None]:
        """Measure the enclosed block; failed blocks are not recorded."""
        self.start()
        try:
            yield
        except BaseException:
            self.cancel()
            raise
        self.stop(size)

    @property
    def average_seconds(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total_seconds / self.count

    def summary(self) -> str:
        text = f"{self.name}: {self.count} calls, {self.total_seconds:.3f}s total"
        if self.count:
            text += f", {self.average_seconds * 1000:.2f}ms avg"
        if self.add_file_sizes and self.total_seconds > 0:
            mb = self.total_bytes / (1024 * 1024)
            text += f", {mb:.1f} MB ({mb / self.total_seconds:.1f} MB/s)"
        return text

    def log_summary(self) -> None:
        if self.count:
            logger.log(self.level, self.summary())
