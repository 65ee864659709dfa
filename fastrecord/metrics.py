"""
fastrecord Build Metrics
========================
Context managers timing build phases and sampling peak memory.

`Timer` measures one phase (a split, a whole build). If the phase reports
how many records it produced via `t.rows`, throughput is logged too.

`MemoryTracker` wraps tracemalloc. It only sees allocations of the main
process, so with worker processes it reports the reading, vocabulary and
serialization side of a build, not the encoding done in the pool.

Usage:
    >>> with Timer("train split") as t:
    ...     t.rows = builder.save_dataset(records, "train.records.ipc")
    >>> with MemoryTracker("classifier build") as tracker:
    ...     builder.build()
    >>> tracker.peak_mb
"""

from __future__ import annotations

import logging
import time
import tracemalloc
from typing import Optional

logger = logging.getLogger(__name__)

_MB = 1024 * 1024


class Timer:
    """
    Wall-clock timer for one build phase.

    Attributes
    ----------
    elapsed : float
        Seconds spent inside the block, set on exit.
    rows : int or None
        Records produced by the phase; set by the caller inside the block.
    """

    def __init__(self, label: str):
        self.label = label
        self.elapsed: float = 0.0
        self.rows: Optional[int] = None
        self._start: float = 0.0

    @property
    def rows_per_second(self) -> Optional[float]:
        if self.rows is None or self.elapsed <= 0:
            return None
        return self.rows / self.elapsed

    def __enter__(self) -> Timer:
        self._start = time.perf_counter()
        return self

    def __exit__(self, *args) -> None:
        self.elapsed = time.perf_counter() - self._start
        rate = self.rows_per_second
        if rate is None:
            logger.info(f"[{self.label}] {self.elapsed:.2f}s")
        else:
            logger.info(
                f"[{self.label}] {self.rows:,} records in {self.elapsed:.2f}s "
                f"({rate:,.0f} records/s)"
            )


class MemoryTracker(Timer):
    """
    `Timer` that also records the peak traced memory of the block.

    Nested use is not supported: tracemalloc is process-wide, and the
    tracker stops it on exit.
    """

    def __init__(self, label: str):
        super().__init__(label)
        self.peak_mb: float = 0.0

    def __enter__(self) -> MemoryTracker:
        tracemalloc.start()
        super().__enter__()
        return self

    def __exit__(self, *args) -> None:
        _, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()
        self.peak_mb = peak / _MB
        super().__exit__(*args)
        logger.info(f"[{self.label}] peak traced memory {self.peak_mb:.1f}MB")

    def __repr__(self) -> str:
        return (
            f"MemoryTracker({self.label}: peak={self.peak_mb:.1f}MB, "
            f"time={self.elapsed:.2f}s)"
        )
