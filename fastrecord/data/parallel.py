"""
fastrecord Batch Processor
==========================
Order-preserving parallel map used by the read and encode phases.

How It Works:
    The mapped function (usually a bound method of a builder, carrying the
    read-only vocabulary and label maps) is shipped to each worker ONCE
    through the pool initializer. Items are then streamed to the workers in
    chunks with `Pool.imap`, which yields results in input order no matter
    which worker finished first. Row order in the output file therefore
    always equals line order in the input file.

    With one worker everything runs in-process, which is also what the
    tests use for speed.

Errors:
    An exception raised by `fn` inside a worker is re-raised in the caller
    when its result is reached; the pool is torn down and the split fails.
"""

from __future__ import annotations

import logging
import multiprocessing as mp
import os
from typing import Any, Callable, Optional, Sequence

from tqdm import tqdm

logger = logging.getLogger(__name__)

DEFAULT_CHUNKSIZE = 256

_WORKER_FN: Optional[Callable[[Any], Any]] = None


def _worker_init(fn: Callable[[Any], Any]) -> None:
    global _WORKER_FN
    _WORKER_FN = fn


def _worker_apply(item: Any) -> Any:
    if _WORKER_FN is None:
        raise RuntimeError("Worker function not initialized.")
    return _WORKER_FN(item)


def resolve_workers(num_workers: int) -> int:
    """0 means one worker per CPU."""
    if num_workers < 0:
        raise ValueError(f"num_workers must be >= 0, got {num_workers}")
    if num_workers == 0:
        return os.cpu_count() or 1
    return num_workers


def parallel_map(
    fn: Callable[[Any], Any],
    items: Sequence[Any],
    num_workers: int = 0,
    desc: Optional[str] = None,
    chunksize: int = DEFAULT_CHUNKSIZE,
    show_progress: bool = True,
) -> list[Any]:
    """
    Apply `fn` to every item, in parallel, keeping input order.

    Parameters
    ----------
    fn : callable
        Picklable function of one argument. Must not depend on mutable
        state shared between items.
    items : sequence
        Inputs. Each must be picklable when more than one worker is used.
    num_workers : int
        Worker processes; 0 = one per CPU, 1 = run in-process.
    desc : str or None
        Progress bar label.
    chunksize : int
        Items sent to a worker per task.
    show_progress : bool
        Whether to draw a tqdm progress bar.

    Returns
    -------
    list
        `[fn(item) for item in items]`, in the same order.
    """
    workers = min(resolve_workers(num_workers), max(len(items), 1))

    progress = tqdm(total=len(items), desc=desc, disable=not show_progress, unit="it")
    results: list[Any] = []
    try:
        if workers == 1:
            for item in items:
                results.append(fn(item))
                progress.update(1)
        else:
            logger.debug(f"Mapping {len(items):,} items over {workers} workers")
            ctx = mp.get_context("spawn")
            with ctx.Pool(
                processes=workers,
                initializer=_worker_init,
                initargs=(fn,),
            ) as pool:
                for result in pool.imap(_worker_apply, items, chunksize=chunksize):
                    results.append(result)
                    progress.update(1)
    finally:
        progress.close()

    return results
