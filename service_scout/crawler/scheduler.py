"""
Batch scheduler: a fixed-size window of concurrent workers, batch after batch.
"""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from service_scout.logger import logger

__all__ = ["ProgressCallback", "run_batched"]

T = TypeVar("T")
R = TypeVar("R")

ProgressCallback = Callable[[int, int], None]


async def run_batched(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    *,
    concurrency: int,
    delay: float = 0.0,
    progress: Optional[ProgressCallback] = None,
) -> List[R]:
    """Run *worker* over *items* in consecutive slices of *concurrency*.

    A slice runs inside a task group and finishes before the next one starts;
    *delay* seconds pass between slices (not after the last). Results keep
    the order of *items*. *progress* receives ``(done, total)`` after every
    slice. Workers are expected to classify their own failures; an exception
    escaping a worker aborts the whole run.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    total = len(items)
    results: List[R] = []
    for start in range(0, total, concurrency):
        batch = items[start : start + concurrency]
        async with asyncio.TaskGroup() as tg:
            tasks = [tg.create_task(worker(item)) for item in batch]
        results.extend(task.result() for task in tasks)

        done = start + len(batch)
        logger.debug("Batch done: %d/%d", done, total)
        if progress is not None:
            progress(done, total)
        if done < total and delay > 0:
            await asyncio.sleep(delay)
    return results
