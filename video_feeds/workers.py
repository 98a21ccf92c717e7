"""Bounded thread pool that maps a task over a list of inputs."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from typing import Callable, List, Optional, Sequence, Tuple, TypeVar

from .errors import UpdateCancelledError, WorkerPoolError

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 30

# Interval at which a running pool re-checks the cancel event.
_POLL_SECONDS = 0.1

T_in = TypeVar("T_in")
R = TypeVar("R")


def run_concurrently(
    task: Callable[[T_in], R],
    inputs: Sequence[T_in],
    max_workers: int = DEFAULT_WORKERS,
    cancel: Optional[threading.Event] = None,
) -> Tuple[List[Optional[R]], List[Optional[Exception]]]:
    """Run ``task`` over ``inputs`` on at most ``max_workers`` threads.

    Returns two lists aligned with ``inputs``: the task results and the
    exceptions raised by individual tasks. Exactly one of the two is set per
    index. Raises WorkerPoolError when the pool cannot be started and
    UpdateCancelledError when ``cancel`` is set before all tasks finish.
    """
    if max_workers < 1:
        raise WorkerPoolError(f"max_workers must be positive, got {max_workers}")

    results: List[Optional[R]] = [None] * len(inputs)
    errors: List[Optional[Exception]] = [None] * len(inputs)
    if not inputs:
        return results, errors

    executor = concurrent.futures.ThreadPoolExecutor(
        max_workers=min(max_workers, len(inputs))
    )
    cancelled = False
    try:
        try:
            future_to_index = {
                executor.submit(task, item): index for index, item in enumerate(inputs)
            }
        except RuntimeError as exc:
            raise WorkerPoolError(f"cannot start worker pool: {exc}") from exc

        pending = set(future_to_index)
        while pending:
            if cancel is not None and cancel.is_set():
                cancelled = True
                for future in pending:
                    future.cancel()
                logger.info("Cancelled worker pool with %d pending tasks", len(pending))
                raise UpdateCancelledError("update cycle cancelled")

            done, pending = concurrent.futures.wait(
                pending,
                timeout=_POLL_SECONDS,
                return_when=concurrent.futures.FIRST_COMPLETED,
            )
            for future in done:
                index = future_to_index[future]
                try:
                    results[index] = future.result()
                except Exception as exc:  # noqa: BLE001 - reported per input
                    errors[index] = exc
    finally:
        executor.shutdown(wait=not cancelled, cancel_futures=cancelled)

    return results, errors
