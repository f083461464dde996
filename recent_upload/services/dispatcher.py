"""Bounded worker pool for self-expanding directory work, plus quiescence detection."""

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from recent_upload.config import DEFAULT_POLL_INTERVAL

logger = logging.getLogger(__name__)


class WorkDispatcher:
    """Runs submitted tasks on a fixed number of worker threads.

    Tasks may submit further tasks while they run. Two counters track the
    pool: ``queued`` (submitted, not yet started) and ``active`` (running).
    A task's children are counted as queued before the task itself stops
    being active, so both counters reading zero means no more work can
    appear.
    """

    def __init__(self, max_workers: int, thread_name_prefix: str = "upload-worker") -> None:
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix=thread_name_prefix
        )
        self._idle = threading.Condition(threading.Lock())
        self._queued = 0
        self._active = 0

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        """Queue ``fn(*args)``. Never blocks; the backlog is unbounded.

        Raises:
            RuntimeError: If the dispatcher has been shut down
        """
        with self._idle:
            self._queued += 1
        try:
            self._executor.submit(self._run, fn, args)
        except RuntimeError:
            with self._idle:
                self._queued -= 1
                self._notify_if_idle()
            raise

    def _run(self, fn: Callable[..., Any], args: tuple[Any, ...]) -> None:
        with self._idle:
            self._queued -= 1
            self._active += 1
        try:
            fn(*args)
        except Exception:
            logger.exception("Task %s failed", getattr(fn, "__name__", fn))
        finally:
            with self._idle:
                self._active -= 1
                self._notify_if_idle()

    def _notify_if_idle(self) -> None:
        if self._queued == 0 and self._active == 0:
            self._idle.notify_all()

    def active_count(self) -> int:
        """Number of tasks currently executing."""
        with self._idle:
            return self._active

    def queue_size(self) -> int:
        """Number of tasks submitted but not yet started."""
        with self._idle:
            return self._queued

    def snapshot(self) -> tuple[int, int]:
        """Return ``(active, queued)`` read under one lock."""
        with self._idle:
            return self._active, self._queued

    def is_idle(self) -> bool:
        """True when nothing is queued and nothing is executing."""
        with self._idle:
            return self._queued == 0 and self._active == 0

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until the pool is idle or ``timeout`` elapses.

        Returns:
            True if the pool was idle when the wait ended
        """
        with self._idle:
            return self._idle.wait_for(
                lambda: self._queued == 0 and self._active == 0, timeout=timeout
            )

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting submissions and release the worker threads.

        Call only after quiescence has been observed; queued tasks are not
        cancelled, but tasks running after this point cannot submit children.
        """
        self._executor.shutdown(wait=wait)


def await_quiescence(
    dispatcher: WorkDispatcher,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    on_sample: Callable[[int, int], None] | None = None,
) -> None:
    """Block the calling thread until the dispatcher has no queued or active tasks.

    Wakes as soon as both counters reach zero, and otherwise every
    ``poll_interval`` seconds to report the pool state through ``on_sample``.
    The final zero/zero sample is reported as well.

    Args:
        dispatcher: Pool to watch
        poll_interval: Seconds between pool-state samples
        on_sample: Callback receiving ``(active, queued)`` for each sample
    """
    while True:
        idle = dispatcher.wait_idle(timeout=poll_interval)
        active, queued = dispatcher.snapshot()
        if on_sample:
            on_sample(active, queued)
        if idle and active == 0 and queued == 0:
            return
