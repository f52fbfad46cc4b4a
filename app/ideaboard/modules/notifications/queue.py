from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

logger = logging.getLogger(__name__)


def _run_isolated(fn: Callable[..., Any], *args: Any) -> None:
    # A failing job is logged and dropped; it never reaches the submitter or sibling jobs.
    try:
        fn(*args)
    except Exception:
        logger.exception("Notification job %s failed", getattr(fn, "__name__", fn))


class NotificationQueue:
    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        raise NotImplementedError

    def shutdown(self, wait: bool = True) -> None:
        return None


class SyncQueue(NotificationQueue):
    """Runs jobs inline. Tests and one-off scripts."""

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        _run_isolated(fn, *args)


class ThreadQueue(NotificationQueue):
    """Runs jobs on a small worker pool so requests never wait on SMTP."""

    def __init__(self, workers: int = 4):
        self._executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="notify")

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        self._executor.submit(_run_isolated, fn, *args)

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)


def queue_from_config(config: dict) -> NotificationQueue:
    kind = (config.get("NOTIFY_QUEUE") or "thread").strip().lower()
    if kind == "sync":
        return SyncQueue()
    return ThreadQueue(workers=int(config.get("NOTIFY_WORKERS") or 4))
