"""Run every configured source concurrently and join reports in order."""

from __future__ import annotations

from collections.abc import Callable, Sequence
import concurrent.futures
from dataclasses import dataclass
import threading
import time

from core.aggregate import unavailable_report
from core.logging import logger as LOGGER
from core.models import SourceReport


@dataclass(frozen=True)
class SourceTask:
    """One source to collect: display title plus the callable producing its report."""

    title: str
    collect: Callable[[], SourceReport]
    timeout_s: float | None = None


def _start(task: SourceTask) -> concurrent.futures.Future[SourceReport]:
    """Run ``task.collect`` on a daemon thread and return a future for its report.

    Daemon threads are not joined at interpreter exit, so a hung provider
    cannot hold the process open after the report is printed.
    """

    future: concurrent.futures.Future[SourceReport] = concurrent.futures.Future()
    future.set_running_or_notify_cancel()

    def _run() -> None:
        try:
            report = task.collect()
        except Exception as exc:  # noqa: BLE001 - handed to the joining thread
            future.set_exception(exc)
        else:
            future.set_result(report)

    thread = threading.Thread(target=_run, name=f"pimotd-{task.title}", daemon=True)
    thread.start()
    return future


def run_sources(tasks: Sequence[SourceTask], timeout_s: float = 5.0) -> list[SourceReport]:
    """Collect all sources and return their reports in task order.

    Each task waits at most its own ``timeout_s`` (or the shared default),
    measured from when collection started. A task that times out or raises
    still yields a report, so the result always has one entry per task.
    """

    started = time.monotonic()
    futures = [_start(task) for task in tasks]
    reports: list[SourceReport] = []
    for task, future in zip(tasks, futures):
        budget = task.timeout_s if task.timeout_s is not None else timeout_s
        remaining = max(0.0, started + budget - time.monotonic())
        reports.append(_await_report(task, future, remaining))
    return reports


def _await_report(
    task: SourceTask,
    future: concurrent.futures.Future[SourceReport],
    remaining_s: float,
) -> SourceReport:
    try:
        return future.result(timeout=remaining_s)
    except concurrent.futures.TimeoutError:
        LOGGER.warning("[collector] %s timed out", task.title)
        return unavailable_report(task.title, "timed out")
    except Exception as exc:  # noqa: BLE001 - one source must not abort the document
        LOGGER.exception("[collector] %s failed", task.title)
        return unavailable_report(task.title, f"Source raised exception: {exc}", label="error")
