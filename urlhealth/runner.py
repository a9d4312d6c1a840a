from __future__ import annotations

import logging
import queue
import threading
import time
from dataclasses import dataclass
from functools import partial
from typing import Callable, Sequence

from urlhealth.checks.http_check import build_session, probe
from urlhealth.checks.results import CheckRecord
from urlhealth.checks.retry import Prober, check_target
from urlhealth.models import RunConfig

logger = logging.getLogger(__name__)

_DONE = object()


class WorkerError(RuntimeError):
    pass


@dataclass(frozen=True)
class _WorkerCrash:
    worker_index: int
    error: BaseException


def partition(n: int, workers: int) -> list[range]:
    """Worker i gets indices i, i+W, i+2W, ... below n."""
    if workers < 1:
        raise ValueError(f"workers must be >= 1, got {workers}")
    return [range(i, n, workers) for i in range(workers)]


def _work(
    worker_index: int,
    assignment: range,
    targets: Sequence[str],
    check: Callable[[str], CheckRecord],
    results: queue.Queue,
) -> None:
    try:
        for j in assignment:
            record = check(targets[j])
            logger.debug(
                "worker %d finished %s in %.3fs: %s",
                worker_index,
                record.url,
                record.elapsed_s,
                record.status,
            )
            results.put(record)
    except Exception as e:
        logger.exception("Worker %d crashed", worker_index)
        results.put(_WorkerCrash(worker_index, e))
    finally:
        # Always sent, so the collector's countdown reaches zero.
        results.put(_DONE)


def dispatch(
    targets: Sequence[str],
    workers: int,
    check: Callable[[str], CheckRecord],
    results: queue.Queue,
) -> list[threading.Thread]:
    threads = []
    for i, assignment in enumerate(partition(len(targets), workers)):
        t = threading.Thread(
            target=_work,
            args=(i, assignment, targets, check, results),
            name=f"urlhealth-worker-{i}",
        )
        t.start()
        threads.append(t)
    return threads


def collect(results: queue.Queue, workers: int, expected: int) -> list[CheckRecord]:
    """
    Drain results until every worker has signalled completion.

    Records are returned in arrival order.
    """
    records: list[CheckRecord] = []
    crashes: list[_WorkerCrash] = []
    remaining = workers
    while remaining:
        item = results.get()
        if item is _DONE:
            remaining -= 1
        elif isinstance(item, _WorkerCrash):
            crashes.append(item)
        else:
            records.append(item)

    if crashes:
        first = crashes[0]
        raise WorkerError(
            f"{len(crashes)} worker(s) failed; worker {first.worker_index}: "
            f"{first.error.__class__.__name__}: {first.error}"
        ) from first.error
    if len(records) != expected:
        raise WorkerError(f"Expected {expected} results, collected {len(records)}")
    return records


def run_checks(
    targets: Sequence[str],
    config: RunConfig,
    prober: Prober | None = None,
    clock: Callable[[], float] = time.perf_counter,
) -> list[CheckRecord]:
    targets = tuple(targets)
    if prober is None:
        with build_session(config.workers, config.user_agent) as session:
            return run_checks(
                targets, config, prober=partial(probe, session), clock=clock
            )

    check = partial(
        check_target,
        prober,
        timeout_s=config.timeout_s,
        max_retries=config.retries,
        clock=clock,
    )
    results: queue.Queue = queue.Queue()

    logger.info(
        "Checking %d targets with %d workers (timeout=%ss, retries=%d)",
        len(targets),
        config.workers,
        config.timeout_s,
        config.retries,
    )
    threads = dispatch(targets, config.workers, check, results)
    records = collect(results, config.workers, expected=len(targets))
    for t in threads:
        t.join()

    failed = [r for r in records if not r.ok]
    for r in failed:
        logger.warning("%s unreachable: %s", r.url, r.status)
    logger.info(
        "Run complete: %d responded, %d failed", len(records) - len(failed), len(failed)
    )
    return records
