from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from urlhealth.checks.results import (
    CheckOutcome,
    CheckRecord,
    Failure,
    RawAttemptResult,
    Responded,
    Success,
)

logger = logging.getLogger(__name__)

# (url, timeout_s) -> one attempt
Prober = Callable[[str, float], RawAttemptResult]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Resolution:
    outcome: CheckOutcome
    attempts: int
    elapsed_s: float
    finished_at: datetime


def resolve_with_timing(
    prober: Prober,
    url: str,
    timeout_s: float,
    max_retries: int,
    clock: Callable[[], float] = time.perf_counter,
    now: Callable[[], datetime] = utcnow,
) -> Resolution:
    """
    Run the bounded retry loop for one target.

    At most max_retries + 1 sequential attempts, no delay between them.
    Elapsed time spans from the start of the first attempt to the end of the
    terminal one.
    """
    if max_retries < 0:
        raise ValueError(f"max_retries must be >= 0, got {max_retries}")

    start = clock()
    attempts = 0
    while True:
        attempts += 1
        raw = prober(url, timeout_s)
        if isinstance(raw, Responded):
            outcome: CheckOutcome = Success(raw.status_code)
            break
        if attempts > max_retries:
            outcome = Failure(raw.description)
            break
        logger.debug(
            "Retrying %s (attempt %d of %d): %s",
            url,
            attempts + 1,
            max_retries + 1,
            raw.description,
        )

    return Resolution(
        outcome=outcome,
        attempts=attempts,
        elapsed_s=clock() - start,
        finished_at=now(),
    )


def resolve(prober: Prober, url: str, timeout_s: float, max_retries: int) -> CheckOutcome:
    return resolve_with_timing(prober, url, timeout_s, max_retries).outcome


def check_target(
    prober: Prober,
    url: str,
    timeout_s: float,
    max_retries: int,
    clock: Callable[[], float] = time.perf_counter,
    now: Callable[[], datetime] = utcnow,
) -> CheckRecord:
    res = resolve_with_timing(prober, url, timeout_s, max_retries, clock=clock, now=now)
    return CheckRecord(
        url=url,
        outcome=res.outcome,
        elapsed_s=res.elapsed_s,
        timestamp=res.finished_at,
    )
