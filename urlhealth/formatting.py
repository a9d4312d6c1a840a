from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from urlhealth.checks.results import CheckRecord


def record_to_row(record: CheckRecord) -> dict[str, Any]:
    return {
        "url": record.url,
        "status": record.status,
        # Whole seconds, truncated.
        "response_time": int(record.elapsed_s),
        "timestamp": record.timestamp.isoformat(),
    }


def records_to_rows(records: Iterable[CheckRecord]) -> list[dict[str, Any]]:
    return [record_to_row(r) for r in records]


def write_status_file(records: Iterable[CheckRecord], path: str | Path) -> Path:
    path = Path(path)
    path.write_text(json.dumps(records_to_rows(records), indent=2), encoding="utf-8")
    return path


def format_summary(records: list[CheckRecord]) -> str:
    responded = sum(1 for r in records if r.ok)
    failed = len(records) - responded
    return f"Checked {len(records)} targets: {responded} responded, {failed} failed"
