from __future__ import annotations

import json
import threading
from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field

from ..utils.logging import get_logger, safe_file_name

logger = get_logger(__name__)


class StepStatus(str, Enum):
    STARTED = "started"
    PASSED = "passed"
    FAILED = "failed"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds")


class StepRecord(BaseModel):
    """
    One entry of the step ledger.

    Attributes:
      - scenario: Scenario the step belongs to.
      - step: Human-readable step name.
      - expected: Expected outcome, as phrased by the step.
      - actual: What was observed (filled in by the step body or the runner).
      - status: started | passed | failed.
      - error: Error message of a failed step.
      - url: Page URL after the step, when the session exposes one.
      - platform: Platform the step ran on.
      - timestamp: ISO-8601 UTC time the record was written.
    """

    scenario: str
    step: str
    expected: str | None = None
    actual: str | None = None
    status: StepStatus = StepStatus.STARTED
    error: str | None = None
    url: str | None = None
    platform: str | None = None
    timestamp: str = Field(default_factory=_now)


class TestLedger:
    """
    Thread-safe, append-only list of step records for a test run.

    Records are kept in the order they were added; `write_report` dumps them
    with a per-status summary into a JSON file.
    """

    __test__ = False

    def __init__(self, report_dir: str | Path = "artifacts/reports") -> None:
        self.report_dir = Path(report_dir)
        self._records: list[StepRecord] = []
        self._lock = threading.RLock()

    def add(self, record: StepRecord) -> StepRecord:
        with self._lock:
            self._records.append(record)
        logger.debug(
            "Step recorded",
            scenario=record.scenario,
            step=record.step,
            status=record.status.value,
            error=record.error,
        )
        return record

    def records(self) -> list[StepRecord]:
        with self._lock:
            return list(self._records)

    def for_scenario(self, scenario: str) -> list[StepRecord]:
        with self._lock:
            return [r for r in self._records if r.scenario == scenario]

    def last(self, scenario: str | None = None) -> StepRecord | None:
        with self._lock:
            pool = self._records if scenario is None else self.for_scenario(scenario)
            return pool[-1] if pool else None

    def summary(self) -> dict[str, int]:
        """Number of records per status, all statuses present."""
        with self._lock:
            counts = Counter(r.status.value for r in self._records)
        return {s.value: counts.get(s.value, 0) for s in StepStatus}

    def clear(self) -> None:
        with self._lock:
            self._records.clear()

    def write_report(self, name: str) -> Path:
        """
        Write the ledger to `<report_dir>/<name>_<timestamp>.json`.

        Args:
            name (str): Report name; unsafe filename characters are replaced.

        Returns:
            Path: The written file.
        """
        safe = safe_file_name(name)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
        self.report_dir.mkdir(parents=True, exist_ok=True)
        path = self.report_dir / f"{safe}_{stamp}.json"

        payload = {
            "name": name,
            "generated_at": _now(),
            "summary": self.summary(),
            "steps": [r.model_dump(mode="json") for r in self.records()],
        }
        path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info("Step report written", path=str(path), steps=len(payload["steps"]))
        return path


__all__ = ["StepStatus", "StepRecord", "TestLedger"]
