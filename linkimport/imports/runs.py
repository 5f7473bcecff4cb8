from __future__ import annotations

import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Optional

from linkimport.imports.models import ImportSummary

RUN_TTL_SEC = 6 * 3600.0
RUN_MAX_ITEMS = 64

RUN_STATUS_RUNNING = "running"
RUN_STATUS_FINISHED = "finished"
RUN_STATUS_CANCELLED = "cancelled"


@dataclass
class ImportRun:
    run_id: str
    created: float
    summary: ImportSummary
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def status(self) -> str:
        if self.summary.cancelled:
            return RUN_STATUS_CANCELLED
        if self.summary.finished:
            return RUN_STATUS_FINISHED
        return RUN_STATUS_RUNNING


class ImportRunStore:
    """Keeps the latest summary snapshot and cancel flag of recent runs."""

    def __init__(self, ttl_sec: float = RUN_TTL_SEC, max_items: int = RUN_MAX_ITEMS) -> None:
        self._ttl_sec = ttl_sec
        self._max_items = max_items
        self._lock = threading.Lock()
        self._runs: dict[str, ImportRun] = {}

    def _prune(self, now: float) -> None:
        expired = [
            run_id
            for run_id, run in self._runs.items()
            if (now - run.created) >= self._ttl_sec and run.status != RUN_STATUS_RUNNING
        ]
        for run_id in expired:
            self._runs.pop(run_id, None)
        while len(self._runs) > self._max_items:
            finished = [run for run in self._runs.values() if run.status != RUN_STATUS_RUNNING]
            if not finished:
                break
            oldest = min(finished, key=lambda run: run.created)
            self._runs.pop(oldest.run_id, None)

    def create(self, total_rows: int) -> ImportRun:
        now = time.monotonic()
        run = ImportRun(
            run_id=uuid.uuid4().hex,
            created=now,
            summary=ImportSummary(total_rows=total_rows),
        )
        with self._lock:
            self._prune(now)
            self._runs[run.run_id] = run
        return run

    def get(self, run_id: str) -> Optional[ImportRun]:
        key = str(run_id or "").strip()
        if not key:
            return None
        with self._lock:
            self._prune(time.monotonic())
            run = self._runs.get(key)
            if run is None:
                return None
            return ImportRun(
                run_id=run.run_id,
                created=run.created,
                summary=run.summary.snapshot(),
                cancel_event=run.cancel_event,
            )

    def update(self, run_id: str, snapshot: ImportSummary) -> None:
        with self._lock:
            run = self._runs.get(run_id)
            if run is not None:
                run.summary = snapshot.snapshot()

    def mark_finished(self, run_id: str) -> None:
        with self._lock:
            run = self._runs.get(run_id)
            if run is not None:
                run.summary = run.summary.snapshot()
                run.summary.finished = True

    def request_cancel(self, run_id: str) -> bool:
        with self._lock:
            run = self._runs.get(run_id)
            if run is None:
                return False
            run.cancel_event.set()
            return True

    def clear(self) -> None:
        with self._lock:
            self._runs.clear()


run_store = ImportRunStore()
