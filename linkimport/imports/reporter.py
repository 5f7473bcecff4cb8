from __future__ import annotations

from linkimport.imports.models import ImportSummary
from linkimport.imports.parsing import DEFAULT_DELIMITER, serialize_rows

DIAGNOSTIC_HEADERS = ("Row", "Error")


class ImportReporter:
    """Read-only views over an import summary.

    Everything is computed from the summary on each call, so the reporter never
    disagrees with the counters it was built from.
    """

    def __init__(self, summary: ImportSummary) -> None:
        self._summary = summary

    @property
    def summary(self) -> ImportSummary:
        return self._summary

    def snapshot(self) -> ImportSummary:
        return self._summary.snapshot()

    def counters(self) -> dict[str, int]:
        summary = self._summary
        return {
            "total_rows": summary.total_rows,
            "processed_rows": summary.processed_rows,
            "pending_rows": summary.pending_rows,
            "success_count": summary.success_count,
            "error_count": summary.error_count,
        }

    def failed_rows(self) -> list[tuple[int, str]]:
        failures = [
            (result.row_index, result.reason or "")
            for result in self._summary.results
            if not result.success
        ]
        return sorted(failures, key=lambda item: item[0])

    def diagnostic_csv(self, delimiter: str = DEFAULT_DELIMITER) -> str:
        return serialize_rows(DIAGNOSTIC_HEADERS, self.failed_rows(), delimiter)
