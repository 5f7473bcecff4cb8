from __future__ import annotations

from fastapi import HTTPException, status
from fastapi.responses import Response

from linkimport.imports.models import (
    DetectedColumn,
    DeviceKind,
    GeoKind,
    ImportIssue,
    ImportParseError,
    RowResult,
)
from linkimport.imports.preview import ImportPreview
from linkimport.imports.reporter import ImportReporter
from linkimport.imports.runs import ImportRun


def parse_error_exception(exc: ImportParseError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": str(exc), "location": exc.location},
    )


def detected_payload(column: DetectedColumn) -> dict[str, str]:
    if isinstance(column.kind, GeoKind):
        return {"header": column.header, "kind": "geo", "value": column.kind.country_code}
    if isinstance(column.kind, DeviceKind):
        return {"header": column.header, "kind": "device", "value": column.kind.device_type}
    raise TypeError(f"Unsupported column kind: {column.kind!r}")


def issue_payload(issue: ImportIssue) -> dict[str, str]:
    return issue.__dict__


def preview_payload(preview: ImportPreview) -> dict[str, object]:
    return {
        "headers": preview.headers,
        "delimiter": preview.delimiter,
        "total_rows": preview.total_rows,
        "mapping": preview.mapping,
        "detected": [detected_payload(column) for column in preview.detected],
        "rows": [
            {
                "row_index": row.row_index,
                "values": row.values,
                "warnings": [issue_payload(issue) for issue in row.warnings],
            }
            for row in preview.rows
        ],
    }


def row_result_payload(result: RowResult) -> dict[str, object]:
    return {
        "row": result.row_index,
        "success": result.success,
        "reason": result.reason,
        "slug": result.created_identifier,
    }


def run_payload(run: ImportRun, include_results: bool = True) -> dict[str, object]:
    reporter = ImportReporter(run.summary)
    payload: dict[str, object] = {
        "run_id": run.run_id,
        "status": run.status,
        "cancel_requested": run.cancel_event.is_set(),
        **reporter.counters(),
    }
    if include_results:
        payload["results"] = [row_result_payload(result) for result in run.summary.results]
    return payload


def csv_download(filename: str, content: str) -> Response:
    response = Response(content=content, media_type="text/csv")
    response.headers["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response
