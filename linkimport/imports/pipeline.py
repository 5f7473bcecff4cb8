from __future__ import annotations

import logging
from typing import Callable, Iterator, Mapping, Optional, Sequence

from linkimport.imports.mapping import FieldTarget, merge_detected, require_destination
from linkimport.imports.models import (
    ChunkResponse,
    ChunkTransportError,
    DetectedColumn,
    ImportChunk,
    ImportSummary,
    RawTable,
    RowResult,
    RowValidationError,
)
from linkimport.imports.parsing import DEFAULT_DELIMITER, serialize_rows

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 100
CHUNK_DELIMITER = DEFAULT_DELIMITER

ChunkSubmitter = Callable[[str], ChunkResponse]
ProgressCallback = Callable[[int, int], None]
SnapshotCallback = Callable[[ImportSummary], None]
CancelCheck = Callable[[], bool]


def iter_chunks(table: RawTable, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[ImportChunk]:
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")
    headers = tuple(table.headers)
    for number, start in enumerate(range(0, len(table.rows), chunk_size), start=1):
        rows = tuple(tuple(row) for row in table.rows[start : start + chunk_size])
        yield ImportChunk(number=number, start=start, headers=headers, rows=rows)


def check_row_width(row: Sequence[str], width: int, row_index: int) -> None:
    if len(row) > width:
        raise RowValidationError(
            f"Row has {len(row)} fields but the header has {width}.",
            row_index=row_index,
        )


def _fold_response(
    chunk: ImportChunk,
    submitted: list[int],
    response: ChunkResponse,
) -> list[RowResult]:
    if not isinstance(response, ChunkResponse):
        raise ChunkTransportError(f"unexpected response type {type(response).__name__}")

    by_position: dict[int, RowResult] = {}
    for remote in response.results:
        if not 0 <= remote.row < len(submitted):
            logger.warning(
                "Chunk %s: ignoring result for unknown row %s", chunk.number, remote.row
            )
            continue
        if remote.row in by_position:
            continue
        by_position[remote.row] = RowResult(
            row_index=submitted[remote.row],
            success=remote.success,
            reason=None if remote.success else (remote.reason or "Rejected by link service."),
            created_identifier=remote.slug if remote.success else None,
        )

    folded: list[RowResult] = []
    for position, row_index in enumerate(submitted):
        result = by_position.get(position)
        if result is None:
            result = RowResult(
                row_index=row_index,
                success=False,
                reason="No result returned for row.",
            )
        folded.append(result)
    return folded


def _chunk_failure(chunk: ImportChunk, row_indexes: list[int], cause: str) -> list[RowResult]:
    reason = f"chunk {chunk.number} failed: {cause}"
    return [RowResult(row_index=index, success=False, reason=reason) for index in row_indexes]


def _process_chunk(
    summary: ImportSummary,
    chunk: ImportChunk,
    width: int,
    submit: ChunkSubmitter,
) -> None:
    rejected: dict[int, RowResult] = {}
    submitted: list[int] = []
    payload_rows: list[tuple[str, ...]] = []
    for offset, row in enumerate(chunk.rows):
        row_index = chunk.start + offset
        try:
            check_row_width(row, width, row_index)
        except RowValidationError as exc:
            rejected[row_index] = RowResult(row_index=row_index, success=False, reason=str(exc))
            continue
        submitted.append(row_index)
        payload_rows.append(row)

    outcomes: dict[int, RowResult] = dict(rejected)
    if submitted:
        chunk_text = serialize_rows(chunk.headers, payload_rows, CHUNK_DELIMITER)
        try:
            response = submit(chunk_text)
            folded = _fold_response(chunk, submitted, response)
        except ChunkTransportError as exc:
            logger.warning("Chunk %s failed: %s", chunk.number, exc)
            folded = _chunk_failure(chunk, submitted, str(exc))
        except Exception as exc:
            logger.exception("Chunk %s failed with an unexpected error", chunk.number)
            folded = _chunk_failure(chunk, submitted, str(exc) or type(exc).__name__)
        for result in folded:
            outcomes[result.row_index] = result

    for row_index in range(chunk.start, chunk.end):
        summary.record(outcomes[row_index])


def run_import(
    table: RawTable,
    mapping: Mapping[str, FieldTarget],
    detected: Sequence[DetectedColumn] = (),
    *,
    submit: ChunkSubmitter,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    on_progress: Optional[ProgressCallback] = None,
    on_snapshot: Optional[SnapshotCallback] = None,
    cancel: Optional[CancelCheck] = None,
) -> ImportSummary:
    """Submit ``table`` chunk by chunk and collect one result per attempted row.

    Missing destination mapping raises before anything is sent. After that no
    error escapes: a failed chunk marks its own rows failed and the run moves
    on. Chunks are prepared lazily and sent one at a time; ``cancel`` is only
    consulted between chunks, so rows of chunks never started are absent from
    ``results`` rather than reported as failures.
    """
    require_destination(merge_detected(mapping, detected))
    if chunk_size < 1:
        raise ValueError("chunk_size must be positive")

    summary = ImportSummary(total_rows=len(table.rows))
    logger.info(
        "Starting import of %s rows in chunks of %s", summary.total_rows, chunk_size
    )
    for chunk in iter_chunks(table, chunk_size):
        if cancel is not None and cancel():
            summary.cancelled = True
            logger.info(
                "Import cancelled before chunk %s; %s rows not attempted",
                chunk.number,
                summary.pending_rows,
            )
            break

        errors_before = summary.error_count
        _process_chunk(summary, chunk, table.width, submit)
        logger.info(
            "Chunk %s done: rows %s-%s, %s failed",
            chunk.number,
            chunk.start,
            chunk.end - 1,
            summary.error_count - errors_before,
        )
        if on_progress is not None:
            on_progress(summary.processed_rows, summary.total_rows)
        if on_snapshot is not None:
            on_snapshot(summary.snapshot())

    summary.finished = True
    logger.info(
        "Import finished: %s succeeded, %s failed, %s not attempted",
        summary.success_count,
        summary.error_count,
        summary.pending_rows,
    )
    return summary
