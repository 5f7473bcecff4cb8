from __future__ import annotations

import json
import logging
from typing import Optional

from fastapi import (
    APIRouter,
    BackgroundTasks,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    UploadFile,
    status,
)
from pydantic import ValidationError

from linkimport import environment
from linkimport.dependencies import SubmitterFactory, get_run_store, get_submitter_factory
from linkimport.imports.mapping import (
    ResolvedMapping,
    parse_column_mapping,
    parse_extraction_rules,
    require_destination,
    resolve_mapping,
)
from linkimport.imports.models import ExtractionRule, ImportParseError, RawTable
from linkimport.imports.parsing import decode_upload, parse_table
from linkimport.imports.pipeline import ChunkSubmitter, run_import
from linkimport.imports.preview import DEFAULT_PREVIEW_ROWS, build_preview
from linkimport.imports.reporter import ImportReporter
from linkimport.imports.runs import ImportRunStore
from linkimport.imports.uploads import UploadTooLargeError, read_upload_limited

from .schemas import ImportOptions, ImportRunOptions
from .utils import csv_download, parse_error_exception, preview_payload, run_payload

logger = logging.getLogger(__name__)

router = APIRouter()


def _validated(model, **values):
    try:
        return model(**values)
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=json.loads(exc.json(include_url=False)),
        ) from exc


async def _load_table(
    file: UploadFile, options: ImportOptions
) -> tuple[RawTable, ResolvedMapping, dict[str, ExtractionRule]]:
    try:
        payload = await read_upload_limited(file)
    except UploadTooLargeError as exc:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=str(exc),
        ) from exc
    try:
        table = parse_table(decode_upload(payload), options.delimiter)
        resolved = resolve_mapping(table.headers, parse_column_mapping(options.column_mapping))
        rules = parse_extraction_rules(options.extraction_rules, resolved.mapping)
    except ImportParseError as exc:
        raise parse_error_exception(exc) from exc
    return table, resolved, rules


def _execute_run(
    store: ImportRunStore,
    run_id: str,
    table: RawTable,
    resolved: ResolvedMapping,
    submit: ChunkSubmitter,
    chunk_size: int,
) -> None:
    run = store.get(run_id)
    if run is None:
        return
    try:
        summary = run_import(
            table,
            resolved.mapping,
            resolved.detected,
            submit=submit,
            chunk_size=chunk_size,
            on_snapshot=lambda snapshot: store.update(run_id, snapshot),
            cancel=run.cancel_event.is_set,
        )
        store.update(run_id, summary)
    except Exception:
        logger.exception("Import run %s stopped unexpectedly", run_id)
        store.mark_finished(run_id)


@router.post("/import/preview")
async def preview_import(
    file: UploadFile = File(...),
    delimiter: str = Form(default="auto"),
    column_mapping: str = Form(default="{}"),
    extraction_rules: str = Form(default="{}"),
    limit: int = Query(default=DEFAULT_PREVIEW_ROWS, ge=0, le=100),
):
    options = _validated(
        ImportOptions,
        delimiter=delimiter,
        column_mapping=column_mapping,
        extraction_rules=extraction_rules,
    )
    table, resolved, rules = await _load_table(file, options)
    return preview_payload(build_preview(table, resolved, rules, limit=limit))


@router.post("/import/runs", status_code=status.HTTP_202_ACCEPTED)
async def start_import_run(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    collection_id: str = Form(...),
    delimiter: str = Form(default="auto"),
    column_mapping: str = Form(default="{}"),
    extraction_rules: str = Form(default="{}"),
    chunk_size: Optional[int] = Form(default=None),
    store: ImportRunStore = Depends(get_run_store),
    submitter_factory: SubmitterFactory = Depends(get_submitter_factory),
):
    options = _validated(
        ImportRunOptions,
        collection_id=collection_id,
        delimiter=delimiter,
        column_mapping=column_mapping,
        extraction_rules=extraction_rules,
        chunk_size=chunk_size,
    )
    table, resolved, rules = await _load_table(file, options)
    try:
        require_destination(resolved.mapping)
    except ImportParseError as exc:
        raise parse_error_exception(exc) from exc

    submit = submitter_factory(options.collection_id, resolved.mapping, rules)
    run = store.create(total_rows=len(table.rows))
    logger.info(
        "Queued import run %s: %s rows for collection %s",
        run.run_id,
        len(table.rows),
        options.collection_id,
    )
    background_tasks.add_task(
        _execute_run,
        store,
        run.run_id,
        table,
        resolved,
        submit,
        options.chunk_size or environment.get_chunk_size(),
    )
    return run_payload(run, include_results=False)


def _require_run(store: ImportRunStore, run_id: str):
    run = store.get(run_id)
    if run is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Import run not found.")
    return run


@router.get("/import/runs/{run_id}")
def get_import_run(
    run_id: str,
    include_results: bool = Query(default=True),
    store: ImportRunStore = Depends(get_run_store),
):
    return run_payload(_require_run(store, run_id), include_results=include_results)


@router.post("/import/runs/{run_id}/cancel")
def cancel_import_run(run_id: str, store: ImportRunStore = Depends(get_run_store)):
    _require_run(store, run_id)
    store.request_cancel(run_id)
    return run_payload(_require_run(store, run_id), include_results=False)


@router.get("/import/runs/{run_id}/errors.csv")
def download_import_errors(run_id: str, store: ImportRunStore = Depends(get_run_store)):
    run = _require_run(store, run_id)
    return csv_download(
        f"import-{run.run_id}-errors.csv",
        ImportReporter(run.summary).diagnostic_csv(),
    )
