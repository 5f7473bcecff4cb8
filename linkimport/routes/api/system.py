from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response

from linkimport import build_info, environment
from linkimport.imports.mapping import TargetField
from linkimport.imports.parsing import AUTO_DELIMITER, DELIMITER_NAMES
from linkimport.imports.uploads import describe_upload_limit

router = APIRouter()


@router.get("/health")
def health_check() -> Response:
    return JSONResponse(content=build_info.get_build_info())


@router.get("/config")
def import_config() -> dict[str, object]:
    max_bytes = environment.get_upload_max_bytes()
    return {
        "chunk_size": environment.get_chunk_size(),
        "upload_max_bytes": max_bytes,
        "upload_limit": describe_upload_limit(max_bytes),
        "service_configured": environment.get_service_url() is not None,
        "delimiters": [AUTO_DELIMITER, *sorted(name for name in DELIMITER_NAMES if name.isalpha())],
        "target_fields": [field.value for field in TargetField],
    }
