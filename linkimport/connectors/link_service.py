from __future__ import annotations

import json
import logging
import ssl
import uuid
from typing import Mapping, Optional
from urllib import error as urllib_error
from urllib import request as urllib_request

from linkimport.imports.mapping import FieldTarget
from linkimport.imports.models import (
    ChunkResponse,
    ChunkTransportError,
    ExtractionRule,
    RemoteRowResult,
)

logger = logging.getLogger(__name__)

IMPORT_PATH = "/api/v1/links/import"


def _build_import_url(base_url: str) -> str:
    return base_url.rstrip("/") + IMPORT_PATH


def encode_multipart(
    fields: Mapping[str, str],
    *,
    file_field: str,
    filename: str,
    content: bytes,
    content_type: str = "text/csv",
) -> tuple[bytes, str]:
    boundary = f"----linkimport-{uuid.uuid4().hex}"
    parts: list[bytes] = []
    for name, value in fields.items():
        parts.extend(
            [
                f"--{boundary}\r\n".encode("utf-8"),
                f'Content-Disposition: form-data; name="{name}"\r\n\r\n'.encode("utf-8"),
                value.encode("utf-8"),
                b"\r\n",
            ]
        )
    parts.extend(
        [
            f"--{boundary}\r\n".encode("utf-8"),
            f'Content-Disposition: form-data; name="{file_field}"; filename="{filename}"\r\n'.encode(
                "utf-8"
            ),
            f"Content-Type: {content_type}\r\n\r\n".encode("utf-8"),
            content,
            b"\r\n",
            f"--{boundary}--\r\n".encode("utf-8"),
        ]
    )
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


def _as_count(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ChunkTransportError(f"link service returned an invalid {name} count")
    return value


def _pick_count(data: dict, keys: tuple[str, ...], fallback: int, name: str) -> int:
    # "success" doubles as the envelope flag in flat payloads.
    for key in keys:
        value = data.get(key)
        if value is None or isinstance(value, bool):
            continue
        return _as_count(value, name)
    return fallback


def parse_chunk_response(payload: object) -> ChunkResponse:
    if not isinstance(payload, dict):
        raise ChunkTransportError("link service returned an unexpected payload")
    if payload.get("success") is False:
        message = payload.get("error") or payload.get("message") or "request rejected"
        raise ChunkTransportError(f"link service rejected the chunk: {message}")

    data = payload.get("data", payload)
    if not isinstance(data, dict):
        raise ChunkTransportError("link service payload is missing data")

    results = data.get("results")
    if not isinstance(results, list):
        raise ChunkTransportError("link service payload contains an invalid result list")

    parsed: list[RemoteRowResult] = []
    for index, entry in enumerate(results):
        if not isinstance(entry, dict):
            raise ChunkTransportError(f"link service result at index {index} is not an object")
        row = entry.get("row")
        if isinstance(row, bool) or not isinstance(row, int):
            raise ChunkTransportError(f"link service result at index {index} has no row number")
        success = entry.get("success") is True
        reason = entry.get("error") or entry.get("reason")
        slug = entry.get("slug")
        parsed.append(
            RemoteRowResult(
                row=row,
                success=success,
                reason=str(reason) if reason is not None else None,
                slug=str(slug) if slug is not None else None,
            )
        )

    succeeded = sum(1 for result in parsed if result.success)
    return ChunkResponse(
        success_count=_pick_count(data, ("successCount", "success"), succeeded, "success"),
        error_count=_pick_count(data, ("errorCount", "errors"), len(parsed) - succeeded, "error"),
        results=parsed,
    )


class LinkServiceClient:
    """Posts one chunk of delimited text to the link service import endpoint.

    Collection, mapping, extraction rules and delimiter are fixed for the
    lifetime of the client and sent alongside every chunk.
    """

    def __init__(
        self,
        *,
        base_url: str,
        collection_id: str,
        column_mapping: Mapping[str, FieldTarget],
        extraction_rules: Optional[Mapping[str, ExtractionRule]] = None,
        token: Optional[str] = None,
        delimiter: str = ",",
        timeout: int = 30,
        insecure: bool = False,
    ) -> None:
        if not base_url:
            raise ValueError("base_url is required")
        if not collection_id:
            raise ValueError("collection_id is required")
        self.url = _build_import_url(base_url)
        self.collection_id = collection_id
        self.column_mapping = {
            header: target.wire_value
            for header, target in column_mapping.items()
            if not target.is_unmapped
        }
        self.slug_prefix_filter = {
            header: rule.prefix for header, rule in (extraction_rules or {}).items()
        }
        self.token = token
        self.delimiter = delimiter
        self.timeout = timeout
        self.insecure = insecure

    def _form_fields(self) -> dict[str, str]:
        return {
            "domain_id": self.collection_id,
            "column_mapping": json.dumps(self.column_mapping, ensure_ascii=False),
            "slug_prefix_filter": json.dumps(self.slug_prefix_filter, ensure_ascii=False),
            "delimiter": self.delimiter,
        }

    def build_request(self, chunk_text: str) -> urllib_request.Request:
        body, content_type = encode_multipart(
            self._form_fields(),
            file_field="file",
            filename="chunk.csv",
            content=chunk_text.encode("utf-8"),
        )
        headers = {"Accept": "application/json", "Content-Type": content_type}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return urllib_request.Request(self.url, data=body, method="POST", headers=headers)

    def submit(self, chunk_text: str) -> ChunkResponse:
        request = self.build_request(chunk_text)
        ssl_context = ssl._create_unverified_context() if self.insecure else None
        try:
            with urllib_request.urlopen(
                request,
                timeout=self.timeout,
                context=ssl_context,
            ) as response:
                response_payload = response.read()
        except urllib_error.HTTPError as exc:
            details = exc.read().decode("utf-8", errors="replace")
            raise ChunkTransportError(
                f"link service returned HTTP {exc.code}: {details}"
            ) from exc
        except urllib_error.URLError as exc:
            raise ChunkTransportError(f"failed to call link service: {exc.reason}") from exc
        except TimeoutError as exc:
            raise ChunkTransportError("link service request timed out") from exc

        try:
            parsed = json.loads(response_payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ChunkTransportError("link service returned invalid JSON") from exc

        chunk_response = parse_chunk_response(parsed)
        logger.debug(
            "Link service accepted %s rows, rejected %s",
            chunk_response.success_count,
            chunk_response.error_count,
        )
        return chunk_response

    __call__ = submit
