from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional
from urllib.parse import urlsplit

from linkimport.imports.extractor import extract_value
from linkimport.imports.mapping import ResolvedMapping, TargetField
from linkimport.imports.models import DetectedColumn, ExtractionRule, ImportIssue, RawTable
from linkimport.utils import split_tag_string

DEFAULT_PREVIEW_ROWS = 10

_SLUG_PATTERN = re.compile(r"^[A-Za-z0-9_-]{2,100}$")


@dataclass
class PreviewRow:
    row_index: int
    values: dict[str, object] = field(default_factory=dict)
    warnings: list[ImportIssue] = field(default_factory=list)


@dataclass
class ImportPreview:
    headers: list[str]
    delimiter: str
    total_rows: int
    mapping: dict[str, str]
    detected: list[DetectedColumn]
    rows: list[PreviewRow] = field(default_factory=list)


def is_http_url(value: str) -> bool:
    parts = urlsplit(value)
    return parts.scheme in {"http", "https"} and bool(parts.netloc)


def build_link_draft(
    headers: list[str],
    row: list[str],
    resolved: ResolvedMapping,
    rules: Optional[Mapping[str, ExtractionRule]] = None,
    row_index: int = 0,
) -> PreviewRow:
    rules = rules or {}
    preview = PreviewRow(row_index=row_index)
    location = f"row {row_index}"
    geo: dict[str, str] = {}
    devices: dict[str, str] = {}

    if len(row) > len(headers):
        preview.warnings.append(
            ImportIssue(
                location=location,
                message=f"Row has {len(row)} fields but the header has {len(headers)}.",
            )
        )

    for position, header in enumerate(headers):
        target = resolved.mapping.get(header)
        if target is None or target.is_unmapped:
            continue
        raw = row[position].strip() if position < len(row) else ""
        if not raw:
            continue
        if target.field == TargetField.GEO_REDIRECT:
            geo[target.parameter or ""] = raw
        elif target.field == TargetField.DEVICE_REDIRECT:
            devices[target.parameter or ""] = raw
        elif target.field == TargetField.TAGS:
            preview.values["tags"] = split_tag_string(raw)
        elif target.field == TargetField.SLUG:
            rule = rules.get(header)
            slug = extract_value(raw, rule)
            if rule is not None and slug == raw:
                preview.warnings.append(
                    ImportIssue(
                        location=f"{location}.{header}",
                        message=f"Prefix '{rule.prefix}' not found; value used as-is.",
                        level="warning",
                    )
                )
            preview.values["slug"] = slug
        else:
            preview.values[target.field.value] = raw

    if geo:
        preview.values["geo_redirects"] = geo
    if devices:
        preview.values["device_redirects"] = devices

    destination = preview.values.get("destination_url")
    if not destination:
        preview.warnings.append(
            ImportIssue(location=location, message="Missing destination URL.")
        )
    elif not is_http_url(str(destination)):
        preview.warnings.append(
            ImportIssue(
                location=f"{location}.destination_url",
                message="Destination is not an http(s) URL.",
                level="warning",
            )
        )
    slug = preview.values.get("slug")
    if slug and not _SLUG_PATTERN.match(str(slug)):
        preview.warnings.append(
            ImportIssue(
                location=f"{location}.slug",
                message="Slug may only use letters, digits, dash and underscore (2-100 characters).",
            )
        )
    return preview


def build_preview(
    table: RawTable,
    resolved: ResolvedMapping,
    rules: Optional[Mapping[str, ExtractionRule]] = None,
    limit: int = DEFAULT_PREVIEW_ROWS,
) -> ImportPreview:
    preview = ImportPreview(
        headers=list(table.headers),
        delimiter=table.delimiter,
        total_rows=len(table.rows),
        mapping=resolved.as_payload(),
        detected=list(resolved.detected),
    )
    for index, row in enumerate(table.rows[: max(limit, 0)]):
        preview.rows.append(build_link_draft(table.headers, row, resolved, rules, row_index=index))
    return preview
