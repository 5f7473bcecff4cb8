from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional, Sequence

from linkimport.imports import lookups
from linkimport.imports.classifier import HeaderClassifier, default_classifier, suggest_core_field
from linkimport.imports.models import (
    DetectedColumn,
    DeviceKind,
    ExtractionRule,
    GeoKind,
    InvalidMappingError,
    MissingRequiredFieldError,
)


class TargetField(str, Enum):
    DESTINATION_URL = "destination_url"
    SLUG = "slug"
    TITLE = "title"
    DESCRIPTION = "description"
    REDIRECT_CODE = "redirect_code"
    CATEGORY_ID = "category_id"
    TAGS = "tags"
    ROUTE = "route"
    DEVICE_REDIRECT = "device_redirect"
    GEO_REDIRECT = "geo_redirect"
    UNMAPPED = "unmapped"


REDIRECT_FIELDS = {TargetField.DEVICE_REDIRECT, TargetField.GEO_REDIRECT}


@dataclass(frozen=True)
class FieldTarget:
    field: TargetField
    parameter: Optional[str] = None

    @property
    def value(self) -> str:
        if self.parameter is None:
            return self.field.value
        return f"{self.field.value}:{self.parameter}"

    @property
    def wire_value(self) -> str:
        """Spelling understood by the link service import endpoint."""
        if self.field == TargetField.GEO_REDIRECT:
            return f"geo:{self.parameter}"
        if self.field == TargetField.DEVICE_REDIRECT:
            return str(self.parameter)
        return self.value

    @property
    def is_unmapped(self) -> bool:
        return self.field == TargetField.UNMAPPED

    @classmethod
    def parse(cls, raw: str) -> FieldTarget:
        value = str(raw or "").strip()
        lowered = value.lower()
        if not lowered:
            return UNMAPPED
        if lowered in lookups.DEVICE_TYPES:
            return cls(TargetField.DEVICE_REDIRECT, lowered)
        name, sep, parameter = lowered.partition(":")
        if name == "geo":
            name = TargetField.GEO_REDIRECT.value
        try:
            target = TargetField(name)
        except ValueError as exc:
            raise InvalidMappingError(f"Unknown target field '{value}'.") from exc

        if target == TargetField.DEVICE_REDIRECT:
            if parameter not in lookups.DEVICE_TYPES:
                raise InvalidMappingError(
                    f"Device redirect must be one of {', '.join(sorted(lookups.DEVICE_TYPES))}."
                )
            return cls(target, parameter)
        if target == TargetField.GEO_REDIRECT:
            code = parameter.upper()
            if len(code) != 2 or not code.isalpha():
                raise InvalidMappingError("Geo redirect requires a two-letter country code.")
            return cls(target, code)
        if sep:
            raise InvalidMappingError(f"Target field '{value}' does not take a parameter.")
        return cls(target)

    @classmethod
    def for_detected(cls, column: DetectedColumn) -> FieldTarget:
        if isinstance(column.kind, GeoKind):
            return cls(TargetField.GEO_REDIRECT, column.kind.country_code)
        if isinstance(column.kind, DeviceKind):
            return cls(TargetField.DEVICE_REDIRECT, column.kind.device_type)
        raise TypeError(f"Unsupported column kind: {column.kind!r}")


UNMAPPED = FieldTarget(TargetField.UNMAPPED)

ColumnMapping = dict[str, FieldTarget]


@dataclass
class ResolvedMapping:
    mapping: ColumnMapping = field(default_factory=dict)
    detected: list[DetectedColumn] = field(default_factory=list)

    def header_for(self, target: TargetField) -> Optional[str]:
        for header, field_target in self.mapping.items():
            if field_target.field == target:
                return header
        return None

    def as_payload(self) -> dict[str, str]:
        return {
            header: target.value
            for header, target in self.mapping.items()
            if not target.is_unmapped
        }


def _load_json_object(raw: object, location: str) -> Mapping[str, object]:
    if raw is None or raw == "":
        return {}
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidMappingError("Expected a JSON object.", location=location) from exc
    if not isinstance(raw, Mapping):
        raise InvalidMappingError("Expected a JSON object.", location=location)
    return raw


def parse_column_mapping(raw: object) -> ColumnMapping:
    entries = _load_json_object(raw, "column_mapping")
    mapping: ColumnMapping = {}
    seen: dict[TargetField, str] = {}
    for header, target_value in entries.items():
        target = FieldTarget.parse(str(target_value) if target_value is not None else "")
        if not target.is_unmapped and target.field not in REDIRECT_FIELDS:
            previous = seen.get(target.field)
            if previous is not None:
                raise InvalidMappingError(
                    f"Columns '{previous}' and '{header}' are both mapped to {target.value}.",
                )
            seen[target.field] = str(header)
        mapping[str(header)] = target
    return mapping


def parse_extraction_rules(raw: object, mapping: Mapping[str, FieldTarget]) -> dict[str, ExtractionRule]:
    entries = _load_json_object(raw, "extraction_rules")
    rules: dict[str, ExtractionRule] = {}
    for header, prefix_value in entries.items():
        prefix = str(prefix_value or "").strip().strip("/")
        if not prefix:
            continue
        target = mapping.get(str(header))
        if target is None or target.field != TargetField.SLUG:
            raise InvalidMappingError(
                f"Extraction rule for '{header}' requires the column to be mapped to slug.",
                location="extraction_rules",
            )
        rules[str(header)] = ExtractionRule(prefix=prefix)
    return rules


def resolve_mapping(
    headers: Sequence[str],
    explicit: Optional[Mapping[str, FieldTarget]] = None,
    classifier: Optional[HeaderClassifier] = None,
) -> ResolvedMapping:
    explicit = explicit or {}
    classifier = classifier or default_classifier()

    unknown = [header for header in explicit if header not in headers]
    if unknown:
        raise InvalidMappingError(
            f"Mapped columns not found in file: {', '.join(sorted(unknown))}.",
        )

    taken = {
        target.field
        for target in explicit.values()
        if not target.is_unmapped and target.field not in REDIRECT_FIELDS
    }
    resolved = ResolvedMapping()
    for header in headers:
        if header in explicit:
            resolved.mapping[header] = explicit[header]
            continue

        suggestion = suggest_core_field(header)
        if suggestion is not None:
            suggested = TargetField(suggestion)
            if suggested not in taken:
                taken.add(suggested)
                resolved.mapping[header] = FieldTarget(suggested)
                continue

        detected = classifier.classify(header)
        if detected is not None:
            resolved.detected.append(detected)
            resolved.mapping[header] = FieldTarget.for_detected(detected)
            continue

        resolved.mapping[header] = UNMAPPED
    return resolved


def merge_detected(
    mapping: Mapping[str, FieldTarget], detected: Sequence[DetectedColumn]
) -> ColumnMapping:
    """Fold detected columns into ``mapping`` without overriding explicit entries."""
    merged: ColumnMapping = dict(mapping)
    for column in detected:
        if column.header not in merged:
            merged[column.header] = FieldTarget.for_detected(column)
    return merged


def require_destination(mapping: Mapping[str, FieldTarget]) -> str:
    for header, target in mapping.items():
        if target.field == TargetField.DESTINATION_URL:
            return header
    raise MissingRequiredFieldError(TargetField.DESTINATION_URL.value)
