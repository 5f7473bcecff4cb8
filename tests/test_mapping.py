from __future__ import annotations

import pytest

from linkimport.imports.mapping import (
    UNMAPPED,
    FieldTarget,
    TargetField,
    merge_detected,
    parse_column_mapping,
    parse_extraction_rules,
    require_destination,
    resolve_mapping,
)
from linkimport.imports.models import (
    DetectedColumn,
    DeviceKind,
    ExtractionRule,
    GeoKind,
    InvalidMappingError,
    MissingRequiredFieldError,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("destination_url", FieldTarget(TargetField.DESTINATION_URL)),
        (" Slug ", FieldTarget(TargetField.SLUG)),
        ("", UNMAPPED),
        ("unmapped", UNMAPPED),
        ("mobile", FieldTarget(TargetField.DEVICE_REDIRECT, "mobile")),
        ("device_redirect:tablet", FieldTarget(TargetField.DEVICE_REDIRECT, "tablet")),
        ("geo:us", FieldTarget(TargetField.GEO_REDIRECT, "US")),
        ("geo_redirect:de", FieldTarget(TargetField.GEO_REDIRECT, "DE")),
    ],
)
def test_field_target_parse(raw: str, expected: FieldTarget) -> None:
    assert FieldTarget.parse(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["nickname", "geo:usa", "geo:", "device_redirect:watch", "slug:extra"],
)
def test_field_target_parse_rejects_invalid_targets(raw: str) -> None:
    with pytest.raises(InvalidMappingError):
        FieldTarget.parse(raw)


def test_field_target_value_round_trips_parameter() -> None:
    assert FieldTarget(TargetField.GEO_REDIRECT, "US").value == "geo_redirect:US"
    assert FieldTarget(TargetField.TITLE).value == "title"


def test_parse_column_mapping_accepts_json_and_rejects_duplicates() -> None:
    mapping = parse_column_mapping('{"Long URL": "destination_url", "US": "geo:US", "CA": "geo:CA"}')

    assert mapping["Long URL"] == FieldTarget(TargetField.DESTINATION_URL)
    assert mapping["CA"] == FieldTarget(TargetField.GEO_REDIRECT, "CA")

    with pytest.raises(InvalidMappingError, match="both mapped to slug"):
        parse_column_mapping({"a": "slug", "b": "slug"})


def test_parse_column_mapping_rejects_non_object() -> None:
    with pytest.raises(InvalidMappingError) as exc_info:
        parse_column_mapping("[1, 2]")
    assert exc_info.value.location == "column_mapping"

    with pytest.raises(InvalidMappingError):
        parse_column_mapping("{not json")


def test_parse_extraction_rules_requires_slug_column() -> None:
    mapping = {"Short": FieldTarget(TargetField.SLUG), "Url": FieldTarget(TargetField.DESTINATION_URL)}

    rules = parse_extraction_rules({"Short": "/go/", "Ignored": "  "}, mapping)

    assert rules == {"Short": ExtractionRule(prefix="go")}
    with pytest.raises(InvalidMappingError) as exc_info:
        parse_extraction_rules({"Url": "go"}, mapping)
    assert exc_info.value.location == "extraction_rules"


def test_resolve_mapping_combines_explicit_aliases_and_detection() -> None:
    headers = ["Long URL", "Short", "Mobile Link", "US Redirect URL", "Notes", "Title"]
    explicit = {"Short": FieldTarget(TargetField.SLUG), "Notes": FieldTarget(TargetField.TITLE)}

    resolved = resolve_mapping(headers, explicit)

    assert resolved.mapping == {
        "Long URL": FieldTarget(TargetField.DESTINATION_URL),
        "Short": FieldTarget(TargetField.SLUG),
        "Mobile Link": FieldTarget(TargetField.DEVICE_REDIRECT, "mobile"),
        "US Redirect URL": FieldTarget(TargetField.GEO_REDIRECT, "US"),
        "Notes": FieldTarget(TargetField.TITLE),
        "Title": UNMAPPED,
    }
    assert resolved.detected == [
        DetectedColumn("Mobile Link", DeviceKind("mobile")),
        DetectedColumn("US Redirect URL", GeoKind("US")),
    ]
    assert resolved.header_for(TargetField.DESTINATION_URL) == "Long URL"
    assert "Title" not in resolved.as_payload()


def test_resolve_mapping_rejects_unknown_explicit_header() -> None:
    with pytest.raises(InvalidMappingError, match="Missing Column"):
        resolve_mapping(["a", "b"], {"Missing Column": FieldTarget(TargetField.SLUG)})


def test_require_destination() -> None:
    assert require_destination({"u": FieldTarget(TargetField.DESTINATION_URL)}) == "u"

    with pytest.raises(MissingRequiredFieldError) as exc_info:
        require_destination({"s": FieldTarget(TargetField.SLUG), "x": UNMAPPED})
    assert exc_info.value.field_name == "destination_url"


def test_merge_detected_does_not_override_explicit_entries() -> None:
    mapping = {"Mobile": UNMAPPED}
    detected = [
        DetectedColumn("Mobile", DeviceKind("mobile")),
        DetectedColumn("FR", GeoKind("FR")),
    ]

    merged = merge_detected(mapping, detected)

    assert merged["Mobile"] == UNMAPPED
    assert merged["FR"] == FieldTarget(TargetField.GEO_REDIRECT, "FR")
