from __future__ import annotations

import pytest

from linkimport.imports.classifier import (
    DeviceDetector,
    GeoDetector,
    HeaderClassifier,
    classify,
    normalize_header,
    suggest_core_field,
)
from linkimport.imports.models import DetectedColumn, DeviceKind, GeoKind


@pytest.mark.parametrize(
    ("header", "country_code"),
    [
        ("US Redirect URL", "US"),
        ("United States", "US"),
        ("united_kingdom_link", "GB"),
        ("DE", "DE"),
        ("Germany Page", "DE"),
        ("uae-url", "AE"),
        ("South Korea Link", "KR"),
    ],
)
def test_classify_detects_geo_headers(header: str, country_code: str) -> None:
    assert classify(header) == DetectedColumn(header=header, kind=GeoKind(country_code))


@pytest.mark.parametrize(
    ("header", "device_type"),
    [
        ("Mobile Link", "mobile"),
        ("tablet_link", "tablet"),
        ("Desktop URL", "desktop"),
        ("iPad Redirect", "tablet"),
    ],
)
def test_classify_detects_device_headers(header: str, device_type: str) -> None:
    assert classify(header) == DetectedColumn(header=header, kind=DeviceKind(device_type))


@pytest.mark.parametrize("header", ["Notes", "Campaign", "", "Redirect URL"])
def test_classify_returns_none_for_plain_headers(header: str) -> None:
    assert classify(header) is None


def test_normalize_header_strips_suffix_and_noise_word() -> None:
    assert normalize_header("  US Redirect URL ") == "us"
    assert normalize_header("mobile_link") == "mobile"
    assert normalize_header("Redirect") == "redirect"


def test_geo_detection_wins_over_device_detection() -> None:
    classifier = HeaderClassifier(
        [GeoDetector({"mobile": "MO"}), DeviceDetector()],
    )

    detected = classifier.classify("Mobile Link")

    assert detected is not None
    assert detected.kind == GeoKind("MO")


def test_classify_all_keeps_header_order_and_skips_unknown() -> None:
    classifier = HeaderClassifier()

    detected = classifier.classify_all(["Destination", "FR Link", "Notes", "Phone URL"])

    assert [column.header for column in detected] == ["FR Link", "Phone URL"]


def test_suggest_core_field_matches_common_aliases() -> None:
    assert suggest_core_field("Destination URL") == "destination_url"
    assert suggest_core_field("long  url") == "destination_url"
    assert suggest_core_field("Short-URL") == "slug"
    assert suggest_core_field("status code") == "redirect_code"
    assert suggest_core_field("US Redirect URL") is None
