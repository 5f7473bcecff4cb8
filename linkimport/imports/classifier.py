"""Header classification for special-purpose import columns.

A header such as ``"US Redirect URL"`` or ``"Mobile Link"`` names a per-country
or per-device redirect destination. Classification looks at the header text
only; cell values are never inspected. Detectors run in order and the first
match wins, so geography always takes precedence over device detection.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from linkimport.imports import lookups
from linkimport.imports.models import DetectedColumn, DeviceKind, GeoKind


def normalize_header(header: str) -> str:
    value = header.strip().lower()
    for suffix in lookups.HEADER_SUFFIXES:
        if value.endswith(suffix):
            value = value[: -len(suffix)]
            break
    value = value.rstrip(lookups.HEADER_SEPARATORS)
    for word in lookups.HEADER_NOISE_WORDS:
        if value.endswith(word):
            remainder = value[: -len(word)].rstrip(lookups.HEADER_SEPARATORS)
            if remainder:
                value = remainder
            break
    return value


class ColumnDetector(Protocol):
    def detect(self, header: str, normalized: str) -> Optional[DetectedColumn]:
        ...


class GeoDetector:
    def __init__(self, country_lookup: Optional[dict[str, str]] = None) -> None:
        self._lookup = (
            country_lookup if country_lookup is not None else lookups.build_country_lookup()
        )

    def detect(self, header: str, normalized: str) -> Optional[DetectedColumn]:
        if not normalized:
            return None
        for variant in lookups.header_variants(normalized):
            code = self._lookup.get(variant)
            if code:
                return DetectedColumn(header=header, kind=GeoKind(country_code=code))
        return None


class DeviceDetector:
    def __init__(self, aliases: Optional[dict[str, str]] = None) -> None:
        self._aliases = aliases if aliases is not None else lookups.DEVICE_ALIASES

    def detect(self, header: str, normalized: str) -> Optional[DetectedColumn]:
        device_type = self._aliases.get(normalized)
        if device_type is None or device_type not in lookups.DEVICE_TYPES:
            return None
        return DetectedColumn(header=header, kind=DeviceKind(device_type=device_type))


class HeaderClassifier:
    def __init__(self, detectors: Optional[Sequence[ColumnDetector]] = None) -> None:
        self.detectors: list[ColumnDetector] = (
            list(detectors) if detectors is not None else [GeoDetector(), DeviceDetector()]
        )

    def classify(self, header: str) -> Optional[DetectedColumn]:
        normalized = normalize_header(header)
        for detector in self.detectors:
            detected = detector.detect(header, normalized)
            if detected is not None:
                return detected
        return None

    def classify_all(self, headers: Sequence[str]) -> list[DetectedColumn]:
        detected: list[DetectedColumn] = []
        for header in headers:
            column = self.classify(header)
            if column is not None:
                detected.append(column)
        return detected


_default_classifier: Optional[HeaderClassifier] = None


def default_classifier() -> HeaderClassifier:
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = HeaderClassifier()
    return _default_classifier


def classify(header: str) -> Optional[DetectedColumn]:
    return default_classifier().classify(header)


def suggest_core_field(header: str) -> Optional[str]:
    key = " ".join(header.strip().lower().split())
    for variant in (key, key.replace("_", " "), key.replace("-", " ")):
        field_name = lookups.CORE_FIELD_ALIASES.get(variant)
        if field_name:
            return field_name
    return None
