from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Optional, Union


@dataclass
class RawTable:
    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)
    delimiter: str = ","

    @property
    def width(self) -> int:
        return len(self.headers)


@dataclass(frozen=True)
class ExtractionRule:
    prefix: str


@dataclass(frozen=True)
class GeoKind:
    country_code: str


@dataclass(frozen=True)
class DeviceKind:
    device_type: str


ColumnKind = Union[GeoKind, DeviceKind]


@dataclass(frozen=True)
class DetectedColumn:
    header: str
    kind: ColumnKind


@dataclass(frozen=True)
class ImportChunk:
    number: int
    start: int
    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]

    @property
    def end(self) -> int:
        return self.start + len(self.rows)


@dataclass
class ImportIssue:
    location: str
    message: str
    level: str = "error"


@dataclass(frozen=True)
class RowResult:
    row_index: int
    success: bool
    reason: Optional[str] = None
    created_identifier: Optional[str] = None


@dataclass(frozen=True)
class RemoteRowResult:
    row: int
    success: bool
    reason: Optional[str] = None
    slug: Optional[str] = None


@dataclass
class ChunkResponse:
    success_count: int = 0
    error_count: int = 0
    results: list[RemoteRowResult] = field(default_factory=list)


@dataclass
class ImportSummary:
    total_rows: int = 0
    success_count: int = 0
    error_count: int = 0
    results: list[RowResult] = field(default_factory=list)
    cancelled: bool = False
    finished: bool = False

    @property
    def processed_rows(self) -> int:
        return len(self.results)

    @property
    def pending_rows(self) -> int:
        return self.total_rows - self.processed_rows

    def record(self, result: RowResult) -> None:
        self.results.append(result)
        if result.success:
            self.success_count += 1
        else:
            self.error_count += 1

    def snapshot(self) -> ImportSummary:
        return replace(self, results=list(self.results))


class ImportParseError(Exception):
    def __init__(self, message: str, location: str = "import") -> None:
        super().__init__(message)
        self.location = location


class EmptyFileError(ImportParseError):
    def __init__(self, message: str = "File must contain a header line and at least one data row.") -> None:
        super().__init__(message, location="file")


class InvalidMappingError(ImportParseError):
    def __init__(self, message: str, location: str = "column_mapping") -> None:
        super().__init__(message, location=location)


class MissingRequiredFieldError(InvalidMappingError):
    def __init__(self, field_name: str = "destination_url") -> None:
        super().__init__(
            f"A column must be mapped to {field_name} before importing.",
        )
        self.field_name = field_name


class ChunkTransportError(Exception):
    """Raised when a whole chunk could not be submitted or its response was unusable."""


class RowValidationError(Exception):
    def __init__(self, message: str, row_index: int) -> None:
        super().__init__(message)
        self.row_index = row_index
